# src/services/hyperparameters.py
import copy
from typing import Any, Dict, Optional

# Defaults sent with every training request made by the multi-algorithm trainer
DEFAULT_HYPERPARAMETERS: Dict[str, Dict[str, Any]] = {
    # Regression
    'linear_regression': {},
    'ridge_regression': {'alpha': 1.0},
    'lasso_regression': {'alpha': 1.0},
    'elastic_net': {'alpha': 1.0, 'l1_ratio': 0.5},
    'decision_tree_regressor': {'max_depth': 10, 'min_samples_split': 5},
    'random_forest_regressor': {'n_estimators': 100, 'max_depth': 10, 'min_samples_split': 5},
    'extra_trees_regressor': {'n_estimators': 100, 'max_depth': 10},
    'gradient_boosting_regressor': {'n_estimators': 100, 'learning_rate': 0.1, 'max_depth': 5},
    'adaboost_regressor': {'n_estimators': 100, 'learning_rate': 0.1},
    'svm_regressor': {'kernel': 'rbf', 'C': 1.0, 'gamma': 'scale'},
    'knn_regressor': {'n_neighbors': 5, 'weights': 'uniform'},

    # Classification
    'logistic_regression': {'C': 1.0, 'max_iter': 1000},
    'lda': {'solver': 'svd'},
    'qda': {},
    'decision_tree_classifier': {'max_depth': 10, 'min_samples_split': 5},
    'random_forest_classifier': {'n_estimators': 100, 'max_depth': 10, 'min_samples_split': 5},
    'extra_trees_classifier': {'n_estimators': 100, 'max_depth': 10},
    'gradient_boosting_classifier': {'n_estimators': 100, 'learning_rate': 0.1, 'max_depth': 5},
    'adaboost_classifier': {'n_estimators': 100, 'learning_rate': 0.1},
    'svm_classifier': {'kernel': 'rbf', 'C': 1.0, 'gamma': 'scale'},
    'knn_classifier': {'n_neighbors': 5, 'weights': 'uniform'},
    'gaussian_nb': {},
    'multinomial_nb': {'alpha': 1.0},

    # Clustering
    'kmeans': {'n_clusters': 3, 'n_init': 10},
    'hierarchical': {'n_clusters': 3, 'linkage': 'ward'},
    'dbscan': {'eps': 0.5, 'min_samples': 5},
    'gaussian_mixture': {'n_components': 3},

    # Dimensionality reduction
    'pca': {'n_components': 2},
    'tsne': {'n_components': 2, 'perplexity': 30},
    'isomap': {'n_components': 2, 'n_neighbors': 5},
}

# Tunable ranges exposed to clients building a tuning grid
HYPERPARAMETER_REFERENCE: Dict[str, Dict[str, Dict[str, Any]]] = {
    'random_forest_classifier': {
        'n_estimators': {'type': 'integer', 'default': 100, 'range': '10-1000', 'description': 'Number of trees'},
        'max_depth': {'type': 'integer', 'default': None, 'range': '1-50', 'description': 'Maximum depth of trees'},
        'min_samples_split': {'type': 'integer', 'default': 2, 'range': '2-100', 'description': 'Minimum samples to split'},
        'max_features': {'type': 'string', 'default': 'sqrt', 'options': ['sqrt', 'log2', None],
                         'description': 'Features to consider for split'},
    },
    'gradient_boosting_classifier': {
        'n_estimators': {'type': 'integer', 'default': 100, 'range': '10-1000', 'description': 'Number of boosting stages'},
        'learning_rate': {'type': 'float', 'default': 0.1, 'range': '0.001-1.0', 'description': 'Learning rate shrinkage'},
        'max_depth': {'type': 'integer', 'default': 3, 'range': '1-10', 'description': 'Maximum depth of trees'},
        'subsample': {'type': 'float', 'default': 1.0, 'range': '0.1-1.0', 'description': 'Fraction of samples for fitting'},
    },
    'svm_classifier': {
        'kernel': {'type': 'string', 'default': 'rbf', 'options': ['linear', 'rbf', 'poly', 'sigmoid'],
                   'description': 'Kernel type'},
        'C': {'type': 'float', 'default': 1.0, 'range': '0.001-1000', 'description': 'Regularization parameter'},
        'gamma': {'type': 'string', 'default': 'scale', 'options': ['scale', 'auto'], 'description': 'Kernel coefficient'},
    },
    'logistic_regression': {
        'C': {'type': 'float', 'default': 1.0, 'range': '0.001-1000', 'description': 'Inverse regularization strength'},
        'penalty': {'type': 'string', 'default': 'l2', 'options': ['l2', 'l1'], 'description': 'Regularization type'},
        'solver': {'type': 'string', 'default': 'lbfgs', 'options': ['lbfgs', 'liblinear', 'saga'],
                   'description': 'Optimization algorithm'},
    },
}


def defaults_for(algorithm: str) -> Dict[str, Any]:
    """Default hyperparameters for an algorithm; unknown ids get an empty dict."""
    return copy.deepcopy(DEFAULT_HYPERPARAMETERS.get(algorithm, {}))


def get_hyperparameter_reference(algorithm: str) -> Optional[Dict[str, Dict[str, Any]]]:
    params = HYPERPARAMETER_REFERENCE.get(algorithm)
    return copy.deepcopy(params) if params is not None else None
