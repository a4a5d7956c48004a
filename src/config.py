# src/config.py
import os
from pathlib import Path
from typing import Dict, Any, List, Optional
from dataclasses import dataclass, field
import json

@dataclass
class DatabaseConfig:
    """Configuration for the document store"""
    BACKEND: str  # 'mongo' or 'memory'
    MONGODB_URI: str
    DATABASE_NAME: str
    SERVER_SELECTION_TIMEOUT_MS: int

@dataclass
class MLServiceConfig:
    """Configuration for the remote ML microservice"""
    URL: str
    TIMEOUT: float  # seconds

@dataclass
class AuthConfig:
    """Configuration for bearer token authentication"""
    JWT_SECRET: str
    JWT_ALGORITHM: str
    TOKEN_EXPIRE_MINUTES: int

@dataclass
class UploadConfig:
    """Configuration for dataset uploads"""
    MAX_FILE_SIZE_MB: int
    MAX_DOCUMENT_BYTES: int
    MIN_PERSISTED_ROWS: int
    ALLOWED_EXTENSIONS: List[str]

@dataclass
class TrainingConfig:
    """Configuration for training requests forwarded to the ML service"""
    DEFAULT_TEST_SIZE: float
    DEFAULT_TRAIN_TEST_SPLIT: float
    TUNING_CV_FOLDS: int
    PARALLEL_REQUESTS: bool

@dataclass
class ServerConfig:
    """Configuration for the HTTP server"""
    HOST: str
    PORT: int
    WORKERS: int
    CORS_ORIGINS: List[str] = field(default_factory=list)
    ENABLE_DOCS: bool = True

@dataclass
class MLFlowConfig:
    """Configuration for optional MLflow tracking"""
    ENABLED: bool
    TRACKING_URI: str
    EXPERIMENT_NAME: str

class Config:
    """Central configuration manager for the ML platform backend"""

    def __init__(self, config_file: Optional[str] = None):
        """
        Initialize configuration

        Args:
            config_file: Optional path to JSON config file to override defaults
        """
        self._load_default_config()

        if config_file and os.path.exists(config_file):
            self._load_config_file(config_file)

        self._load_environment_variables()

    def _load_default_config(self):
        """Load default configuration values"""

        self.project_root = Path(__file__).parent.parent

        self.database = DatabaseConfig(
            BACKEND="mongo",
            MONGODB_URI="mongodb://localhost:27017",
            DATABASE_NAME="ml_platform",
            SERVER_SELECTION_TIMEOUT_MS=10000
        )

        self.ml_service = MLServiceConfig(
            URL="http://localhost:8000",
            TIMEOUT=600.0
        )

        self.auth = AuthConfig(
            JWT_SECRET="change-me",
            JWT_ALGORITHM="HS256",
            TOKEN_EXPIRE_MINUTES=7 * 24 * 60  # 7 days
        )

        self.upload = UploadConfig(
            MAX_FILE_SIZE_MB=50,
            MAX_DOCUMENT_BYTES=12 * 1024 * 1024,  # headroom under the 16MB document cap
            MIN_PERSISTED_ROWS=100,
            ALLOWED_EXTENSIONS=['.csv']
        )

        self.training = TrainingConfig(
            DEFAULT_TEST_SIZE=0.2,
            DEFAULT_TRAIN_TEST_SPLIT=0.2,
            TUNING_CV_FOLDS=5,
            PARALLEL_REQUESTS=False
        )

        self.server = ServerConfig(
            HOST="0.0.0.0",
            PORT=5000,
            WORKERS=1,
            CORS_ORIGINS=['http://localhost:5173'],
            ENABLE_DOCS=True
        )

        self.mlflow = MLFlowConfig(
            ENABLED=False,
            TRACKING_URI="sqlite:///mlflow.db",
            EXPERIMENT_NAME="ml_platform_comparisons"
        )

        # Additional settings
        self.logging_level = "INFO"
        self.log_dir = str(self.project_root / "logs")
        self.log_to_file = True
        self.debug_mode = False

    def _load_config_file(self, config_file: str):
        """Load configuration from JSON file"""
        try:
            with open(config_file, 'r') as f:
                config_data = json.load(f)
        except (OSError, ValueError) as e:
            print(f"Warning: Could not load config file {config_file}: {e}")
            return

        # Update configurations with values from file
        for section, values in config_data.items():
            if not hasattr(self, section):
                continue
            config_obj = getattr(self, section)
            if isinstance(values, dict):
                for key, value in values.items():
                    if hasattr(config_obj, key):
                        setattr(config_obj, key, value)
            else:
                setattr(self, section, values)

    def _load_environment_variables(self):
        """Load configuration from environment variables"""

        # Database settings
        if os.getenv("STORAGE_BACKEND"):
            self.database.BACKEND = os.getenv("STORAGE_BACKEND").lower()

        if os.getenv("MONGODB_URI"):
            self.database.MONGODB_URI = os.getenv("MONGODB_URI")

        if os.getenv("MONGODB_DATABASE"):
            self.database.DATABASE_NAME = os.getenv("MONGODB_DATABASE")

        # ML service settings
        if os.getenv("ML_SERVICE_URL"):
            self.ml_service.URL = os.getenv("ML_SERVICE_URL").rstrip('/')

        if os.getenv("ML_SERVICE_TIMEOUT"):
            self.ml_service.TIMEOUT = float(os.getenv("ML_SERVICE_TIMEOUT"))

        # Auth settings
        if os.getenv("JWT_SECRET"):
            self.auth.JWT_SECRET = os.getenv("JWT_SECRET")

        if os.getenv("JWT_EXPIRE_MINUTES"):
            self.auth.TOKEN_EXPIRE_MINUTES = int(os.getenv("JWT_EXPIRE_MINUTES"))

        # Training settings
        if os.getenv("TEST_SIZE"):
            self.training.DEFAULT_TEST_SIZE = float(os.getenv("TEST_SIZE"))

        if os.getenv("PARALLEL_REQUESTS"):
            self.training.PARALLEL_REQUESTS = os.getenv("PARALLEL_REQUESTS").lower() == 'true'

        # Server settings
        if os.getenv("PORT"):
            self.server.PORT = int(os.getenv("PORT"))

        if os.getenv("API_HOST"):
            self.server.HOST = os.getenv("API_HOST")

        if os.getenv("FRONTEND_URL"):
            self.server.CORS_ORIGINS = [
                origin.strip() for origin in os.getenv("FRONTEND_URL").split(',') if origin.strip()
            ]

        # MLflow settings
        if os.getenv("MLFLOW_TRACKING_URI"):
            self.mlflow.TRACKING_URI = os.getenv("MLFLOW_TRACKING_URI")
            self.mlflow.ENABLED = True

        if os.getenv("MLFLOW_EXPERIMENT_NAME"):
            self.mlflow.EXPERIMENT_NAME = os.getenv("MLFLOW_EXPERIMENT_NAME")

        # General settings
        if os.getenv("LOG_LEVEL"):
            self.logging_level = os.getenv("LOG_LEVEL")

        if os.getenv("LOG_DIR"):
            self.log_dir = os.getenv("LOG_DIR")

        if os.getenv("LOG_TO_FILE"):
            self.log_to_file = os.getenv("LOG_TO_FILE").lower() == 'true'

        if os.getenv("DEBUG_MODE"):
            self.debug_mode = os.getenv("DEBUG_MODE").lower() == 'true'

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to a plain dictionary"""
        config_dict = {}

        for attr_name, attr_value in vars(self).items():
            if attr_name.startswith('_'):
                continue
            if hasattr(attr_value, '__dataclass_fields__'):
                config_dict[attr_name] = dict(vars(attr_value))
            elif isinstance(attr_value, Path):
                config_dict[attr_name] = str(attr_value)
            else:
                config_dict[attr_name] = attr_value

        return config_dict

    def save_config(self, config_file: str):
        """Save current configuration to JSON file"""
        with open(config_file, 'w') as f:
            json.dump(self.to_dict(), f, indent=2)

    def validate_config(self) -> List[str]:
        """Validate configuration and return list of issues"""
        issues = []

        if self.database.BACKEND not in ('mongo', 'memory'):
            issues.append(f"Unknown storage backend: {self.database.BACKEND}")

        if self.database.BACKEND == 'mongo' and not self.database.MONGODB_URI:
            issues.append("MONGODB_URI is required for the mongo storage backend")

        if not self.ml_service.URL:
            issues.append("ML service URL is not configured")

        if self.training.DEFAULT_TEST_SIZE <= 0 or self.training.DEFAULT_TEST_SIZE >= 1:
            issues.append(f"Invalid test size: {self.training.DEFAULT_TEST_SIZE}")

        if self.training.TUNING_CV_FOLDS < 2:
            issues.append(f"CV folds must be >= 2: {self.training.TUNING_CV_FOLDS}")

        if self.upload.MAX_FILE_SIZE_MB <= 0:
            issues.append(f"Invalid max file size: {self.upload.MAX_FILE_SIZE_MB}")

        if self.upload.MAX_DOCUMENT_BYTES <= 0:
            issues.append(f"Invalid max document size: {self.upload.MAX_DOCUMENT_BYTES}")

        if self.auth.JWT_SECRET == "change-me" and not self.debug_mode:
            issues.append("JWT_SECRET is using the built-in default")

        return issues

    def __str__(self) -> str:
        """String representation of configuration"""
        return f"Config(storage={self.database.BACKEND}, ml_service={self.ml_service.URL}, debug={self.debug_mode})"

# Global configuration instance
_config = None

def get_config(config_file: Optional[str] = None) -> Config:
    """Get global configuration instance (singleton pattern)"""
    global _config
    if _config is None:
        _config = Config(config_file)
    return _config

def reload_config(config_file: Optional[str] = None) -> Config:
    """Reload configuration (useful for testing)"""
    global _config
    _config = Config(config_file)
    return _config

# Example configuration file template
CONFIG_TEMPLATE = {
    "database": {
        "BACKEND": "mongo",
        "MONGODB_URI": "mongodb://localhost:27017",
        "DATABASE_NAME": "ml_platform"
    },
    "ml_service": {
        "URL": "http://localhost:8000",
        "TIMEOUT": 600
    },
    "training": {
        "DEFAULT_TEST_SIZE": 0.2,
        "PARALLEL_REQUESTS": False
    },
    "server": {
        "PORT": 5000
    }
}

def create_config_template(output_file: str):
    """Create a configuration template file"""
    with open(output_file, 'w') as f:
        json.dump(CONFIG_TEMPLATE, f, indent=2)
    print(f"Configuration template created: {output_file}")
