# tests/test_config.py
import json

from src.config import Config, reload_config


class TestConfig:

    def test_defaults(self, monkeypatch):
        for name in ("STORAGE_BACKEND", "PORT", "TEST_SIZE", "MLFLOW_TRACKING_URI"):
            monkeypatch.delenv(name, raising=False)

        config = Config()

        assert config.server.PORT == 5000
        assert config.training.DEFAULT_TEST_SIZE == 0.2
        assert config.upload.MAX_DOCUMENT_BYTES == 12 * 1024 * 1024
        assert config.upload.MIN_PERSISTED_ROWS == 100
        assert config.mlflow.ENABLED is False

    def test_environment_overrides(self, monkeypatch):
        monkeypatch.setenv("STORAGE_BACKEND", "Memory")
        monkeypatch.setenv("ML_SERVICE_URL", "http://ml:8000/")
        monkeypatch.setenv("PARALLEL_REQUESTS", "true")
        monkeypatch.setenv("FRONTEND_URL", "http://a.test, http://b.test")
        monkeypatch.setenv("MLFLOW_TRACKING_URI", "http://mlflow:5000")

        config = Config()

        assert config.database.BACKEND == "memory"
        assert config.ml_service.URL == "http://ml:8000"
        assert config.training.PARALLEL_REQUESTS is True
        assert config.server.CORS_ORIGINS == ["http://a.test", "http://b.test"]
        assert config.mlflow.ENABLED is True

    def test_config_file_then_environment(self, tmp_path, monkeypatch):
        monkeypatch.setenv("PORT", "9000")
        config_file = tmp_path / "config.json"
        config_file.write_text(json.dumps({
            "server": {"PORT": 7000, "HOST": "127.0.0.1"},
            "training": {"TUNING_CV_FOLDS": 3},
        }))

        config = reload_config(str(config_file))

        assert config.server.HOST == "127.0.0.1"
        assert config.server.PORT == 9000
        assert config.training.TUNING_CV_FOLDS == 3

    def test_validate_config(self, config):
        assert config.validate_config() == []

        config.training.DEFAULT_TEST_SIZE = 1.5
        config.database.BACKEND = "redis"

        issues = config.validate_config()
        assert any("test size" in issue for issue in issues)
        assert any("storage backend" in issue for issue in issues)

    def test_save_and_reload_round_trip(self, config, tmp_path):
        path = tmp_path / "saved.json"
        config.training.TUNING_CV_FOLDS = 7
        config.save_config(str(path))

        assert Config(str(path)).training.TUNING_CV_FOLDS == 7
