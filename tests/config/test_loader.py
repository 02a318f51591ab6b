# tests/config/test_loader.py
"""
Тесты для модуля загрузки конфигурации.
"""

from __future__ import annotations

import json
import os
from pathlib import Path
from unittest.mock import patch

import pytest
from pydantic import ValidationError

from orders_api.config.loader import (
    LoggingSettings,
    RedisSettings,
    Settings,
    StoreSettings,
    get_config_path,
    get_project_root,
    load_config_json,
)


class TestGetProjectRoot:
    """Тесты для функции get_project_root."""

    def test_returns_path_object(self) -> None:
        assert isinstance(get_project_root(), Path)

    def test_root_contains_package_and_config(self) -> None:
        """Проверяет наличие пакета и директории config в корне."""
        root = get_project_root()
        assert (root / "orders_api").exists()
        assert (root / "config").exists()


class TestGetConfigPath:
    """Тесты для функции get_config_path."""

    def test_default_path(self) -> None:
        path = get_config_path()
        assert path.name == "config.json"
        assert path.parent.name == "config"

    def test_env_override(self, tmp_path: Path) -> None:
        """Путь к конфигу можно переопределить переменной окружения."""
        custom = tmp_path / "custom.json"
        with patch.dict(os.environ, {"ORDERS_API_CONFIG": str(custom)}):
            assert get_config_path() == custom


class TestLoadConfigJson:
    """Тесты для функции load_config_json."""

    def test_loads_dict(self) -> None:
        config = load_config_json()
        assert isinstance(config, dict)
        assert "REDIS_HOST" in config
        assert "OPERATION_TIMEOUT" in config

    def test_missing_file(self, tmp_path: Path) -> None:
        with patch.dict(os.environ, {"ORDERS_API_CONFIG": str(tmp_path / "nope.json")}):
            with pytest.raises(FileNotFoundError):
                load_config_json()

    def test_custom_file(self, tmp_path: Path) -> None:
        custom = tmp_path / "config.json"
        custom.write_text(json.dumps({"API_PORT": 8081}), encoding="utf-8")

        with patch.dict(os.environ, {"ORDERS_API_CONFIG": str(custom)}):
            assert load_config_json() == {"API_PORT": 8081}


class TestSectionModels:
    """Тесты секций настроек."""

    def test_redis_url_without_password(self) -> None:
        with patch.dict(os.environ, {"REDIS_PASSWORD": ""}):
            redis = RedisSettings(REDIS_HOST="redis", REDIS_PORT=6380, REDIS_DB=2, REDIS_PASSWORD="")
        assert redis.url == "redis://redis:6380/2"

    def test_redis_url_with_password(self) -> None:
        redis = RedisSettings(REDIS_PASSWORD="secret")
        assert redis.url == "redis://:secret@localhost:6379/0"

    def test_redis_password_from_env(self) -> None:
        with patch.dict(os.environ, {"REDIS_PASSWORD": "from-env"}):
            assert RedisSettings(REDIS_PASSWORD="").REDIS_PASSWORD == "from-env"

    def test_invalid_log_format(self) -> None:
        with pytest.raises(ValidationError):
            LoggingSettings(LOG_FORMAT="xml")

    def test_operation_timeout_positive(self) -> None:
        with pytest.raises(ValidationError):
            StoreSettings(OPERATION_TIMEOUT=0)


class TestSettings:
    """Тесты главного класса настроек."""

    def test_from_config_json(self) -> None:
        settings = Settings.from_config_json()

        assert settings.system.PROJECT_NAME == "orders_api"
        assert settings.store.DEFAULT_PAGE_SIZE <= settings.store.MAX_PAGE_SIZE
        assert settings.redis.REDIS_NAMESPACE == ""

    def test_from_dict_ignores_comments(self) -> None:
        settings = Settings.from_dict({"_comment_x": "текст", "MAX_PAGE_SIZE": 10})
        assert settings.store.MAX_PAGE_SIZE == 10

    def test_env_overrides(self) -> None:
        """Адреса и уровень логов переопределяются из окружения."""
        env = {"REDIS_HOST": "redis.internal", "REDIS_PORT": "6390", "API_PORT": "9000", "LOG_LEVEL": "WARNING"}
        with patch.dict(os.environ, env):
            settings = Settings.from_dict({"REDIS_HOST": "localhost", "API_PORT": 3000})

        assert settings.redis.REDIS_HOST == "redis.internal"
        assert settings.redis.REDIS_PORT == 6390
        assert settings.api.API_PORT == 9000
        assert settings.logging.LOG_LEVEL == "WARNING"

    def test_defaults(self) -> None:
        with patch.dict(os.environ, {}, clear=False):
            for name in ("REDIS_HOST", "REDIS_PORT", "API_PORT", "ENVIRONMENT"):
                os.environ.pop(name, None)
            settings = Settings.from_dict({})

        assert settings.redis.REDIS_PORT == 6379
        assert settings.store.OPERATION_TIMEOUT == 5.0
        assert settings.store.ORDER_ID_ATTEMPTS == 3
