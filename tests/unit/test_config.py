"""
Unit tests for ServerConfig.
"""

import logging

import pytest

from tinyhttp.config import ServerConfig


ENV_VARS = (
    "TINYHTTP_HOST",
    "TINYHTTP_PORT",
    "TINYHTTP_DIRECTORY",
    "TINYHTTP_LOG_LEVEL",
    "TINYHTTP_WORKERS",
)


@pytest.fixture
def clean_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


class TestServerConfig:

    def test_defaults(self):
        config = ServerConfig()

        assert config.host == "0.0.0.0"
        assert config.port == 4221
        assert config.buffer_size == 4096
        assert config.timeout is None
        assert config.directory is None
        assert config.log_format == "text"
        config.validate()

    def test_log_level_value(self):
        assert ServerConfig(log_level="debug").log_level_value == logging.DEBUG

    def test_from_env_defaults(self, clean_env):
        assert ServerConfig.from_env() == ServerConfig()

    def test_from_env(self, clean_env, tmp_path):
        clean_env.setenv("TINYHTTP_HOST", "127.0.0.1")
        clean_env.setenv("TINYHTTP_PORT", "8080")
        clean_env.setenv("TINYHTTP_DIRECTORY", str(tmp_path))
        clean_env.setenv("TINYHTTP_LOG_LEVEL", "DEBUG")
        clean_env.setenv("TINYHTTP_WORKERS", "8")

        config = ServerConfig.from_env()

        assert config.host == "127.0.0.1"
        assert config.port == 8080
        assert config.directory == str(tmp_path)
        assert config.log_level == "DEBUG"
        assert config.max_workers == 8

    def test_from_env_few_workers(self, clean_env):
        clean_env.setenv("TINYHTTP_WORKERS", "2")

        config = ServerConfig.from_env()
        config.validate()

        assert config.min_workers == 2
        assert config.max_workers == 2

    def test_from_env_zero_workers(self, clean_env):
        clean_env.setenv("TINYHTTP_WORKERS", "0")

        with pytest.raises(ValueError):
            ServerConfig.from_env().validate()

    def test_from_env_bad_port(self, clean_env):
        clean_env.setenv("TINYHTTP_PORT", "http")

        with pytest.raises(ValueError):
            ServerConfig.from_env()


class TestValidate:

    @pytest.mark.parametrize("overrides", [
        {"port": -1},
        {"port": 65536},
        {"min_workers": 0},
        {"min_workers": 8, "max_workers": 4},
        {"buffer_size": 512},
        {"timeout": 0},
        {"log_level": "LOUD"},
        {"log_format": "xml"},
    ])
    def test_invalid(self, overrides):
        with pytest.raises(ValueError):
            ServerConfig(**overrides).validate()

    def test_directory_must_exist(self, tmp_path):
        with pytest.raises(ValueError):
            ServerConfig(directory=str(tmp_path / "missing")).validate()

    def test_directory_must_be_a_directory(self, tmp_path):
        path = tmp_path / "file"
        path.write_text("x")

        with pytest.raises(ValueError):
            ServerConfig(directory=str(path)).validate()

    def test_valid_directory(self, tmp_path):
        ServerConfig(directory=str(tmp_path), port=0).validate()
