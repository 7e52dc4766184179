"""
Tests for settings and logging setup.
"""

import logging

import pytest
from pydantic import ValidationError

from hwvault.config import HwVaultConfig, load_config
from hwvault.datasets.registry import BUNDLED_DATA_DIR
from hwvault.utils.logging_config import setup_logging


@pytest.fixture
def clean_env(monkeypatch):
    for name in ("HWVAULT_DATASET_DIR", "HWVAULT_PROBE_TIMEOUT",
                 "HWVAULT_DEFAULT_MEMORY_SLOTS", "HWVAULT_LOG_LEVEL"):
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


class TestLoadConfig:

    def test_defaults(self, clean_env):
        settings = load_config()
        assert settings.dataset_dir == BUNDLED_DATA_DIR
        assert settings.probe_timeout == 15.0
        assert settings.default_memory_slots == 4
        assert settings.log_level == "WARNING"

    def test_environment(self, clean_env, tmp_path):
        clean_env.setenv("HWVAULT_DATASET_DIR", str(tmp_path))
        clean_env.setenv("HWVAULT_PROBE_TIMEOUT", "2.5")
        clean_env.setenv("HWVAULT_DEFAULT_MEMORY_SLOTS", "8")
        clean_env.setenv("HWVAULT_LOG_LEVEL", "debug")

        settings = load_config()
        assert settings.dataset_dir == tmp_path
        assert settings.probe_timeout == 2.5
        assert settings.default_memory_slots == 8
        assert settings.log_level == "DEBUG"

    def test_overrides_win_and_none_is_ignored(self, clean_env):
        clean_env.setenv("HWVAULT_PROBE_TIMEOUT", "30")
        settings = load_config({"probe_timeout": 5, "log_level": None})
        assert settings.probe_timeout == 5.0
        assert settings.log_level == "WARNING"

    @pytest.mark.parametrize("name,value", [
        ("HWVAULT_PROBE_TIMEOUT", "0"),
        ("HWVAULT_PROBE_TIMEOUT", "-1"),
        ("HWVAULT_PROBE_TIMEOUT", "soon"),
        ("HWVAULT_DEFAULT_MEMORY_SLOTS", "0"),
        ("HWVAULT_LOG_LEVEL", "verbose"),
        ("HWVAULT_DATASET_DIR", "/definitely/not/here"),
    ])
    def test_invalid_environment(self, clean_env, name, value):
        clean_env.setenv(name, value)
        with pytest.raises(ValidationError):
            load_config()


class TestHwVaultConfig:

    def test_unknown_fields_are_rejected(self):
        with pytest.raises(ValidationError):
            HwVaultConfig(probe_timeot=3)

    def test_assignment_is_validated(self):
        settings = HwVaultConfig()
        with pytest.raises(ValidationError):
            settings.probe_timeout = 0


class TestSetupLogging:

    @pytest.fixture(autouse=True)
    def restore_logger(self):
        logger = logging.getLogger("hwvault")
        handlers, level, propagate = list(logger.handlers), logger.level, logger.propagate
        yield
        logger.handlers[:] = handlers
        logger.setLevel(level)
        logger.propagate = propagate

    def test_single_handler(self):
        setup_logging("info")
        logger = setup_logging("DEBUG")
        owned = [h for h in logger.handlers if getattr(h, "_hwvault_handler", False)]
        assert len(owned) == 1
        assert logger.level == logging.DEBUG

    def test_invalid_level(self):
        with pytest.raises(ValueError):
            setup_logging("chatty")
