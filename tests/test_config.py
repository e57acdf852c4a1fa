# tests/test_config.py
"""
Tests for the configuration system: defaults, runtime changes, the JSON user
file and environment variable overrides.
"""

import json
import logging

import pytest

from gaussdist.core.config import (
    ConfigManager, get_config, get_modified_options, get_numerical_config,
    reset_config, set_config, to_dict
)
from gaussdist.core.exceptions import ConfigurationError


@pytest.fixture
def isolated_env(monkeypatch, tmp_path):
    """Point the user configuration at a temporary directory and clear overrides."""
    monkeypatch.setenv("GAUSSDIST_CONFIG_DIR", str(tmp_path))
    for name in ("GAUSSDIST_NUMERICAL_SVD_DRIVER", "GAUSSDIST_CORE_RANDOM_SEED",
                 "GAUSSDIST_LOGGING_LOG_LEVEL", "GAUSSDIST_NUMERICAL_SYMMETRY_TOLERANCE"):
        monkeypatch.delenv(name, raising=False)
    yield tmp_path
    logging.getLogger("gaussdist").setLevel(logging.WARNING)


class TestDefaults:
    """Tests for default values."""

    def test_default_values(self, restore_config):
        reset_config()
        assert get_config("core", "random_seed") is None
        assert get_config("numerical", "svd_driver") == "gesdd"
        assert get_config("numerical", "symmetry_tolerance") == 1e-8
        assert get_config("logging", "log_level") == "WARNING"
        assert get_config("logging", "console_logging") is False

    def test_missing_option_returns_default(self):
        assert get_config("numerical", "no_such_option", "fallback") == "fallback"
        assert get_config("no_such_section", "svd_driver") is None

    def test_to_dict_sections(self):
        config = to_dict()
        assert set(config) == {"core", "numerical", "logging"}
        assert isinstance(config["core"]["user_config_dir"], str)


class TestRuntimeChanges:
    """Tests for ``set_config`` and ``reset_config``."""

    def test_set_and_get(self, restore_config):
        set_config("numerical", "svd_driver", "gesvd")
        assert get_config("numerical", "svd_driver") == "gesvd"
        assert get_numerical_config().svd_driver == "gesvd"
        assert get_modified_options() == {"numerical.svd_driver": "gesvd"}

    def test_values_are_coerced(self, restore_config):
        set_config("core", "random_seed", "42")
        set_config("numerical", "symmetry_tolerance", "1e-6")
        set_config("logging", "log_level", "debug")
        assert get_config("core", "random_seed") == 42
        assert get_config("numerical", "symmetry_tolerance") == 1e-6
        assert get_config("logging", "log_level") == "DEBUG"

    def test_unknown_section(self):
        with pytest.raises(ConfigurationError, match="Unknown configuration section"):
            set_config("plotting", "style", "dark")

    def test_unknown_option(self):
        with pytest.raises(ConfigurationError, match="Unknown configuration option"):
            set_config("numerical", "solver", "lu")

    def test_invalid_value_rejected_and_restored(self, restore_config):
        set_config("numerical", "svd_driver", "gesvd")
        with pytest.raises(ConfigurationError):
            set_config("numerical", "svd_driver", "jacobi")
        assert get_config("numerical", "svd_driver") == "gesvd"

    def test_unconvertible_value(self):
        with pytest.raises(ConfigurationError):
            set_config("numerical", "symmetry_tolerance", "tight")

    def test_reset_option(self, restore_config):
        set_config("numerical", "svd_driver", "gesvd")
        reset_config("numerical", "svd_driver")
        assert get_config("numerical", "svd_driver") == "gesdd"
        assert "numerical.svd_driver" not in get_modified_options()

    def test_reset_section(self, restore_config):
        set_config("numerical", "svd_driver", "gesvd")
        set_config("numerical", "symmetry_tolerance", 1e-4)
        reset_config("numerical")
        assert get_config("numerical", "svd_driver") == "gesdd"
        assert get_config("numerical", "symmetry_tolerance") == 1e-8

    def test_log_level_applied_to_package_logger(self, restore_config):
        set_config("logging", "log_level", "DEBUG")
        assert logging.getLogger("gaussdist").level == logging.DEBUG


class TestUserFileAndEnvironment:
    """Tests for the file and environment layers of a fresh manager."""

    def test_no_user_file(self, isolated_env):
        manager = ConfigManager()
        manager.initialize()
        assert manager.config_file == isolated_env / "gaussdist_config.json"
        assert manager.get("numerical", "svd_driver") == "gesdd"

    def test_user_file_loaded(self, isolated_env):
        (isolated_env / "gaussdist_config.json").write_text(json.dumps({
            "core": {"random_seed": 7},
            "numerical": {"svd_driver": "gesvd"}
        }))
        manager = ConfigManager()
        manager.initialize()
        assert manager.get("core", "random_seed") == 7
        assert manager.get("numerical", "svd_driver") == "gesvd"

    def test_invalid_file_value_replaced_by_default(self, isolated_env):
        (isolated_env / "gaussdist_config.json").write_text(json.dumps({
            "numerical": {"svd_driver": "jacobi", "symmetry_tolerance": -1.0}
        }))
        manager = ConfigManager()
        manager.initialize()
        assert manager.get("numerical", "svd_driver") == "gesdd"
        assert manager.get("numerical", "symmetry_tolerance") == 1e-8

    def test_malformed_file_ignored(self, isolated_env):
        (isolated_env / "gaussdist_config.json").write_text("{not json")
        manager = ConfigManager()
        manager.initialize()
        assert manager.get("numerical", "svd_driver") == "gesdd"

    def test_environment_overrides_file(self, isolated_env, monkeypatch):
        (isolated_env / "gaussdist_config.json").write_text(json.dumps({
            "numerical": {"svd_driver": "gesdd"}
        }))
        monkeypatch.setenv("GAUSSDIST_NUMERICAL_SVD_DRIVER", "gesvd")
        monkeypatch.setenv("GAUSSDIST_CORE_RANDOM_SEED", "123")
        manager = ConfigManager()
        manager.initialize()
        assert manager.get("numerical", "svd_driver") == "gesvd"
        assert manager.get("core", "random_seed") == 123

    def test_save_round_trip(self, isolated_env):
        manager = ConfigManager()
        manager.initialize()
        manager.set("numerical", "svd_driver", "gesvd")
        manager.save_user_config()

        saved = json.loads((isolated_env / "gaussdist_config.json").read_text())
        assert saved["numerical"]["svd_driver"] == "gesvd"

        reloaded = ConfigManager()
        reloaded.initialize()
        assert reloaded.get("numerical", "svd_driver") == "gesvd"

    def test_get_section_unknown(self, isolated_env):
        manager = ConfigManager()
        manager.initialize()
        assert not manager.has_section("plotting")
        with pytest.raises(ConfigurationError):
            manager.get_section("plotting")
