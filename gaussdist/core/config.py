'''
Configuration management for gaussdist.

The configuration system follows a layered approach:
1. Default configurations built into the package
2. An optional user-specific JSON configuration file
3. Environment variables
4. Runtime modifications

Sections are plain dataclasses. Environment variables follow the pattern
``GAUSSDIST_<SECTION>_<OPTION>``, e.g. ``GAUSSDIST_NUMERICAL_SVD_DRIVER=gesvd``
or ``GAUSSDIST_CORE_RANDOM_SEED=42``.
'''

import json
import logging
import os
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, List, Optional

from .exceptions import ConfigurationError
from .types import ConfigDict, LogLevel, SVDDriver

# Set up module-level logger
logger = logging.getLogger("gaussdist.core.config")

# Constants for configuration paths and environment variables
CONFIG_ENV_PREFIX = "GAUSSDIST_"
DEFAULT_CONFIG_FILENAME = "gaussdist_config.json"
USER_CONFIG_DIR_ENV = "GAUSSDIST_CONFIG_DIR"

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")
_SVD_DRIVERS = ("gesdd", "gesvd")


class ConfigSection(Enum):
    """Enumeration of configuration sections."""
    CORE = "core"
    NUMERICAL = "numerical"
    LOGGING = "logging"


@dataclass
class CoreConfig:
    """
    Core configuration settings.

    Attributes:
        user_config_dir: Directory holding the user configuration file
        random_seed: Seed for sources created without an explicit random state
            (None for fresh OS entropy)
    """
    user_config_dir: Path = field(default_factory=lambda: Path.home() / ".gaussdist")
    random_seed: Optional[int] = None


@dataclass
class NumericalConfig:
    """
    Numerical configuration settings.

    Attributes:
        svd_driver: LAPACK driver used to decompose full covariance matrices
            for sampling ("gesdd" divide-and-conquer or "gesvd" QR iteration)
        symmetry_tolerance: Largest absolute asymmetry accepted silently in a
            supplied covariance matrix before it is symmetrized with a warning
    """
    svd_driver: SVDDriver = "gesdd"
    symmetry_tolerance: float = 1e-8


@dataclass
class LoggingConfig:
    """
    Logging configuration settings.

    Attributes:
        log_level: Level of the ``gaussdist`` root logger
        log_file: Path to log file (None for no file logging)
        log_format: Format string for log messages
        log_date_format: Format string for log message timestamps
        console_logging: Whether to log to the console
        file_logging: Whether to log to ``log_file``
    """
    log_level: LogLevel = "WARNING"
    log_file: Optional[Path] = None
    log_format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    log_date_format: str = "%Y-%m-%d %H:%M:%S"
    console_logging: bool = False
    file_logging: bool = False


@dataclass
class GaussConfig:
    """
    Complete configuration, one attribute per section.
    """
    core: CoreConfig = field(default_factory=CoreConfig)
    numerical: NumericalConfig = field(default_factory=NumericalConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


class ConfigManager:
    """
    Configuration manager for gaussdist.

    Holds the current configuration and applies the file and environment
    layers on initialization. Runtime changes go through ``set`` and are
    tracked so that ``get_modified_options`` can report them.
    """

    def __init__(self):
        self._config = GaussConfig()
        self._initialized = False
        self._config_file: Optional[Path] = None
        self._modified_keys = set()
        self._handlers: List[logging.Handler] = []

    def initialize(self) -> None:
        """
        Initialize the configuration manager.

        Loads the user configuration file if one exists, applies environment
        variable overrides, validates the result, and configures logging.
        """
        if self._initialized:
            return

        self._locate_user_config()
        self._load_user_config()
        self._apply_env_overrides()
        self._validate_config()
        self._setup_logging()

        self._initialized = True
        logger.debug("Configuration manager initialized")

    def _locate_user_config(self) -> None:
        env_config_dir = os.environ.get(USER_CONFIG_DIR_ENV)
        if env_config_dir:
            self._config.core.user_config_dir = Path(env_config_dir)
        self._config_file = self._config.core.user_config_dir / DEFAULT_CONFIG_FILENAME

    def _load_user_config(self) -> None:
        """Load the user configuration file, if present."""
        if not self._config_file or not self._config_file.exists():
            logger.debug("No user configuration file found")
            return

        try:
            with open(self._config_file, 'r') as f:
                user_config = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.warning(f"Failed to load user configuration: {e}")
            return

        self._update_from_dict(user_config)
        logger.debug(f"Loaded user configuration from {self._config_file}")

    def _apply_env_overrides(self) -> None:
        """Apply ``GAUSSDIST_<SECTION>_<OPTION>`` environment variables."""
        for env_var, value in os.environ.items():
            if not env_var.startswith(CONFIG_ENV_PREFIX) or env_var == USER_CONFIG_DIR_ENV:
                continue

            key = env_var[len(CONFIG_ENV_PREFIX):]
            parts = key.lower().split('_', 1)
            if len(parts) != 2:
                continue

            section, option = parts
            try:
                ConfigSection(section)
            except ValueError:
                continue

            section_obj = getattr(self._config, section)
            if option not in section_obj.__dataclass_fields__:
                continue

            try:
                setattr(section_obj, option, self._coerce(section_obj, option, value))
                logger.debug(f"Applied environment override: {env_var}={value}")
            except (TypeError, ValueError) as e:
                logger.warning(f"Failed to apply environment override {env_var}: {e}")

    @staticmethod
    def _coerce(section_obj: Any, option: str, value: Any) -> Any:
        """Convert ``value`` to the type of the option's default."""
        current_value = getattr(section_obj, option)
        reference = current_value if current_value is not None else getattr(type(section_obj)(), option)

        if option == "log_level":
            return str(value).upper()
        if option == "random_seed":
            if value is None or (isinstance(value, str) and value.lower() in ("", "none")):
                return None
            return int(value)
        if option == "log_file":
            return None if value is None else Path(value)
        if isinstance(reference, bool):
            if isinstance(value, str):
                return value.lower() in ('true', 'yes', '1', 'y')
            return bool(value)
        if isinstance(reference, Path):
            return Path(value)
        if isinstance(reference, float):
            return float(value)
        if isinstance(reference, int):
            return int(value)
        return value

    def _setup_logging(self) -> None:
        """Attach handlers to the ``gaussdist`` root logger per the logging section."""
        root_logger = logging.getLogger("gaussdist")

        for handler in self._handlers:
            root_logger.removeHandler(handler)
        self._handlers = []

        root_logger.setLevel(getattr(logging, self._config.logging.log_level))

        formatter = logging.Formatter(
            fmt=self._config.logging.log_format,
            datefmt=self._config.logging.log_date_format
        )

        if self._config.logging.console_logging:
            console_handler = logging.StreamHandler()
            console_handler.setFormatter(formatter)
            self._handlers.append(console_handler)

        if self._config.logging.file_logging and self._config.logging.log_file:
            try:
                self._config.logging.log_file.parent.mkdir(parents=True, exist_ok=True)
                file_handler = logging.FileHandler(self._config.logging.log_file)
                file_handler.setFormatter(formatter)
                self._handlers.append(file_handler)
            except OSError as e:
                logger.warning(f"Failed to set up file logging: {e}")

        for handler in self._handlers:
            root_logger.addHandler(handler)

    def _validate_config(self) -> None:
        """Replace invalid values with their defaults, logging a warning for each."""
        numerical = self._config.numerical
        if numerical.svd_driver not in _SVD_DRIVERS:
            logger.warning(f"Invalid svd_driver: {numerical.svd_driver}, using gesdd")
            numerical.svd_driver = "gesdd"

        if not numerical.symmetry_tolerance >= 0:
            logger.warning(
                f"Invalid symmetry_tolerance: {numerical.symmetry_tolerance}, must be non-negative"
            )
            numerical.symmetry_tolerance = 1e-8

        logging_config = self._config.logging
        if logging_config.log_level not in _LOG_LEVELS:
            logger.warning(f"Invalid log level: {logging_config.log_level}, using WARNING")
            logging_config.log_level = "WARNING"

        seed = self._config.core.random_seed
        if seed is not None and (not isinstance(seed, int) or seed < 0):
            logger.warning(f"Invalid random_seed: {seed}, must be a non-negative integer")
            self._config.core.random_seed = None

    def _update_from_dict(self, config_dict: ConfigDict) -> None:
        for section_name, section_dict in config_dict.items():
            if not hasattr(self._config, section_name):
                logger.warning(f"Unknown configuration section: {section_name}")
                continue

            section = getattr(self._config, section_name)
            for option_name, option_value in section_dict.items():
                if option_name not in section.__dataclass_fields__:
                    logger.warning(f"Unknown configuration option: {section_name}.{option_name}")
                    continue
                try:
                    setattr(section, option_name, self._coerce(section, option_name, option_value))
                except (TypeError, ValueError) as e:
                    logger.warning(f"Failed to set {section_name}.{option_name}: {e}")

    def save_user_config(self) -> None:
        """Write the current configuration to the user configuration file."""
        if not self._config_file:
            logger.warning("No user configuration file path available")
            return

        try:
            self._config_file.parent.mkdir(parents=True, exist_ok=True)
            with open(self._config_file, 'w') as f:
                json.dump(self.to_dict(), f, indent=2)
            logger.debug(f"Saved user configuration to {self._config_file}")
        except OSError as e:
            logger.warning(f"Failed to save user configuration: {e}")

    def to_dict(self) -> ConfigDict:
        """
        Convert the configuration to a JSON-serializable dictionary.
        """
        result = {}
        for section in ConfigSection:
            section_obj = getattr(self._config, section.value)
            section_dict = {}
            for field_name in section_obj.__dataclass_fields__:
                value = getattr(section_obj, field_name)
                if isinstance(value, Path):
                    value = str(value)
                section_dict[field_name] = value
            result[section.value] = section_dict
        return result

    def get(self, section: str, option: str, default: Any = None) -> Any:
        """
        Get a configuration value, or ``default`` if it does not exist.
        """
        section_obj = getattr(self._config, section, None)
        if section_obj is None or option not in section_obj.__dataclass_fields__:
            return default
        return getattr(section_obj, option)

    def get_section(self, section: str) -> Any:
        """Get a whole configuration section dataclass.

        Raises:
            ConfigurationError: If the section is not found
        """
        if not self.has_section(section):
            raise ConfigurationError(
                f"Unknown configuration section: {section}",
                setting=section,
                issue="Section not found"
            )
        return getattr(self._config, section)

    def set(self, section: str, option: str, value: Any) -> None:
        """
        Set a configuration value.

        Raises:
            ConfigurationError: If the section or option is not found, or the
                value cannot be converted to the option's type
        """
        section_obj = self.get_section(section)

        if option not in section_obj.__dataclass_fields__:
            raise ConfigurationError(
                f"Unknown configuration option: {section}.{option}",
                setting=f"{section}.{option}",
                value=value,
                issue="Option not found"
            )

        try:
            typed_value = self._coerce(section_obj, option, value)
        except (TypeError, ValueError) as e:
            raise ConfigurationError(
                f"Failed to set configuration option: {section}.{option}",
                setting=f"{section}.{option}",
                value=value,
                issue=str(e)
            ) from e

        previous = getattr(section_obj, option)
        setattr(section_obj, option, typed_value)
        self._validate_config()
        if getattr(section_obj, option) != typed_value:
            setattr(section_obj, option, previous)
            raise ConfigurationError(
                f"Invalid value for configuration option: {section}.{option}",
                setting=f"{section}.{option}",
                value=value,
                issue="Value rejected by validation"
            )

        self._modified_keys.add(f"{section}.{option}")
        if section == ConfigSection.LOGGING.value:
            self._setup_logging()

        logger.debug(f"Set configuration option: {section}.{option}={value}")

    def reset(self, section: Optional[str] = None, option: Optional[str] = None) -> None:
        """
        Reset configuration to default values.

        Args:
            section: The configuration section to reset, or None to reset all
            option: The option to reset, or None to reset the entire section

        Raises:
            ConfigurationError: If the section or option is not found
        """
        if section is None:
            self._config = GaussConfig()
            self._modified_keys.clear()
            self._setup_logging()
            logger.debug("Reset all configuration to defaults")
            return

        section_obj = self.get_section(section)
        defaults = type(section_obj)()

        if option is None:
            setattr(self._config, section, defaults)
            self._modified_keys = {k for k in self._modified_keys if not k.startswith(f"{section}.")}
            logger.debug(f"Reset configuration section {section} to defaults")
        else:
            if option not in section_obj.__dataclass_fields__:
                raise ConfigurationError(
                    f"Unknown configuration option: {section}.{option}",
                    setting=f"{section}.{option}",
                    issue="Option not found"
                )
            setattr(section_obj, option, getattr(defaults, option))
            self._modified_keys.discard(f"{section}.{option}")
            logger.debug(f"Reset configuration option {section}.{option} to default")

        if section == ConfigSection.LOGGING.value:
            self._setup_logging()

    def has_section(self, section: str) -> bool:
        return section in {s.value for s in ConfigSection}

    def get_modified_options(self) -> ConfigDict:
        """Options changed at runtime, keyed as ``section.option``."""
        result = {}
        for key in sorted(self._modified_keys):
            section, option = key.split('.', 1)
            result[key] = self.get(section, option)
        return result

    @property
    def config_file(self) -> Optional[Path]:
        return self._config_file


# Create a singleton instance of the configuration manager
_config_manager = ConfigManager()


def initialize_config() -> None:
    """
    Initialize the configuration system.

    Called implicitly by every accessor below, so explicit calls are only
    needed to force environment variables to be read early.
    """
    _config_manager.initialize()


def get_config(section: str, option: str, default: Any = None) -> Any:
    """
    Get a configuration value.

    Args:
        section: The configuration section
        option: The configuration option
        default: Default value if the option is not found

    Returns:
        The configuration value, or the default if not found
    """
    if not _config_manager._initialized:
        initialize_config()

    return _config_manager.get(section, option, default)


def set_config(section: str, option: str, value: Any) -> None:
    """
    Set a configuration value.

    Raises:
        ConfigurationError: If the section or option is not found
    """
    if not _config_manager._initialized:
        initialize_config()

    _config_manager.set(section, option, value)


def reset_config(section: Optional[str] = None, option: Optional[str] = None) -> None:
    """
    Reset configuration to default values.

    Raises:
        ConfigurationError: If the section or option is not found
    """
    if not _config_manager._initialized:
        initialize_config()

    _config_manager.reset(section, option)


def save_config() -> None:
    """
    Save the current configuration to the user configuration file.
    """
    if not _config_manager._initialized:
        initialize_config()

    _config_manager.save_user_config()


def get_config_manager() -> ConfigManager:
    if not _config_manager._initialized:
        initialize_config()

    return _config_manager


def get_core_config() -> CoreConfig:
    return get_config_manager().get_section("core")


def get_numerical_config() -> NumericalConfig:
    return get_config_manager().get_section("numerical")


def get_logging_config() -> LoggingConfig:
    return get_config_manager().get_section("logging")


def get_modified_options() -> ConfigDict:
    return get_config_manager().get_modified_options()


def to_dict() -> ConfigDict:
    """
    Get the whole configuration as a dictionary.
    """
    return get_config_manager().to_dict()
