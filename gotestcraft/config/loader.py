"""Configuration loader for gotestcraft."""

import logging
import os
import tomllib
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from .models import GoTestCraftConfig
from .models.main import _deep_merge

logger = logging.getLogger(__name__)


class ConfigurationError(Exception):
    """Raised when configuration loading or validation fails."""

    pass


class ConfigLoader:
    """Configuration loader that merges config files, environment variables, and CLI arguments."""

    DEFAULT_CONFIG_FILES = [
        ".gotestcraft.toml",  # TOML files (preferred)
        ".gotestcraft.yml",
        ".gotestcraft.yaml",
        "gotestcraft.toml",
        "gotestcraft.yml",
        "gotestcraft.yaml",
    ]

    ENV_PREFIX = "GOTESTCRAFT_"

    def __init__(self, config_file: str | Path | None = None, search_dir: Path | None = None):
        """Initialize the configuration loader.

        Args:
            config_file: Path to configuration file. If None, will search for default files.
            search_dir: Directory searched for default files (current directory if None).
        """
        self.config_file = Path(config_file) if config_file else None
        self.search_dir = search_dir
        self._config_cache: GoTestCraftConfig | None = None

    def load_config(
        self,
        cli_overrides: dict[str, Any] | None = None,
        reload: bool = False,
    ) -> GoTestCraftConfig:
        """Load configuration from all sources.

        Args:
            cli_overrides: Nested overrides from the command line, see overrides_from_pairs
            reload: Force reload even if cached

        Returns:
            Validated gotestcraft configuration

        Raises:
            ConfigurationError: If configuration is invalid
        """
        if self._config_cache is not None and not reload:
            return self._config_cache

        try:
            config_dict: dict[str, Any] = {}

            # 1. Load from configuration file (TOML or YAML)
            file_config = self._load_config_file()
            if file_config:
                config_dict = _deep_merge(config_dict, file_config)
                logger.debug(
                    "Loaded configuration from %s", self._get_config_file_path()
                )

            # 2. Apply environment variable overrides
            env_config = self._load_env_config()
            if env_config:
                config_dict = _deep_merge(config_dict, env_config)
                logger.debug("Applied environment variable overrides")

            # 3. Apply CLI overrides (highest priority)
            if cli_overrides:
                config_dict = _deep_merge(config_dict, cli_overrides)
                logger.debug("Applied CLI argument overrides")

            # 4. Validate and create Pydantic model
            self._config_cache = GoTestCraftConfig(**config_dict)
            logger.debug("Configuration loaded and validated successfully")

            return self._config_cache

        except ConfigurationError:
            raise
        except ValidationError as e:
            error_msg = f"Configuration validation failed: {e}"
            logger.error(error_msg)
            raise ConfigurationError(error_msg) from e
        except Exception as e:
            error_msg = f"Failed to load configuration: {e}"
            logger.error(error_msg)
            raise ConfigurationError(error_msg) from e

    def _load_config_file(self) -> dict[str, Any] | None:
        """Load configuration from TOML or YAML file."""
        config_file = self._get_config_file_path()

        if not config_file or not config_file.exists():
            logger.debug("No configuration file found, using defaults")
            return None

        try:
            if config_file.suffix.lower() == ".toml":
                return self._load_toml_file(config_file)
            elif config_file.suffix.lower() in (".yml", ".yaml"):
                return self._load_yaml_file(config_file)
            else:
                logger.warning("Unknown configuration file type: %s", config_file)
                return None

        except OSError as e:
            error_msg = f"Failed to read {config_file}: {e}"
            logger.error(error_msg)
            raise ConfigurationError(error_msg) from e

    def _load_toml_file(self, config_file: Path) -> dict[str, Any] | None:
        """Load configuration from TOML file."""
        try:
            with open(config_file, "rb") as f:
                content = tomllib.load(f)

            if not content:
                logger.warning("Configuration file %s is empty", config_file)
                return None

            return content

        except tomllib.TOMLDecodeError as e:
            error_msg = f"Invalid TOML in {config_file}: {e}"
            logger.error(error_msg)
            raise ConfigurationError(error_msg) from e

    def _load_yaml_file(self, config_file: Path) -> dict[str, Any] | None:
        """Load configuration from YAML file."""
        try:
            with open(config_file, encoding="utf-8") as f:
                content = yaml.safe_load(f)

            if not content:
                logger.warning("Configuration file %s is empty", config_file)
                return None

            return content

        except yaml.YAMLError as e:
            error_msg = f"Invalid YAML in {config_file}: {e}"
            logger.error(error_msg)
            raise ConfigurationError(error_msg) from e

    def _load_env_config(self) -> dict[str, Any]:
        """Load configuration from environment variables."""
        env_config: dict[str, Any] = {}

        for key, value in os.environ.items():
            if key.startswith(self.ENV_PREFIX):
                config_key = key[len(self.ENV_PREFIX) :].lower()

                # e.g., GOTESTCRAFT_GENERATION__FRESH_TEST_NAME -> generation.fresh_test_name
                nested_keys = config_key.split("__")

                self._set_nested_value(env_config, nested_keys, self._parse_env_value(value))

        return env_config

    def overrides_from_pairs(self, pairs: list[str] | tuple[str, ...]) -> dict[str, Any]:
        """Build CLI overrides from ``section.key=value`` pairs.

        Values are parsed like environment variables.

        Raises:
            ConfigurationError: If a pair has no ``=`` or an empty key
        """
        overrides: dict[str, Any] = {}
        for pair in pairs:
            key, sep, value = pair.partition("=")
            nested_keys = [part.strip().lower() for part in key.split(".")]
            if not sep or not all(nested_keys):
                raise ConfigurationError(f"Invalid override {pair!r}: expected KEY=VALUE")
            self._set_nested_value(overrides, nested_keys, self._parse_env_value(value))
        return overrides

    def _parse_env_value(self, value: str) -> Any:
        """Parse environment variable value to appropriate Python type."""
        if value.lower() in ("true", "yes", "on"):
            return True
        elif value.lower() in ("false", "no", "off"):
            return False

        # Handle list values (comma-separated)
        if "," in value:
            return [item.strip() for item in value.split(",")]

        return value

    def _set_nested_value(self, config: dict[str, Any], keys: list, value: Any) -> None:
        """Set a nested value in the configuration dictionary."""
        current = config

        for key in keys[:-1]:
            if key not in current:
                current[key] = {}
            current = current[key]

        current[keys[-1]] = value

    def _get_config_file_path(self) -> Path | None:
        """Get the path to the configuration file."""
        if self.config_file:
            return self.config_file

        base = self.search_dir or Path.cwd()
        for filename in self.DEFAULT_CONFIG_FILES:
            path = base / filename
            if path.exists():
                return path

        return None

