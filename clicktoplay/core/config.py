"""
Configuration management for clicktoplay using Pydantic.
"""

import json
import logging
import os
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import yaml
from pydantic import BaseModel, Field, field_validator

from clicktoplay.core.permissions import Permission
from clicktoplay.core.wait import WaitSettings

logger = logging.getLogger(__name__)

ENV_PREFIX = "CLICKTOPLAY_"


class LogLevel(str, Enum):
    """Log levels for clicktoplay."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class Environment(str, Enum):
    """Environment types for clicktoplay."""
    DEV = "dev"
    TEST = "test"
    PROD = "prod"


class PolicySettings(BaseModel):
    """Click-to-play policy settings."""

    click_to_play: bool = Field(
        default=True,
        description="Require a click before embedded plugin content runs"
    )
    default_permissions: Dict[str, Permission] = Field(
        default={},
        description="Origin permissions present when a session starts"
    )

    @field_validator("default_permissions", mode="before")
    @classmethod
    def parse_permissions(cls, value: Any) -> Dict[str, Permission]:
        """Accept loose permission spellings such as "allow" or "deny"."""
        if value is None:
            return {}
        if not isinstance(value, dict):
            raise ValueError(f"Invalid default permissions: {value}")
        return {origin: Permission.parse(perm) for origin, perm in value.items()}


class ScenarioSettings(BaseModel):
    """Scenario discovery settings."""

    scenario_dirs: List[Path] = Field(
        default_factory=lambda: [Path.home() / ".clicktoplay" / "scenarios"],
        description="Directories to search for scenario files"
    )
    include_builtin: bool = Field(
        default=True,
        description="Register the built-in scenarios"
    )


class LoggingSettings(BaseModel):
    """Logging-specific settings."""
    level: LogLevel = Field(
        default=LogLevel.INFO,
        description="Log level"
    )
    file: Optional[Path] = Field(
        default=None,
        description="Path to log file"
    )
    format: str = Field(
        default="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        description="Log format"
    )
    rotate_size: int = Field(
        default=10 * 1024 * 1024,  # 10 MB
        description="Size in bytes before log rotation"
    )
    backup_count: int = Field(
        default=5,
        description="Number of backup logs to keep"
    )

    @field_validator("file", mode="before")
    @classmethod
    def validate_log_file_path(cls, value: Any) -> Optional[Path]:
        """Validate and convert log file path to Path object.

        Args:
            value: Path value

        Returns:
            Path object or None
        """
        if value is None:
            return None

        if isinstance(value, str):
            return Path(value).expanduser().absolute()

        if isinstance(value, Path):
            return value.expanduser().absolute()

        raise ValueError(f"Invalid log file path: {value}")


class Settings(BaseModel):
    """Main settings for clicktoplay."""

    env: Environment = Field(
        default=Environment.DEV,
        description="Current environment (dev/test/prod)"
    )
    data_dir: Path = Field(
        default_factory=lambda: Path.home() / ".clicktoplay",
        description="Directory to store reports and scenarios"
    )
    config_file: Optional[Path] = Field(
        default=None,
        description="Path to configuration file"
    )

    logging: LoggingSettings = Field(
        default_factory=LoggingSettings,
        description="Logging settings"
    )
    policy: PolicySettings = Field(
        default_factory=PolicySettings,
        description="Click-to-play policy settings"
    )
    wait: WaitSettings = Field(
        default_factory=WaitSettings,
        description="Condition polling settings"
    )
    scenarios: ScenarioSettings = Field(
        default_factory=ScenarioSettings,
        description="Scenario settings"
    )

    def __init__(
        self,
        config_file: Optional[Union[str, Path]] = None,
        env: Optional[Environment] = None,
        **data: Any
    ):
        """Initialize settings.

        Args:
            config_file: Path to configuration file
            env: Environment to use (overrides config/env var)
            **data: Additional settings
        """
        if isinstance(config_file, str):
            config_file = Path(config_file)

        # Load settings in order of precedence
        settings = {}

        # 1. Load from default config file if exists
        default_config = Path.home() / ".clicktoplay" / "config.yaml"
        if default_config.exists():
            settings.update(self._load_from_file(default_config))

        # 2. Load from specified config file
        if config_file and config_file.exists():
            settings.update(self._load_from_file(config_file))

        # 3. Load from environment variables
        for key, value in self._load_from_env().items():
            if isinstance(value, dict) and isinstance(settings.get(key), dict):
                settings[key] = {**settings[key], **value}
            else:
                settings[key] = value

        # 4. Override with provided data
        settings.update(data)

        # 5. Override environment if specified
        if env:
            settings["env"] = env

        super().__init__(**settings)

        self.config_file = config_file
        self.data_dir.mkdir(parents=True, exist_ok=True)

    @staticmethod
    def _load_from_env() -> Dict[str, Any]:
        """Load settings from environment variables.

        Returns:
            Dictionary of settings from environment variables
        """
        settings = {}

        if os.environ.get(f"{ENV_PREFIX}ENV"):
            settings["env"] = os.environ[f"{ENV_PREFIX}ENV"]

        if os.environ.get(f"{ENV_PREFIX}DATA_DIR"):
            settings["data_dir"] = Path(os.environ[f"{ENV_PREFIX}DATA_DIR"])

        if os.environ.get(f"{ENV_PREFIX}LOG_LEVEL"):
            settings.setdefault("logging", {})["level"] = os.environ[f"{ENV_PREFIX}LOG_LEVEL"].upper()

        if os.environ.get(f"{ENV_PREFIX}LOG_FILE"):
            settings.setdefault("logging", {})["file"] = Path(os.environ[f"{ENV_PREFIX}LOG_FILE"])

        click_to_play = os.environ.get(f"{ENV_PREFIX}CLICK_TO_PLAY")
        if click_to_play:
            settings.setdefault("policy", {})["click_to_play"] = (
                click_to_play.strip().lower() in ("1", "true", "yes", "on")
            )

        if os.environ.get(f"{ENV_PREFIX}WAIT_TIMEOUT"):
            settings.setdefault("wait", {})["timeout"] = float(os.environ[f"{ENV_PREFIX}WAIT_TIMEOUT"])

        return settings

    @staticmethod
    def _load_from_file(config_file: Path) -> Dict[str, Any]:
        """Load settings from configuration file.

        Args:
            config_file: Path to configuration file

        Returns:
            Dictionary of settings from file
        """
        if not config_file.exists():
            logger.warning(f"Configuration file {config_file} not found")
            return {}

        try:
            with open(config_file, "r") as f:
                if config_file.suffix.lower() in [".yaml", ".yml"]:
                    return yaml.safe_load(f) or {}
                elif config_file.suffix.lower() == ".json":
                    return json.load(f)
                else:
                    logger.warning(f"Unsupported configuration file format: {config_file.suffix}")
                    return {}
        except (OSError, ValueError, yaml.YAMLError) as e:
            logger.error(f"Error loading configuration file: {e}")
            return {}

    def save(self, config_file: Optional[Path] = None) -> bool:
        """Save settings to configuration file.

        Args:
            config_file: Path to configuration file (defaults to self.config_file)

        Returns:
            True if settings were saved, False otherwise
        """
        config_file = config_file or self.config_file

        if not config_file:
            logger.warning("No configuration file specified")
            return False

        try:
            config_file.parent.mkdir(parents=True, exist_ok=True)
            settings_dict = self.model_dump(mode="json", exclude={"config_file"})

            with open(config_file, "w") as f:
                if config_file.suffix.lower() in [".yaml", ".yml"]:
                    yaml.safe_dump(settings_dict, f, default_flow_style=False)
                elif config_file.suffix.lower() == ".json":
                    json.dump(settings_dict, f, indent=2)
                else:
                    logger.warning(f"Unsupported configuration file format: {config_file.suffix}")
                    return False

            logger.info(f"Settings saved to {config_file}")
            return True
        except OSError as e:
            logger.error(f"Error saving configuration file: {e}")
            return False

    @field_validator("data_dir", mode="before")
    @classmethod
    def validate_path(cls, value: Any) -> Path:
        """Validate and convert path to Path object.

        Args:
            value: Path value

        Returns:
            Path object
        """
        if isinstance(value, str):
            return Path(value).expanduser().absolute()

        if isinstance(value, Path):
            return value.expanduser().absolute()

        raise ValueError(f"Invalid path: {value}")
