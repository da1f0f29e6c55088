"""Application configuration for scoped-acp.

Defines configuration models for logging and evaluation behavior. The config
file is stored at the OS-appropriate location (via click.get_app_dir) and can
be created with `scoped-acp config init`.

Example usage:
    # Load from config file
    config = AppConfig.load_from_files(get_config_path())

    # Save new configuration
    config.save_to_file(get_config_path())
"""

from __future__ import annotations

__all__ = [
    "DEFAULT_LOG_DIR",
    "AppConfig",
    "EvaluationConfig",
    "LoggingConfig",
    "get_config_path",
    "load_config",
]

import logging
import os
import sys
from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field

from scoped_acp.constants import CONFIG_FILE_NAME
from scoped_acp.exceptions import ConfigurationError
from scoped_acp.utils.file_helpers import (
    atomic_write_json,
    get_app_dir,
    load_validated_json,
    require_file_exists,
)


# =============================================================================
# Platform-specific defaults
# =============================================================================


def _get_platform_log_dir() -> str:
    """Get platform-appropriate base log directory following OS conventions.

    Platform conventions:
        - macOS: ~/Library/Logs
        - Linux: $XDG_STATE_HOME, falling back to ~/.local/state
        - Windows: ~/AppData/Local

    Returns:
        Platform-specific base log directory path (unexpanded).
    """
    if sys.platform == "darwin":
        return "~/Library/Logs"
    elif sys.platform == "win32":
        return "~/AppData/Local"
    return os.environ.get("XDG_STATE_HOME", "~/.local/state")


# Default base log directory (platform-specific, follows OS conventions)
DEFAULT_LOG_DIR = _get_platform_log_dir()


def get_config_path() -> Path:
    """Default config file location: <app dir>/config.json."""
    return get_app_dir() / CONFIG_FILE_NAME


# =============================================================================
# Configuration sections
# =============================================================================


class LoggingConfig(BaseModel):
    """Logging configuration settings.

    Logs are stored under <log_dir>/scoped-acp/:
        <log_dir>/
        └── scoped-acp/
            └── audit/
                └── decisions.jsonl     # One line per decision (if enabled)

    Attributes:
        log_dir: Base directory for logs (platform-specific default).
        log_level: Level for diagnostic logging (DEBUG or INFO).
        decision_log: Write every enforcement decision to decisions.jsonl.
    """

    log_dir: str = Field(default=DEFAULT_LOG_DIR, min_length=1)
    log_level: Literal["DEBUG", "INFO"] = "INFO"
    decision_log: bool = True

    @property
    def log_dir_path(self) -> Path:
        """log_dir with "~" expanded."""
        return Path(self.log_dir).expanduser()

    @property
    def level(self) -> int:
        """log_level as a logging module constant."""
        return logging.DEBUG if self.log_level == "DEBUG" else logging.INFO


class EvaluationConfig(BaseModel):
    """Evaluation behavior.

    Attributes:
        validate_policies: Validate policy documents before each evaluation.
            Disable only when every document comes from a source that already
            validated it (e.g. a bundle loaded at startup).
    """

    validate_policies: bool = True


class AppConfig(BaseModel):
    """Main application configuration for scoped-acp.

    Attributes:
        logging: Logging configuration (log level, paths, decision log).
        evaluation: Evaluation behavior.
        bundle_path: Default policy bundle for `scoped-acp check`.
    """

    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    evaluation: EvaluationConfig = Field(default_factory=EvaluationConfig)
    bundle_path: str | None = None

    def save_to_file(self, config_path: Path) -> None:
        """Save configuration to JSON file.

        Creates parent directories if they don't exist and sets owner-only
        permissions on the directory (0o700) and file (0o600).

        Args:
            config_path: Path where the config JSON file should be saved.
        """
        atomic_write_json(self.model_dump(), config_path, prefix=".config_")

    @classmethod
    def load_from_files(cls, config_path: Path) -> "AppConfig":
        """Load configuration from JSON file.

        Args:
            config_path: Path to the config JSON file.

        Returns:
            AppConfig instance with loaded configuration.

        Raises:
            FileNotFoundError: If config file doesn't exist.
            ValueError: If config file is invalid.
        """
        require_file_exists(
            config_path,
            file_type="configuration",
            hint="Run 'scoped-acp config init' to create one.",
        )
        return load_validated_json(
            config_path,
            cls,
            file_type="config",
            recovery_hint="Run 'scoped-acp config init --force' to reconfigure.",
        )


def load_config(config_path: Path | None = None, *, missing_ok: bool = True) -> AppConfig:
    """Load the app config, falling back to defaults when no file exists.

    Args:
        config_path: Config file; defaults to get_config_path().
        missing_ok: Return defaults instead of raising when the file is missing.

    Returns:
        Loaded (or default) AppConfig.

    Raises:
        ConfigurationError: If the file exists but is invalid, or is missing
            and missing_ok is False.
    """
    path = config_path or get_config_path()
    if not path.exists() and missing_ok:
        return AppConfig()

    try:
        return AppConfig.load_from_files(path)
    except (FileNotFoundError, ValueError) as e:
        raise ConfigurationError(str(e)) from e
