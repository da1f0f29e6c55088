"""Per-invocation CLI state shared by the command group and its subcommands."""

from __future__ import annotations

__all__ = ["CliState"]

from dataclasses import dataclass, field
from pathlib import Path

from scoped_acp.config import AppConfig, load_config


@dataclass
class CliState:
    """Config location selected by --config / SCOPED_ACP_CONFIG.

    Attributes:
        config_path: Config file path (may not exist yet).
    """

    config_path: Path
    _config: AppConfig | None = field(default=None, repr=False)

    def app_config(self) -> AppConfig:
        """Load the config once; defaults are used if the file does not exist.

        Raises:
            ConfigurationError: If the file exists but is invalid.
        """
        if self._config is None:
            self._config = load_config(self.config_path)
        return self._config
