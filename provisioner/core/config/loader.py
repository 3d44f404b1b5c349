"""
Configuration loader — reads config.yml into a Settings model.

Lookup order for the file:
    explicit path  >  PROVISIONER_CONFIG env var  >  ~/.config/provisioner/config.yml

A missing default file is fine (defaults apply); a missing explicit
file is an error.  PROVISIONER_PREFIX / PROVISIONER_JOBS override
whatever the file says.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

import yaml
from pydantic import BaseModel, Field, ValidationError

from provisioner.core.services.provision.data.constants import (
    CONNECT_TIMEOUT,
    DEFAULT_PREFIX,
    DEFAULT_REQUIRED_OS,
    DEFAULT_REQUIRED_TOOLS,
    HEARTBEAT_INTERVAL,
    SUDO_KEEPALIVE_INTERVAL,
)

logger = logging.getLogger(__name__)

CONFIG_ENV_VAR = "PROVISIONER_CONFIG"
DEFAULT_CONFIG_PATH = Path("~/.config/provisioner/config.yml")
DEFAULT_DOWNLOAD_DIR = "~/.cache/provisioner/downloads"


class ConfigError(Exception):
    """Raised when provisioner configuration is invalid or missing."""


class Settings(BaseModel):
    """Run-independent configuration."""

    prefix: str = DEFAULT_PREFIX
    jobs: int = Field(default=0, ge=0)              # 0 = CPU count
    download_dir: str = DEFAULT_DOWNLOAD_DIR
    work_root: str | None = None                    # None = system temp dir
    required_os: str = DEFAULT_REQUIRED_OS
    required_tools: list[str] = Field(default_factory=lambda: list(DEFAULT_REQUIRED_TOOLS))
    connect_timeout: int = Field(default=CONNECT_TIMEOUT, gt=0)
    heartbeat_interval: float = Field(default=HEARTBEAT_INTERVAL, gt=0)
    sudo_keepalive_interval: float = Field(default=SUDO_KEEPALIVE_INTERVAL, ge=0)

    def resolved_prefix(self, override: str | None = None) -> str:
        """Absolute prefix path (``~`` expanded)."""
        return str(Path(override or self.prefix).expanduser().resolve())

    def resolved_download_dir(self) -> str:
        return str(Path(self.download_dir).expanduser())


def find_config_file(path: Path | None = None) -> Path | None:
    """Return the config file to load, or None to use defaults.

    Raises:
        ConfigError: an explicitly requested file does not exist.
    """
    explicit = path or (Path(os.environ[CONFIG_ENV_VAR]) if os.environ.get(CONFIG_ENV_VAR) else None)
    if explicit is not None:
        explicit = explicit.expanduser()
        if not explicit.is_file():
            raise ConfigError(f"Config file not found: {explicit}")
        return explicit

    default = DEFAULT_CONFIG_PATH.expanduser()
    return default if default.is_file() else None


def _env_overrides() -> dict:
    overrides: dict = {}
    if os.environ.get("PROVISIONER_PREFIX"):
        overrides["prefix"] = os.environ["PROVISIONER_PREFIX"]
    if os.environ.get("PROVISIONER_JOBS"):
        try:
            overrides["jobs"] = int(os.environ["PROVISIONER_JOBS"])
        except ValueError as e:
            raise ConfigError(f"PROVISIONER_JOBS must be an integer: {e}") from e
    return overrides


def load_settings(path: Path | None = None) -> Settings:
    """Load and validate settings.

    Args:
        path: Explicit config file.  If None, uses the lookup order above.

    Returns:
        Validated Settings.

    Raises:
        ConfigError: unreadable, malformed or invalid configuration.
    """
    data: dict = {}
    config_file = find_config_file(path)

    if config_file is not None:
        logger.debug("Loading settings from %s", config_file)
        try:
            raw = config_file.read_text(encoding="utf-8")
        except OSError as e:
            raise ConfigError(f"Cannot read {config_file}: {e}") from e

        try:
            loaded = yaml.safe_load(raw)
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML in {config_file}: {e}") from e

        if loaded is None:
            loaded = {}
        if not isinstance(loaded, dict):
            raise ConfigError(
                f"Expected a YAML mapping in {config_file}, got {type(loaded).__name__}"
            )

        # May wrap everything under a "provisioner" key
        data = loaded.get("provisioner", loaded)
        if not isinstance(data, dict):
            raise ConfigError(f"'provisioner' in {config_file} must be a mapping")

    data = {**data, **_env_overrides()}

    try:
        settings = Settings.model_validate(data)
    except ValidationError as e:
        raise ConfigError(f"Invalid configuration: {e}") from e

    logger.info("Settings: prefix=%s jobs=%s", settings.prefix, settings.jobs or "auto")
    return settings
