"""YAML configuration for evm.

The configuration file is optional. It lives at ``{home}/.evm/config.yaml``
unless another path is given on the command line:

    version: 1
    mirrors:
      go: https://golang.google.cn/dl
"""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Optional

import yaml

from evm.core.directory import get_config_path, get_user_home_dir
from evm.core.exceptions import ConfigError

logger = logging.getLogger(__name__)

HOME_ENV_VAR = "EVM_HOME"


@dataclass
class EvmConfig:
    """Complete evm configuration."""

    home: Path
    mirrors: Dict[str, str] = field(default_factory=dict)

    def mirror_for(self, toolchain: str) -> Optional[str]:
        """Get the configured base URL override for a toolchain, if any."""
        url = self.mirrors.get(toolchain)
        return url.rstrip("/") if url else None


def resolve_home(home: Optional[Path] = None) -> Path:
    """
    Determine the base storage directory.

    Precedence: explicit argument, then the EVM_HOME environment variable,
    then the user's home directory.
    """
    if home is not None:
        return Path(home).expanduser()
    env_home = os.environ.get(HOME_ENV_VAR)
    if env_home:
        return Path(env_home).expanduser()
    return get_user_home_dir()


def load_config(
    home: Optional[Path] = None, config_path: Optional[Path] = None
) -> EvmConfig:
    """
    Load configuration.

    Args:
        home: Base storage directory override
        config_path: Explicit config file; it must exist when given

    Returns:
        Parsed configuration (defaults when no file is present)

    Raises:
        ConfigError: If the file is missing (explicit path only) or invalid
    """
    resolved_home = resolve_home(home)

    if config_path is None:
        config_path = get_config_path(resolved_home)
        if not config_path.exists():
            logger.debug(f"Config file not found (optional): {config_path}")
            return EvmConfig(home=resolved_home)
    elif not config_path.exists():
        raise ConfigError(f"Configuration file not found: {config_path}")

    logger.debug(f"Loading configuration from {config_path}")
    try:
        with open(config_path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {config_path}: {e}") from e

    return _parse_and_validate(data or {}, resolved_home)


def _parse_and_validate(data: dict, home: Path) -> EvmConfig:
    """Parse and validate configuration data."""
    if not isinstance(data, dict):
        raise ConfigError("Configuration must be a mapping")

    version = data.get("version", 1)
    if version != 1:
        raise ConfigError(f"Unsupported version: {version} (expected 1)")

    mirrors = data.get("mirrors") or {}
    if not isinstance(mirrors, dict):
        raise ConfigError("'mirrors' must be a mapping of toolchain to URL")
    for name, url in mirrors.items():
        if not isinstance(url, str) or not url.startswith(("http://", "https://")):
            raise ConfigError(f"Invalid mirror URL for '{name}': {url!r}")

    return EvmConfig(home=home, mirrors={str(k): v for k, v in mirrors.items()})
