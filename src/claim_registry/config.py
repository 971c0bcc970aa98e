"""Project configuration discovery and token resolution.

Convention-based: ``.claim-registry/config.json`` is found by walking up
from the current directory.
"""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any

from claim_registry.errors import MissingCredentials
from claim_registry.github import DEFAULT_API_URL
from claim_registry.orchestrator import DEFAULT_TARGET_BRANCH
from claim_registry.types import RegistryConfig

logger = logging.getLogger(__name__)

CONFIG_DIR_NAME = ".claim-registry"
CONFIG_FILENAME = "config.json"
TOKEN_ENV_VAR = "GITHUB_TOKEN"


def default_config() -> RegistryConfig:
    return RegistryConfig(api_url=DEFAULT_API_URL, target_branch=DEFAULT_TARGET_BRANCH, version=1)


def find_config_root(start: Path | None = None) -> Path:
    """Walk up from start (default cwd) looking for .claim-registry/.

    Returns the .claim-registry/ directory path (not the project root).
    """
    current = (start or Path.cwd()).resolve()
    for parent in [current, *current.parents]:
        candidate = parent / CONFIG_DIR_NAME
        if candidate.is_dir():
            return candidate
    msg = f"No {CONFIG_DIR_NAME}/ directory found in {current} or any parent"
    raise FileNotFoundError(msg)


def read_config(config_dir: Path) -> RegistryConfig:
    """Read .claim-registry/config.json over the defaults. Returns defaults if missing or corrupt."""
    config = default_config()
    config_path = config_dir / CONFIG_FILENAME
    if not config_path.exists():
        return config
    try:
        data = json.loads(config_path.read_text())
    except (json.JSONDecodeError, OSError) as exc:
        logger.warning("Failed to read %s, using defaults: %s", config_path, exc)
        return config
    if not isinstance(data, dict):
        logger.warning("Config file %s contains non-object JSON, using defaults", config_path)
        return config
    config.update(data)  # type: ignore[typeddict-item]
    return config


def write_config(config_dir: Path, config: dict[str, Any] | RegistryConfig) -> None:
    """Write .claim-registry/config.json."""
    config_path = config_dir / CONFIG_FILENAME
    config_path.write_text(json.dumps(config, indent=2) + "\n")


def load_config() -> tuple[RegistryConfig, Path | None]:
    """Discovered config plus its directory, or defaults and None outside a project."""
    try:
        config_dir = find_config_root()
    except FileNotFoundError:
        return default_config(), None
    return read_config(config_dir), config_dir


def resolve_token(config: RegistryConfig, override: str | None = None) -> str:
    """Explicit override, then config, then $GITHUB_TOKEN."""
    token = override or config.get("github_token") or os.environ.get(TOKEN_ENV_VAR, "")
    if not token:
        raise MissingCredentials()
    return token
