"""
Configuration loader — reads pkgplan.yml and plan files.

Compiler settings live in ``pkgplan.yml``; a missing file means
defaults. Plan files are YAML documents listing the package, source
and package-manager requests for one compilation.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError

logger = logging.getLogger(__name__)

# Default config filename
CONFIG_FILE = "pkgplan.yml"

DEFAULT_KEY_SERVER = "subkeys.pgp.net"


class ConfigError(Exception):
    """Raised when configuration or a plan file is invalid."""


class CompilerConfig(BaseModel):
    """Settings shared by every compilation.

    Attributes:
        key_server:  Keyserver used for apt key-id imports when a source
                     does not name its own.
        app_name:    Names the manager config files this tool writes
                     (``/etc/yum.<app>.conf``, ``/etc/apt/apt.conf.d/50<app>``).
        interpreter: Interpreter declared by compiled scripts.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    key_server: str = DEFAULT_KEY_SERVER
    app_name: str = Field(default="pkgplan", pattern=r"^[A-Za-z0-9_.-]+$")
    interpreter: str = "bash"


class Plan(BaseModel):
    """One compilation request loaded from a plan file."""

    packages: list[Any] = Field(default_factory=list)
    sources: list[dict[str, Any]] = Field(default_factory=list)
    package_manager: list[Any] = Field(default_factory=list)


def find_config_file(start_dir: Path | None = None) -> Path | None:
    """Search for pkgplan.yml starting from the given directory, walking up."""
    start = (start_dir or Path.cwd()).resolve()
    for directory in (start, *start.parents):
        candidate = directory / CONFIG_FILE
        if candidate.is_file():
            return candidate
    return None


def _read_mapping(path: Path) -> dict[str, Any]:
    """Parse ``path`` as YAML; an empty document is an empty mapping."""
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except FileNotFoundError as e:
        raise ConfigError(f"File not found: {path}") from e
    except OSError as e:
        raise ConfigError(f"Cannot read {path}: {e}") from e
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"{path} must hold a YAML mapping, not {type(data).__name__}")
    return data


def load_config(path: Path | None = None) -> CompilerConfig:
    """Load compiler settings.

    Args:
        path: Explicit path to pkgplan.yml. If None, searches upward and
              falls back to defaults when nothing is found.

    Raises:
        ConfigError: If the file exists but is invalid.
    """
    if path is None:
        path = find_config_file()
        if path is None:
            logger.debug("No %s found, using defaults", CONFIG_FILE)
            return CompilerConfig()

    logger.debug("Loading compiler config from %s", path)
    data = _read_mapping(path)

    # Settings may also sit under a top-level "pkgplan" key
    data = data.get("pkgplan", data)

    try:
        return CompilerConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigError(f"Invalid configuration in {path}: {e}") from e


def load_plan(path: Path) -> Plan:
    """Load and validate a plan file.

    Raises:
        ConfigError: If the file is missing or invalid.
    """
    try:
        plan = Plan.model_validate(_read_mapping(path))
    except ValidationError as e:
        raise ConfigError(f"Invalid plan in {path}: {e}") from e

    logger.info(
        "Loaded plan %s: %d packages, %d sources, %d package-manager actions",
        path.name, len(plan.packages), len(plan.sources), len(plan.package_manager),
    )
    return plan
