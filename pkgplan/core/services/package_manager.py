"""
Package-manager actions — index refresh, upgrades, scopes, debconf, config.

Each requested action compiles to its own checked group labelled
``package-manager <action> ...``. Repeated identical requests collapse
to one.

Accepted request shapes::

    "update"
    ("update", "--allow-releaseinfo-change")
    ("add-scope", {"scope": "non-free"})
    ("debconf", "selection line", ...)
    {"action": "configure", "proxy": "http://proxy:3128"}
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from pkgplan.backends.base import PackageBackend
from pkgplan.core.config.loader import CompilerConfig
from pkgplan.core.errors import CompileError, InvalidOperationError
from pkgplan.core.models.host import HostContext
from pkgplan.core.normalizer import as_list
from pkgplan.script import lib
from pkgplan.script.tree import (
    And,
    Assign,
    CheckedGroup,
    Command,
    Echo,
    Node,
    Or,
    Subst,
    Var,
)

logger = logging.getLogger(__name__)

MANAGER_ACTIONS = (
    "update",
    "upgrade",
    "list-installed",
    "add-scope",
    "multiverse",
    "universe",
    "debconf",
    "configure",
)

DEFAULT_SOURCES_LIST = "/etc/apt/sources.list"


class ManagerAction(BaseModel):
    """One normalized package-manager request."""

    model_config = ConfigDict(frozen=True)

    action: str
    args: tuple[str, ...] = ()
    options: dict[str, Any] = Field(default_factory=dict)

    @property
    def label(self) -> str:
        parts = ["package-manager", self.action, *self.args]
        parts.extend(f"{k}={v}" for k, v in self.options.items())
        return " ".join(parts)


def normalize_action(entry: Any) -> ManagerAction:
    """Normalize one request in any accepted shape."""
    if isinstance(entry, ManagerAction):
        return entry
    if isinstance(entry, str):
        return ManagerAction(action=entry)
    if isinstance(entry, Mapping):
        options = dict(entry)
        action = options.pop("action", None)
        if not action:
            raise CompileError(f"package-manager entry has no action: {entry!r}")
        args = as_list(options.pop("args", None) or options.pop("selections", None))
        return ManagerAction(action=str(action), args=tuple(args), options=options)
    if isinstance(entry, (list, tuple)) and entry:
        action, *rest = entry
        args: list[str] = []
        options: dict[str, Any] = {}
        for item in rest:
            if isinstance(item, Mapping):
                options.update(item)
            else:
                args.append(str(item))
        return ManagerAction(action=str(action), args=tuple(args), options=options)
    raise CompileError(f"Cannot interpret package-manager request: {entry!r}")


def distinct_actions(entries: Iterable[Any]) -> list[ManagerAction]:
    actions: list[ManagerAction] = []
    for entry in entries:
        action = normalize_action(entry)
        if action not in actions:
            actions.append(action)
    return actions


# ── Scopes ──────────────────────────────────────────────────────


def add_scope(scope: str, source_type: str = "deb.*", path: str = DEFAULT_SOURCES_LIST) -> list[Node]:
    """Append ``scope`` to every ``source_type`` line of an apt source file."""
    program = (
        "{if ($1 ~ /^%s/ && !/%s/) print $0 \" \" \"%s\" ; else print; }"
        % (source_type, scope, scope)
    )
    return [
        Assign("tmpfile", Subst(Command(("mktemp", "-t", "addscopeXXXX")))),
        Command(("cp", "-p", path, Var("tmpfile"))),
        Command(("awk", program, path), stdout=Var("tmpfile")),
        Command(("mv", "-f", Var("tmpfile"), path)),
    ]


def _scope_statements(action: ManagerAction) -> list[Node]:
    options = action.options
    scope = options.get("scope") or (action.action if action.action != "add-scope" else None)
    if not scope:
        raise CompileError("add-scope needs a scope")
    return add_scope(
        str(scope),
        source_type=options.get("type") or "deb.*",
        path=options.get("file") or DEFAULT_SOURCES_LIST,
    )


# ── Dispatch ────────────────────────────────────────────────────


def action_statements(
    action: ManagerAction,
    backend: PackageBackend,
    host: HostContext,
    config: CompilerConfig,
) -> list[Node]:
    """Statements for one package-manager request."""
    name = action.action
    if name not in MANAGER_ACTIONS:
        raise InvalidOperationError(name, kind="package-manager")

    if name == "update":
        return [lib.update_package_list(host, *action.args)]
    if name == "upgrade":
        return [lib.upgrade_all_packages(host)]
    if name == "list-installed":
        return [lib.list_installed_packages(host)]
    if name in ("add-scope", "multiverse", "universe"):
        return _scope_statements(action)
    if name == "debconf":
        if not host.backend.apt_family:
            logger.debug("debconf ignored for backend %s", host.backend.value)
            return []
        return [lib.debconf_set_selections(*action.args)]
    return backend.configure(action.options, host, config)


def package_manager_group(
    action: ManagerAction,
    backend: PackageBackend,
    host: HostContext,
    config: CompilerConfig,
) -> CheckedGroup:
    return CheckedGroup(
        label=action.label,
        body=tuple(action_statements(action, backend, host, config)),
    )


# ── Minimal packages ────────────────────────────────────────────


def minimal_packages_statements(host: HostContext) -> list[Node]:
    """Packages the generated scripts themselves rely on."""
    if host.os_family in ("ubuntu", "debian"):
        return [
            lib.update_package_list(host),
            lib.install_package(host, "coreutils"),
            lib.install_package(host, "sudo"),
        ]
    if host.os_family == "arch":
        db_upgrade = Command(("pacman-db-upgrade",), silent=True)
        return [
            Or(db_upgrade, Command(("true",))),
            lib.update_package_list(host),
            lib.upgrade_package(host, "pacman"),
            Echo("  checking for pacman-db-upgrade"),
            Or(And(db_upgrade, lib.update_package_list(host)), Command(("true",))),
            lib.install_package(host, "sudo"),
        ]
    logger.debug("No minimal packages defined for OS family %r", host.os_family)
    return []
