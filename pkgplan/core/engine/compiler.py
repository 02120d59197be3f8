"""
Compiler — the entry points that turn package intents into a script.

Every entry point is a pure function of (host, request): it resolves
the backend strategy for the host through the registry, builds the
checked command groups, and returns a CompileResult. Nothing here
raises for a bad request; compile errors come back as failed results.

Flow:
    raw args → normalize → registry.resolve(host.backend) → statements
             → CheckedGroup(s) → Script → CompileResult
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Mapping, Sequence
from typing import Any

from pydantic import ValidationError

from pkgplan.backends.base import PackageBackend
from pkgplan.backends.registry import BackendRegistry, default_registry
from pkgplan.core.config.loader import CompilerConfig, Plan
from pkgplan.core.errors import CompileError
from pkgplan.core.models.host import HostContext
from pkgplan.core.models.operation import PackageOperation
from pkgplan.core.models.result import CompileResult
from pkgplan.core.models.source import RepositorySource
from pkgplan.core.normalizer import normalize_all
from pkgplan.core.services.artifacts import add_rpm_statements, install_deb_statements
from pkgplan.core.services.package_manager import (
    distinct_actions,
    minimal_packages_statements,
    package_manager_group,
)
from pkgplan.core.services.sources import package_source_group
from pkgplan.script.tree import CheckedGroup, Node, Script

logger = logging.getLogger(__name__)

Builder = Callable[[PackageBackend], list[Node]]


def _compile(
    host: HostContext,
    build: Builder,
    registry: BackendRegistry | None,
    config: CompilerConfig | None,
) -> CompileResult:
    registry = registry or default_registry()
    config = config or CompilerConfig()
    backend = registry.resolve(host.backend)

    try:
        statements = build(backend)
    except CompileError as e:
        logger.error("Compilation failed for %s backend: %s", backend.name, e)
        return CompileResult.failure(host.backend, e)

    script = Script(interpreter=config.interpreter, statements=tuple(statements))
    return CompileResult.success(host.backend, script)


# ── Packages ────────────────────────────────────────────────────


def packages_group(
    operations: Sequence[PackageOperation],
    backend: PackageBackend,
    host: HostContext,
) -> CheckedGroup:
    """The batch plus its verification, as one checked unit."""
    body = backend.compile_packages(operations, host)
    body.extend(backend.verify(operations, host))
    return CheckedGroup(label="Packages", body=tuple(body))


def _package_statements(
    packages: Iterable[Any],
    backend: PackageBackend,
    host: HostContext,
) -> list[Node]:
    operations = normalize_all(packages)
    if not operations:
        return []
    logger.info("Compiling %d package operations for %s", len(operations), backend.name)
    return [packages_group(operations, backend, host)]


def compile_packages(
    host: HostContext,
    packages: Iterable[Any],
    *,
    registry: BackendRegistry | None = None,
    config: CompilerConfig | None = None,
) -> CompileResult:
    """Compile one batch of package operations for ``host``.

    Args:
        host: Target host context.
        packages: Raw package arguments (see ``normalize_args``).

    Returns:
        CompileResult with a single "Packages" checked group.
    """
    packages = list(packages)
    return _compile(
        host, lambda backend: _package_statements(packages, backend, host), registry, config,
    )


# ── Sources ─────────────────────────────────────────────────────


def _as_source(entry: RepositorySource | Mapping[str, Any]) -> RepositorySource:
    if isinstance(entry, RepositorySource):
        return entry
    options = dict(entry)
    name = options.pop("name", None)
    if not name:
        raise CompileError(f"Package source has no name: {entry!r}")
    return RepositorySource.from_args(str(name), **options)


def _source_statements(
    sources: Iterable[Any],
    backend: PackageBackend,
    host: HostContext,
    config: CompilerConfig,
) -> list[Node]:
    return [package_source_group(_as_source(s), backend, host, config) for s in sources]


def compile_package_sources(
    host: HostContext,
    sources: Iterable[RepositorySource | Mapping[str, Any]],
    *,
    registry: BackendRegistry | None = None,
    config: CompilerConfig | None = None,
) -> CompileResult:
    """Compile repository source definitions, one checked group each."""
    sources = list(sources)
    config = config or CompilerConfig()
    return _compile(
        host,
        lambda backend: _source_statements(sources, backend, host, config),
        registry,
        config,
    )


# ── Package manager ─────────────────────────────────────────────


def _manager_statements(
    actions: Iterable[Any],
    backend: PackageBackend,
    host: HostContext,
    config: CompilerConfig,
) -> list[Node]:
    return [
        package_manager_group(action, backend, host, config)
        for action in distinct_actions(actions)
    ]


def compile_package_manager(
    host: HostContext,
    *actions: Any,
    registry: BackendRegistry | None = None,
    config: CompilerConfig | None = None,
) -> CompileResult:
    """Compile package-manager requests (update, configure, add-scope, ...)."""
    config = config or CompilerConfig()
    return _compile(
        host,
        lambda backend: _manager_statements(actions, backend, host, config),
        registry,
        config,
    )


# ── Artifacts and bootstrap ─────────────────────────────────────


def compile_add_rpm(
    host: HostContext,
    rpm_name: str,
    *,
    url: str | None = None,
    content: str | None = None,
    config: CompilerConfig | None = None,
) -> CompileResult:
    """Place an .rpm file and install it unless already installed."""
    return _compile(
        host, lambda _backend: add_rpm_statements(rpm_name, url=url, content=content), None, config,
    )


def compile_install_deb(
    host: HostContext,
    deb_name: str,
    *,
    url: str | None = None,
    content: str | None = None,
    config: CompilerConfig | None = None,
) -> CompileResult:
    """Place a .deb file and install it with dpkg."""
    return _compile(
        host, lambda _backend: install_deb_statements(deb_name, url=url, content=content), None, config,
    )


def compile_minimal_packages(
    host: HostContext,
    *,
    config: CompilerConfig | None = None,
) -> CompileResult:
    """Install the packages generated scripts rely on (sudo, coreutils)."""
    return _compile(
        host,
        lambda _backend: [
            CheckedGroup("Add minimal packages", tuple(minimal_packages_statements(host)))
        ],
        None,
        config,
    )


# ── Plans ───────────────────────────────────────────────────────


def compile_plan(
    host: HostContext,
    plan: Plan | Mapping[str, Any],
    *,
    registry: BackendRegistry | None = None,
    config: CompilerConfig | None = None,
) -> CompileResult:
    """Compile a whole plan: package-manager requests, sources, then packages.

    Sources and manager settings come first so the package batch sees
    the repositories and proxy it depends on.
    """
    if not isinstance(plan, Plan):
        try:
            plan = Plan.model_validate(dict(plan))
        except ValidationError as e:
            return CompileResult.failure(host.backend, CompileError(f"Invalid plan: {e}"))
    config = config or CompilerConfig()

    def build(backend: PackageBackend) -> list[Node]:
        statements = _manager_statements(plan.package_manager, backend, host, config)
        statements.extend(_source_statements(plan.sources, backend, host, config))
        statements.extend(_package_statements(plan.packages, backend, host))
        return statements

    return _compile(host, build, registry, config)
