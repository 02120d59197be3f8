"""
Backend base — the strategy contract between the compiler and a package manager.

Every package-manager dialect implements this protocol. The compiler
only talks to backends through it (via the BackendRegistry), never
to a concrete class directly.

A backend covers four concerns:
    compile_packages   one batch of PackageOperations → statements
    verify             post-hoc checks for weak exit codes
    format_source      repository definition → on-disk text
    configure          global manager options → config file statements

To add a backend:
    1. Subclass PackageBackend
    2. Set backend_id, implement compile_packages
    3. Register it in the BackendRegistry
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import Callable, Hashable, Iterable, Sequence
from typing import Any, TypeVar

from pkgplan.core.config.loader import CompilerConfig
from pkgplan.core.models.host import HostContext
from pkgplan.core.models.operation import BackendId, PackageOperation
from pkgplan.script.tree import Node

logger = logging.getLogger(__name__)

K = TypeVar("K", bound=Hashable)


def group_by(
    operations: Iterable[PackageOperation],
    key: Callable[[PackageOperation], K],
) -> dict[K, list[PackageOperation]]:
    """Group operations by ``key``, keeping first-appearance order."""
    groups: dict[K, list[PackageOperation]] = {}
    for op in operations:
        groups.setdefault(key(op), []).append(op)
    return groups


def by_min_priority(
    groups: dict[K, list[PackageOperation]],
) -> list[tuple[K, list[PackageOperation]]]:
    """Order groups by their lowest priority value (stable)."""
    return sorted(groups.items(), key=lambda item: min(op.priority for op in item[1]))


class PackageBackend(ABC):
    """Abstract base class for all package-manager backends.

    Backends are pure: they build command-tree nodes and never perform
    I/O. An invalid operation raises InvalidOperationError, which the
    compiler turns into a failed CompileResult.
    """

    backend_id: BackendId = BackendId.OTHER

    # Path template for repository source files, None if unsupported.
    source_location: str | None = None

    @property
    def name(self) -> str:
        return self.backend_id.value

    @abstractmethod
    def compile_packages(
        self,
        operations: Sequence[PackageOperation],
        host: HostContext,
    ) -> list[Node]:
        """Compile the whole batch for one host into statements."""

    def verify(
        self,
        operations: Sequence[PackageOperation],
        host: HostContext,
    ) -> list[Node]:
        """Statements appended after the batch to check its outcome."""
        return []

    # ── Sources ─────────────────────────────────────────────────

    def source_path(self, name: str) -> str | None:
        if self.source_location is None:
            return None
        return self.source_location % name

    def format_source(
        self,
        name: str,
        options: dict[str, Any],
        host: HostContext,
    ) -> str | None:
        """Render a repository source; None when the backend has no format."""
        return None

    def source_is_literal(self) -> bool:
        """Whether source file content is written without shell expansion."""
        return True

    # ── Manager configuration ───────────────────────────────────

    # option key → method name rendering that option
    option_renderers: dict[str, str] = {}

    def render_option(self, key: str, value: Any) -> str | None:
        """Render one manager option, or None if this backend ignores it."""
        method = self.option_renderers.get(key)
        if method is None:
            logger.debug("Backend %s ignores manager option %r", self.name, key)
            return None
        return getattr(self, method)(value)

    def render_options(self, options: dict[str, Any]) -> list[str]:
        lines = []
        for key, value in options.items():
            if key == "priority":
                continue
            line = self.render_option(key, value)
            if line is not None:
                lines.append(line)
        return lines

    def configure(
        self,
        options: dict[str, Any],
        host: HostContext,
        config: CompilerConfig,
    ) -> list[Node]:
        """Statements that install the manager configuration file."""
        return []

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} name={self.name!r}>"
