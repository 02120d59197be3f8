"""
Apt and aptitude backends.

Both tools install, remove and purge in a single invocation, selected
per package by a name suffix:

    nginx+    install (or upgrade)
    nginx-    remove, keep configuration
    nginx_    remove and purge configuration

so a batch only needs splitting by its ``enable`` (``-t <release>``)
option set. Aptitude exits 0 even when individual packages fail, so
its batch is followed by one ``aptitude search`` assertion per package.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Any

from pkgplan.backends.base import PackageBackend, by_min_priority, group_by
from pkgplan.core.config.loader import CompilerConfig
from pkgplan.core.errors import CompileError
from pkgplan.core.models.host import HostContext
from pkgplan.core.models.operation import BackendId, PackageAction, PackageOperation
from pkgplan.core.normalizer import as_list
from pkgplan.script import lib
from pkgplan.script.tree import Command, Node, Not, Pipeline

logger = logging.getLogger(__name__)

# Metacharacters of aptitude's search-term syntax.
APTITUDE_ESCAPES = str.maketrans({
    "+": "\\+",
    "-": "\\-",
    ".": "\\.",
    "(": "\\(",
    ")": "\\)",
    "|": "\\|",
    "[": "\\[",
    "]": "\\]",
    "^": "\\^",
    "$": "\\$",
})


def aptitude_escape(package: str) -> str:
    return package.translate(APTITUDE_ESCAPES)


def package_word(op: PackageOperation) -> str:
    """Render ``op`` with its install/remove/purge suffix."""
    action = op.resolved_action()
    if action is PackageAction.REMOVE:
        return f"{op.name}_" if op.purge else f"{op.name}-"
    return f"{op.name}+"


class AptBackend(PackageBackend):
    """apt-get: combined invocation, trusted exit code."""

    backend_id = BackendId.APT
    source_location = "/etc/apt/sources.list.d/%s.list"
    install_command: tuple[str, ...] = ("apt-get", "-q", "-y", "install")

    option_renderers = {"proxy": "_proxy_option"}

    def compile_packages(
        self,
        operations: Sequence[PackageOperation],
        host: HostContext,
    ) -> list[Node]:
        statements: list[Node] = list(lib.package_manager_non_interactive(host))

        groups = group_by(operations, key=lambda op: op.enable)
        for enable, ops in by_min_priority(groups):
            words: list[str] = []
            for _action, action_ops in group_by(ops, key=lambda op: op.action).items():
                words.extend(package_word(op) for op in action_ops)
            release_flags = [flag for repo in enable for flag in ("-t", repo)]
            statements.append(Command((*self.install_command, *release_flags, *words)))

        logger.debug(
            "%s: %d operations in %d invocations",
            self.name, len(operations), len(groups),
        )
        return statements

    def verify(
        self,
        operations: Sequence[PackageOperation],
        host: HostContext,
    ) -> list[Node]:
        return [lib.list_installed_packages(host)]

    # ── Sources ─────────────────────────────────────────────────

    def format_source(
        self,
        name: str,
        options: dict[str, Any],
        host: HostContext,
    ) -> str | None:
        url = options.get("url")
        if not url:
            raise CompileError(f"apt source {name!r} has no url")
        scopes = as_list(options.get("scopes")) or ["main"]
        return "%s %s %s %s\n" % (
            options.get("source_type") or "deb",
            url,
            options.get("release") or lib.OS_VERSION_NAME,
            " ".join(scopes),
        )

    def source_is_literal(self) -> bool:
        # The default release is a $(...) substitution run on the target.
        return False

    # ── Manager configuration ───────────────────────────────────

    def _proxy_option(self, url: str) -> str:
        return f'ACQUIRE::http::proxy "{url}";'

    def configure(
        self,
        options: dict[str, Any],
        host: HostContext,
        config: CompilerConfig,
    ) -> list[Node]:
        priority = options.get("priority", 50)
        return [
            lib.remote_file(
                f"/etc/apt/apt.conf.d/{priority}{config.app_name}",
                content="\n".join(self.render_options(options)),
                literal=True,
            )
        ]


class AptitudeBackend(AptBackend):
    """aptitude: combined invocation, untrusted exit code."""

    backend_id = BackendId.APTITUDE
    install_command = ("aptitude", "install", "-q", "-y")

    def verify(
        self,
        operations: Sequence[PackageOperation],
        host: HostContext,
    ) -> list[Node]:
        checks: list[Node] = []
        for op in operations:
            installed = Pipeline((
                Command((
                    "aptitude", "search",
                    f"?and(?installed, ?name(^{aptitude_escape(op.name)}$))",
                )),
                Command(("grep", "-F", "--", op.name)),
            ))
            if op.resolved_action() is PackageAction.REMOVE:
                checks.append(Not(installed))
            else:
                checks.append(installed)
        return checks
