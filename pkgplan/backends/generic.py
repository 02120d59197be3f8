"""
Generic fallback backend.

No batching primitive: one single-package command per operation, in
input order, using whatever tool the host's OS family implies.
"""

from __future__ import annotations

from collections.abc import Sequence

from pkgplan.backends.base import PackageBackend
from pkgplan.core.models.host import HostContext
from pkgplan.core.models.operation import BackendId, PackageAction, PackageOperation
from pkgplan.script import lib
from pkgplan.script.tree import Node


class GenericBackend(PackageBackend):
    backend_id = BackendId.OTHER

    def compile_packages(
        self,
        operations: Sequence[PackageOperation],
        host: HostContext,
    ) -> list[Node]:
        statements: list[Node] = list(lib.package_manager_non_interactive(host))
        for op in operations:
            action = op.resolved_action()
            if action is PackageAction.INSTALL:
                statements.append(lib.install_package(host, op.name, force=op.force))
            elif action is PackageAction.UPGRADE:
                statements.append(lib.upgrade_package(host, op.name))
            elif op.purge:
                statements.append(lib.purge_package(host, op.name))
            else:
                statements.append(lib.remove_package(host, op.name))
        return statements
