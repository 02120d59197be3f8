"""
Yum backend.

yum has separate install, remove and upgrade commands, so a batch is
split by action and then by its repository options. Installs run
before removes, and removes before upgrades, so a remove never takes
out a dependency of a package installed in the same batch.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Any

from pkgplan.backends.base import PackageBackend, by_min_priority, group_by
from pkgplan.core.config.loader import CompilerConfig
from pkgplan.core.models.host import HostContext
from pkgplan.core.models.operation import BackendId, PackageAction, PackageOperation
from pkgplan.core.normalizer import as_list
from pkgplan.script import lib
from pkgplan.script.tree import Command, If, Node

logger = logging.getLogger(__name__)

ACTION_ORDER = {
    PackageAction.INSTALL: 10,
    PackageAction.REMOVE: 20,
    PackageAction.UPGRADE: 30,
}

# Never let a kernel upgrade replace the running kernel package.
DEFAULT_INSTALLONLYPKGS = (
    "kernel",
    "kernel-smp",
    "kernel-bigmem",
    "kernel-enterprise",
    "kernel-debug",
    "kernel-unsupported",
)

MAIN_CONFIG = "/etc/yum.conf"


class YumBackend(PackageBackend):
    backend_id = BackendId.YUM
    source_location = "/etc/yum.repos.d/%s.repo"

    option_renderers = {
        "proxy": "_proxy_option",
        "installonlypkgs": "_installonlypkgs_option",
    }

    def compile_packages(
        self,
        operations: Sequence[PackageOperation],
        host: HostContext,
    ) -> list[Node]:
        # Resolve every action up front so an invalid one fails the batch.
        ranked = sorted(operations, key=lambda op: ACTION_ORDER[op.resolved_action()])

        statements: list[Node] = []
        for action, bucket in group_by(ranked, key=lambda op: op.action).items():
            groups = group_by(bucket, key=lambda op: (op.enable, op.disable, op.exclude))
            for (enable, disable, exclude), ops in by_min_priority(groups):
                names = list(dict.fromkeys(op.name for op in ops))
                statements.append(Command((
                    "yum", action, "-q", "-y",
                    *(f"--disablerepo={repo}" for repo in disable),
                    *(f"--enablerepo={repo}" for repo in enable),
                    *(f"--exclude={pattern}" for pattern in exclude),
                    *names,
                )))

        logger.debug("yum: %d operations in %d commands", len(operations), len(statements))
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
        gpgkey = options.get("gpgkey")
        lines = [f"[{name}]", f"name={name}"]
        for key, option in (("baseurl", "url"), ("mirrorlist", "mirrorlist")):
            if options.get(option):
                lines.append(f"{key}={options[option]}")
        lines.append(f"gpgcheck={1 if gpgkey else 0}")
        for key in ("gpgkey", "priority", "failovermethod"):
            if options.get(key) not in (None, ""):
                lines.append(f"{key}={options[key]}")
        enabled = options.get("enabled", 1)
        lines.append(f"enabled={int(enabled) if isinstance(enabled, bool) else enabled}")
        return "\n".join(lines) + "\n"

    # ── Manager configuration ───────────────────────────────────

    def _proxy_option(self, url: str) -> str:
        return f"proxy={url}"

    def _installonlypkgs_option(self, packages: Any) -> str:
        names = [p for p in as_list(packages) if p not in DEFAULT_INSTALLONLYPKGS]
        names = list(dict.fromkeys(names)) + list(DEFAULT_INSTALLONLYPKGS)
        return "installonlypkgs=" + " ".join(names)

    def configure(
        self,
        options: dict[str, Any],
        host: HostContext,
        config: CompilerConfig,
    ) -> list[Node]:
        conf_name = f"yum.{config.app_name}.conf"
        conf_path = f"/etc/{conf_name}"
        return [
            lib.remote_file(
                conf_path,
                content="\n".join(self.render_options(options)),
                literal=True,
            ),
            # yum only reads extra files it is told to include
            If(
                test=lib.file_contains(MAIN_CONFIG, conf_name),
                negate=True,
                then=(
                    lib.remote_file(
                        MAIN_CONFIG,
                        content=f"include=file://{conf_path}\n",
                        append=True,
                    ),
                ),
            ),
        ]
