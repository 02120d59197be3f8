"""
Pacman backend.

Packages go through the generic single-package path; pacman adds a
proxy setting (expressed as an ``XferCommand`` running wget) and its
own config file, which has to be wired into ``/etc/pacman.conf``.
"""

from __future__ import annotations

from typing import Any

from pkgplan.backends.generic import GenericBackend
from pkgplan.core.config.loader import CompilerConfig
from pkgplan.core.models.host import HostContext
from pkgplan.core.models.operation import BackendId
from pkgplan.script import lib
from pkgplan.script.tree import If, Node

MAIN_CONFIG = "/etc/pacman.conf"


class PacmanBackend(GenericBackend):
    backend_id = BackendId.PACMAN

    option_renderers = {"proxy": "_proxy_option"}

    def _proxy_option(self, url: str) -> str:
        return (
            "XferCommand = /usr/bin/wget "
            f'-e "http_proxy = {url}" -e "ftp_proxy = {url}" '
            "--passive-ftp --no-verbose -c -O %o %u"
        )

    def configure(
        self,
        options: dict[str, Any],
        host: HostContext,
        config: CompilerConfig,
    ) -> list[Node]:
        conf_name = f"pacman.{config.app_name}.conf"
        conf_path = f"/etc/{conf_name}"
        return [
            lib.remote_file(
                conf_path,
                content="\n".join(self.render_options(options)),
                literal=True,
            ),
            If(
                test=lib.file_contains(MAIN_CONFIG, conf_name),
                negate=True,
                then=(
                    lib.sed_append(
                        MAIN_CONFIG,
                        f"Include = {conf_path}",
                        restriction=r"/\[options\]/",
                    ),
                ),
            ),
        ]
