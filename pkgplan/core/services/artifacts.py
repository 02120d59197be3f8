"""
Standalone package files — .rpm and .deb artifacts.

The file is placed with the file-transfer primitive, then installed
with the low-level tool. rpm installs are skipped when the package
inside the file is already present.
"""

from __future__ import annotations

from pkgplan.core.errors import CompileError
from pkgplan.script import lib
from pkgplan.script.tree import CheckedGroup, Command, If, Node


def _place_file(path: str, url: str | None, content: str | None) -> CheckedGroup:
    if url is None and content is None:
        raise CompileError(f"{path}: give a url or content for the package file")
    return CheckedGroup(
        label=f"remote-file {path}",
        body=(lib.remote_file(path, url=url, content=content),),
    )


def add_rpm_statements(rpm_name: str, url: str | None = None, content: str | None = None) -> list[Node]:
    install = If(
        test=Command(("rpm", "-q", lib.package_file_name(rpm_name)), silent=True),
        negate=True,
        then=(Command(("rpm", "-U", "--quiet", rpm_name)),),
    )
    return [
        _place_file(rpm_name, url, content),
        CheckedGroup(label=f"Install rpm {rpm_name}", body=(install,)),
    ]


def install_deb_statements(deb_name: str, url: str | None = None, content: str | None = None) -> list[Node]:
    return [
        _place_file(deb_name, url, content),
        CheckedGroup(
            label=f"Install deb {deb_name}",
            body=(Command(("dpkg", "-i", "--skip-same-version", deb_name)),),
        ),
    ]
