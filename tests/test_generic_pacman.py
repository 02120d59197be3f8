"""
Tests for the generic fallback backend and the pacman backend.
"""

import pytest

from pkgplan.backends.generic import GenericBackend
from pkgplan.backends.pacman import PacmanBackend
from pkgplan.core.engine.compiler import compile_packages
from pkgplan.core.errors import CompileError
from pkgplan.core.models import HostContext
from pkgplan.core.normalizer import normalize_all
from pkgplan.script.render import render_lines
from pkgplan.script.tree import Command, Export, If, WriteFile


# ── Generic ─────────────────────────────────────────────────────


class TestGenericBackend:
    def test_one_command_per_operation_in_order(self):
        host = HostContext(backend="other", os_family="centos")
        ops = normalize_all([
            ("nginx", {}),
            ("httpd", {"action": "remove", "purge": True}),
            ("vim", {"action": "upgrade"}),
            ("curl", {"action": "remove"}),
        ])
        assert GenericBackend().compile_packages(ops, host) == [
            Command(("yum", "install", "-q", "-y", "nginx")),
            Command(("yum", "remove", "-q", "-y", "httpd")),
            Command(("yum", "upgrade", "-q", "-y", "vim")),
            Command(("yum", "remove", "-q", "-y", "curl")),
        ]

    def test_debian_family_gets_non_interactive_directive(self):
        host = HostContext(backend="other", os_family="debian")
        statements = GenericBackend().compile_packages(normalize_all(["nginx"]), host)
        assert statements[0] == Export("DEBIAN_FRONTEND", "noninteractive")
        assert statements[-1] == Command(("apt-get", "-q", "-y", "install", "nginx"))

    def test_force(self):
        host = HostContext(backend="other", os_family="ubuntu")
        ops = normalize_all([("nginx", {"force": True})])
        assert GenericBackend().compile_packages(ops, host)[-1] == Command((
            "apt-get", "-q", "-y", "install",
            "--allow-downgrades", "--allow-change-held-packages", "nginx",
        ))

    def test_other_tools(self):
        ops = normalize_all(["nginx"])
        alpine = HostContext(os_family="alpine")
        suse = HostContext(os_family="opensuse")
        assert GenericBackend().compile_packages(ops, alpine) == [Command(("apk", "add", "nginx"))]
        assert GenericBackend().compile_packages(ops, suse) == [
            Command(("zypper", "--non-interactive", "install", "nginx"))
        ]

    def test_unknown_os_family(self):
        host = HostContext(os_family="plan9")
        with pytest.raises(CompileError, match="plan9"):
            GenericBackend().compile_packages(normalize_all(["nginx"]), host)

    def test_unknown_os_family_is_failed_result(self):
        result = compile_packages(HostContext(os_family="plan9"), ["nginx"])
        assert result.failed
        assert result.error_type == "CompileError"

    def test_no_source_format(self):
        backend = GenericBackend()
        assert backend.format_source("x", {}, HostContext()) is None
        assert backend.source_path("x") is None


# ── Pacman ──────────────────────────────────────────────────────


class TestPacmanBackend:
    def test_packages(self, pacman_host):
        ops = normalize_all([("nginx", {}), ("vim", {"action": "remove", "purge": True})])
        assert PacmanBackend().compile_packages(ops, pacman_host) == [
            Command(("pacman", "-S", "--noconfirm", "--needed", "nginx")),
            Command(("pacman", "-Rn", "--noconfirm", "vim")),
        ]

    def test_proxy_xfercommand(self):
        line = PacmanBackend().render_option("proxy", "http://p:3128")
        assert line == (
            'XferCommand = /usr/bin/wget -e "http_proxy = http://p:3128" '
            '-e "ftp_proxy = http://p:3128" --passive-ftp --no-verbose -c -O %o %u'
        )

    def test_configure(self, pacman_host, config):
        statements = PacmanBackend().configure({"proxy": "http://p"}, pacman_host, config)
        assert isinstance(statements[0], WriteFile)
        assert statements[0].path == "/etc/pacman.pkgplan.conf"
        include = statements[1]
        assert isinstance(include, If)
        assert render_lines(include) == [
            "if ! grep -q -F -- pacman.pkgplan.conf /etc/pacman.conf; then",
            "  sed -i -e '/\\[options\\]/ a Include = /etc/pacman.pkgplan.conf' /etc/pacman.conf",
            "fi",
        ]
