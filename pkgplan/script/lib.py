"""
Script primitives — single-package OS-level commands as tree nodes.

Each primitive resolves a *tool* (apt, aptitude, yum, pacman, zypper,
apk) from the backend, or from the host's OS family when the backend is
the generic fallback, and returns the nodes for that tool.

Tool → command table:
    apt       apt-get -q -y install|remove|purge, dpkg --get-selections
    aptitude  aptitude install|remove|purge -q -y, aptitude search ~i
    yum       yum install|remove|upgrade -q -y, yum list installed
    pacman    pacman -S|-R|-Rn --noconfirm, pacman -Q
    zypper    zypper --non-interactive install|remove|update, rpm -qa
    apk       apk add|del, apk info
"""

from __future__ import annotations

from pkgplan.core.errors import CompileError
from pkgplan.core.models.host import HostContext
from pkgplan.core.models.operation import BackendId
from pkgplan.script.tree import (
    Command,
    Export,
    FetchFile,
    Node,
    Pipeline,
    Subst,
    WriteFile,
)

# Expanded by the target shell when written into non-literal file content.
OS_VERSION_NAME = "$(lsb_release -c -s)"


# ── Tool resolution ─────────────────────────────────────────────

_OS_FAMILY_TOOLS: dict[str, str] = {
    "debian": "apt",
    "ubuntu": "apt",
    "linuxmint": "apt",
    "centos": "yum",
    "rhel": "yum",
    "fedora": "yum",
    "amzn": "yum",
    "rocky": "yum",
    "almalinux": "yum",
    "arch": "pacman",
    "manjaro": "pacman",
    "suse": "zypper",
    "opensuse": "zypper",
    "sles": "zypper",
    "alpine": "apk",
}


def package_tool(host: HostContext) -> str:
    """Pick the command-line tool used for single-package primitives.

    Raises:
        CompileError: If the fallback backend meets an unknown OS family.
    """
    if host.backend is not BackendId.OTHER:
        return host.backend.value
    tool = _OS_FAMILY_TOOLS.get(host.os_family)
    if tool is None:
        raise CompileError(
            f"No package tool known for OS family {host.os_family or '<unset>'!r}"
        )
    return tool


# ── Single-package commands ─────────────────────────────────────

_PACKAGE_COMMANDS: dict[str, dict[str, tuple[str, ...]]] = {
    "apt": {
        "install": ("apt-get", "-q", "-y", "install"),
        "remove": ("apt-get", "-q", "-y", "remove"),
        "purge": ("apt-get", "-q", "-y", "purge"),
        "upgrade": ("apt-get", "-q", "-y", "install", "--only-upgrade"),
        "update": ("apt-get", "-qq", "update"),
        "upgrade-all": ("apt-get", "-q", "-y", "upgrade"),
        "list-installed": ("dpkg", "--get-selections"),
    },
    "aptitude": {
        "install": ("aptitude", "install", "-q", "-y"),
        "remove": ("aptitude", "remove", "-q", "-y"),
        "purge": ("aptitude", "purge", "-q", "-y"),
        "upgrade": ("aptitude", "safe-upgrade", "-q", "-y"),
        "update": ("aptitude", "update", "-q"),
        "upgrade-all": ("aptitude", "safe-upgrade", "-q", "-y"),
        "list-installed": ("aptitude", "search", "~i"),
    },
    "yum": {
        "install": ("yum", "install", "-q", "-y"),
        "remove": ("yum", "remove", "-q", "-y"),
        "purge": ("yum", "remove", "-q", "-y"),
        "upgrade": ("yum", "upgrade", "-q", "-y"),
        "update": ("yum", "makecache", "-q"),
        "upgrade-all": ("yum", "update", "-q", "-y"),
        "list-installed": ("yum", "list", "installed"),
    },
    "pacman": {
        "install": ("pacman", "-S", "--noconfirm", "--needed"),
        "remove": ("pacman", "-R", "--noconfirm"),
        "purge": ("pacman", "-Rn", "--noconfirm"),
        "upgrade": ("pacman", "-S", "--noconfirm"),
        "update": ("pacman", "-Sy", "--noconfirm"),
        "upgrade-all": ("pacman", "-Syu", "--noconfirm"),
        "list-installed": ("pacman", "-Q"),
    },
    "zypper": {
        "install": ("zypper", "--non-interactive", "install"),
        "remove": ("zypper", "--non-interactive", "remove"),
        "purge": ("zypper", "--non-interactive", "remove", "--clean-deps"),
        "upgrade": ("zypper", "--non-interactive", "update"),
        "update": ("zypper", "--non-interactive", "refresh"),
        "upgrade-all": ("zypper", "--non-interactive", "update"),
        "list-installed": ("rpm", "-qa"),
    },
    "apk": {
        "install": ("apk", "add"),
        "remove": ("apk", "del"),
        "purge": ("apk", "del", "--purge"),
        "upgrade": ("apk", "add", "--upgrade"),
        "update": ("apk", "update"),
        "upgrade-all": ("apk", "upgrade"),
        "list-installed": ("apk", "info"),
    },
}

# Extra install flags when an operation asks for ``force``.
_FORCE_FLAGS: dict[str, tuple[str, ...]] = {
    "apt": ("--allow-downgrades", "--allow-change-held-packages"),
    "aptitude": ("--allow-untrusted",),
    "pacman": ("--overwrite", "*"),
    "zypper": ("--force",),
    "apk": ("--force-overwrite",),
}


def _tool_command(host: HostContext, verb: str) -> tuple[str, ...]:
    return _PACKAGE_COMMANDS[package_tool(host)][verb]


def install_package(host: HostContext, package: str, force: bool = False) -> Command:
    tool = package_tool(host)
    flags = _FORCE_FLAGS.get(tool, ()) if force else ()
    return Command((*_PACKAGE_COMMANDS[tool]["install"], *flags, package))


def remove_package(host: HostContext, package: str) -> Command:
    return Command((*_tool_command(host, "remove"), package))


def purge_package(host: HostContext, package: str) -> Command:
    return Command((*_tool_command(host, "purge"), package))


def upgrade_package(host: HostContext, package: str) -> Command:
    return Command((*_tool_command(host, "upgrade"), package))


def update_package_list(host: HostContext, *args: str) -> Command:
    return Command((*_tool_command(host, "update"), *args))


def upgrade_all_packages(host: HostContext) -> Command:
    return Command(_tool_command(host, "upgrade-all"))


def list_installed_packages(host: HostContext) -> Command:
    return Command(_tool_command(host, "list-installed"))


# ── Session primitives ──────────────────────────────────────────


def debconf_set_selections(*selections: str) -> Pipeline:
    return Pipeline((
        Command(("printf", "%s\\n", *selections)),
        Command(("debconf-set-selections",)),
    ))


def package_manager_non_interactive(host: HostContext) -> tuple[Node, ...]:
    """Directive that stops the package manager from prompting.

    Only the Debian family prompts through debconf; the other tools take
    their non-interactive flags on each command line.
    """
    if package_tool(host) not in ("apt", "aptitude"):
        return ()
    return (
        Export("DEBIAN_FRONTEND", "noninteractive"),
        debconf_set_selections(
            "debconf debconf/frontend select noninteractive",
            "debconf debconf/frontend seen false",
        ),
    )


# ── File transfer ───────────────────────────────────────────────


def remote_file(
    path: str,
    *,
    content: str | None = None,
    url: str | None = None,
    literal: bool = True,
    append: bool = False,
) -> Node:
    """Place a file on the target from inline content or a URL."""
    if url is not None:
        return FetchFile(path=path, url=url)
    if content is None:
        raise CompileError(f"remote file {path!r} needs content or a url")
    return WriteFile(path=path, content=content, literal=literal, append=append)


def file_contains(path: str, text: str) -> Command:
    """Text-search primitive: fixed-string match, status only."""
    return Command(("grep", "-q", "-F", "--", text, path))


def sed_append(path: str, line: str, restriction: str) -> Command:
    """Append ``line`` after every line matching ``restriction``."""
    return Command(("sed", "-i", "-e", f"{restriction} a {line}", path))


def package_file_name(path: str) -> Subst:
    """``$(rpm -pq <file>)`` — the package name inside an rpm file."""
    return Subst(Command(("rpm", "-pq", path)))
