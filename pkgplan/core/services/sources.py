"""
Package sources — repository definitions → statements.

Flow per source:
    ppa:<id> url (apt family)  → helper package, add-apt-repository, index refresh
    otherwise                  → source file via the backend's formatter
    then key material          → apt-key (key_id / key_url) or rpm --import (yum)
"""

from __future__ import annotations

import logging

from pkgplan.backends.base import PackageBackend
from pkgplan.core.config.loader import CompilerConfig
from pkgplan.core.models.host import HostContext
from pkgplan.core.models.operation import BackendId
from pkgplan.core.models.source import RepositorySource
from pkgplan.script import lib
from pkgplan.script.tree import CheckedGroup, Command, Node, Pipeline

logger = logging.getLogger(__name__)

PPA_HELPER_PACKAGE = "python-software-properties"
APT_KEY_TMP = "aptkey.tmp"


def ppa_statements(url: str, host: HostContext) -> list[Node]:
    """Register a Launchpad PPA instead of writing a source file."""
    return [
        lib.install_package(host, PPA_HELPER_PACKAGE),
        Pipeline((Command(("echo", "")), Command(("add-apt-repository", url)))),
        lib.update_package_list(host),
    ]


def _key_statements(
    source: RepositorySource,
    host: HostContext,
    config: CompilerConfig,
) -> list[Node]:
    statements: list[Node] = []

    if host.backend.apt_family:
        key_id = source.apt_option("key_id")
        if key_id:
            key_server = source.apt_option("key_server") or config.key_server
            statements.append(Command((
                "apt-key", "adv", "--keyserver", key_server, "--recv-keys", str(key_id),
            )))
        key_url = source.apt_option("key_url")
        if key_url:
            statements.append(lib.remote_file(APT_KEY_TMP, url=key_url))
            statements.append(Command(("apt-key", "add", APT_KEY_TMP)))

    elif host.backend is BackendId.YUM:
        gpgkey = source.for_backend(BackendId.YUM).get("gpgkey")
        if gpgkey:
            statements.append(Command(("rpm", "--import", gpgkey)))

    return statements


def source_statements(
    source: RepositorySource,
    backend: PackageBackend,
    host: HostContext,
    config: CompilerConfig,
) -> list[Node]:
    """Statements installing one repository source on ``host``."""
    statements: list[Node] = []

    url = source.apt_option("url") if host.backend.apt_family else None
    if url and str(url).startswith("ppa:"):
        statements.extend(ppa_statements(url, host))
    else:
        if host.backend.apt_family:
            options = source.apt_options()
        else:
            options = source.for_backend(host.backend)
        path = backend.source_path(source.name)
        if not options:
            logger.debug("Source %s defines nothing for %s, skipping file",
                         source.name, backend.name)
        elif path is None:
            logger.debug("Backend %s has no source file format, skipping file for %s",
                         backend.name, source.name)
        else:
            content = backend.format_source(source.name, options, host)
            if content is not None:
                statements.append(lib.remote_file(
                    path, content=content, literal=backend.source_is_literal(),
                ))

    statements.extend(_key_statements(source, host, config))
    return statements


def package_source_group(
    source: RepositorySource,
    backend: PackageBackend,
    host: HostContext,
    config: CompilerConfig,
) -> CheckedGroup:
    return CheckedGroup(
        label="Package source",
        body=tuple(source_statements(source, backend, host, config)),
    )
