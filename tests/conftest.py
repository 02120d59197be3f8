"""
Shared test fixtures and configuration.
"""

import logging

import pytest

from pkgplan.core.config.loader import CompilerConfig
from pkgplan.core.models.host import HostContext


@pytest.fixture(autouse=True)
def _restore_root_logger():
    """The CLI reconfigures the root logger; put it back after each test."""
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


@pytest.fixture
def config() -> CompilerConfig:
    return CompilerConfig()


@pytest.fixture
def apt_host() -> HostContext:
    return HostContext(backend="apt", os_family="ubuntu", hostname="web1")


@pytest.fixture
def aptitude_host() -> HostContext:
    return HostContext(backend="aptitude", os_family="debian")


@pytest.fixture
def yum_host() -> HostContext:
    return HostContext(backend="yum", os_family="centos")


@pytest.fixture
def pacman_host() -> HostContext:
    return HostContext(backend="pacman", os_family="arch")
