"""Backends — one compilation strategy per package manager.

Public re-exports for convenient access.
"""

from pkgplan.backends.apt import AptBackend, AptitudeBackend
from pkgplan.backends.base import PackageBackend
from pkgplan.backends.generic import GenericBackend
from pkgplan.backends.pacman import PacmanBackend
from pkgplan.backends.registry import BackendRegistry, default_registry
from pkgplan.backends.yum import YumBackend

__all__ = [
    "AptBackend",
    "AptitudeBackend",
    "BackendRegistry",
    "GenericBackend",
    "PackageBackend",
    "PacmanBackend",
    "YumBackend",
    "default_registry",
]
