"""
Backend registry — the single dispatch point for package-manager strategies.

The compiler never picks a backend class itself; it asks the registry
for the strategy matching the host's BackendId. Identifiers with no
registered strategy resolve to the generic fallback, which is a real
backend rather than a null case.
"""

from __future__ import annotations

import logging

from pkgplan.backends.apt import AptBackend, AptitudeBackend
from pkgplan.backends.base import PackageBackend
from pkgplan.backends.generic import GenericBackend
from pkgplan.backends.pacman import PacmanBackend
from pkgplan.backends.yum import YumBackend
from pkgplan.core.models.operation import BackendId

logger = logging.getLogger(__name__)


class BackendRegistry:
    """Registry of package-manager backends keyed by BackendId.

    Features:
        - Register/unregister backends by id
        - Resolve an id (or free-form name) to a strategy, with fallback
        - List registered backends
    """

    def __init__(self, fallback: PackageBackend | None = None):
        self._backends: dict[BackendId, PackageBackend] = {}
        self._fallback = fallback or GenericBackend()

    @property
    def fallback(self) -> PackageBackend:
        return self._fallback

    def register(self, backend: PackageBackend) -> None:
        """Register a backend under its ``backend_id``."""
        backend_id = backend.backend_id
        if backend_id in self._backends:
            logger.warning("Overwriting existing backend: %s", backend_id.value)
        self._backends[backend_id] = backend
        logger.debug("Registered backend: %s", backend_id.value)

    def unregister(self, backend_id: BackendId | str) -> None:
        """Remove a backend from the registry."""
        self._backends.pop(BackendId.resolve(backend_id), None)

    def get(self, backend_id: BackendId | str) -> PackageBackend | None:
        """Look up a backend by id, without fallback."""
        return self._backends.get(BackendId.resolve(backend_id))

    def resolve(self, backend_id: BackendId | str | None) -> PackageBackend:
        """Look up a backend by id, falling back to the generic backend."""
        backend = self._backends.get(BackendId.resolve(backend_id))
        if backend is None:
            logger.debug("No backend for %r, using %s", backend_id, self._fallback.name)
            return self._fallback
        return backend

    def list_backends(self) -> list[str]:
        """List all registered backend ids."""
        return [b.value for b in self._backends]


def default_registry() -> BackendRegistry:
    """Build a registry with every built-in backend."""
    registry = BackendRegistry(fallback=GenericBackend())
    for backend in (
        AptBackend(),
        AptitudeBackend(),
        YumBackend(),
        PacmanBackend(),
        GenericBackend(),
    ):
        registry.register(backend)
    return registry
