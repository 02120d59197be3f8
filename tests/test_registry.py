"""
Tests for the backend registry.
"""

import logging

from pkgplan.backends import (
    AptBackend,
    AptitudeBackend,
    BackendRegistry,
    GenericBackend,
    PacmanBackend,
    YumBackend,
    default_registry,
)
from pkgplan.core.models import BackendId


class TestBackendRegistry:
    def test_register_and_get(self):
        registry = BackendRegistry()
        backend = YumBackend()
        registry.register(backend)
        assert registry.get("yum") is backend
        assert registry.get(BackendId.APT) is None

    def test_resolve_falls_back(self):
        fallback = GenericBackend()
        registry = BackendRegistry(fallback=fallback)
        assert registry.resolve("apt") is fallback
        assert registry.resolve(None) is fallback

    def test_unregister(self):
        registry = BackendRegistry()
        registry.register(AptBackend())
        registry.unregister("apt")
        assert registry.get("apt") is None
        assert registry.list_backends() == []

    def test_overwrite_warns(self, caplog):
        registry = BackendRegistry()
        registry.register(AptBackend())
        with caplog.at_level(logging.WARNING, logger="pkgplan.backends.registry"):
            registry.register(AptBackend())
        assert "Overwriting existing backend: apt" in caplog.text

    def test_repr(self):
        assert repr(AptitudeBackend()) == "<AptitudeBackend name='aptitude'>"


class TestDefaultRegistry:
    def test_all_builtins(self):
        registry = default_registry()
        assert registry.list_backends() == ["apt", "aptitude", "yum", "pacman", "other"]

    def test_resolution(self):
        registry = default_registry()
        assert isinstance(registry.resolve("apt"), AptBackend)
        assert isinstance(registry.resolve("aptitude"), AptitudeBackend)
        assert isinstance(registry.resolve("yum"), YumBackend)
        assert isinstance(registry.resolve("pacman"), PacmanBackend)

    def test_unknown_identifier_uses_generic(self):
        backend = default_registry().resolve("portage")
        assert type(backend) is GenericBackend
        assert backend.name == "other"
