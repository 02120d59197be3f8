"""
Repository source model.

A source carries one option map per backend; the backend chosen for a
host picks its own map and ignores the rest, so the same definition
can be sent to a mixed apt/yum fleet.

Option keys used per backend:

    apt / aptitude:
        source_type   "deb" (default) or "deb-src"
        url           repository url, or "ppa:<id>"
        release       defaults to the host's codename
        scopes        list, defaults to ["main"]
        key_id        key to fetch from a keyserver
        key_server    keyserver host for key_id
        key_url       url of an armored key to import

    yum:
        url, mirrorlist, gpgkey, priority, failovermethod, enabled
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel, Field

from pkgplan.core.errors import CompileError
from pkgplan.core.models.operation import BackendId


class RepositorySource(BaseModel):
    """A named package source with per-backend options."""

    name: str
    options: dict[BackendId, dict[str, Any]] = Field(default_factory=dict)

    @classmethod
    def from_args(cls, name: str, **backend_options: Any) -> RepositorySource:
        """Build a source from ``apt={...}, yum={...}`` style keyword args.

        Raises:
            CompileError: If a backend's options are not a mapping.
        """
        options: dict[BackendId, dict[str, Any]] = {}
        for key, value in backend_options.items():
            backend = BackendId.resolve(key)
            if backend is BackendId.OTHER:
                continue
            if value is not None and not isinstance(value, Mapping):
                raise CompileError(f"source {name!r}: options for {key} must be a mapping")
            options[backend] = dict(value or {})
        return cls(name=name, options=options)

    def for_backend(self, backend: BackendId) -> dict[str, Any]:
        return dict(self.options.get(backend, {}))

    def apt_option(self, key: str) -> Any:
        """First non-empty value for ``key`` in the aptitude, then apt map."""
        for backend in (BackendId.APTITUDE, BackendId.APT):
            value = self.options.get(backend, {}).get(key)
            if value:
                return value
        return None

    def apt_options(self) -> dict[str, Any]:
        """The apt map overlaid with the aptitude map."""
        merged = self.for_backend(BackendId.APT)
        merged.update(
            (k, v) for k, v in self.options.get(BackendId.APTITUDE, {}).items() if v
        )
        return merged
