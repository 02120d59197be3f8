"""
Host context — what the compiler knows about a target host.

The host-characteristics lookup itself is someone else's job; the
compiler only reads the backend identifier and the OS family.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, field_validator

from pkgplan.core.models.operation import BackendId


class HostContext(BaseModel):
    """The compiler's view of one target host."""

    model_config = ConfigDict(frozen=True)

    backend: BackendId = BackendId.OTHER
    os_family: str = ""
    hostname: str = ""

    @field_validator("backend", mode="before")
    @classmethod
    def _resolve_backend(cls, value: object) -> BackendId:
        return BackendId.resolve(value if isinstance(value, (str, BackendId)) else None)

    @field_validator("os_family", mode="before")
    @classmethod
    def _lower_os_family(cls, value: object) -> str:
        return str(value or "").strip().lower()
