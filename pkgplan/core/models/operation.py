"""
Package operation model — one canonical package intent.

A PackageOperation is what the normalizer produces from the raw
keyword options a caller hands in, and what every backend strategy
consumes. Records are frozen: strategies group and sort them but
never mutate them.
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

from pkgplan.core.errors import InvalidOperationError


class BackendId(str, Enum):
    """Package-manager dialects the compiler knows how to target."""

    APT = "apt"
    APTITUDE = "aptitude"
    YUM = "yum"
    PACMAN = "pacman"
    OTHER = "other"

    @classmethod
    def resolve(cls, value: str | BackendId | None) -> BackendId:
        """Map a free-form identifier to a BackendId, falling back to OTHER."""
        if isinstance(value, BackendId):
            return value
        try:
            return cls((value or "").strip().lower())
        except ValueError:
            return cls.OTHER

    @property
    def apt_family(self) -> bool:
        return self in (BackendId.APT, BackendId.APTITUDE)


class PackageAction(str, Enum):
    """The three recognized package actions."""

    INSTALL = "install"
    REMOVE = "remove"
    UPGRADE = "upgrade"


VALID_ACTIONS = frozenset(a.value for a in PackageAction)

DEFAULT_PRIORITY = 50


class PackageOperation(BaseModel):
    """A single normalized package intent.

    ``action`` is kept as the raw string the caller asked for. Strategies
    resolve it through :meth:`resolved_action` at compile time, which is
    where an unknown action becomes an ``InvalidOperationError``.
    """

    model_config = ConfigDict(frozen=True)

    name: str
    action: str = PackageAction.INSTALL.value
    purge: bool = False
    force: bool = False
    enable: tuple[str, ...] = ()
    disable: tuple[str, ...] = ()
    exclude: tuple[str, ...] = ()
    priority: int = Field(default=DEFAULT_PRIORITY, ge=0, le=100)

    @property
    def is_valid_action(self) -> bool:
        return self.action in VALID_ACTIONS

    def resolved_action(self) -> PackageAction:
        """Return the action as a PackageAction.

        Raises:
            InvalidOperationError: If the action is not install/remove/upgrade.
        """
        if not self.is_valid_action:
            raise InvalidOperationError(self.action, package=self.name)
        return PackageAction(self.action)
