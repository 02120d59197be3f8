"""
Compile errors.

These are programming errors in the requested operations, not failures
on the target host. Entry points in ``pkgplan.core.engine.compiler`` catch them
and return a failed CompileResult; only ``raise_for_error`` re-raises.
"""

from __future__ import annotations


class CompileError(Exception):
    """Base class for errors raised while compiling a batch."""


class InvalidOperationError(CompileError):
    """An action outside the recognized set was requested."""

    def __init__(self, action: object, package: str | None = None, kind: str = "package"):
        self.action = action
        self.package = package
        self.kind = kind
        target = f" (package {package!r})" if package else ""
        super().__init__(f"{action} is not a valid action for {kind} action{target}")
