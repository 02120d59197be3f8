"""
CompileResult — the outcome of one compilation.

Compilers never raise for a bad request: an invalid action or an
unsupported host comes back as a failed result with no script, and the
caller decides whether to abort. ``raise_for_error`` is there for
callers that would rather have the exception.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from pkgplan.core.models.operation import BackendId
from pkgplan.script.render import render_script


class CompileResult(BaseModel):
    """Result of compiling one request for one host."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    backend: BackendId = BackendId.OTHER
    status: str = "ok"

    # pkgplan.script.tree.Script, or None on failure
    script: Any = None

    error: str | None = None
    error_type: str | None = None
    exception: Any = Field(default=None, exclude=True)

    @property
    def ok(self) -> bool:
        return self.status == "ok"

    @property
    def failed(self) -> bool:
        return self.status == "failed"

    @classmethod
    def success(cls, backend: BackendId, script: Any) -> CompileResult:
        """Create a success result."""
        return cls(backend=backend, status="ok", script=script)

    @classmethod
    def failure(cls, backend: BackendId, exception: Exception) -> CompileResult:
        """Create a failure result from the error that stopped compilation."""
        return cls(
            backend=backend,
            status="failed",
            error=str(exception),
            error_type=type(exception).__name__,
            exception=exception,
        )

    def render(self) -> str:
        """Render the script text ('' for a failed result)."""
        if self.script is None:
            return ""
        return render_script(self.script)

    def raise_for_error(self) -> CompileResult:
        """Re-raise the compile error, if any; returns self otherwise."""
        if self.exception is not None:
            raise self.exception
        return self

    def to_dict(self) -> dict:
        return {
            "backend": self.backend.value,
            "status": self.status,
            "error": self.error,
            "error_type": self.error_type,
            "script": self.render() if self.ok else None,
        }
