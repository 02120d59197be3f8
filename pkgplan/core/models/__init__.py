"""
Domain models — Pydantic types for the compiler.

All models are re-exported here for convenient access:

    from pkgplan.core.models import PackageOperation, HostContext, CompileResult
"""

from pkgplan.core.models.host import HostContext
from pkgplan.core.models.operation import (
    DEFAULT_PRIORITY,
    BackendId,
    PackageAction,
    PackageOperation,
)
from pkgplan.core.models.result import CompileResult
from pkgplan.core.models.source import RepositorySource

__all__ = [
    # operation.py
    "BackendId",
    # result.py
    "CompileResult",
    "DEFAULT_PRIORITY",
    # host.py
    "HostContext",
    "PackageAction",
    "PackageOperation",
    # source.py
    "RepositorySource",
]
