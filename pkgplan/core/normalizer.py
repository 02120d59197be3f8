"""
Operation normalizer — raw per-call options → PackageOperation.

Callers describe a package the loose way (a bare name, a name plus an
options mapping, or a single mapping with a ``name`` key). The
normalizer applies defaults and promotes scalar repository options to
one-element ordered sets. It does not validate the action; an unknown
action survives normalization and fails when a backend compiles it.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from enum import Enum
from typing import Any

from pydantic import ValidationError

from pkgplan.core.errors import CompileError
from pkgplan.core.models.operation import DEFAULT_PRIORITY, PackageAction, PackageOperation

logger = logging.getLogger(__name__)

_KNOWN_OPTIONS = frozenset({
    "action", "purge", "force", "enable", "disable", "exclude", "priority",
})

# Accepted for compatibility, no effect on the compiled batch.
_IGNORED_OPTIONS = frozenset({"y"})


def as_list(value: Any) -> list[str]:
    """Promote a scalar to a one-element list; sequences keep their order."""
    if value is None:
        return []
    if isinstance(value, Enum):
        return [str(value.value)]
    if isinstance(value, (str, bytes)):
        return [value.decode() if isinstance(value, bytes) else value]
    if isinstance(value, Iterable):
        return [str(v) for v in value]
    return [str(value)]


def _ordered_set(value: Any) -> tuple[str, ...]:
    return tuple(dict.fromkeys(as_list(value)))


def _action_value(action: Any) -> str:
    if isinstance(action, Enum):
        return str(action.value)
    return str(action)


def normalize(name: str, **options: Any) -> PackageOperation:
    """Build the canonical record for one package.

    Defaults: action=install, priority=50, purge/force off.

    Raises:
        CompileError: If an option has an unusable type (e.g. a
            non-numeric priority).
    """
    logger.debug("package-map %s %s", name, options)

    for key in options.keys() - _KNOWN_OPTIONS - _IGNORED_OPTIONS:
        logger.debug("Ignoring unknown option %r for package %s", key, name)

    try:
        return PackageOperation(
            name=str(name),
            action=_action_value(options.get("action", PackageAction.INSTALL)),
            purge=bool(options.get("purge", False)),
            force=bool(options.get("force", False)),
            enable=_ordered_set(options.get("enable")),
            disable=_ordered_set(options.get("disable")),
            exclude=_ordered_set(options.get("exclude")),
            priority=options.get("priority", DEFAULT_PRIORITY),
        )
    except ValidationError as e:
        raise CompileError(f"Invalid options for package {name!r}: {e}") from e


def normalize_args(arg: Any) -> PackageOperation:
    """Normalize one raw package argument in any accepted shape.

    Accepted shapes::

        "nginx"
        ("nginx", {"action": "remove", "purge": True})
        {"name": "nginx", "action": "remove"}
    """
    if isinstance(arg, PackageOperation):
        return arg
    if isinstance(arg, str):
        return normalize(arg)
    if isinstance(arg, Mapping):
        options = dict(arg)
        name = options.pop("name", None) or options.pop("package", None)
        if not name:
            raise CompileError(f"Package entry has no name: {arg!r}")
        return normalize(name, **options)
    if isinstance(arg, (list, tuple)) and arg:
        name, *rest = arg
        options: dict[str, Any] = {}
        for extra in rest:
            if not isinstance(extra, Mapping):
                raise CompileError(f"Expected an options mapping for {name!r}, got {extra!r}")
            options.update(extra)
        return normalize(name, **options)
    raise CompileError(f"Cannot interpret package argument: {arg!r}")


def normalize_all(args: Iterable[Any]) -> list[PackageOperation]:
    return [normalize_args(arg) for arg in args]
