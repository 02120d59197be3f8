"""
Command tree — the typed value every backend strategy builds.

Strategies never produce shell text. They assemble these nodes and
``pkgplan.script.render`` turns the tree into quoted shell source.
All nodes are frozen dataclasses, so two compilations of the same
input compare equal node for node.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Union


@dataclass(frozen=True)
class Node:
    """Base class for every statement in the tree."""


@dataclass(frozen=True)
class Subst:
    """A ``$(...)`` command substitution used as a single word."""

    command: Command


@dataclass(frozen=True)
class Var:
    """A shell variable reference used as a single word."""

    name: str


Word = Union[str, Subst, Var]


@dataclass(frozen=True)
class Command(Node):
    """A simple command.

    Attributes:
        argv:      Command words; plain strings are quoted on render.
        silent:    Discard stdout and stderr.
        stdout:    Redirect stdout to this path.
    """

    argv: tuple[Word, ...]
    silent: bool = False
    stdout: Word | None = None


@dataclass(frozen=True)
class Pipeline(Node):
    commands: tuple[Command, ...]


@dataclass(frozen=True)
class Not(Node):
    """Invert the exit status of a command or pipeline."""

    node: Node


@dataclass(frozen=True)
class And(Node):
    first: Node
    second: Node


@dataclass(frozen=True)
class Or(Node):
    first: Node
    second: Node


@dataclass(frozen=True)
class If(Node):
    """``if [!] test; then ...; fi``"""

    test: Node
    then: tuple[Node, ...]
    negate: bool = False


@dataclass(frozen=True)
class Assign(Node):
    """``name=value`` in the current shell."""

    name: str
    value: Word


@dataclass(frozen=True)
class Export(Node):
    name: str
    value: str


@dataclass(frozen=True)
class Echo(Node):
    text: str


@dataclass(frozen=True)
class WriteFile(Node):
    """Write text to a file on the target (file-transfer collaborator).

    ``literal`` content is written byte for byte; non-literal content
    lets the target shell expand ``$(...)`` substitutions in it.
    """

    path: str
    content: str
    literal: bool = True
    append: bool = False


@dataclass(frozen=True)
class FetchFile(Node):
    """Download a URL to a path on the target (file-transfer collaborator)."""

    path: str
    url: str


@dataclass(frozen=True)
class CheckedGroup(Node):
    """A labelled statement sequence that succeeds or fails as one unit."""

    label: str
    body: tuple[Node, ...] = ()


@dataclass(frozen=True)
class Script:
    """A complete script: an interpreter plus top-level statements."""

    interpreter: str = "bash"
    statements: tuple[Node, ...] = field(default_factory=tuple)

    def __add__(self, other: Script) -> Script:
        return Script(self.interpreter, self.statements + other.statements)

    @property
    def groups(self) -> list[CheckedGroup]:
        return [s for s in self.statements if isinstance(s, CheckedGroup)]
