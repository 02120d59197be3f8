"""
Script assembler — render a command tree to shell source.

Quoting lives here and nowhere else. Every plain word goes through
``shlex.quote``; ``Subst`` words render as a double-quoted
``"$(...)"``.

Inside a CheckedGroup every statement is terminated with
``|| exit 1`` and the group body runs in a subshell, so the first
failing statement (including a failed verification assertion) fails
the group, and the group reports its label on failure:

    echo Packages...
    (
    apt-get -q -y install nginx+ || exit 1
    ) || { echo 'Packages failed' >&2; exit 1; }
    echo '...done'
"""

from __future__ import annotations

import logging
import shlex

from pkgplan.script.tree import (
    And,
    Assign,
    CheckedGroup,
    Command,
    Echo,
    Export,
    FetchFile,
    If,
    Node,
    Not,
    Or,
    Pipeline,
    Script,
    Subst,
    Var,
    Word,
    WriteFile,
)

logger = logging.getLogger(__name__)

HEREDOC_MARKER = "EOF_PKGPLAN"

_INTERPRETERS = {
    "bash": "#!/usr/bin/env bash",
    "sh": "#!/bin/sh",
}


class RenderError(Exception):
    """Raised when a node cannot be rendered."""


def render_word(word: Word) -> str:
    if isinstance(word, Subst):
        return f'"$({render_command(word.command)})"'
    if isinstance(word, Var):
        return f'"${word.name}"'
    return shlex.quote(word)


def render_command(command: Command) -> str:
    text = " ".join(render_word(w) for w in command.argv)
    if command.stdout is not None:
        text += " > " + render_word(command.stdout)
    if command.silent:
        text += " > /dev/null 2>&1"
    return text


def heredoc_marker(lines: list[str]) -> str:
    """First of EOF_PKGPLAN, EOF_PKGPLAN_1, ... that no content line equals."""
    taken = set(lines)
    marker = HEREDOC_MARKER
    suffix = 0
    while marker in taken:
        suffix += 1
        marker = f"{HEREDOC_MARKER}_{suffix}"
    return marker


def render_lines(node: Node) -> list[str]:
    """Render one statement to its source lines."""
    if isinstance(node, Command):
        return [render_command(node)]

    if isinstance(node, Pipeline):
        return [" | ".join(render_command(c) for c in node.commands)]

    if isinstance(node, Not):
        return ["! " + _inline(node.node)]

    if isinstance(node, And):
        return [f"{_inline(node.first)} && {_operand(node.second)}"]

    if isinstance(node, Or):
        return [f"{_inline(node.first)} || {_operand(node.second)}"]

    if isinstance(node, If):
        bang = "! " if node.negate else ""
        lines = [f"if {bang}{_inline(node.test)}; then"]
        for stmt in node.then:
            inner = render_lines(stmt)
            if isinstance(stmt, WriteFile):
                # Here-document bodies and terminators stay at column 0.
                lines.extend(["  " + inner[0], *inner[1:]])
            else:
                lines.extend("  " + line for line in inner)
        lines.append("fi")
        return lines

    if isinstance(node, Assign):
        return [f"{node.name}={render_word(node.value)}"]

    if isinstance(node, Export):
        return [f"export {node.name}={shlex.quote(node.value)}"]

    if isinstance(node, Echo):
        return [f"echo {shlex.quote(node.text)}"]

    if isinstance(node, WriteFile):
        body = node.content[:-1] if node.content.endswith("\n") else node.content
        lines = body.split("\n")
        marker = heredoc_marker(lines)
        opener = f"'{marker}'" if node.literal else marker
        redirect = ">>" if node.append else ">"
        return [
            f"cat {redirect} {shlex.quote(node.path)} <<{opener}",
            *lines,
            marker,
        ]

    if isinstance(node, FetchFile):
        return [
            "curl --fail --silent --show-error --location"
            f" -o {shlex.quote(node.path)} {shlex.quote(node.url)}"
        ]

    if isinstance(node, CheckedGroup):
        return _render_group(node)

    raise RenderError(f"Cannot render node of type {type(node).__name__}")


def _inline(node: Node) -> str:
    lines = render_lines(node)
    if len(lines) != 1:
        raise RenderError(f"{type(node).__name__} does not fit on one line")
    return lines[0]


def _operand(node: Node) -> str:
    """Right-hand operand of && / ||; compound lists get braces."""
    text = _inline(node)
    if isinstance(node, (And, Or)):
        return "{ " + text + "; }"
    return text


def _terminate(node: Node, lines: list[str], suffix: str) -> list[str]:
    """Attach ``suffix`` to the line that ends the statement's command."""
    if isinstance(node, WriteFile):
        # The here-document body follows the command line.
        return [lines[0] + suffix, *lines[1:]]
    return [*lines[:-1], lines[-1] + suffix]


def _render_group(group: CheckedGroup) -> list[str]:
    if not group.body:
        return []
    label = shlex.quote(group.label + "...")
    failed = shlex.quote(group.label + " failed")
    lines = [f"echo {label}", "("]
    for stmt in group.body:
        lines.extend(_terminate(stmt, render_lines(stmt), " || exit 1"))
    lines.append(f") || {{ echo {failed} >&2; exit 1; }}")
    lines.append("echo '...done'")
    return lines


def render_script(script: Script) -> str:
    """Render a whole script, shebang included."""
    try:
        shebang = _INTERPRETERS[script.interpreter]
    except KeyError:
        shebang = f"#!/usr/bin/env {script.interpreter}"
    lines = [shebang]
    for stmt in script.statements:
        lines.extend(render_lines(stmt))
    logger.debug("Rendered %d statements into %d lines", len(script.statements), len(lines))
    return "\n".join(lines) + "\n"
