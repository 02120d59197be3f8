"""
Tests for the script assembler — quoting, compound statements,
checked groups and here-documents.
"""

import pytest

from pkgplan.script.render import (
    RenderError,
    heredoc_marker,
    render_lines,
    render_script,
    render_word,
)
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
    WriteFile,
)


# ── Words ───────────────────────────────────────────────────────


class TestWords:
    def test_safe_word_unquoted(self):
        assert render_word("nginx+") == "nginx+"
        assert render_word("apache2_") == "apache2_"

    def test_unsafe_word_quoted(self):
        assert render_word("a b") == "'a b'"
        assert render_word("$(rm -rf /)") == "'$(rm -rf /)'"

    def test_subst(self):
        assert render_word(Subst(Command(("rpm", "-pq", "foo.rpm")))) == '"$(rpm -pq foo.rpm)"'

    def test_var(self):
        assert render_word(Var("tmpfile")) == '"$tmpfile"'


# ── Statements ──────────────────────────────────────────────────


class TestStatements:
    def test_command(self):
        node = Command(("apt-get", "-q", "-y", "install", "nginx+", "apache2_"))
        assert render_lines(node) == ["apt-get -q -y install nginx+ apache2_"]

    def test_silent_command(self):
        assert render_lines(Command(("rpm", "-q", "x"), silent=True)) == [
            "rpm -q x > /dev/null 2>&1"
        ]

    def test_stdout_redirect(self):
        node = Command(("awk", "{print}", "f"), stdout=Var("tmp"))
        assert render_lines(node) == ["awk '{print}' f > \"$tmp\""]

    def test_pipeline(self):
        node = Pipeline((Command(("echo", "")), Command(("add-apt-repository", "ppa:x/y"))))
        assert render_lines(node) == ["echo '' | add-apt-repository ppa:x/y"]

    def test_not(self):
        assert render_lines(Not(Command(("false",)))) == ["! false"]

    def test_nested_and_or_braced(self):
        node = Or(And(Command(("a",)), Command(("b",))), Command(("true",)))
        assert render_lines(node) == ["a && b || true"]
        node = Or(Command(("a",)), And(Command(("b",)), Command(("c",))))
        assert render_lines(node) == ["a || { b && c; }"]

    def test_assign_export_echo(self):
        assert render_lines(Assign("t", Subst(Command(("mktemp",))))) == ['t="$(mktemp)"']
        assert render_lines(Export("DEBIAN_FRONTEND", "noninteractive")) == [
            "export DEBIAN_FRONTEND=noninteractive"
        ]
        assert render_lines(Echo("hello world")) == ["echo 'hello world'"]

    def test_fetch_file(self):
        node = FetchFile("aptkey.tmp", "http://example.com/key.asc")
        assert render_lines(node) == [
            "curl --fail --silent --show-error --location"
            " -o aptkey.tmp http://example.com/key.asc"
        ]

    def test_unknown_node(self):
        with pytest.raises(RenderError):
            render_lines(Node())


# ── Here-documents ──────────────────────────────────────────────


class TestWriteFile:
    def test_literal(self):
        lines = render_lines(WriteFile("/etc/x.conf", "a=$b\n"))
        assert lines == ["cat > /etc/x.conf <<'EOF_PKGPLAN'", "a=$b", "EOF_PKGPLAN"]

    def test_expanding(self):
        lines = render_lines(WriteFile("/etc/x.list", "deb u $(lsb_release -c -s) main\n", literal=False))
        assert lines[0] == "cat > /etc/x.list <<EOF_PKGPLAN"

    def test_append(self):
        lines = render_lines(WriteFile("/etc/yum.conf", "include=x\n", append=True))
        assert lines[0] == "cat >> /etc/yum.conf <<'EOF_PKGPLAN'"

    def test_marker_in_content_picks_another(self):
        lines = render_lines(WriteFile("f", "a\nEOF_PKGPLAN\nb\n"))
        assert lines == ["cat > f <<'EOF_PKGPLAN_1'", "a", "EOF_PKGPLAN", "b", "EOF_PKGPLAN_1"]

    def test_marker_skips_every_taken_suffix(self):
        assert heredoc_marker(["x"]) == "EOF_PKGPLAN"
        assert heredoc_marker(["EOF_PKGPLAN", "EOF_PKGPLAN_1"]) == "EOF_PKGPLAN_2"

    def test_marker_only_matches_whole_lines(self):
        assert heredoc_marker(["  EOF_PKGPLAN", "EOF_PKGPLAN x"]) == "EOF_PKGPLAN"

    def test_inside_if_stays_at_column_zero(self):
        node = If(
            test=Command(("grep", "-q", "x", "f")),
            negate=True,
            then=(WriteFile("f", "x\n", append=True),),
        )
        assert render_lines(node) == [
            "if ! grep -q x f; then",
            "  cat >> f <<'EOF_PKGPLAN'",
            "x",
            "EOF_PKGPLAN",
            "fi",
        ]


# ── Checked groups ──────────────────────────────────────────────


class TestCheckedGroup:
    def test_layout(self):
        group = CheckedGroup("Packages", (Command(("apt-get", "-q", "-y", "install", "nginx+")),))
        assert render_lines(group) == [
            "echo Packages...",
            "(",
            "apt-get -q -y install nginx+ || exit 1",
            ") || { echo 'Packages failed' >&2; exit 1; }",
            "echo '...done'",
        ]

    def test_empty_group_renders_nothing(self):
        assert render_lines(CheckedGroup("Nothing")) == []

    def test_write_file_terminated_on_command_line(self):
        group = CheckedGroup("f", (WriteFile("/tmp/a", "x\n"),))
        lines = render_lines(group)
        assert "cat > /tmp/a <<'EOF_PKGPLAN' || exit 1" in lines
        assert "EOF_PKGPLAN" in lines

    def test_every_statement_checked(self):
        group = CheckedGroup("g", (Command(("a",)), Not(Command(("b",)))))
        lines = render_lines(group)
        assert "a || exit 1" in lines
        assert "! b || exit 1" in lines


class TestScript:
    def test_shebang(self):
        assert render_script(Script()) == "#!/usr/bin/env bash\n"
        assert render_script(Script(interpreter="sh")) == "#!/bin/sh\n"
        assert render_script(Script(interpreter="zsh")) == "#!/usr/bin/env zsh\n"

    def test_concatenation(self):
        a = Script(statements=(Command(("a",)),))
        b = Script(statements=(Command(("b",)),))
        assert render_script(a + b) == "#!/usr/bin/env bash\na\nb\n"

    def test_groups(self):
        group = CheckedGroup("g", (Command(("a",)),))
        script = Script(statements=(Command(("x",)), group))
        assert script.groups == [group]
