"""
Tests for CLI commands — compile, package, minimal, backends and global options.
"""

import json
import textwrap
from pathlib import Path

from click.testing import CliRunner

from pkgplan.main import cli


class TestCLIGlobal:
    """Tests for global CLI behavior."""

    def test_help(self):
        runner = CliRunner()
        result = runner.invoke(cli, ["--help"])
        assert result.exit_code == 0
        assert "compile package intents" in result.output

    def test_version(self):
        runner = CliRunner()
        result = runner.invoke(cli, ["--version"])
        assert result.exit_code == 0
        assert "0.1.0" in result.output

    def test_invalid_config(self, tmp_path: Path):
        config = tmp_path / "pkgplan.yml"
        config.write_text("bogus_key: 1\n")
        runner = CliRunner()
        result = runner.invoke(cli, ["--config", str(config), "package", "nginx", "-b", "apt"])
        assert result.exit_code == 1
        assert "Invalid configuration" in result.output


class TestPackageCommand:
    def test_apt_batch(self):
        runner = CliRunner()
        result = runner.invoke(cli, ["package", "nginx", "apache2", "--backend", "apt"])
        assert result.exit_code == 0
        assert result.output.startswith("#!/usr/bin/env bash\n")
        assert "apt-get -q -y install nginx+ apache2+ || exit 1" in result.output

    def test_remove_with_purge(self):
        runner = CliRunner()
        result = runner.invoke(
            cli, ["package", "apache2", "-b", "aptitude", "--action", "remove", "--purge"],
        )
        assert result.exit_code == 0
        assert "aptitude install -q -y apache2_ || exit 1" in result.output

    def test_yum_repo_flags(self):
        runner = CliRunner()
        result = runner.invoke(
            cli, ["package", "git", "-b", "yum", "--enable", "epel", "--exclude", "git-svn"],
        )
        assert result.exit_code == 0
        assert "yum install -q -y --enablerepo=epel --exclude=git-svn git || exit 1" in result.output

    def test_invalid_action(self):
        runner = CliRunner()
        result = runner.invoke(cli, ["package", "nginx", "-b", "apt", "--action", "frobnicate"])
        assert result.exit_code == 1
        assert "frobnicate is not a valid action" in result.output

    def test_json(self):
        runner = CliRunner()
        result = runner.invoke(cli, ["package", "nginx", "-b", "pacman", "--json"])
        assert result.exit_code == 0
        data = json.loads(result.output)
        assert data["status"] == "ok"
        assert data["backend"] == "pacman"
        assert "pacman -S --noconfirm --needed nginx" in data["script"]

    def test_generic_needs_os_family(self):
        runner = CliRunner()
        result = runner.invoke(cli, ["package", "nginx", "-b", "other"])
        assert result.exit_code == 1
        ok = runner.invoke(cli, ["package", "nginx", "-b", "other", "--os-family", "alpine"])
        assert ok.exit_code == 0
        assert "apk add nginx" in ok.output


class TestCompileCommand:
    def _make_plan(self, tmp_path: Path) -> Path:
        content = textwrap.dedent("""\
            package_manager:
              - update
            sources:
              - name: epel
                yum:
                  url: http://mirror/epel
                  gpgkey: http://mirror/KEY
            packages:
              - nginx
              - name: httpd
                action: remove
        """)
        plan = tmp_path / "plan.yml"
        plan.write_text(content)
        return plan

    def test_compile_plan(self, tmp_path: Path):
        plan = self._make_plan(tmp_path)
        runner = CliRunner()
        result = runner.invoke(cli, ["compile", str(plan), "--backend", "yum"])
        assert result.exit_code == 0
        out = result.output
        assert out.index("package-manager update") < out.index("Package source")
        assert out.index("Package source") < out.index("echo Packages...")
        assert "rpm --import http://mirror/KEY || exit 1" in out
        assert "yum remove -q -y httpd || exit 1" in out

    def test_invalid_plan(self, tmp_path: Path):
        plan = tmp_path / "plan.yml"
        plan.write_text("packages: nginx\n")
        runner = CliRunner()
        result = runner.invoke(cli, ["compile", str(plan), "-b", "apt"])
        assert result.exit_code == 1
        assert "Invalid plan" in result.output


class TestMinimalCommand:
    def test_ubuntu(self):
        runner = CliRunner()
        result = runner.invoke(cli, ["minimal", "-b", "apt", "--os-family", "ubuntu"])
        assert result.exit_code == 0
        assert "apt-get -q -y install sudo || exit 1" in result.output


class TestBackendsCommand:
    def test_list(self):
        runner = CliRunner()
        result = runner.invoke(cli, ["backends"])
        assert result.exit_code == 0
        for name in ("apt", "aptitude", "yum", "pacman"):
            assert name in result.output
        assert "other (fallback)" in result.output

    def test_json(self):
        runner = CliRunner()
        result = runner.invoke(cli, ["backends", "--json"])
        data = json.loads(result.output)
        assert data["fallback"] == "other"
        assert data["backends"] == ["apt", "aptitude", "yum", "pacman", "other"]
