"""
pkgplan — CLI entrypoint.

Usage:
    pkgplan --help
    pkgplan compile plan.yml --backend yum
    pkgplan package nginx --backend apt
    pkgplan package apache2 --backend aptitude --action remove --purge
"""

from __future__ import annotations

import json
import sys
from pathlib import Path

import click

from pkgplan import __version__
from pkgplan.core.config.loader import CompilerConfig, ConfigError, load_config
from pkgplan.core.models.host import HostContext
from pkgplan.core.models.operation import BackendId
from pkgplan.core.models.result import CompileResult
from pkgplan.core.observability.logging_config import resolve_level, setup_from_env

_BACKEND_CHOICES = click.Choice([b.value for b in BackendId], case_sensitive=False)


@click.group()
@click.version_option(version=__version__, prog_name="pkgplan")
@click.option("--verbose", "-v", is_flag=True, help="Log progress at INFO level.")
@click.option("--quiet", "-q", is_flag=True, help="Only log errors.")
@click.option("--debug", is_flag=True, help="Log normalized records and rendering details.")
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(exists=False),
    default=None,
    help="Path to pkgplan.yml (default: auto-detect).",
)
@click.pass_context
def cli(
    ctx: click.Context,
    verbose: bool,
    quiet: bool,
    debug: bool,
    config_path: str | None,
) -> None:
    """pkgplan — compile package intents into shell scripts."""
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = Path(config_path) if config_path else None

    setup_from_env(resolve_level(debug=debug, verbose=verbose, quiet=quiet))


def _load_config(ctx: click.Context) -> CompilerConfig:
    try:
        return load_config(ctx.obj.get("config_path"))
    except ConfigError as e:
        click.secho(f"❌ {e}", fg="red", err=True)
        sys.exit(1)


def _host(backend: str, os_family: str | None) -> HostContext:
    return HostContext(backend=backend, os_family=os_family or "")


def _emit(result: CompileResult, as_json: bool) -> None:
    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
        sys.exit(0 if result.ok else 1)

    if result.failed:
        click.secho(f"❌ {result.error_type}: {result.error}", fg="red", err=True)
        sys.exit(1)

    click.echo(result.render(), nl=False)


_backend_option = click.option(
    "--backend", "-b", type=_BACKEND_CHOICES, required=True,
    help="Package manager of the target host.",
)
_os_family_option = click.option(
    "--os-family", default=None, help="OS family of the target host (e.g. ubuntu, centos).",
)
_json_option = click.option(
    "--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.",
)


@cli.command("compile")
@click.argument("plan_file", type=click.Path(exists=True, dir_okay=False))
@_backend_option
@_os_family_option
@_json_option
@click.pass_context
def compile_cmd(
    ctx: click.Context,
    plan_file: str,
    backend: str,
    os_family: str | None,
    as_json: bool,
) -> None:
    """Compile a YAML plan file into a script."""
    from pkgplan.core.config.loader import load_plan
    from pkgplan.core.engine.compiler import compile_plan

    config = _load_config(ctx)
    try:
        plan = load_plan(Path(plan_file))
    except ConfigError as e:
        click.secho(f"❌ {e}", fg="red", err=True)
        sys.exit(1)

    _emit(compile_plan(_host(backend, os_family), plan, config=config), as_json)


@cli.command()
@click.argument("names", nargs=-1, required=True)
@_backend_option
@_os_family_option
@click.option(
    "--action", "-a", default="install", show_default=True,
    help="install, remove or upgrade.",
)
@click.option("--purge", is_flag=True, help="Remove configuration files too.")
@click.option("--force", is_flag=True, help="Force the install where the tool supports it.")
@click.option("--enable", multiple=True, help="Repository to enable (repeatable).")
@click.option("--disable", multiple=True, help="Repository to disable (repeatable).")
@click.option("--exclude", multiple=True, help="Package pattern to exclude (repeatable).")
@click.option("--priority", type=click.IntRange(0, 100), default=50, show_default=True)
@_json_option
@click.pass_context
def package(
    ctx: click.Context,
    names: tuple[str, ...],
    backend: str,
    os_family: str | None,
    action: str,
    purge: bool,
    force: bool,
    enable: tuple[str, ...],
    disable: tuple[str, ...],
    exclude: tuple[str, ...],
    priority: int,
    as_json: bool,
) -> None:
    """Compile one package batch applying the same options to every NAME."""
    from pkgplan.core.engine.compiler import compile_packages

    options = {
        "action": action,
        "purge": purge,
        "force": force,
        "enable": list(enable),
        "disable": list(disable),
        "exclude": list(exclude),
        "priority": priority,
    }
    result = compile_packages(
        _host(backend, os_family),
        [(name, options) for name in names],
        config=_load_config(ctx),
    )
    _emit(result, as_json)


@cli.command()
@_backend_option
@_os_family_option
@_json_option
@click.pass_context
def minimal(ctx: click.Context, backend: str, os_family: str | None, as_json: bool) -> None:
    """Compile the bootstrap packages (sudo, coreutils) for an OS family."""
    from pkgplan.core.engine.compiler import compile_minimal_packages

    result = compile_minimal_packages(_host(backend, os_family), config=_load_config(ctx))
    _emit(result, as_json)


@cli.command()
@_json_option
def backends(as_json: bool) -> None:
    """List the registered package-manager backends."""
    from pkgplan.backends.registry import default_registry

    registry = default_registry()
    names = registry.list_backends()

    if as_json:
        click.echo(json.dumps({"backends": names, "fallback": registry.fallback.name}, indent=2))
        return

    click.secho("📦 Backends:", fg="cyan", bold=True)
    for name in names:
        marker = " (fallback)" if name == registry.fallback.name else ""
        click.echo(f"   • {name}{marker}")


def main() -> None:
    """Console-script entry point."""
    cli(obj={})


if __name__ == "__main__":
    main()
