"""
Toolchain Provisioner — CLI entrypoint.

Usage:
    python -m provisioner.main --help
    python -m provisioner.main install --prefix ~/tools
    python -m provisioner.main plan
    python -m provisioner.main list
"""

from __future__ import annotations

import os
import sys
from pathlib import Path

import click

from provisioner import __version__
from provisioner.core.config.loader import ConfigError, load_settings
from provisioner.core.observability.logging_config import resolve_level, setup_logging
from provisioner.core.services.provision.domain.errors import BuildStepFailure, ProvisionError


def _fail(error: Exception, code: int = 1) -> None:
    click.secho(f"error: {error}", fg="red", err=True)
    sys.exit(code)


@click.group()
@click.version_option(version=__version__, prog_name="provisioner")
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output.")
@click.option("--quiet", "-q", is_flag=True, help="Suppress non-essential output.")
@click.option("--debug", is_flag=True, help="Enable debug logging (very verbose).")
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(exists=False, dir_okay=False),
    default=None,
    help="Path to config.yml (default: $PROVISIONER_CONFIG or ~/.config/provisioner/config.yml).",
)
@click.pass_context
def cli(
    ctx: click.Context,
    verbose: bool,
    quiet: bool,
    debug: bool,
    config_path: str | None,
) -> None:
    """Toolchain Provisioner — build m4, autoconf, automake, libtool, cmake,
    meson, nasm, ninja, openssl and pkg-config from source into a prefix."""
    ctx.ensure_object(dict)

    setup_logging(
        level=resolve_level(debug=debug, verbose=verbose, quiet=quiet),
        role="orchestrator" if ctx.invoked_subcommand == "run-plan" else "supervisor",
        log_file=os.environ.get("PROVISIONER_LOG_FILE"),
        log_file_level=os.environ.get("PROVISIONER_LOG_FILE_LEVEL"),
    )

    # Flags the orchestrator child is re-launched with
    child_args: list[str] = []
    if debug:
        child_args.append("--debug")
    elif verbose:
        child_args.append("--verbose")
    elif quiet:
        child_args.append("--quiet")
    if config_path:
        child_args += ["--config", config_path]

    ctx.obj["child_args"] = child_args
    ctx.obj["config_path"] = Path(config_path) if config_path else None


def _settings(ctx: click.Context):
    try:
        return load_settings(ctx.obj.get("config_path"))
    except ConfigError as e:
        _fail(e)


@cli.command("list")
def list_cmd() -> None:
    """List the catalog (name and pinned version)."""
    from provisioner.core.use_cases.provision import list_catalog

    for name, version in list_catalog():
        click.echo(f"{name} {version}")


@cli.command()
@click.option("--prefix", "-p", default=None, help="Installation prefix (default from config).")
@click.option("--force", "-f", is_flag=True, help="Ignore installed versions.")
@click.pass_context
def plan(ctx: click.Context, prefix: str | None, force: bool) -> None:
    """Show what install would build or skip, without changing anything."""
    from provisioner.core.use_cases.provision import plan_run

    settings = _settings(ctx)
    try:
        run_plan = plan_run(settings, prefix=prefix, force=force)
    except ProvisionError as e:
        _fail(e, e.exit_code)
        return

    click.secho(f"Prefix: {run_plan.prefix}", bold=True)
    for index, decision in enumerate(run_plan.decisions, start=1):
        entry = decision.entry
        installed = decision.installed_version or "not installed"
        action = "skip" if decision.skip else "build"
        color = "green" if decision.skip else "yellow"
        click.echo(f"  [{index}/{run_plan.total}] {entry.name} {entry.version} ", nl=False)
        click.secho(f"({action}; {installed})", fg=color)
    click.echo(f"{run_plan.pending_count} of {run_plan.total} to build")


@cli.command()
@click.option("--prefix", "-p", default=None, help="Installation prefix (default from config).")
@click.option("--jobs", "-j", type=click.IntRange(min=0), default=None,
              help="Parallel make jobs (0 = CPU count).")
@click.option("--force", "-f", is_flag=True, help="Rebuild everything, ignoring installed versions.")
@click.pass_context
def install(ctx: click.Context, prefix: str | None, jobs: int | None, force: bool) -> None:
    """Build and install every catalog entry that is missing or outdated."""
    from provisioner.core.use_cases.provision import run_install

    settings = _settings(ctx)
    try:
        status = run_install(
            settings,
            prefix=prefix,
            jobs=jobs,
            force=force,
            child_args=ctx.obj.get("child_args", []),
        )
    except ProvisionError as e:
        _fail(e, e.exit_code)
        return
    sys.exit(status)


@cli.command("run-plan", hidden=True)
@click.option("--plan", "plan_path", required=True,
              type=click.Path(exists=True, dir_okay=False, path_type=Path))
def run_plan_cmd(plan_path: Path) -> None:
    """Orchestrator child entrypoint (launched by ``install``)."""
    from provisioner.core.use_cases.provision import run_orchestrator, tail_log
    try:
        run_orchestrator(plan_path)
    except BuildStepFailure as e:
        for line in tail_log(e.log_path):
            click.echo(f"  | {line}", err=True)
        _fail(e, e.exit_code)
    except ProvisionError as e:
        _fail(e, e.exit_code)


if __name__ == "__main__":
    cli()
