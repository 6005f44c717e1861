"""Command-line interface for bkt."""

from __future__ import annotations

import logging
import sys
from pathlib import Path

import click

from . import config
from .command_runner import RealCommandRunner
from .exceptions import PlanningError, ValidationError
from .output import (
    format_report,
    format_status_table,
    format_subsystem_table,
    format_summary,
    print_progress,
)
from .pipeline import ExecutionMode, ExecutionOptions, detect_mode
from .plan import CompositePlan, ExecuteContext, PlanContext, Planned
from .subsystem import Subsystem, SubsystemRegistry

logger = logging.getLogger(__name__)


def configure_logging(verbose: int) -> None:
    """Configure the root logger from the ``-v`` count."""
    level = logging.WARNING
    if verbose == 1:
        level = logging.INFO
    elif verbose > 1:
        level = logging.DEBUG
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
        datefmt="%H:%M:%S",
        force=True,
    )


def _split_ids(ctx: click.Context, param: click.Parameter, value: str | None) -> list[str] | None:
    """Parse a comma-separated list of subsystem ids. An empty list means "not given"."""
    if value is None:
        return None
    ids = [part.strip() for part in value.split(",") if part.strip()]
    return ids or None


def _select(
    registry: SubsystemRegistry,
    only: list[str] | None,
    exclude: list[str] | None,
    *,
    capture: bool,
) -> list[Subsystem]:
    try:
        registry.validate_ids("--only", only or [], capture=capture)
        registry.validate_ids("--exclude", exclude or [], capture=capture)
    except ValidationError as e:
        raise click.BadParameter(e.reason, param_hint=f"'{e.field}' ({e.value})") from e

    candidates = registry.filtered(only, exclude)
    if capture:
        return [s for s in candidates if s.supports_capture()]
    return [s for s in candidates if s.supports_sync()]


def _build_plan(
    name: str,
    subsystems: list[Subsystem],
    plan_ctx: PlanContext,
    *,
    capture: bool,
) -> Planned:
    plan = CompositePlan(name)
    for subsystem in subsystems:
        command = subsystem.capture(plan_ctx) if capture else subsystem.sync(plan_ctx)
        if command is None:
            continue
        logger.info("Planning %s", subsystem.id)
        plan.add(command.plan(plan_ctx))
    return Planned(plan)


def _run(
    planned: Planned,
    options: ExecutionOptions,
    *,
    empty_message: str,
    verb: str,
    execute: bool,
) -> None:
    summary = planned.describe()
    if planned.is_empty():
        if summary.warnings:
            click.echo(format_summary(summary))
            click.echo()
        click.echo(empty_message)
        return

    click.echo(format_summary(summary))
    click.echo()

    if options.dry_run:
        click.echo(f"Run without --dry-run to {verb} these changes.")
        return
    if not execute:
        click.echo("Image context: manifests were planned but nothing was executed locally.")
        return

    exec_ctx = ExecuteContext(
        options=options,
        total_ops=summary.action_count(),
        progress_callback=print_progress,
    )
    report = planned.execute(exec_ctx)
    click.echo()
    click.echo(format_report(report))


ids_option_help = "Comma-separated subsystem ids."


@click.group()
@click.version_option(package_name="bkt")
@click.option("--dry-run", is_flag=True, help="Show what would change without changing anything.")
@click.option(
    "--context",
    "mode",
    type=click.Choice([m.value for m in ExecutionMode]),
    help="Execution context (default: detected).",
)
@click.option(
    "--manifest-dir",
    type=click.Path(file_okay=False, path_type=Path),
    help=f"User manifest directory (default: ${config.CONFIG_DIR_ENV_VAR} or ~/.config/bootc).",
)
@click.option(
    "--system-manifest-dir",
    type=click.Path(file_okay=False, path_type=Path),
    help=f"System manifest directory (default: {config.DEFAULT_SYSTEM_MANIFEST_DIR}).",
)
@click.option(
    "--shims-dir",
    type=click.Path(file_okay=False, path_type=Path),
    help="Directory host shims are written to.",
)
@click.option("-v", "--verbose", count=True, help="Increase log verbosity (-v, -vv).")
@click.pass_context
def cli(
    ctx: click.Context,
    dry_run: bool,
    mode: str | None,
    manifest_dir: Path | None,
    system_manifest_dir: Path | None,
    shims_dir: Path | None,
    verbose: int,
) -> None:
    """bkt: keep manifests and the running system in sync."""
    configure_logging(verbose)
    ctx.ensure_object(dict)

    options = ExecutionOptions(
        dry_run=dry_run,
        mode=ExecutionMode(mode) if mode else detect_mode(),
        runner=ctx.obj.get("runner") or RealCommandRunner(),
    )
    ctx.obj["plan_ctx"] = PlanContext(
        working_dir=Path.cwd(),
        manifest_dir=manifest_dir or config.user_config_dir(),
        system_manifest_dir=system_manifest_dir or config.system_manifest_dir(),
        shims_dir=shims_dir or config.shims_dir(),
        options=options,
    )


@cli.command()
@click.option("--only", callback=_split_ids, help=ids_option_help)
@click.option("--exclude", callback=_split_ids, help=ids_option_help)
@click.pass_obj
def apply(obj: dict, only: list[str] | None, exclude: list[str] | None) -> None:
    """Bring the system in line with the manifests."""
    plan_ctx: PlanContext = obj["plan_ctx"]
    registry = SubsystemRegistry.builtin()
    subsystems = _select(registry, only, exclude, capture=False)

    try:
        planned = _build_plan("Apply", subsystems, plan_ctx, capture=False)
    except PlanningError as e:
        click.echo(f"✗ {e}", err=True)
        sys.exit(1)

    _run(
        planned,
        plan_ctx.options,
        empty_message="Nothing to apply. System is in sync with manifests.",
        verb="apply",
        execute=plan_ctx.options.should_execute_locally(),
    )


@cli.command()
@click.option("--only", callback=_split_ids, help=ids_option_help)
@click.option("--exclude", callback=_split_ids, help=ids_option_help)
@click.pass_obj
def capture(obj: dict, only: list[str] | None, exclude: list[str] | None) -> None:
    """Record untracked system state into the user manifests."""
    plan_ctx: PlanContext = obj["plan_ctx"]
    registry = SubsystemRegistry.builtin()
    subsystems = _select(registry, only, exclude, capture=True)

    try:
        planned = _build_plan("Capture", subsystems, plan_ctx, capture=True)
    except PlanningError as e:
        click.echo(f"✗ {e}", err=True)
        sys.exit(1)

    _run(
        planned,
        plan_ctx.options,
        empty_message="Nothing to capture. Manifests already cover the system.",
        verb="capture",
        execute=not plan_ctx.options.dry_run,
    )


@cli.command()
@click.option("--only", callback=_split_ids, help=ids_option_help)
@click.option("--exclude", callback=_split_ids, help=ids_option_help)
@click.pass_obj
def status(obj: dict, only: list[str] | None, exclude: list[str] | None) -> None:
    """Show drift between manifests and the system."""
    plan_ctx: PlanContext = obj["plan_ctx"]
    registry = SubsystemRegistry.builtin()
    for field, ids in (("--only", only), ("--exclude", exclude)):
        for subsystem_id in ids or []:
            if registry.find(subsystem_id) is None:
                raise click.BadParameter(
                    f"Unknown subsystem. Valid values: {', '.join(registry.ids())}",
                    param_hint=f"'{field}' ({subsystem_id})",
                )

    try:
        statuses = [
            s.component(plan_ctx).status()
            for s in registry.filtered(only, exclude)
            if s.supports_drift()
        ]
    except PlanningError as e:
        click.echo(f"✗ {e}", err=True)
        sys.exit(1)

    click.echo(format_status_table(statuses))


@cli.group()
def subsystem() -> None:
    """Inspect the available subsystems."""


@subsystem.command("list")
def subsystem_list() -> None:
    """List subsystems and what they support."""
    click.echo(format_subsystem_table(SubsystemRegistry.builtin().all()))


def main() -> None:
    """Entry point for the CLI."""
    cli()


if __name__ == "__main__":
    main()
