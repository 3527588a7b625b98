"""
brewkeeper — CLI entrypoint.

Usage:
    brewkeeper --help
    brewkeeper plan
    brewkeeper apply --dry-run
    brewkeeper status
"""

from __future__ import annotations

import json
import sys
from pathlib import Path

import click

from brewkeeper import __version__
from brewkeeper.core.observability.logging_config import resolve_level, setup_logging


@click.group()
@click.version_option(version=__version__, prog_name="brewkeeper")
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output.")
@click.option("--quiet", "-q", is_flag=True, help="Suppress non-essential output.")
@click.option("--debug", is_flag=True, help="Enable debug logging (very verbose).")
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(exists=False),
    default=None,
    help="Path to brewkeeper.yml (default: auto-detect).",
)
@click.pass_context
def cli(
    ctx: click.Context,
    verbose: bool,
    quiet: bool,
    debug: bool,
    config_path: str | None,
) -> None:
    """brewkeeper — keep Homebrew packages in line with brewkeeper.yml."""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["quiet"] = quiet
    ctx.obj["config_path"] = Path(config_path) if config_path else None

    setup_logging(level=resolve_level(debug=debug, verbose=verbose, quiet=quiet))


def _print_names(title: str, names: dict[str, list[str]], color: str, marker: str) -> None:
    total = sum(len(v) for v in names.values())
    click.secho(f"   {title}: {total}", fg="white", bold=True)
    for label, items in names.items():
        for name in items:
            click.secho(f"     {marker} ", fg=color, nl=False)
            click.echo(f"{name} [{label}]")


@cli.command()
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.option("--dry-run", is_flag=True, help="Show the brew commands without running them.")
@click.option("--mock", is_flag=True, help="Use mock adapter (no real execution).")
@click.pass_context
def apply(ctx: click.Context, as_json: bool, dry_run: bool, mock: bool) -> None:
    """Uninstall removed packages, update brew, install new packages.

    Examples:

        brewkeeper apply

        brewkeeper apply --dry-run
    """
    from brewkeeper.core.use_cases.apply import run_apply

    result = run_apply(
        config_path=ctx.obj.get("config_path"),
        dry_run=dry_run,
        mock_mode=mock,
    )

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
        sys.exit(0 if result.ok else 1)

    report = result.report
    if report is None:
        click.secho(f"❌ {result.error}", fg="red")
        sys.exit(1)

    mode_label = "[dry-run] " if dry_run else "[mock] " if mock else ""
    click.secho(f"\n🍺 {mode_label}apply — {report.operation_id}", fg="cyan", bold=True)
    click.echo()

    for receipt in report.receipts:
        argv = receipt.metadata.get("argv", [])
        shown = " ".join(["brew", *argv[1:]]) if argv else receipt.action_id
        if receipt.ok:
            timing = f" ({receipt.duration_ms}ms)" if receipt.duration_ms else ""
            click.secho("   ✓ ", fg="green", nl=False)
            click.echo(f"{shown}{timing}")
            if ctx.obj.get("verbose") and receipt.output:
                for line in receipt.output.split("\n")[:10]:
                    click.echo(f"     │ {line}")
        elif receipt.failed:
            click.secho("   ✗ ", fg="red", nl=False)
            click.echo(shown)
            if receipt.error:
                for line in receipt.error.split("\n")[:5]:
                    click.echo(f"     │ {line}")
        else:
            click.secho("   ⊘ ", fg="yellow", nl=False)
            click.echo(shown)

    click.echo()
    _print_names("Removed", report.removed, "red", "-")
    _print_names("Installed", report.installed, "green", "+")
    click.echo()

    if result.error:
        failure = result.failure
        click.secho("❌ Apply failed", fg="red", bold=True)
        if failure is not None:
            click.echo(f"   Stage:    {failure.stage}")
            if failure.category:
                click.echo(f"   Category: {failure.category.label}")
            if failure.package:
                click.echo(f"   Package:  {failure.package}")
            click.echo(f"   Error:    {failure.message}")
        else:
            click.echo(f"   {result.error}")
        click.echo()
        sys.exit(1)

    click.secho(f"   Result: {report.status}", fg="green", bold=True)
    click.echo()


@cli.command()
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def plan(ctx: click.Context, as_json: bool) -> None:
    """Preview which packages the next apply removes and installs."""
    from brewkeeper.core.use_cases.status import get_plan

    result = get_plan(config_path=ctx.obj.get("config_path"))

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
        sys.exit(0 if result.error is None else 1)

    if result.error:
        click.secho(f"❌ {result.error}", fg="red")
        sys.exit(1)

    data = result.to_dict()
    click.secho("\n📋 Plan", fg="cyan", bold=True)
    if result.plan is not None and result.plan.is_empty:
        click.echo("   Nothing to remove or install (brew update/upgrade still run).")
        click.echo()
        return

    _print_names("Remove", data["obsolete"], "red", "-")
    _print_names("Install", data["incoming"], "green", "+")
    click.echo()


@cli.command()
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def status(ctx: click.Context, as_json: bool) -> None:
    """Show recorded packages and the last apply run."""
    from brewkeeper.core.use_cases.status import get_status

    result = get_status(config_path=ctx.obj.get("config_path"))

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
        sys.exit(0 if result.error is None else 1)

    if result.error:
        click.secho(f"❌ {result.error}", fg="red")
        sys.exit(1)

    assert result.config is not None  # guaranteed after error check above
    if not ctx.obj.get("quiet"):
        click.secho(f"\n🍺 {result.config.homebrew_root}", fg="cyan", bold=True)
        click.echo(f"   Datastore: {result.config.datastore.type}")
        click.echo()

    _print_names("Recorded", result.recorded, "white", "•")

    op = result.last_operation
    if op is not None:
        click.echo()
        click.secho("   Last apply:", fg="white", bold=True)
        status_color = {"ok": "green", "dry-run": "yellow", "failed": "red"}.get(op.status, "white")
        click.echo(f"     {op.operation_id} — ", nl=False)
        click.secho(op.status, fg=status_color)
        if op.ended_at:
            click.echo(f"     at {op.ended_at} (stage {op.stage})")
        if op.error:
            click.echo(f"     {op.error}")

    click.echo()


if __name__ == "__main__":
    cli()
