"""
Main application entry point for LeaseKeeper.

Provides CLI interface for the lease document lifecycle.
"""

from pathlib import Path
from typing import Optional

import click
from pydantic import ValidationError as PydanticValidationError

from leasekeeper.cli_commands import console, fail, get_service
from leasekeeper.cli_commands.leases import create, files, hash_file, years
from leasekeeper.cli_commands.templates import templates
from leasekeeper.core.config import get_settings, print_configuration_summary
from leasekeeper.core.exceptions import ConfigurationError, LeaseError
from leasekeeper.core.logging import set_correlation_id, setup_logging


@click.group()
@click.option("--debug", is_flag=True, help="Enable debug logging")
@click.option("--json-logs", is_flag=True, help="Emit JSON log lines instead of rich output")
@click.option(
    "--root",
    type=click.Path(file_okay=False, path_type=Path),
    help="Directory holding the lease tree (overrides LEASE_ROOT_DIR)",
)
@click.option("--correlation-id", help="Set correlation ID for request tracing")
@click.pass_context
def main(
    ctx,
    debug: bool,
    json_logs: bool,
    root: Optional[Path],
    correlation_id: Optional[str],
):
    """Lease document lifecycle manager.

    Moves lease agreements from master templates through working drafts to
    immutable, fingerprinted completed agreements.
    """
    ctx.ensure_object(dict)

    try:
        settings = get_settings()
    except PydanticValidationError as e:
        fail(ctx, "Configuration Error", ConfigurationError(str(e)))
    if root is not None:
        settings = settings.model_copy(update={"root_dir": root.expanduser()})

    debug = debug or settings.debug
    setup_logging(debug=debug, rich_output=not (json_logs or settings.log_json))

    if correlation_id:
        set_correlation_id(correlation_id)

    ctx.obj["settings"] = settings
    ctx.obj["debug"] = debug
    ctx.obj["service"] = None


main.add_command(templates)
main.add_command(create)
main.add_command(years)
main.add_command(files)
main.add_command(hash_file)


@main.command()
@click.option("--seed/--no-seed", default=True, help="Seed stock templates into an empty tier")
@click.pass_context
def init(ctx, seed: bool):
    """Create the lease directory tiers."""
    try:
        service = get_service(ctx)
        seeded = service.seed_templates_if_needed() if seed else []
    except LeaseError as e:
        fail(ctx, "Initialization Error", e)

    console.print(f"[green]✅ Lease directories ready under {service.registry.base_dir}[/green]")
    if seeded:
        console.print(f"Seeded {len(seeded)} lease templates")


@main.command()
@click.pass_context
def config(ctx):
    """Display current configuration."""
    print_configuration_summary(ctx.obj["settings"])


if __name__ == "__main__":
    main()
