"""
Completed lease commands: create, browse by year and hash.
"""

from typing import Optional
from uuid import UUID

import click
from pydantic import ValidationError as PydanticValidationError
from rich.table import Table

from leasekeeper.cli_commands import console, fail, get_service
from leasekeeper.core.exceptions import LeaseError
from leasekeeper.core.models import LeaseCreationData

ISO_DATE = click.DateTime(formats=["%Y-%m-%d"])


@click.command()
@click.argument("working_name")
@click.option("--year", "growing_year", type=int, required=True, help="Growing year")
@click.option("--property", "property_name", help="Property name")
@click.option("--farmer", "farmer_name", help="Farmer/tenant name")
@click.option("--lease-type", help="Lease type (cash, crop share, ...)")
@click.option("--start", "start_date", type=ISO_DATE, help="Start date (YYYY-MM-DD)")
@click.option("--end", "end_date", type=ISO_DATE, help="End date (YYYY-MM-DD)")
@click.option("--rent", "rent_amount", help="Rent amount")
@click.option("--frequency", "rent_frequency", help="Rent payment frequency")
@click.option("--lease-id", type=click.UUID, help="Lease identifier")
@click.pass_context
def create(
    ctx,
    working_name: str,
    growing_year: int,
    property_name: Optional[str],
    farmer_name: Optional[str],
    lease_type: Optional[str],
    start_date,
    end_date,
    rent_amount: Optional[str],
    rent_frequency: Optional[str],
    lease_id: Optional[UUID],
):
    """Finalize working draft WORKING_NAME as a completed lease."""
    try:
        data = LeaseCreationData(
            lease_id=lease_id,
            property_name=property_name,
            farmer_name=farmer_name,
            growing_year=growing_year,
            lease_type=lease_type,
            start_date=start_date.date() if start_date else None,
            end_date=end_date.date() if end_date else None,
            rent_amount=rent_amount,
            rent_frequency=rent_frequency,
        )
    except PydanticValidationError as e:
        fail(ctx, "Invalid Lease Data", e)

    try:
        lease = get_service(ctx).create_completed_lease(working_name, data)
    except LeaseError as e:
        fail(ctx, "Lease Creation Error", e)

    console.print(f"[green]✅ Created lease agreement {lease.file_name}[/green]")

    table = Table(title="Completed Lease")
    table.add_column("Field", style="cyan")
    table.add_column("Value", style="white")
    table.add_row("ID", str(lease.id))
    table.add_row("File", lease.file_name)
    table.add_row("Path", lease.file_path)
    table.add_row("Short Hash", lease.short_hash)
    table.add_row("SHA-256", lease.file_hash)
    console.print(table)


@click.command()
@click.pass_context
def years(ctx):
    """List growing years with completed leases."""
    try:
        found = get_service(ctx).list_years()
    except LeaseError as e:
        fail(ctx, "Listing Error", e)

    if not found:
        console.print("[yellow]No completed leases found[/yellow]")
        return
    for year in found:
        console.print(str(year))


@click.command()
@click.argument("year", type=int)
@click.pass_context
def files(ctx, year: int):
    """List completed leases for YEAR, newest first."""
    try:
        infos = get_service(ctx).list_files(year)
    except LeaseError as e:
        fail(ctx, "Listing Error", e)

    if not infos:
        console.print(f"[yellow]No completed leases for {year}[/yellow]")
        return

    table = Table(title=f"Completed Leases {year}")
    table.add_column("Lease", style="cyan")
    table.add_column("File", style="white")
    table.add_column("Created", style="white")
    table.add_column("Size", style="dim", justify="right")
    for info in infos:
        table.add_row(
            info.display_name,
            info.file_name,
            info.creation_date.strftime("%Y-%m-%d %H:%M"),
            f"{info.file_size:,} B",
        )
    console.print(table)


@click.command("hash")
@click.argument("path", type=click.Path(dir_okay=False))
@click.pass_context
def hash_file(ctx, path: str):
    """Print the SHA-256 audit fingerprint of PATH."""
    try:
        service = get_service(ctx)
        full_hash = service.hash_file(path)
    except LeaseError as e:
        fail(ctx, "Hash Error", e)

    console.print(f"SHA-256: {full_hash}")
    console.print(f"Short:   {service.fingerprinter.short_hash(full_hash)}")
