"""Shared helpers for CLI commands."""

import sys
import traceback

import click
from rich.console import Console
from rich.markup import escape

from leasekeeper.core.exceptions import LeaseError
from leasekeeper.services.lease_service import LeaseService, create_lease_service

console = Console()


def get_service(ctx: click.Context) -> LeaseService:
    """Lease service for the root selected on the command line."""
    obj = ctx.find_root().obj
    if obj.get("service") is None:
        obj["service"] = create_lease_service(obj["settings"])
    return obj["service"]


def fail(ctx: click.Context, label: str, error: Exception) -> None:
    """Report an error and exit with status 1."""
    console.print(f"[red]{label}:[/red] {escape(str(error))}")
    if not isinstance(error, LeaseError) and ctx.find_root().obj.get("debug"):
        console.print(traceback.format_exc())
    sys.exit(1)
