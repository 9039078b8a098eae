"""
Template commands: list, copy to working and seed the stock templates.
"""

import click
from rich.markup import escape

from leasekeeper.cli_commands import console, fail, get_service
from leasekeeper.core.exceptions import LeaseError


@click.group()
def templates():
    """Manage master templates and working drafts."""
    pass


@templates.command("list")
@click.option("--working", is_flag=True, help="List working drafts instead of templates")
@click.pass_context
def list_templates(ctx, working: bool):
    """List master templates (or working drafts)."""
    try:
        service = get_service(ctx)
        names = service.list_working_drafts() if working else service.list_templates()
    except LeaseError as e:
        fail(ctx, "Template Error", e)

    label = "working drafts" if working else "templates"
    if not names:
        console.print(f"[yellow]No {label} found[/yellow]")
        return
    for name in sorted(names):
        console.print(escape(name))


@templates.command("copy")
@click.argument("template_name")
@click.argument("working_name")
@click.pass_context
def copy_template(ctx, template_name: str, working_name: str):
    """Copy TEMPLATE_NAME into the working tier as WORKING_NAME."""
    try:
        get_service(ctx).copy_template_to_working(template_name, working_name)
    except LeaseError as e:
        fail(ctx, "Template Error", e)
    console.print(
        f"[green]✅ Copied '{escape(template_name)}' "
        f"to working draft '{escape(working_name)}'[/green]"
    )


@templates.command("seed")
@click.pass_context
def seed_templates(ctx):
    """Write the stock agricultural lease templates into an empty templates tier."""
    try:
        seeded = get_service(ctx).seed_templates_if_needed()
    except LeaseError as e:
        fail(ctx, "Seed Error", e)

    if seeded:
        console.print(f"[green]✅ Seeded {len(seeded)} lease templates[/green]")
        for name in seeded:
            console.print(f"  • {escape(name)}")
    else:
        console.print("[yellow]Templates already exist; nothing seeded[/yellow]")
