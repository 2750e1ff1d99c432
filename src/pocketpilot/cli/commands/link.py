"""Transaction link commands."""

import click
from pocketpilot.cli.error_handling import handle_domain_error
from pocketpilot.domain.entities import LINK_TYPES
from pocketpilot.domain.links import TransactionLinkService


@click.group()
def link_group():
    """Link related transactions (refunds, chargebacks, ...)."""
    pass


@link_group.command("create")
@click.argument("source_id", type=int)
@click.argument("target_id", type=int)
@click.option("--type", "link_type", type=click.Choice(LINK_TYPES), default="related", show_default=True)
@click.option("--notes", help="Notes")
@click.pass_context
def create_link(ctx, source_id: int, target_id: int, link_type: str, notes: str | None):
    """Link transaction SOURCE_ID to TARGET_ID.

    Example:
        pocketpilot link create 42 17 --type refund
    """
    try:
        link_id = TransactionLinkService(ctx.obj["db"]).create_link(
            ctx.obj["user_id"], source_id, target_id, link_type, notes
        )
        click.echo(f"Created {link_type} link {link_id}: {source_id} -> {target_id}")
    except ValueError as e:
        handle_domain_error(ctx, e)


@link_group.command("list")
@click.option("--transaction", "transaction_id", type=int, help="Only links involving this transaction")
@click.pass_context
def list_links(ctx, transaction_id: int | None):
    """List transaction links."""
    links = TransactionLinkService(ctx.obj["db"]).list_links(ctx.obj["user_id"], transaction_id)
    if not links:
        click.echo("No links found.")
        return
    for link in links:
        notes = f" | {link.notes}" if link.notes else ""
        click.echo(
            f"ID: {link.id:3d} | {link.source_transaction_id:5d} -> {link.target_transaction_id:5d} | "
            f"{link.link_type}{notes}"
        )


@link_group.command("delete")
@click.argument("link_id", type=int)
@click.pass_context
def delete_link(ctx, link_id: int):
    """Delete a link."""
    try:
        TransactionLinkService(ctx.obj["db"]).delete_link(ctx.obj["user_id"], link_id)
        click.echo(f"Deleted link {link_id}")
    except ValueError as e:
        handle_domain_error(ctx, e)


def register_commands(cli):
    """Register link commands with main CLI."""
    cli.add_command(link_group, name="link")
