"""Tag commands."""

import click
from pocketpilot.cli.error_handling import handle_domain_error
from pocketpilot.domain.tags import DEFAULT_TAG_COLOR, TagService


@click.group()
def tag_group():
    """Manage tags."""
    pass


def _resolve_tag(ctx, service: TagService, tag: str) -> int:
    if tag.isdigit():
        return int(tag)
    tag_obj = service.db.get_tag_by_name(ctx.obj["user_id"], tag)
    if tag_obj is None:
        click.echo(f"Error: Tag '{tag}' not found", err=True)
        ctx.exit(1)
    return tag_obj.id


@tag_group.command("create")
@click.argument("name")
@click.option("--color", default=DEFAULT_TAG_COLOR, show_default=True, help="Colour as #rrggbb")
@click.pass_context
def create_tag(ctx, name: str, color: str):
    """Create a tag."""
    try:
        tag_id = TagService(ctx.obj["db"]).create_tag(ctx.obj["user_id"], name, color)
        click.echo(f"Created tag '{name}' (ID: {tag_id})")
    except ValueError as e:
        handle_domain_error(ctx, e)


@tag_group.command("list")
@click.pass_context
def list_tags(ctx):
    """List tags with how many transactions carry each."""
    tags = TagService(ctx.obj["db"]).list_tags(ctx.obj["user_id"])
    if not tags:
        click.echo("No tags found.")
        return
    for tag, count in tags:
        click.echo(f"ID: {tag.id:3d} | {tag.name:20s} | {tag.color} | {count} transaction(s)")


@tag_group.command("apply")
@click.argument("tag")
@click.argument("transaction_ids", nargs=-1, type=int, required=True)
@click.pass_context
def apply_tag(ctx, tag: str, transaction_ids: tuple[int, ...]):
    """Tag one or more transactions."""
    service = TagService(ctx.obj["db"])
    tag_id = _resolve_tag(ctx, service, tag)
    try:
        added = service.tag_transactions(ctx.obj["user_id"], tag_id, list(transaction_ids))
        click.echo(f"Tagged {added} transaction(s)")
    except ValueError as e:
        handle_domain_error(ctx, e)


@tag_group.command("remove")
@click.argument("tag")
@click.argument("transaction_id", type=int)
@click.pass_context
def remove_tag(ctx, tag: str, transaction_id: int):
    """Remove a tag from a transaction."""
    service = TagService(ctx.obj["db"])
    tag_id = _resolve_tag(ctx, service, tag)
    try:
        service.untag_transaction(ctx.obj["user_id"], tag_id, transaction_id)
        click.echo(f"Removed tag from transaction {transaction_id}")
    except ValueError as e:
        handle_domain_error(ctx, e)


@tag_group.command("delete")
@click.argument("tag")
@click.pass_context
def delete_tag(ctx, tag: str):
    """Delete a tag."""
    service = TagService(ctx.obj["db"])
    tag_id = _resolve_tag(ctx, service, tag)
    try:
        service.delete_tag(ctx.obj["user_id"], tag_id)
        click.echo(f"Deleted tag {tag_id}")
    except ValueError as e:
        handle_domain_error(ctx, e)


def register_commands(cli):
    """Register tag commands with main CLI."""
    cli.add_command(tag_group, name="tag")
