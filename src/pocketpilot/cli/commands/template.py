"""Transaction template commands."""

import click
from pocketpilot.cli.error_handling import handle_domain_error
from pocketpilot.cli.resolution import (
    parse_amount_or_exit,
    parse_date_or_exit,
    resolve_account_or_exit,
    resolve_category_or_exit,
)
from pocketpilot.domain.templates import TEMPLATE_KINDS, TransactionTemplateService
from pocketpilot.utils.amounts import format_currency


@click.group()
def template_group():
    """Manage transaction templates."""
    pass


def _resolve_tags(ctx, tags: tuple[str, ...]) -> list[int]:
    db = ctx.obj["db"]
    tag_ids = []
    for tag in tags:
        if tag.isdigit():
            tag_ids.append(int(tag))
            continue
        tag_obj = db.get_tag_by_name(ctx.obj["user_id"], tag)
        if tag_obj is None:
            click.echo(f"Error: Tag '{tag}' not found", err=True)
            ctx.exit(1)
        tag_ids.append(tag_obj.id)
    return tag_ids


@template_group.command("create")
@click.argument("name")
@click.argument("amount")
@click.option("--account", required=True, help="Account name or ID")
@click.option("--type", "kind", type=click.Choice(TEMPLATE_KINDS), default="expense", show_default=True)
@click.option("--category", help="Category name or ID")
@click.option("--description", help="Description for created transactions")
@click.option("--favorite", is_flag=True, help="List this template first")
@click.option("--tag", "tags", multiple=True, help="Tag name or ID (repeatable)")
@click.pass_context
def create_template(
    ctx,
    name: str,
    amount: str,
    account: str,
    kind: str,
    category: str | None,
    description: str | None,
    favorite: bool,
    tags: tuple[str, ...],
):
    """Save a transaction as a reusable template.

    Examples:
        pocketpilot template create Coffee 4.50 --account Visa --category "Dining Out" --favorite
        pocketpilot template create "Side gig" 300 --type income --account 1 --tag work
    """
    account_id = resolve_account_or_exit(ctx, account)
    category_id = resolve_category_or_exit(ctx, category) if category else None
    value = parse_amount_or_exit(ctx, amount)
    tag_ids = _resolve_tags(ctx, tags)

    try:
        template_id = TransactionTemplateService(ctx.obj["db"]).create_template(
            ctx.obj["user_id"],
            name=name,
            account_id=account_id,
            amount=value,
            kind=kind,
            category_id=category_id,
            description=description,
            is_favorite=favorite,
            tag_ids=tag_ids,
        )
        click.echo(f"Created template '{name}' (ID: {template_id})")
    except ValueError as e:
        handle_domain_error(ctx, e)


@template_group.command("list")
@click.pass_context
def list_templates(ctx):
    """List templates, favorites first."""
    templates = TransactionTemplateService(ctx.obj["db"]).list_templates(ctx.obj["user_id"])
    if not templates:
        click.echo("No templates found.")
        return

    click.echo(f"{'ID':<5} {'Name':<25} {'Type':<8} {'Amount':>12} {'Used':>5}")
    click.echo("-" * 59)
    for template in templates:
        star = "*" if template.is_favorite else " "
        click.echo(
            f"{template.id:<5} {star}{template.name:<24} {template.kind:<8} "
            f"{format_currency(template.amount):>12} {template.usage_count:>5}"
        )


@template_group.command("apply")
@click.argument("template_id", type=int)
@click.option("--date", "on", default="today", show_default=True, help="Transaction date")
@click.option("--amount", help="Amount replacing the template's")
@click.option("--description", help="Description replacing the template's")
@click.pass_context
def apply_template(ctx, template_id: int, on: str, amount: str | None, description: str | None):
    """Create a transaction from a template.

    Examples:
        pocketpilot template apply 3
        pocketpilot template apply 3 --date yesterday --amount 5.25
    """
    when = parse_date_or_exit(ctx, on)
    value = parse_amount_or_exit(ctx, amount) if amount else None

    try:
        transaction_id = TransactionTemplateService(ctx.obj["db"]).apply_template(
            ctx.obj["user_id"],
            template_id,
            on=when,
            amount_override=value,
            description_override=description,
        )
        click.echo(f"Created transaction {transaction_id} from template {template_id}")
    except ValueError as e:
        handle_domain_error(ctx, e)


@template_group.command("delete")
@click.argument("template_id", type=int)
@click.pass_context
def delete_template(ctx, template_id: int):
    """Delete a template; transactions created from it are kept."""
    try:
        TransactionTemplateService(ctx.obj["db"]).delete_template(ctx.obj["user_id"], template_id)
        click.echo(f"Deleted template {template_id}")
    except ValueError as e:
        handle_domain_error(ctx, e)


def register_commands(cli):
    """Register template commands with main CLI."""
    cli.add_command(template_group, name="template")
