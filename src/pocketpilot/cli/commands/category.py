"""Category management commands."""

import click
from pocketpilot.cli.error_handling import handle_domain_error
from pocketpilot.cli.resolution import resolve_category_or_exit
from pocketpilot.domain.category import CategoryService
from pocketpilot.domain.entities import CATEGORY_TYPES


@click.group()
def category_group():
    """Manage categories."""
    pass


@category_group.command("create")
@click.argument("name")
@click.option(
    "--type",
    "category_type",
    type=click.Choice(CATEGORY_TYPES),
    default="expense",
    show_default=True,
    help="Category type",
)
@click.option("--tax-tag", help="Tax tag; marks the category as tax related")
@click.pass_context
def create_category(ctx, name: str, category_type: str, tax_tag: str | None):
    """Create a new category.

    Examples:
        pocketpilot category create "Groceries"
        pocketpilot category create "Salary" --type income
        pocketpilot category create "Donations" --tax-tag charitable
    """
    service = CategoryService(ctx.obj["db"])
    try:
        category_id = service.create_category(
            ctx.obj["user_id"],
            name=name,
            category_type=category_type,
            is_tax_related=tax_tag is not None,
            tax_tag=tax_tag,
        )
        click.echo(f"Created category '{name}' (ID: {category_id})")
    except ValueError as e:
        handle_domain_error(ctx, e)


@category_group.command("list")
@click.option("--type", "category_type", type=click.Choice(CATEGORY_TYPES), help="Only show one type")
@click.option("--all", "show_all", is_flag=True, help="Include archived categories")
@click.pass_context
def list_categories(ctx, category_type: str | None, show_all: bool):
    """List categories."""
    service = CategoryService(ctx.obj["db"])
    categories = service.list_categories(
        ctx.obj["user_id"], include_archived=show_all, category_type=category_type
    )

    if not categories:
        click.echo("No categories found.")
        return

    click.echo("\nCategories:")
    click.echo("-" * 60)
    for cat in categories:
        flags = []
        if cat.is_archived:
            flags.append("archived")
        if cat.tax_tag:
            flags.append(f"tax: {cat.tax_tag}")
        suffix = f" ({', '.join(flags)})" if flags else ""
        click.echo(f"ID: {cat.id:3d} | {cat.name:25s} | {cat.category_type:8s}{suffix}")


@category_group.command("init")
@click.pass_context
def init_categories(ctx):
    """Create the default set of categories."""
    service = CategoryService(ctx.obj["db"])
    created = service.seed_defaults(ctx.obj["user_id"])
    if created:
        click.echo(f"Created {len(created)} default categories.")
    else:
        click.echo("Default categories already exist.")


@category_group.command("rename")
@click.argument("category")
@click.argument("new_name")
@click.pass_context
def rename_category(ctx, category: str, new_name: str):
    """Rename a category (by name or ID)."""
    service = CategoryService(ctx.obj["db"])
    category_id = resolve_category_or_exit(ctx, category)
    try:
        service.update_category(ctx.obj["user_id"], category_id, name=new_name)
        click.echo(f"Renamed category to '{new_name}'")
    except ValueError as e:
        handle_domain_error(ctx, e)


@category_group.command("archive")
@click.argument("category")
@click.option("--restore", is_flag=True, help="Unarchive the category instead")
@click.pass_context
def archive_category(ctx, category: str, restore: bool):
    """Archive a category, hiding it from listings and imports."""
    service = CategoryService(ctx.obj["db"])
    category_id = resolve_category_or_exit(ctx, category)
    try:
        service.archive_category(ctx.obj["user_id"], category_id, archived=not restore)
        click.echo(f"{'Restored' if restore else 'Archived'} category {category_id}")
    except ValueError as e:
        handle_domain_error(ctx, e)


@category_group.command("delete")
@click.argument("category_id", type=int)
@click.pass_context
def delete_category(ctx, category_id: int):
    """Delete an unused category.

    Categories still referenced by transactions, budgets, rules or recurring
    transactions cannot be deleted; archive them instead.
    """
    service = CategoryService(ctx.obj["db"])
    try:
        service.delete_category(ctx.obj["user_id"], category_id)
        click.echo(f"Deleted category {category_id}")
    except ValueError as e:
        handle_domain_error(ctx, e)


def register_commands(cli):
    """Register category commands with main CLI."""
    cli.add_command(category_group, name="category")
