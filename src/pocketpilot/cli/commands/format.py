"""CSV format management commands."""

import click
from pocketpilot.cli.error_handling import handle_domain_error
from pocketpilot.cli.resolution import resolve_account_or_exit
from pocketpilot.domain.csv_format import MAPPABLE_FIELDS, CSVFormatService
from pocketpilot.utils.dates import DATE_FORMATS


@click.group()
def format_group():
    """Manage CSV import formats."""
    pass


@format_group.command("create")
@click.argument("name")
@click.option("--account", required=True, help="Account name or ID")
@click.option(
    "--debit-credit-format",
    is_flag=True,
    default=False,
    help="Use separate debit and credit columns instead of a single amount column",
)
@click.option(
    "--date-format",
    type=click.Choice(list(DATE_FORMATS)),
    help="Date layout of the file (auto-detected if omitted)",
)
@click.pass_context
def create_format(ctx, name: str, account: str, debit_credit_format: bool, date_format: str | None):
    """Create a new CSV format."""
    account_id = resolve_account_or_exit(ctx, account)
    service = CSVFormatService(ctx.obj["db"])

    try:
        format_id = service.create_format(
            ctx.obj["user_id"],
            name=name,
            account_id=account_id,
            is_debit_credit_format=debit_credit_format,
            date_format=date_format,
        )
        click.echo(f"Created CSV format '{name}' (ID: {format_id})")
        if debit_credit_format:
            click.echo("Debit/Credit format enabled")
        click.echo("Use 'format map' to add column mappings.")
    except ValueError as e:
        handle_domain_error(ctx, e)


@format_group.command("map")
@click.argument("format_name")
@click.argument("csv_column")
@click.argument("db_field", type=click.Choice(sorted(MAPPABLE_FIELDS)))
@click.option("--required", is_flag=True, help="Mark this mapping as required")
@click.pass_context
def map_column(ctx, format_name: str, csv_column: str, db_field: str, required: bool):
    """Map a CSV column to a transaction field."""
    service = CSVFormatService(ctx.obj["db"])

    fmt = service.get_format_by_name(ctx.obj["user_id"], format_name)
    if fmt is None:
        click.echo(f"Error: CSV format '{format_name}' not found", err=True)
        ctx.exit(1)

    try:
        mapping_id = service.add_mapping(
            ctx.obj["user_id"],
            fmt.id,
            csv_column_name=csv_column,
            db_field_name=db_field,
            is_required=required,
        )
        click.echo(f"Mapped CSV column '{csv_column}' to '{db_field}' (ID: {mapping_id})")
    except ValueError as e:
        handle_domain_error(ctx, e)


@format_group.command("list")
@click.option("--account", help="Filter by account name or ID")
@click.pass_context
def list_formats(ctx, account: str | None):
    """List CSV formats."""
    service = CSVFormatService(ctx.obj["db"])
    account_id = resolve_account_or_exit(ctx, account) if account else None

    formats = service.list_formats(ctx.obj["user_id"], account_id=account_id)
    if not formats:
        click.echo("No CSV formats found.")
        return

    click.echo("\nCSV Formats:")
    click.echo("-" * 60)
    for fmt in formats:
        is_valid, missing = service.validate_format(fmt)
        status = "✓" if is_valid else "✗"
        click.echo(f"{status} {fmt.name} (ID: {fmt.id}, Account: {fmt.account_id})")
        if fmt.is_debit_credit_format:
            click.echo("  Type: Debit/Credit Format")
        if fmt.date_format:
            click.echo(f"  Dates: {fmt.date_format}")
        if not is_valid:
            click.echo(f"  Missing required fields: {', '.join(missing)}")
        for m in service.get_mappings(fmt.id):
            req = " (required)" if m.is_required else ""
            click.echo(f"    {m.csv_column_name} -> {m.db_field_name}{req}")


@format_group.command("delete")
@click.argument("format_name")
@click.pass_context
def delete_format(ctx, format_name: str):
    """Delete a CSV format."""
    service = CSVFormatService(ctx.obj["db"])
    fmt = service.get_format_by_name(ctx.obj["user_id"], format_name)
    if fmt is None:
        click.echo(f"Error: CSV format '{format_name}' not found", err=True)
        ctx.exit(1)
    try:
        service.delete_format(ctx.obj["user_id"], fmt.id)
        click.echo(f"Deleted CSV format '{format_name}'")
    except ValueError as e:
        handle_domain_error(ctx, e)


def register_commands(cli):
    """Register format commands with main CLI."""
    cli.add_command(format_group, name="format")
