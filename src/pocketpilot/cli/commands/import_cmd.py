"""CSV import command."""

import click
from pocketpilot.domain.csv_import import CSVImportService
from pocketpilot.utils.amounts import format_currency


@click.command("import")
@click.argument("csv_file", type=click.Path(exists=True))
@click.option("--format", required=True, help="CSV format name")
@click.option("--preview", is_flag=True, help="Show what would be imported without saving")
@click.pass_context
def import_csv(ctx, csv_file: str, format: str, preview: bool):
    """Import transactions from a CSV file."""
    service = CSVImportService(ctx.obj["db"])

    try:
        result = service.import_csv(ctx.obj["user_id"], csv_file, format, preview=preview)
    except (ValueError, FileNotFoundError) as e:
        click.echo(f"Error: {e}", err=True)
        ctx.exit(1)

    if preview:
        click.echo("\nPreview:")
        for row in result["transactions"]:
            marker = " (duplicate)" if row["is_duplicate"] else ""
            click.echo(
                f"  {row['date']} | {format_currency(row['amount'], signed=True):>12s} | "
                f"{row['description'] or ''}{marker}"
            )
        click.echo(f"  Would import: {result['valid']} transactions")
    else:
        click.echo("\nImport complete:")
        click.echo(f"  Imported: {result['imported']} transactions")
        click.echo(f"  Skipped: {result['skipped']}")
    click.echo(f"  Duplicates: {result['duplicates']}")
    if result["errors"]:
        click.echo(f"  Errors: {len(result['errors'])}")
        for error in result["errors"]:
            click.echo(f"    {error}", err=True)


def register_commands(cli):
    """Register import command with main CLI."""
    cli.add_command(import_csv)
