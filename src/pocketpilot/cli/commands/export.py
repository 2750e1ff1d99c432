"""Transaction export command."""

from pathlib import Path

import click
from pocketpilot.cli.error_handling import handle_domain_error
from pocketpilot.cli.resolution import parse_date_or_exit
from pocketpilot.domain.csv_export import ExportService


@click.command("export")
@click.option("--format", "fmt", type=click.Choice(["csv", "json"]), default="csv", show_default=True)
@click.option("--start-date", help="Only export transactions on or after this date")
@click.option("--end-date", help="Only export transactions on or before this date")
@click.option(
    "--output",
    "-o",
    type=click.Path(dir_okay=False),
    help="File to write (default: pocket-pilot-transactions-<date>.<format>); '-' for stdout",
)
@click.pass_context
def export_transactions(ctx, fmt: str, start_date: str | None, end_date: str | None, output: str | None):
    """Export transactions as CSV or JSON."""
    start = parse_date_or_exit(ctx, start_date, "start date") if start_date else None
    end = parse_date_or_exit(ctx, end_date, "end date") if end_date else None

    try:
        filename, _, body = ExportService(ctx.obj["db"]).export_transactions(
            ctx.obj["user_id"], fmt=fmt, start_date=start, end_date=end
        )
    except ValueError as e:
        handle_domain_error(ctx, e)
        return

    if output == "-":
        click.echo(body, nl=False)
        return
    path = Path(output or filename)
    path.write_text(body, encoding="utf-8")
    click.echo(f"Exported transactions to {path}")


def register_commands(cli):
    """Register export command with main CLI."""
    cli.add_command(export_transactions)
