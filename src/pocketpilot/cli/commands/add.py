"""Add transaction command."""

import click
from pocketpilot.cli.error_handling import handle_domain_error
from pocketpilot.cli.resolution import (
    parse_amount_or_exit,
    parse_date_or_exit,
    resolve_account_or_exit,
    resolve_category_or_exit,
)
from pocketpilot.domain.transaction import TransactionService
from pocketpilot.utils.amounts import format_currency, to_signed_amount


@click.command("add")
@click.option("--account", required=True, help="Account name or ID")
@click.option(
    "--date",
    default="today",
    show_default=True,
    help="Transaction date (YYYY-MM-DD or relative like 'today', 'yesterday')",
)
@click.option("--amount", required=True, help="Transaction amount (e.g., 123.45 or -123.45)")
@click.option(
    "--type",
    "kind",
    type=click.Choice(["expense", "income"]),
    help="Treat --amount as a magnitude and apply this sign",
)
@click.option("--description", help="Transaction description")
@click.option("--category", help="Category name or ID")
@click.option("--notes", help="Notes")
@click.pass_context
def add_transaction(
    ctx,
    account: str,
    date: str,
    amount: str,
    kind: str | None,
    description: str | None,
    category: str | None,
    notes: str | None,
):
    """Add a transaction manually.

    Negative amounts are expenses, positive amounts are income.

    Examples:
        pocketpilot add --account Chequing --amount -50.00 --description "Grocery store"
        pocketpilot add --account 1 --date 2024-01-15 --amount 1000 --type income --category Salary
    """
    service = TransactionService(ctx.obj["db"])

    account_id = resolve_account_or_exit(ctx, account)
    txn_date = parse_date_or_exit(ctx, date)
    txn_amount = parse_amount_or_exit(ctx, amount)
    if kind is not None:
        txn_amount = to_signed_amount(txn_amount, kind)
    category_id = resolve_category_or_exit(ctx, category) if category else None

    try:
        transaction_id = service.create_transaction(
            ctx.obj["user_id"],
            account_id=account_id,
            date=txn_date,
            amount=txn_amount,
            description=description,
            category_id=category_id,
            notes=notes,
        )
        click.echo(f"Created transaction {transaction_id}")
        click.echo(f"  Date: {txn_date}")
        click.echo(f"  Amount: {format_currency(txn_amount, signed=True)}")
        if description:
            click.echo(f"  Description: {description}")
        if category:
            click.echo(f"  Category: {category}")
    except ValueError as e:
        handle_domain_error(ctx, e)


def register_commands(cli):
    """Register add command with main CLI."""
    cli.add_command(add_transaction)
