"""Transaction management commands."""

import click
from pocketpilot.cli.error_handling import handle_domain_error
from pocketpilot.cli.resolution import (
    parse_amount_or_exit,
    parse_date_or_exit,
    resolve_account_or_exit,
    resolve_category_or_exit,
)
from pocketpilot.domain.account import AccountService
from pocketpilot.domain.category import CategoryService
from pocketpilot.domain.entities import SplitItem
from pocketpilot.domain.splits import SplitService
from pocketpilot.domain.transaction import TransactionService
from pocketpilot.utils.amounts import format_currency


@click.group()
def transaction_group():
    """Manage transactions."""
    pass


@transaction_group.command("list")
@click.option("--start-date", help="Start date (YYYY-MM-DD or relative like 'last month', 'this year')")
@click.option("--end-date", help="End date (YYYY-MM-DD or relative like 'today', 'this month')")
@click.option("--category", help="Category name or ID")
@click.option("--account", help="Account name or ID")
@click.option("--uncategorized", is_flag=True, help="Show only uncategorized transactions")
@click.option("--limit", type=int, help="Show at most this many transactions")
@click.option("--verbose", "-v", is_flag=True, help="Show notes, split and transfer details")
@click.pass_context
def list_transactions(
    ctx,
    start_date: str | None,
    end_date: str | None,
    category: str | None,
    account: str | None,
    uncategorized: bool,
    limit: int | None,
    verbose: bool,
):
    """View transactions with optional filters, newest first."""
    user_id = ctx.obj["user_id"]
    db = ctx.obj["db"]
    service = TransactionService(db)

    start = parse_date_or_exit(ctx, start_date, "start date") if start_date else None
    end = parse_date_or_exit(ctx, end_date, "end date") if end_date else None
    account_id = resolve_account_or_exit(ctx, account) if account else None
    category_id = resolve_category_or_exit(ctx, category) if category else None

    transactions = service.list_transactions(
        user_id,
        start_date=start,
        end_date=end,
        account_id=account_id,
        category_id=category_id,
        uncategorized_only=uncategorized,
        limit=limit,
    )
    if not transactions:
        click.echo("No transactions found.")
        return

    accounts = {acc.id: acc.name for acc in AccountService(db).list_accounts(user_id)}
    categories = {
        cat.id: cat.name for cat in CategoryService(db).list_categories(user_id, include_archived=True)
    }

    click.echo(f"\nFound {len(transactions)} transaction(s):")
    click.echo("-" * 110)
    click.echo(f"{'ID':>5s} | {'Date':10s} | {'Account':15s} | {'Amount':>12s} | {'Category':18s} | Description")
    click.echo("-" * 110)
    for txn in transactions:
        category_name = categories.get(txn.category_id, "Uncategorized") if txn.category_id else "Uncategorized"
        description = (txn.description or "")[:40]
        click.echo(
            f"{txn.id:5d} | {txn.date} | {accounts.get(txn.account_id, 'Unknown'):15s} | "
            f"{format_currency(txn.amount, signed=True):>12s} | {category_name:18s} | {description}"
        )
        if verbose:
            if txn.is_split_parent:
                click.echo(f"      split into group {txn.split_group_id}")
            if txn.split_parent_id is not None:
                click.echo(f"      part of split of transaction {txn.split_parent_id}")
            if txn.is_transfer:
                click.echo(f"      transfer, linked to transaction {txn.linked_transaction_id}")
            if txn.notes:
                click.echo(f"      notes: {txn.notes}")


@transaction_group.command("update")
@click.argument("transaction_id", type=int)
@click.option("--account", help="Account name or ID")
@click.option("--date", help="Transaction date (YYYY-MM-DD or relative like 'today', 'yesterday')")
@click.option("--amount", help="Transaction amount (e.g., 123.45 or -123.45)")
@click.option("--description", help="Transaction description")
@click.option("--category", help="Category name or ID, or empty string to clear")
@click.option("--notes", help="Notes")
@click.pass_context
def update_transaction(
    ctx,
    transaction_id: int,
    account: str | None,
    date: str | None,
    amount: str | None,
    description: str | None,
    category: str | None,
    notes: str | None,
) -> None:
    """Update a transaction.

    Updates only the fields that are provided. Use --category "" to clear the category.

    Examples:
        pocketpilot transaction update 1 --amount -75.00
        pocketpilot transaction update 1 --category Groceries
        pocketpilot transaction update 1 --category ""  # Clear category
    """
    service = TransactionService(ctx.obj["db"])

    account_id = resolve_account_or_exit(ctx, account) if account is not None else None
    txn_date = parse_date_or_exit(ctx, date) if date is not None else None
    txn_amount = parse_amount_or_exit(ctx, amount) if amount is not None else None
    clear_category = category == ""
    category_id = resolve_category_or_exit(ctx, category) if category else None

    try:
        service.update_transaction(
            ctx.obj["user_id"],
            transaction_id,
            account_id=account_id,
            date=txn_date,
            amount=txn_amount,
            description=description,
            category_id=category_id,
            clear_category=clear_category,
            notes=notes,
        )
        click.echo(f"Updated transaction {transaction_id}")
    except ValueError as e:
        handle_domain_error(ctx, e)


@transaction_group.command("delete")
@click.argument("transaction_id", type=int)
@click.pass_context
def delete_transaction(ctx, transaction_id: int) -> None:
    """Delete a transaction (and its split parts, if any)."""
    service = TransactionService(ctx.obj["db"])
    try:
        service.delete_transaction(ctx.obj["user_id"], transaction_id)
        click.echo(f"Deleted transaction {transaction_id}")
    except ValueError as e:
        handle_domain_error(ctx, e)


@transaction_group.command("bulk-categorize")
@click.argument("transaction_ids", type=int, nargs=-1, required=True)
@click.option("--category", help="Category name or ID")
@click.option("--clear", "clear_category", is_flag=True, help="Remove the category instead")
@click.pass_context
def bulk_categorize(ctx, transaction_ids: tuple[int, ...], category: str | None, clear_category: bool) -> None:
    """Set (or clear) the category of several transactions.

    Examples:
        pocketpilot transaction bulk-categorize 4 5 9 --category Groceries
        pocketpilot transaction bulk-categorize 4 5 --clear
    """
    if bool(category) == clear_category:
        click.echo("Error: Give exactly one of --category or --clear", err=True)
        ctx.exit(1)
    category_id = resolve_category_or_exit(ctx, category) if category else None
    service = TransactionService(ctx.obj["db"])
    try:
        updated = service.bulk_update_category(ctx.obj["user_id"], list(transaction_ids), category_id)
        click.echo(f"Updated {updated} transaction(s)")
    except ValueError as e:
        handle_domain_error(ctx, e)


@transaction_group.command("bulk-delete")
@click.argument("transaction_ids", type=int, nargs=-1, required=True)
@click.option("--yes", is_flag=True, help="Do not ask for confirmation")
@click.pass_context
def bulk_delete(ctx, transaction_ids: tuple[int, ...], yes: bool) -> None:
    """Delete several transactions. Transfers lose both legs."""
    if not yes and not click.confirm(f"Delete {len(set(transaction_ids))} transaction(s)?"):
        click.echo("Deletion cancelled.")
        return

    service = TransactionService(ctx.obj["db"])
    try:
        deleted = service.bulk_delete(ctx.obj["user_id"], list(transaction_ids))
        click.echo(f"Deleted {len(deleted)} transaction(s)")
    except ValueError as e:
        handle_domain_error(ctx, e)


def _parse_split_part(ctx, part: str) -> SplitItem:
    amount_text, _, rest = part.partition(":")
    category_text, _, description = rest.partition(":")
    amount = parse_amount_or_exit(ctx, amount_text)
    category_id = resolve_category_or_exit(ctx, category_text) if category_text else None
    return SplitItem(amount=amount, category_id=category_id, description=description or None)


@transaction_group.command("split")
@click.argument("transaction_id", type=int)
@click.option(
    "--part",
    "parts",
    multiple=True,
    required=True,
    help="AMOUNT[:CATEGORY[:DESCRIPTION]]; repeat for each part",
)
@click.pass_context
def split_transaction(ctx, transaction_id: int, parts: tuple[str, ...]) -> None:
    """Split a transaction across categories.

    Part amounts are positive and must add up to the transaction amount.

    Examples:
        pocketpilot transaction split 12 --part 60:Groceries --part "40:Household:Cleaning supplies"
    """
    splits = [_parse_split_part(ctx, part) for part in parts]
    service = SplitService(ctx.obj["db"])
    try:
        details = service.split_transaction(ctx.obj["user_id"], transaction_id, splits)
    except ValueError as e:
        handle_domain_error(ctx, e)
        return

    click.echo(f"Split transaction {transaction_id} into {len(details.children)} parts:")
    for child in details.children:
        click.echo(f"  {child.id:5d} | {format_currency(child.amount, signed=True):>12s} | {child.description or ''}")


@transaction_group.command("unsplit")
@click.argument("transaction_id", type=int)
@click.pass_context
def unsplit_transaction(ctx, transaction_id: int) -> None:
    """Undo a split, removing its parts."""
    service = SplitService(ctx.obj["db"])
    try:
        service.unsplit_transaction(ctx.obj["user_id"], transaction_id)
        click.echo(f"Removed split of transaction {transaction_id}")
    except ValueError as e:
        handle_domain_error(ctx, e)


@transaction_group.command("transfer")
@click.option("--from", "from_account", required=True, help="Source account name or ID")
@click.option("--to", "to_account", required=True, help="Destination account name or ID")
@click.option("--amount", required=True, help="Amount to move (positive)")
@click.option("--date", default="today", show_default=True, help="Transfer date")
@click.option("--description", help="Description (defaults to 'Transfer: A → B')")
@click.option("--notes", help="Notes")
@click.pass_context
def transfer(
    ctx,
    from_account: str,
    to_account: str,
    amount: str,
    date: str,
    description: str | None,
    notes: str | None,
) -> None:
    """Move money between two accounts."""
    service = TransactionService(ctx.obj["db"])
    from_id = resolve_account_or_exit(ctx, from_account)
    to_id = resolve_account_or_exit(ctx, to_account)
    txn_date = parse_date_or_exit(ctx, date)
    txn_amount = parse_amount_or_exit(ctx, amount)

    try:
        withdrawal_id, deposit_id = service.create_transfer(
            ctx.obj["user_id"],
            from_account_id=from_id,
            to_account_id=to_id,
            amount=txn_amount,
            date=txn_date,
            description=description,
            notes=notes,
        )
        click.echo(
            f"Transferred {format_currency(txn_amount)} "
            f"(transactions {withdrawal_id} and {deposit_id})"
        )
    except ValueError as e:
        handle_domain_error(ctx, e)


def register_commands(cli):
    """Register transaction commands with main CLI."""
    cli.add_command(transaction_group, name="transaction")
