"""Recurring transaction commands."""

import click
from pocketpilot.cli.error_handling import handle_domain_error
from pocketpilot.cli.resolution import (
    parse_amount_or_exit,
    parse_date_or_exit,
    resolve_account_or_exit,
    resolve_category_or_exit,
)
from pocketpilot.domain.entities import FREQUENCIES
from pocketpilot.domain.recurring import RecurringTransactionService
from pocketpilot.utils.amounts import format_currency


@click.group()
def recurring_group():
    """Manage recurring transactions."""
    pass


@recurring_group.command("create")
@click.argument("description")
@click.argument("amount")
@click.option("--account", required=True, help="Account name or ID")
@click.option("--type", "kind", type=click.Choice(["expense", "income"]), default="expense", show_default=True)
@click.option("--frequency", type=click.Choice(FREQUENCIES), default="monthly", show_default=True)
@click.option("--start", "start_date", default="today", show_default=True, help="First occurrence date")
@click.option("--category", help="Category name or ID")
@click.option("--notes", help="Notes")
@click.pass_context
def create_recurring(
    ctx,
    description: str,
    amount: str,
    account: str,
    kind: str,
    frequency: str,
    start_date: str,
    category: str | None,
    notes: str | None,
):
    """Create a recurring transaction.

    Examples:
        pocketpilot recurring create Rent 1500 --account Chequing --start 2024-02-01
        pocketpilot recurring create Paycheque 2100 --type income --frequency biweekly --account 1
    """
    account_id = resolve_account_or_exit(ctx, account)
    category_id = resolve_category_or_exit(ctx, category) if category else None
    value = parse_amount_or_exit(ctx, amount)
    first = parse_date_or_exit(ctx, start_date, "start date")

    try:
        recurring_id = RecurringTransactionService(ctx.obj["db"]).create_recurring(
            ctx.obj["user_id"],
            account_id=account_id,
            description=description,
            amount=value,
            kind=kind,
            frequency=frequency,
            next_occurrence_date=first,
            category_id=category_id,
            notes=notes,
        )
        click.echo(f"Created recurring transaction '{description}' (ID: {recurring_id})")
    except ValueError as e:
        handle_domain_error(ctx, e)


@recurring_group.command("list")
@click.option("--active", "active_only", is_flag=True, help="Hide paused templates")
@click.pass_context
def list_recurring(ctx, active_only: bool):
    """List recurring transactions and when they are next due."""
    items = RecurringTransactionService(ctx.obj["db"]).list_recurring(ctx.obj["user_id"], active_only=active_only)
    if not items:
        click.echo("No recurring transactions found.")
        return

    click.echo("\nRecurring transactions:")
    click.echo("-" * 100)
    for template, days in items:
        if days < 0:
            due = f"overdue by {-days} day(s)"
        elif days == 0:
            due = "due today"
        else:
            due = f"in {days} day(s)"
        state = "" if template.is_active else " (paused)"
        click.echo(
            f"ID: {template.id:3d} | {template.description:25s} | "
            f"{format_currency(template.amount, signed=True):>12s} | {template.frequency:9s} | "
            f"next {template.next_occurrence_date} ({due}){state}"
        )


def _set_active(ctx, recurring_id: int, active: bool) -> None:
    try:
        RecurringTransactionService(ctx.obj["db"]).set_active(ctx.obj["user_id"], recurring_id, active)
        click.echo(f"{'Resumed' if active else 'Paused'} recurring transaction {recurring_id}")
    except ValueError as e:
        handle_domain_error(ctx, e)


@recurring_group.command("pause")
@click.argument("recurring_id", type=int)
@click.pass_context
def pause_recurring(ctx, recurring_id: int):
    """Stop generating a recurring transaction."""
    _set_active(ctx, recurring_id, False)


@recurring_group.command("resume")
@click.argument("recurring_id", type=int)
@click.pass_context
def resume_recurring(ctx, recurring_id: int):
    """Resume a paused recurring transaction."""
    _set_active(ctx, recurring_id, True)


@recurring_group.command("delete")
@click.argument("recurring_id", type=int)
@click.pass_context
def delete_recurring(ctx, recurring_id: int):
    """Delete a recurring transaction; generated transactions are kept."""
    try:
        RecurringTransactionService(ctx.obj["db"]).delete_recurring(ctx.obj["user_id"], recurring_id)
        click.echo(f"Deleted recurring transaction {recurring_id}")
    except ValueError as e:
        handle_domain_error(ctx, e)


@recurring_group.command("generate")
@click.option("--date", "as_of", help="Generate as if today were this date")
@click.pass_context
def generate(ctx, as_of: str | None):
    """Create the transactions of every due recurring template."""
    today = parse_date_or_exit(ctx, as_of) if as_of else None
    result = RecurringTransactionService(ctx.obj["db"]).generate_due(ctx.obj["user_id"], today=today)

    for txn in result.created:
        click.echo(
            f"  {txn.date} | {txn.description:25s} | {format_currency(txn.amount, signed=True):>12s} | "
            f"next {txn.next_occurrence}"
        )
    click.echo(result.message)
    for error in result.errors:
        click.echo(f"  {error.description}: {error.error}", err=True)


def register_commands(cli):
    """Register recurring commands with main CLI."""
    cli.add_command(recurring_group, name="recurring")
