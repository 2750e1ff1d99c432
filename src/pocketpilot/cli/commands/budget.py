"""Budget commands."""

import click
from pocketpilot.cli.error_handling import handle_domain_error
from pocketpilot.cli.resolution import (
    parse_amount_or_exit,
    parse_date_or_exit,
    resolve_category_or_exit,
)
from pocketpilot.domain.budgets import DEFAULT_ALERT_THRESHOLD, BudgetService
from pocketpilot.utils.amounts import format_currency


@click.group()
def budget_group():
    """Manage monthly budgets."""
    pass


@budget_group.command("set")
@click.argument("category")
@click.argument("amount")
@click.option("--rollover/--no-rollover", default=None, help="Carry unspent money into the next month")
@click.option(
    "--alert",
    "alert_threshold",
    type=click.IntRange(0, 100),
    help=f"Warn when this percentage is spent (default {DEFAULT_ALERT_THRESHOLD})",
)
@click.option("--notes", help="Notes")
@click.pass_context
def set_budget(
    ctx, category: str, amount: str, rollover: bool | None, alert_threshold: int | None, notes: str | None
):
    """Create or update the monthly budget of an expense category.

    Examples:
        pocketpilot budget set Groceries 600
        pocketpilot budget set "Dining Out" 150 --rollover --alert 80
    """
    user_id = ctx.obj["user_id"]
    category_id = resolve_category_or_exit(ctx, category)
    budget_amount = parse_amount_or_exit(ctx, amount)
    service = BudgetService(ctx.obj["db"])

    try:
        existing = service.db.get_budget_by_category(user_id, category_id)
        if existing is None:
            budget_id = service.create_budget(
                user_id,
                category_id=category_id,
                amount=budget_amount,
                rollover=bool(rollover),
                alert_threshold=DEFAULT_ALERT_THRESHOLD if alert_threshold is None else alert_threshold,
                notes=notes,
            )
            click.echo(f"Created budget {budget_id}: {format_currency(budget_amount)} for '{category}'")
        else:
            service.update_budget(
                user_id,
                existing.id,
                amount=budget_amount,
                rollover=rollover,
                alert_threshold=alert_threshold,
                notes=notes,
            )
            click.echo(f"Updated budget {existing.id}: {format_currency(budget_amount)} for '{category}'")
    except ValueError as e:
        handle_domain_error(ctx, e)


@budget_group.command("list")
@click.option("--month", help="Any date in the month to report (default: this month)")
@click.pass_context
def list_budgets(ctx, month: str | None):
    """Show budgets with spending for the month."""
    month_date = parse_date_or_exit(ctx, month, "month") if month else None
    budgets = BudgetService(ctx.obj["db"]).list_budgets(ctx.obj["user_id"], month=month_date)
    if not budgets:
        click.echo("No budgets found.")
        return

    click.echo("\nBudgets:")
    click.echo("-" * 100)
    click.echo(
        f"{'ID':>4s} | {'Category':20s} | {'Budget':>12s} | {'Spent':>12s} | {'Remaining':>12s} | {'Used':>6s} | Status"
    )
    click.echo("-" * 100)
    for item in budgets:
        click.echo(
            f"{item.budget.id:4d} | {item.category_name:20s} | {format_currency(item.effective_budget):>12s} | "
            f"{format_currency(item.spent):>12s} | {format_currency(item.remaining, signed=True):>12s} | "
            f"{item.percentage:5.1f}% | {item.status}"
        )
        if item.rollover_amount:
            click.echo(f"       includes {format_currency(item.rollover_amount)} rolled over")


@budget_group.command("delete")
@click.argument("budget_id", type=int)
@click.pass_context
def delete_budget(ctx, budget_id: int):
    """Delete a budget."""
    try:
        BudgetService(ctx.obj["db"]).delete_budget(ctx.obj["user_id"], budget_id)
        click.echo(f"Deleted budget {budget_id}")
    except ValueError as e:
        handle_domain_error(ctx, e)


def register_commands(cli):
    """Register budget commands with main CLI."""
    cli.add_command(budget_group, name="budget")
