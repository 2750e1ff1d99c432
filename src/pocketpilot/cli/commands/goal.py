"""Savings goal commands."""

import click
from pocketpilot.cli.error_handling import handle_domain_error
from pocketpilot.cli.resolution import parse_amount_or_exit, parse_date_or_exit
from pocketpilot.domain.entities import GOAL_CATEGORIES, GoalDetails
from pocketpilot.domain.goals import GoalService
from pocketpilot.utils.amounts import format_currency


@click.group()
def goal_group():
    """Manage savings goals."""
    pass


def _echo_goal(details: GoalDetails) -> None:
    goal = details.goal
    status = "completed" if goal.is_completed else ("overdue" if details.is_overdue else "open")
    click.echo(
        f"ID: {goal.id:3d} | {goal.name:20s} | {format_currency(goal.current_amount):>12s} of "
        f"{format_currency(goal.target_amount):>12s} | {details.percentage:5.1f}% | {status}"
    )


@goal_group.command("create")
@click.argument("name")
@click.argument("target_amount")
@click.option("--current", "current_amount", default="0", help="Amount already saved")
@click.option("--target-date", help="Date the goal should be reached by")
@click.option("--category", type=click.Choice(GOAL_CATEGORIES), help="Goal category")
@click.option("--milestones", is_flag=True, help="Add 25/50/75% milestones")
@click.pass_context
def create_goal(
    ctx,
    name: str,
    target_amount: str,
    current_amount: str,
    target_date: str | None,
    category: str | None,
    milestones: bool,
):
    """Create a savings goal.

    Examples:
        pocketpilot goal create "Emergency fund" 10000 --category emergency
        pocketpilot goal create "Trip" 3000 --target-date 2025-06-01 --milestones
    """
    target = parse_amount_or_exit(ctx, target_amount)
    current = parse_amount_or_exit(ctx, current_amount)
    deadline = parse_date_or_exit(ctx, target_date, "target date") if target_date else None
    try:
        goal_id = GoalService(ctx.obj["db"]).create_goal(
            ctx.obj["user_id"],
            name=name,
            target_amount=target,
            current_amount=current,
            target_date=deadline,
            category=category,
            default_milestones=milestones,
        )
        click.echo(f"Created goal '{name}' (ID: {goal_id})")
    except ValueError as e:
        handle_domain_error(ctx, e)


@goal_group.command("list")
@click.pass_context
def list_goals(ctx):
    """List goals with their progress."""
    goals = GoalService(ctx.obj["db"]).list_goals(ctx.obj["user_id"])
    if not goals:
        click.echo("No goals found.")
        return

    click.echo("\nGoals:")
    click.echo("-" * 90)
    for details in goals:
        _echo_goal(details)


@goal_group.command("show")
@click.argument("goal_id", type=int)
@click.pass_context
def show_goal(ctx, goal_id: int):
    """Show a goal in detail."""
    try:
        details = GoalService(ctx.obj["db"]).get_goal_details(ctx.obj["user_id"], goal_id)
    except ValueError as e:
        handle_domain_error(ctx, e)
        return

    goal = details.goal
    _echo_goal(details)
    click.echo(f"  Remaining: {format_currency(details.remaining)}")
    if goal.target_date:
        click.echo(f"  Target date: {goal.target_date}")
    if details.monthly_required is not None:
        click.echo(f"  Needed per month: {format_currency(details.monthly_required)}")
    if goal.completed_at:
        click.echo(f"  Completed on: {goal.completed_at}")
    if goal.is_shared:
        click.echo(f"  Share token: {goal.share_token}")
    for progress in details.milestones:
        mark = "x" if progress.is_reached else " "
        click.echo(
            f"  [{mark}] {progress.milestone.name} ({progress.milestone.target_percentage}% = "
            f"{format_currency(progress.target_amount)})"
        )


@goal_group.command("contribute")
@click.argument("goal_id", type=int)
@click.argument("amount")
@click.option("--date", "contribution_date", help="Contribution date (default: today)")
@click.option("--note", help="Note")
@click.pass_context
def contribute(ctx, goal_id: int, amount: str, contribution_date: str | None, note: str | None):
    """Add money to a goal."""
    value = parse_amount_or_exit(ctx, amount)
    when = parse_date_or_exit(ctx, contribution_date) if contribution_date else None
    service = GoalService(ctx.obj["db"])
    try:
        contribution_id = service.add_contribution(
            ctx.obj["user_id"], goal_id, amount=value, contribution_date=when, note=note
        )
        click.echo(f"Added contribution {contribution_id} of {format_currency(value)}")
        details = service.get_goal_details(ctx.obj["user_id"], goal_id)
        if details.goal.is_completed:
            click.echo(f"Goal '{details.goal.name}' reached!")
    except ValueError as e:
        handle_domain_error(ctx, e)


@goal_group.command("contributions")
@click.argument("goal_id", type=int, required=False)
@click.pass_context
def list_contributions(ctx, goal_id: int | None):
    """List contributions, optionally for one goal."""
    try:
        contributions = GoalService(ctx.obj["db"]).list_contributions(ctx.obj["user_id"], goal_id)
    except ValueError as e:
        handle_domain_error(ctx, e)
        return

    if not contributions:
        click.echo("No contributions found.")
        return
    for c in contributions:
        click.echo(f"ID: {c.id:3d} | goal {c.goal_id:3d} | {c.date} | {format_currency(c.amount):>12s} | {c.note or ''}")


@goal_group.command("uncontribute")
@click.argument("contribution_id", type=int)
@click.pass_context
def delete_contribution(ctx, contribution_id: int):
    """Remove a contribution and take its amount off the goal."""
    try:
        GoalService(ctx.obj["db"]).delete_contribution(ctx.obj["user_id"], contribution_id)
        click.echo(f"Deleted contribution {contribution_id}")
    except ValueError as e:
        handle_domain_error(ctx, e)


@goal_group.command("milestone")
@click.argument("goal_id", type=int)
@click.argument("name")
@click.argument("percentage", type=click.IntRange(1, 100))
@click.pass_context
def add_milestone(ctx, goal_id: int, name: str, percentage: int):
    """Add a milestone at PERCENTAGE of the goal's target."""
    try:
        milestone_id = GoalService(ctx.obj["db"]).add_milestone(ctx.obj["user_id"], goal_id, name, percentage)
        click.echo(f"Added milestone '{name}' (ID: {milestone_id})")
    except ValueError as e:
        handle_domain_error(ctx, e)


@goal_group.command("share")
@click.argument("goal_id", type=int)
@click.option("--off", is_flag=True, help="Stop sharing")
@click.pass_context
def share_goal(ctx, goal_id: int, off: bool):
    """Create (or revoke) a public read-only link token for a goal."""
    try:
        token = GoalService(ctx.obj["db"]).set_sharing(ctx.obj["user_id"], goal_id, enabled=not off)
    except ValueError as e:
        handle_domain_error(ctx, e)
        return
    if token is None:
        click.echo(f"Goal {goal_id} is no longer shared")
    else:
        click.echo(f"Share token: {token}")
        click.echo(f"Public URL path: /api/goals/share/{token}")


@goal_group.command("delete")
@click.argument("goal_id", type=int)
@click.pass_context
def delete_goal(ctx, goal_id: int):
    """Delete a goal with its contributions and milestones."""
    try:
        GoalService(ctx.obj["db"]).delete_goal(ctx.obj["user_id"], goal_id)
        click.echo(f"Deleted goal {goal_id}")
    except ValueError as e:
        handle_domain_error(ctx, e)


def register_commands(cli):
    """Register goal commands with main CLI."""
    cli.add_command(goal_group, name="goal")
