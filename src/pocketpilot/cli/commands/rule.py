"""Categorization rule commands."""

import click
from pocketpilot.cli.error_handling import handle_domain_error
from pocketpilot.cli.resolution import resolve_category_or_exit
from pocketpilot.domain.categorization import CategorizationRuleService
from pocketpilot.domain.category import CategoryService
from pocketpilot.domain.entities import RULE_TYPES
from pocketpilot.domain.rules import test_rule


@click.group()
def rule_group():
    """Manage categorization rules."""
    pass


@rule_group.command("create")
@click.argument("name")
@click.option("--type", "rule_type", type=click.Choice(RULE_TYPES), default="contains", show_default=True)
@click.option("--pattern", required=True, help="Text or regular expression to look for")
@click.option("--category", required=True, help="Category name or ID to assign")
@click.option("--case-sensitive", is_flag=True, help="Match case exactly")
@click.option("--inactive", is_flag=True, help="Create the rule disabled")
@click.pass_context
def create_rule(
    ctx, name: str, rule_type: str, pattern: str, category: str, case_sensitive: bool, inactive: bool
):
    """Create a rule; new rules are evaluated after existing ones.

    Examples:
        pocketpilot rule create "Coffee" --pattern starbucks --category "Dining Out"
        pocketpilot rule create "Payroll" --type regex --pattern "^PAYROLL \\d+" --category Salary
    """
    category_id = resolve_category_or_exit(ctx, category)
    service = CategorizationRuleService(ctx.obj["db"])
    try:
        rule_id = service.create_rule(
            ctx.obj["user_id"],
            name=name,
            rule_type=rule_type,
            pattern=pattern,
            target_category_id=category_id,
            case_sensitive=case_sensitive,
            is_active=not inactive,
        )
        click.echo(f"Created rule '{name}' (ID: {rule_id})")
    except ValueError as e:
        handle_domain_error(ctx, e)


@rule_group.command("list")
@click.pass_context
def list_rules(ctx):
    """List rules in evaluation order."""
    user_id = ctx.obj["user_id"]
    rules = CategorizationRuleService(ctx.obj["db"]).list_rules(user_id)
    if not rules:
        click.echo("No rules found.")
        return

    categories = {
        c.id: c.name for c in CategoryService(ctx.obj["db"]).list_categories(user_id, include_archived=True)
    }
    click.echo("\nRules:")
    click.echo("-" * 90)
    for rule in rules:
        status = "" if rule.is_active else " (inactive)"
        click.echo(
            f"{rule.rule_order:3d}. ID: {rule.id:3d} | {rule.name:20s} | {rule.rule_type:11s} | "
            f"{rule.pattern!r:25s} -> {categories.get(rule.target_category_id, 'Unknown')}{status}"
        )


@rule_group.command("delete")
@click.argument("rule_id", type=int)
@click.pass_context
def delete_rule(ctx, rule_id: int):
    """Delete a rule."""
    service = CategorizationRuleService(ctx.obj["db"])
    try:
        service.delete_rule(ctx.obj["user_id"], rule_id)
        click.echo(f"Deleted rule {rule_id}")
    except ValueError as e:
        handle_domain_error(ctx, e)


@rule_group.command("reorder")
@click.argument("rule_ids", nargs=-1, type=int, required=True)
@click.pass_context
def reorder_rules(ctx, rule_ids: tuple[int, ...]):
    """Set the evaluation order; the first ID is checked first.

    Example:
        pocketpilot rule reorder 3 1 2
    """
    service = CategorizationRuleService(ctx.obj["db"])
    try:
        service.reorder_rules(ctx.obj["user_id"], list(rule_ids))
        click.echo("Rules reordered")
    except ValueError as e:
        handle_domain_error(ctx, e)


@rule_group.command("test")
@click.argument("description")
@click.option("--type", "rule_type", type=click.Choice(RULE_TYPES), help="Test an ad-hoc rule of this type")
@click.option("--pattern", help="Pattern of the ad-hoc rule")
@click.option("--case-sensitive", is_flag=True)
@click.pass_context
def test_description(ctx, description: str, rule_type: str | None, pattern: str | None, case_sensitive: bool):
    """Show which rule would categorize DESCRIPTION.

    With --type and --pattern, test a rule without saving it.
    """
    if rule_type or pattern:
        if not (rule_type and pattern):
            click.echo("Error: --type and --pattern must be used together", err=True)
            ctx.exit(1)
        matched = test_rule(description, rule_type, pattern, case_sensitive)
        click.echo("Match" if matched else "No match")
        return

    rule = CategorizationRuleService(ctx.obj["db"]).match_description(ctx.obj["user_id"], description)
    if rule is None:
        click.echo("No rule matches.")
    else:
        click.echo(f"Matched rule '{rule.name}' (ID: {rule.id})")


@rule_group.command("apply")
@click.option("--all", "include_categorized", is_flag=True, help="Also recategorize categorized transactions")
@click.option("--dry-run", is_flag=True, help="Show matches without changing anything")
@click.pass_context
def apply_rules(ctx, include_categorized: bool, dry_run: bool):
    """Apply active rules to transactions."""
    service = CategorizationRuleService(ctx.obj["db"])
    result = service.apply_rules(
        ctx.obj["user_id"], uncategorized_only=not include_categorized, dry_run=dry_run
    )
    for match in result.matches:
        click.echo(f"  {match.transaction_id:5d} | {match.description[:40]:40s} | {match.rule_name} -> {match.category_name}")
    click.echo(result.message)
    for error in result.errors:
        click.echo(f"  {error}", err=True)


def register_commands(cli):
    """Register rule commands with main CLI."""
    cli.add_command(rule_group, name="rule")
