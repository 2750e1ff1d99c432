"""Account management commands."""

import click
from pocketpilot.cli.error_handling import handle_domain_error
from pocketpilot.cli.resolution import resolve_account_or_exit
from pocketpilot.domain.account import AccountService
from pocketpilot.domain.entities import ACCOUNT_TYPES
from pocketpilot.utils.amounts import format_currency


@click.group()
def account_group():
    """Manage accounts."""
    pass


@account_group.command("create")
@click.argument("name", metavar="ACCOUNT_NAME")
@click.option(
    "--type",
    "account_type",
    type=click.Choice(ACCOUNT_TYPES),
    default="Checking",
    show_default=True,
    help="Account type",
)
@click.pass_context
def create_account(ctx, name: str, account_type: str):
    """Create a new account.

    Examples:
        pocketpilot account create "Chequing"
        pocketpilot account create "Emergency Fund" --type Savings
    """
    service = AccountService(ctx.obj["db"])
    try:
        account_id = service.create_account(ctx.obj["user_id"], name=name, account_type=account_type)
        click.echo(f"Created account '{name}' (ID: {account_id})")
    except ValueError as e:
        handle_domain_error(ctx, e)


@account_group.command("list")
@click.pass_context
def list_accounts(ctx):
    """List all accounts with their balances."""
    service = AccountService(ctx.obj["db"])

    accounts = service.list_with_balances(ctx.obj["user_id"])
    if not accounts:
        click.echo("No accounts found.")
        return

    click.echo("\nAccounts:")
    click.echo("-" * 70)
    for item in accounts:
        acc = item.account
        balance = format_currency(item.balance, signed=True)
        click.echo(f"ID: {acc.id:3d} | {acc.name:20s} | {acc.account_type:10s} | {balance:>15s}")


@account_group.command("rename")
@click.argument("account", metavar="ACCOUNT")
@click.argument("new_name", metavar="NEW_NAME")
@click.option("--type", "account_type", type=click.Choice(ACCOUNT_TYPES), help="New account type")
@click.pass_context
def rename_account(ctx, account: str, new_name: str, account_type: str | None) -> None:
    """Rename an account.

    ACCOUNT can be an account name or ID.

    Examples:
        pocketpilot account rename "Chequing" "Main Chequing"
        pocketpilot account rename 1 "Visa" --type Credit
    """
    service = AccountService(ctx.obj["db"])
    account_id = resolve_account_or_exit(ctx, account)

    try:
        service.update_account(ctx.obj["user_id"], account_id, name=new_name, account_type=account_type)
        click.echo(f"Renamed account to '{new_name}'")
        if account_type is not None:
            click.echo(f"Account type updated to '{account_type}'")
    except ValueError as e:
        handle_domain_error(ctx, e)


@account_group.command("delete")
@click.argument("account", metavar="ACCOUNT")
@click.option("--yes", is_flag=True, help="Do not ask for confirmation")
@click.pass_context
def delete_account(ctx, account: str, yes: bool) -> None:
    """Delete an account together with its transactions.

    ACCOUNT can be an account name or ID.
    """
    user_id = ctx.obj["user_id"]
    service = AccountService(ctx.obj["db"])
    account_id = resolve_account_or_exit(ctx, account)
    account_obj = service.get_account(user_id, account_id)

    if not yes and not click.confirm(
        f"Delete account '{account_obj.name}' (ID: {account_id}) and all its transactions?"
    ):
        click.echo("Deletion cancelled.")
        return

    try:
        service.delete_account(user_id, account_id)
        click.echo(f"Deleted account '{account_obj.name}'")
    except ValueError as e:
        handle_domain_error(ctx, e)


def register_commands(cli):
    """Register account commands with main CLI."""
    cli.add_command(account_group, name="account")
