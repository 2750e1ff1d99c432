"""CLI helpers for resolving names and parsing option values."""

from __future__ import annotations

from datetime import date
from decimal import Decimal

import click
from pocketpilot.domain.account import AccountService
from pocketpilot.domain.category import CategoryService
from pocketpilot.utils.amounts import parse_amount
from pocketpilot.utils.dates import parse_date


def resolve_account(account_service: AccountService, user_id: str, account: str) -> int:
    """Resolve an account name or ID to an account ID.

    Raises:
        ValueError: If no such account exists
    """
    try:
        account_id = int(account)
    except (ValueError, TypeError):
        account_id = None

    if account_id is not None:
        if account_service.get_account(user_id, account_id) is None:
            raise ValueError(f"Account ID {account_id} not found")
        return account_id

    for acc in account_service.list_accounts(user_id):
        if acc.name == account:
            return acc.id
    raise ValueError(f"Account '{account}' not found")


def resolve_category(category_service: CategoryService, user_id: str, category: str) -> int:
    """Resolve a category name (case-insensitive) or ID to a category ID.

    Raises:
        ValueError: If no such category exists
    """
    if category.isdigit():
        category_id = int(category)
        if category_service.get_category(user_id, category_id) is None:
            raise ValueError(f"Category ID {category_id} not found")
        return category_id

    category_obj = category_service.get_category_by_name(user_id, category)
    if category_obj is None:
        raise ValueError(f"Category '{category}' not found")
    return category_obj.id


def resolve_account_or_exit(ctx: click.Context, account: str) -> int:
    """Resolve an account for the current owner, or exit with a CLI error."""
    try:
        return resolve_account(AccountService(ctx.obj["db"]), ctx.obj["user_id"], account)
    except ValueError as exc:
        click.echo(f"Error: {exc}", err=True)
        ctx.exit(1)


def resolve_category_or_exit(ctx: click.Context, category: str) -> int:
    """Resolve a category for the current owner, or exit with a CLI error."""
    try:
        return resolve_category(CategoryService(ctx.obj["db"]), ctx.obj["user_id"], category)
    except ValueError as exc:
        click.echo(f"Error: {exc}", err=True)
        ctx.exit(1)


def parse_date_or_exit(ctx: click.Context, value: str, label: str = "date") -> date:
    try:
        return parse_date(value)
    except ValueError as e:
        click.echo(f"Error: Invalid {label}: {e}", err=True)
        ctx.exit(1)


def parse_amount_or_exit(ctx: click.Context, value: str) -> Decimal:
    try:
        return parse_amount(value)
    except ValueError as e:
        click.echo(f"Error: Invalid amount format: {e}", err=True)
        ctx.exit(1)
