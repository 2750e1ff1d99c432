"""Main CLI entry point."""

import logging

import click
from pocketpilot.database.factories import create_database

# Import and register all commands at module level
from pocketpilot.cli.commands import (
    account,
    category,
    add,
    transaction,
    rule,
    budget,
    goal,
    recurring,
    template,
    link,
    tag,
    format,
    import_cmd,
    export,
)


@click.group()
@click.option(
    "--db-path",
    type=click.Path(),
    help="Path to database file (overrides POCKETPILOT_DB_PATH environment variable)",
    envvar="POCKETPILOT_DB_PATH",
)
@click.option(
    "--user",
    "user_id",
    default="local",
    show_default=True,
    help="Owner whose records are used (overrides POCKETPILOT_USER environment variable)",
    envvar="POCKETPILOT_USER",
)
@click.option("--verbose", is_flag=True, help="Enable debug logging")
@click.pass_context
def cli(ctx, db_path: str | None, user_id: str, verbose: bool):
    """Pocket Pilot - Personal finance tracker.

    Track accounts and transactions, keep budgets and savings goals,
    automate categorization with rules and schedule recurring transactions.
    """
    ctx.ensure_object(dict)
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    # Open the database only when a command runs, not for --help
    if ctx.invoked_subcommand is not None:
        db = create_database(database_path=db_path)
        db.connect()
        db.initialize_schema()
        ctx.obj["db"] = db
        ctx.obj["user_id"] = user_id
        ctx.call_on_close(db.disconnect)


# Register all commands
account.register_commands(cli)
category.register_commands(cli)
add.register_commands(cli)
transaction.register_commands(cli)
rule.register_commands(cli)
budget.register_commands(cli)
goal.register_commands(cli)
recurring.register_commands(cli)
template.register_commands(cli)
link.register_commands(cli)
tag.register_commands(cli)
format.register_commands(cli)
import_cmd.register_commands(cli)
export.register_commands(cli)


def main():
    """Main entry point for CLI."""
    cli()


if __name__ == "__main__":
    main()
