"""CLI error handling helpers."""

import click

from pocketpilot.domain.errors import DomainError


def handle_domain_error(ctx: click.Context, error: DomainError | ValueError) -> None:
    """Render a domain error on stderr and exit with failure."""
    click.echo(f"Error: {error}", err=True)
    ctx.exit(1)
