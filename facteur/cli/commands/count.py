"""Count command implementation."""

import typer
from typing_extensions import Annotated

from .common import open_session


def count(
    ctx: typer.Context,
    account: Annotated[
        str | None, typer.Option("--account", "-a", help="Account name")
    ] = None,
):
    """Show how many messages are in the mailbox."""
    with open_session(ctx, account) as client:
        total = client.total_count()
        size = client.size()

    typer.echo(f"{total} messages ({size} bytes)")
