"""Delete command implementation."""

import typer
from typing_extensions import Annotated

from .common import open_session


def delete(
    ctx: typer.Context,
    message_numbers: Annotated[
        list[int], typer.Argument(help="Message number(s) to delete")
    ],
    account: Annotated[
        str | None, typer.Option("--account", "-a", help="Account name")
    ] = None,
):
    """Delete messages from the mailbox.

    Deletions are committed when the session ends. A message the server
    refuses to delete does not stop the others.
    """
    with open_session(ctx, account) as client:
        results = client.remove(message_numbers)

    failed = [number for number, accepted in results.items() if not accepted]

    for number, accepted in results.items():
        if accepted:
            typer.echo(f"Deleted message {number}")
        else:
            typer.echo(f"Server refused to delete message {number}", err=True)

    if failed:
        raise typer.Exit(1)
