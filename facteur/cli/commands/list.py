"""List command implementation."""

import json
from enum import Enum

import typer
from typing_extensions import Annotated

from facteur.config import get_defaults, load_config
from facteur.mime import Message, parse_message

from .common import open_session


class ListFormat(str, Enum):
    """Output formats for the list command."""

    summary = "summary"
    json = "json"


def list_cmd(
    ctx: typer.Context,
    account: Annotated[
        str | None, typer.Option("--account", "-a", help="Account name")
    ] = None,
    start: Annotated[
        int, typer.Option("--start", min=0, help="Skip this many of the newest messages")
    ] = 0,
    range: Annotated[
        int | None, typer.Option("--range", "-n", min=1, help="Number of messages to list")
    ] = None,
    format: Annotated[
        ListFormat, typer.Option("--format", help="Output format: summary or json")
    ] = ListFormat.summary,
):
    """List a page of messages, newest page first."""
    if range is None:
        range = get_defaults(load_config())["range"]

    with open_session(ctx, account) as client:
        emails = client.list(start=start, range=range)

    messages = {index: parse_message(raw) for index, raw in emails.items()}

    if format == ListFormat.json:
        payload = [{"index": index, **msg.to_dict()} for index, msg in messages.items()]
        typer.echo(json.dumps(payload, indent=2, ensure_ascii=False))
        return

    if not messages:
        typer.echo("No messages.")
        return

    for index, msg in messages.items():
        typer.echo(_summary_line(index, msg))


def _summary_line(index: int, msg: Message) -> str:
    """One line per message: number, date, sender, subject."""
    date = msg.date.strftime("%Y-%m-%d %H:%M") if msg.date else " " * 16
    sender = msg.from_.name or msg.from_.email
    marker = "@" if msg.has_attachments else " "
    return f"{index:>5} {marker} {date}  {sender[:28]:<28}  {msg.subject}"
