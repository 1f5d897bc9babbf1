"""Read command implementation."""

import json
from enum import Enum
from pathlib import Path

import typer
from typing_extensions import Annotated

from facteur.mime import Message, split_message

from .common import open_session


class ReadFormat(str, Enum):
    """Output formats for the read command."""

    text = "text"
    json = "json"
    raw = "raw"
    headers = "headers"


def read(
    ctx: typer.Context,
    message_number: Annotated[int, typer.Argument(min=1, help="Message number to read")],
    account: Annotated[
        str | None, typer.Option("--account", "-a", help="Account name")
    ] = None,
    format: Annotated[
        ReadFormat, typer.Option("--format", help="Output format: text, json, raw, headers")
    ] = ReadFormat.text,
    no_attachments: Annotated[
        bool, typer.Option("--no-attachments", help="Don't show attachment info")
    ] = False,
    save_attachments: Annotated[
        Path | None, typer.Option("--save-attachments", help="Save attachments to directory")
    ] = None,
):
    """Display a message."""
    with open_session(ctx, account) as client:
        msg = client.fetch(message_number)

    if msg is None:
        typer.echo(f"Message {message_number} not found.", err=True)
        raise typer.Exit(1)

    if format == ReadFormat.raw:
        typer.echo(msg.raw)
    elif format == ReadFormat.headers:
        head, _ = split_message(msg.raw)
        typer.echo(head)
    elif format == ReadFormat.json:
        typer.echo(json.dumps(msg.to_dict(), indent=2, ensure_ascii=False))
    else:
        _display_message(msg, show_attachments=not no_attachments)

    if save_attachments is not None:
        _save_attachments(msg, save_attachments)


def _display_message(msg: Message, show_attachments: bool = True) -> None:
    """Print headers, the body and the attachment list."""
    typer.echo(f"From:    {msg.from_}")
    if msg.to:
        typer.echo(f"To:      {', '.join(str(addr) for addr in msg.to)}")
    if msg.cc:
        typer.echo(f"Cc:      {', '.join(str(addr) for addr in msg.cc)}")
    if msg.date:
        typer.echo(f"Date:    {msg.date.strftime('%a, %d %b %Y %H:%M:%S %z')}")
    typer.echo(f"Subject: {msg.subject}")
    typer.echo()

    if msg.text is not None:
        typer.echo(msg.text)
    elif msg.html is not None:
        typer.echo(msg.html)
    elif msg.body:
        typer.echo("(no text body)")

    if show_attachments and msg.attachments:
        typer.echo()
        typer.echo("Attachments:")
        for att in msg.attachments:
            typer.echo(f"  {att.name} ({att.content_type}, {att.size} bytes)")


def _save_attachments(msg: Message, directory: Path) -> None:
    """Write each attachment to directory, keeping its name.

    Attachments without a usable file name are saved as attachment-N.
    """
    directory = directory.expanduser()
    directory.mkdir(parents=True, exist_ok=True)

    for number, att in enumerate(msg.attachments, start=1):
        # Never let an attachment name escape the target directory
        name = Path(att.name).name
        if name in ("", ".", ".."):
            name = f"attachment-{number}"
        target = directory / name
        payload = att.payload
        if isinstance(payload, str):
            payload = payload.encode("utf-8", "surrogateescape")
        target.write_bytes(payload)
        typer.echo(f"Saved {target}")
