"""Main CLI entry point for facteur."""

import logging

import typer
from typing_extensions import Annotated

from facteur import __version__
from facteur.cli import commands

app = typer.Typer(
    name="facteur",
    help="POP3 mailbox client: list, read and delete messages",
    no_args_is_help=True,
)

# Register command groups
app.add_typer(commands.config.app, name="config")

# Mailbox commands take positional arguments, so they are plain commands
app.command("count")(commands.count.count)
app.command("list")(commands.list.list_cmd)
app.command("read")(commands.read.read)
app.command("delete")(commands.delete.delete)


@app.callback()
def main_callback(
    ctx: typer.Context,
    debug: Annotated[
        bool, typer.Option("--debug", help="Log the POP3 conversation to stderr")
    ] = False,
):
    """POP3 mailbox client."""
    ctx.ensure_object(dict)
    ctx.obj["debug"] = debug
    if debug:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(asctime)s %(name)s %(levelname)s %(message)s",
        )


@app.command()
def version():
    """Show version information."""
    typer.echo(f"facteur version {__version__}")


def main():
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
