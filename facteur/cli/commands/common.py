"""Helpers shared by the mailbox commands."""

from collections.abc import Iterator
from contextlib import contextmanager

import typer

from facteur.config import get_account, get_defaults, get_password, load_config
from facteur.errors import FacteurError
from facteur.pop3 import Pop3Client


def is_debug(ctx: typer.Context) -> bool:
    """Whether the global --debug option was given."""
    obj = ctx.obj or {}
    return bool(obj.get("debug", False))


def build_client(account: str | None, debug: bool = False) -> Pop3Client:
    """Create a client for a configured account.

    Exits with status 1 (after printing why) if the account is missing or
    incomplete.
    """
    config = load_config()

    account_config = get_account(config, account)
    if not account_config:
        if account:
            typer.echo(f"Account '{account}' not found.", err=True)
        else:
            typer.echo("No account configured.", err=True)
            typer.echo()
            typer.echo("Run 'facteur config init' and add an account to config.toml")
        raise typer.Exit(1)

    host = account_config.get("host")
    username = account_config.get("username")
    if not host or not username:
        typer.echo("Account must have 'host' and 'username' configured.", err=True)
        raise typer.Exit(1)

    password = get_password(account_config)
    if not password:
        typer.echo(
            "No password found. Set FACTEUR_POP3_PASSWORD or add 'password' to the account.",
            err=True,
        )
        raise typer.Exit(1)

    try:
        return Pop3Client(
            host,
            username,
            password,
            port=account_config.get("port"),
            use_ssl=bool(account_config.get("ssl", False)),
            use_tls=bool(account_config.get("tls", False)),
            debug=debug,
        )
    except FacteurError as e:
        typer.echo(f"Invalid account configuration: {e}", err=True)
        raise typer.Exit(1)


@contextmanager
def open_session(ctx: typer.Context, account: str | None) -> Iterator[Pop3Client]:
    """Connect to the account's mailbox for the duration of a command.

    Any FacteurError raised inside the block is reported and turned into
    exit status 1. The session is always disconnected on the way out,
    which also commits deletions.
    """
    client = build_client(account, debug=is_debug(ctx))
    timeout = get_defaults(load_config())["timeout"]

    try:
        client.connect(timeout=timeout)
        yield client
    except FacteurError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)
    finally:
        client.disconnect()
