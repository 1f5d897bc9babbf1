"""Config command implementation.

Creates, shows and edits the facteur configuration, and checks that an
account can log in.
"""

import typer
from typing_extensions import Annotated

from facteur.config import CONFIG_FILE, init_config, load_config, set_config_value
from facteur.config.paths import CONFIG_DIR
from facteur.errors import FacteurError

from .common import build_client, is_debug

app = typer.Typer(help="Manage configuration and test accounts")

# Values of these keys are never printed
SECRET_KEYS = {"password"}
REDACTED = "***REDACTED***"


@app.command()
def init(
    force: Annotated[
        bool, typer.Option("--force", "-f", help="Replace an existing config file")
    ] = False,
):
    """Create the config directory and a template config.toml."""
    if not init_config(overwrite=force):
        typer.echo(f"{CONFIG_FILE} already exists (use --force to replace it).")
        return

    typer.echo(f"Wrote {CONFIG_FILE}")
    typer.echo(f"Config directory: {CONFIG_DIR}")
    typer.echo("Add a POP3 account to it, then run 'facteur config test'.")


@app.command()
def test(
    ctx: typer.Context,
    account: Annotated[
        str | None, typer.Option("--account", "-a", help="Account name to test")
    ] = None,
):
    """Check that the account's server answers and accepts the login."""
    client = build_client(account, debug=is_debug(ctx))

    typer.echo(f"Connecting to {client.address}...")
    try:
        client.login()
        method = client.auth_method
        count = client.total_count()
    except FacteurError as e:
        typer.echo(f"Connection failed: {e}", err=True)
        raise typer.Exit(1)
    finally:
        client.disconnect()

    typer.echo(f"Logged in as: {client.username} ({method.value})")
    typer.echo(f"Messages: {count}")


@app.command()
def show(
    account: Annotated[
        str | None, typer.Option("--account", "-a", help="Only show this account")
    ] = None,
):
    """Print the configuration with passwords redacted."""
    config = load_config()
    if not config:
        typer.echo("No configuration found.")
        typer.echo(f"Run 'facteur config init' to create {CONFIG_FILE}")
        return

    accounts = config.get("accounts", {})

    if account is not None:
        if account not in accounts:
            typer.echo(f"Account '{account}' not found.", err=True)
            raise typer.Exit(1)
        _print_table(f"accounts.{account}", accounts[account])
        return

    if "defaults" in config:
        _print_table("defaults", config["defaults"])

    if not accounts:
        typer.echo("No accounts configured.")
    for name, settings in accounts.items():
        _print_table(f"accounts.{name}", settings)


def _print_table(title: str, table: dict) -> None:
    typer.echo(f"[{title}]")
    for key, value in table.items():
        if key in SECRET_KEYS:
            value = REDACTED if value else "(not set)"
        typer.echo(f"  {key} = {value}")
    typer.echo()


@app.command("set")
def set_value(
    key: Annotated[
        str, typer.Argument(help="Dotted key, e.g. 'accounts.work.host'")
    ],
    value: Annotated[str, typer.Argument(help="New value")],
):
    """Change one setting.

    Examples:
        facteur config set defaults.range 20
        facteur config set accounts.work.ssl true
    """
    try:
        set_config_value(key, value)
    except ValueError as e:
        typer.echo(f"Invalid value: {e}", err=True)
        raise typer.Exit(1)

    shown = REDACTED if key.rsplit(".", 1)[-1] in SECRET_KEYS else value
    typer.echo(f"Set {key} = {shown}")
