"""Configuration for facteur.

POP3 accounts and defaults live in ~/.config/facteur/config.toml. The file
is read once per process and cached; writes go through save_config so the
cache never goes stale.

Usage:
    from facteur.config import get_account, get_password, load_config

    config = load_config()
    account = get_account(config, "personal")
    password = get_password(account)
"""

import os
import tomllib

import tomli_w

from .paths import CONFIG_FILE, ensure_config_dir
from .schema import AccountConfig, DefaultsConfig, FacteurConfig
from .template import CONFIG_TEMPLATE

__all__ = [
    "load_config",
    "save_config",
    "init_config",
    "get_account",
    "get_account_names",
    "get_defaults",
    "get_password",
    "set_config_value",
    "CONFIG_FILE",
    "PASSWORD_ENV",
]

# Overrides any password stored in the file
PASSWORD_ENV = "FACTEUR_POP3_PASSWORD"

# Used for settings missing from [defaults]
DEFAULTS: DefaultsConfig = {
    "range": 10,
    "timeout": 30,
}

# Value types of the settings `facteur config set` knows about.
# Anything else is stored as a string.
_FIELD_TYPES: dict[str, type] = {
    "port": int,
    "range": int,
    "timeout": int,
    "ssl": bool,
    "tls": bool,
}

_TRUE = {"true", "yes", "on", "1"}
_FALSE = {"false", "no", "off", "0"}

_cached_config: FacteurConfig | None = None


def load_config(*, force_reload: bool = False) -> FacteurConfig:
    """Read config.toml, or return the cached copy.

    Args:
        force_reload: Read the file even if a cached copy exists.

    Returns:
        The parsed configuration; an empty dict when there is no file.
    """
    global _cached_config

    if force_reload or _cached_config is None:
        _cached_config = _read_file()
    return _cached_config


def _read_file() -> FacteurConfig:
    if not CONFIG_FILE.exists():
        return {}
    with open(CONFIG_FILE, "rb") as f:
        return tomllib.load(f)


def save_config(config: FacteurConfig) -> None:
    """Write the configuration and refresh the cache.

    The file may hold passwords, so it is made readable by its owner only.
    """
    global _cached_config

    ensure_config_dir()
    with open(CONFIG_FILE, "wb") as f:
        tomli_w.dump(config, f)
    CONFIG_FILE.chmod(0o600)

    _cached_config = config


def init_config(*, overwrite: bool = False) -> bool:
    """Write the commented template to config.toml.

    Returns:
        False if a config file already exists and overwrite is not set,
        True once the template has been written.
    """
    ensure_config_dir()
    if CONFIG_FILE.exists() and not overwrite:
        return False

    CONFIG_FILE.write_text(CONFIG_TEMPLATE)
    CONFIG_FILE.chmod(0o600)
    return True


def get_account(config: FacteurConfig, name: str | None = None) -> AccountConfig | None:
    """Look up an [accounts.<name>] table.

    Without a name the first configured account is used. Returns None when
    there is no such account.
    """
    accounts = config.get("accounts") or {}
    if name is not None:
        return accounts.get(name)
    return next(iter(accounts.values()), None)


def get_account_names(config: FacteurConfig) -> list[str]:
    return [*config.get("accounts", {})]


def get_defaults(config: FacteurConfig) -> DefaultsConfig:
    """The [defaults] table with built-in values filled in."""
    return {**DEFAULTS, **config.get("defaults", {})}


def get_password(account: AccountConfig) -> str | None:
    """Password for an account.

    FACTEUR_POP3_PASSWORD takes precedence over the account's password.
    Returns None when neither is set.
    """
    return os.environ.get(PASSWORD_ENV) or account.get("password")


def set_config_value(key: str, value: str) -> None:
    """Store one setting addressed by a dotted key, then save.

    Missing tables along the path are created.

    Examples:
        set_config_value("defaults.range", "20")
        set_config_value("accounts.work.ssl", "true")

    Raises:
        ValueError: If value does not fit the setting's type.
    """
    *tables, field = key.split(".")

    config = load_config(force_reload=True)
    table: dict = config
    for name in tables:
        table = table.setdefault(name, {})

    table[field] = _convert_value(field, value)
    save_config(config)


def _convert_value(field: str, value: str) -> str | int | bool:
    """Convert a command-line string to the type of the named setting."""
    kind = _FIELD_TYPES.get(field, str)

    if kind is int:
        return int(value)

    if kind is bool:
        flag = value.strip().lower()
        if flag in _TRUE:
            return True
        if flag in _FALSE:
            return False
        raise ValueError(f"'{value}' is not a boolean (use true or false)")

    return value
