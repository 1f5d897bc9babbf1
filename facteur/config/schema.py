"""Shape of config.toml, as TypedDicts.

Every key is optional; get_defaults() supplies the missing defaults.
"""

from typing import TypedDict


class DefaultsConfig(TypedDict, total=False):
    """The [defaults] table.

    Attributes:
        range: Number of messages per page for `facteur list`.
        timeout: Connection timeout in seconds.
    """

    range: int
    timeout: int


class AccountConfig(TypedDict, total=False):
    """One [accounts.<name>] table.

    Attributes:
        host: POP3 server host name.
        port: Server port (defaults to 995 with ssl, 110 otherwise).
        username: Mailbox user name.
        password: Mailbox password (prefer the FACTEUR_POP3_PASSWORD env var).
        ssl: Connect with implicit TLS (POP3S).
        tls: Upgrade a plain connection with STLS.
    """

    host: str
    port: int
    username: str
    password: str
    ssl: bool
    tls: bool


class FacteurConfig(TypedDict, total=False):
    """The whole file: [defaults] plus one [accounts.<name>] table per mailbox."""

    defaults: DefaultsConfig
    accounts: dict[str, AccountConfig]
