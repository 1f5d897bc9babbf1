"""Exception hierarchy for facteur.

Fatal errors (ServerError, TLSError, LoginError) are only raised after the
session has been fully disconnected. Ordinary -ERR replies are not
exceptions: they come back as a falsy Reply from the framing layer.
"""


class FacteurError(Exception):
    """Base class for every error raised by facteur."""


class ServerError(FacteurError):
    """The connection to the mail server could not be established.

    Attributes:
        address: The "host:port" (or "ssl://host:port") that was dialled.
    """

    def __init__(self, address: str, reason: str | None = None):
        self.address = address
        self.reason = reason
        message = f"Could not connect to {address}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


class TLSError(FacteurError):
    """The STLS command was refused or the TLS upgrade failed."""

    def __init__(self, address: str, reason: str | None = None):
        self.address = address
        self.reason = reason
        message = f"Could not start TLS with {address}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


class LoginError(FacteurError):
    """The server rejected the USER/PASS credentials."""

    def __init__(self, username: str):
        self.username = username
        super().__init__(f"Login failed for user '{username}'")


class ArgumentError(FacteurError, ValueError):
    """An argument passed by the caller has the wrong type or value."""


class ProtocolError(FacteurError):
    """The server broke the POP3 conversation.

    Raised when the server stops keeping to the protocol mid-conversation,
    for example by closing the stream inside a multi-line response.
    Ordinary -ERR replies are falsy Reply values instead.
    """
