"""facteur - a POP3 mailbox client.

Connects to a POP3 server, authenticates (APOP with a USER/PASS fallback),
lists and retrieves messages, and decodes the raw RFC 822 / MIME payloads
into structured Message records.

Usage:
    from facteur import Pop3Client

    with Pop3Client("pop.example.com", "alice", "secret", use_ssl=True) as client:
        for index, message in client.fetch([1, 2]).items():
            print(index, message.subject)
"""

__version__ = "0.1.0"

from facteur.errors import (  # noqa: E402
    ArgumentError,
    FacteurError,
    LoginError,
    ProtocolError,
    ServerError,
    TLSError,
)
from facteur.mime import Message, parse_message  # noqa: E402
from facteur.pop3 import ConnectionState, Pop3Client  # noqa: E402

__all__ = [
    "__version__",
    "Pop3Client",
    "ConnectionState",
    "Message",
    "parse_message",
    "FacteurError",
    "ServerError",
    "TLSError",
    "LoginError",
    "ArgumentError",
    "ProtocolError",
]
