"""POP3 protocol engine.

Usage:
    from facteur.pop3 import Pop3Client

    client = Pop3Client("pop.example.com", "alice", "secret", use_tls=True)
    count = client.total_count()
"""

from .auth import AuthMethod, ConnectionState, Pop3Dialect, parse_apop_token
from .client import PORTS, Pop3Client
from .framing import Pop3Framing, Reply
from .pagination import pagination_window
from .transport import DEFAULT_TIMEOUT, LineStream, Transport

__all__ = [
    "Pop3Client",
    "Pop3Dialect",
    "Pop3Framing",
    "Reply",
    "Transport",
    "LineStream",
    "ConnectionState",
    "AuthMethod",
    "parse_apop_token",
    "pagination_window",
    "PORTS",
    "DEFAULT_TIMEOUT",
]
