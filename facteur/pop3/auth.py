"""POP3 greeting, STLS and authentication.

Pop3Dialect holds everything protocol-specific about getting a session
from "socket open" to "authenticated". The client drives it; a sibling
dialect for another protocol would implement the same four steps.
"""

import hashlib
import logging
import ssl
from enum import Enum

from facteur.errors import LoginError, TLSError
from facteur.pop3.framing import Pop3Framing, Reply
from facteur.pop3.transport import LineStream

logger = logging.getLogger(__name__)


class ConnectionState(str, Enum):
    """Where a session is in its lifecycle."""

    DISCONNECTED = "disconnected"
    CONNECTED = "connected"
    AUTHENTICATED = "authenticated"


class AuthMethod(str, Enum):
    """Which login command succeeded."""

    APOP = "apop"
    USER_PASS = "user_pass"


def parse_apop_token(banner: str) -> str | None:
    """Extract the APOP challenge from a server greeting.

    The challenge is the text between the first "<" and the following ">",
    and only counts if it contains an "@".

    Examples:
        >>> parse_apop_token("+OK POP3 ready <1896.697170952@dbc.mtview.ca.us>")
        '<1896.697170952@dbc.mtview.ca.us>'
        >>> parse_apop_token("+OK POP3 ready") is None
        True
    """
    _, lt, rest = banner.partition("<")
    if not lt:
        return None
    token = rest.split(">", 1)[0]
    if "@" not in token:
        return None
    return f"<{token}>"


def apop_digest(token: str, password: str) -> str:
    """MD5 hex digest of the challenge followed by the password (RFC 1939)."""
    return hashlib.md5((token + password).encode("utf-8")).hexdigest()


class Pop3Dialect:
    """POP3 behaviour for the handshake, login and logout steps."""

    name = "pop3"

    def parse_greeting(self, banner: Reply) -> str | None:
        """Return the APOP token advertised in the greeting, if any."""
        return parse_apop_token(banner.message)

    def start_tls(self, framing: Pop3Framing, stream: LineStream, address: str) -> None:
        """Issue STLS and upgrade the stream in place.

        Raises:
            TLSError: If the server refused STLS or the handshake failed.
                      The caller is responsible for disconnecting.
        """
        reply = framing.call("STLS")
        if not reply:
            raise TLSError(address, reply.message or "STLS refused")
        try:
            stream.start_tls()
        except (ssl.SSLError, OSError) as e:
            raise TLSError(address, str(e)) from e
        logger.debug("TLS established with %s", address)

    def try_apop(
        self, framing: Pop3Framing, username: str, password: str, token: str
    ) -> Reply:
        """Attempt APOP. The caller decides what a failure means."""
        return framing.call(f"APOP {username} {apop_digest(token, password)}")

    def authorize(
        self,
        framing: Pop3Framing,
        username: str,
        password: str,
        token: str | None = None,
    ) -> AuthMethod:
        """Log in, preferring APOP when the server offered a challenge.

        A rejected APOP is not an error: the conversation continues with
        USER/PASS on the same connection.

        Returns:
            The method that succeeded.

        Raises:
            LoginError: If PASS was rejected. The caller disconnects.
        """
        if token:
            if self.try_apop(framing, username, password, token):
                return AuthMethod.APOP
            logger.debug("APOP rejected, falling back to USER/PASS")

        # Only the PASS reply decides
        framing.call(f"USER {username}")
        if not framing.call(f"PASS {password}"):
            raise LoginError(username)

        return AuthMethod.USER_PASS

    def logout(self, framing: Pop3Framing) -> None:
        """Send QUIT without waiting for the reply."""
        framing.send("QUIT")
