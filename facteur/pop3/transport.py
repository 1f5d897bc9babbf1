"""Byte-stream transport for the POP3 client.

Owns the socket, its lifecycle and the TLS upgrade. The client only talks
to the LineStream protocol, so tests can swap in an in-memory stream.
"""

import logging
import socket
import ssl
from typing import Protocol

from facteur.errors import ProtocolError, ServerError

logger = logging.getLogger(__name__)

# Connection timeout in seconds
DEFAULT_TIMEOUT = 30

# RFC 1939 limits response lines to 512 octets, but message bodies sent
# through RETR routinely exceed that. Longer lines are a protocol error.
MAX_LINE = 1 << 16


class LineStream(Protocol):
    """What the client and framing layer need from a connection."""

    def connect(self, timeout: float = DEFAULT_TIMEOUT) -> None: ...

    def read_line(self) -> bytes: ...

    def write(self, data: bytes) -> bool: ...

    def start_tls(self) -> None: ...

    def close(self) -> None: ...


class Transport:
    """A TCP connection to a mail server, optionally wrapped in TLS.

    Example:
        transport = Transport("pop.example.com", 995, use_ssl=True)
        transport.connect(timeout=10)
        banner = transport.read_line()
        transport.close()
    """

    def __init__(self, host: str, port: int, use_ssl: bool = False):
        """Store connection details. Nothing is opened until connect().

        Args:
            host: Server host name.
            port: Server port.
            use_ssl: Wrap the socket in TLS right after connecting (POP3S).
        """
        self._host = host
        self._port = port
        self._use_ssl = use_ssl
        self._sock: socket.socket | None = None
        self._file = None

    @property
    def address(self) -> str:
        """The dialled address, with the ssl:// scheme for implicit TLS."""
        host = f"ssl://{self._host}" if self._use_ssl else self._host
        return f"{host}:{self._port}"

    @property
    def connected(self) -> bool:
        return self._sock is not None

    def connect(self, timeout: float = DEFAULT_TIMEOUT) -> None:
        """Open the connection.

        Args:
            timeout: Seconds to wait for the connection (and, afterwards,
                     for each read).

        Raises:
            ServerError: If the socket could not be opened.
        """
        if self._sock is not None:
            return

        logger.debug("Connecting to %s", self.address)
        try:
            sock = socket.create_connection((self._host, self._port), timeout)
        except OSError as e:
            raise ServerError(self.address, str(e)) from e

        if self._use_ssl:
            try:
                sock = self._wrap(sock)
            except (ssl.SSLError, OSError) as e:
                sock.close()
                raise ServerError(self.address, str(e)) from e

        self._attach(sock)

    def read_line(self) -> bytes:
        """Read one line including its terminator.

        Returns:
            The line, or b"" when the server closed the connection.

        Raises:
            ProtocolError: If the read timed out, the socket failed or the
                           line is longer than MAX_LINE.
        """
        if self._file is None:
            return b""
        try:
            line = self._file.readline(MAX_LINE + 1)
        except (socket.timeout, OSError) as e:
            raise ProtocolError(f"Read from {self.address} failed: {e}") from e
        if len(line) > MAX_LINE:
            raise ProtocolError(f"Line from {self.address} is longer than {MAX_LINE} bytes")
        return line

    def write(self, data: bytes) -> bool:
        """Send data to the server.

        Returns:
            True if everything was written, False otherwise.
        """
        if self._sock is None:
            return False
        try:
            self._sock.sendall(data)
        except OSError as e:
            logger.debug("Write to %s failed: %s", self.address, e)
            return False
        return True

    def start_tls(self) -> None:
        """Upgrade the open connection to TLS in place (after STLS).

        Raises:
            ssl.SSLError, OSError: If the handshake fails.
        """
        if self._sock is None:
            raise OSError("Not connected")
        sock = self._wrap(self._sock)
        self._attach(sock)

    def close(self) -> None:
        """Close the connection. Safe to call more than once."""
        if self._file is not None:
            try:
                self._file.close()
            except OSError:
                pass
            self._file = None

        if self._sock is not None:
            try:
                self._sock.close()
            except OSError:
                pass
            self._sock = None
            logger.debug("Closed connection to %s", self.address)

    def _wrap(self, sock: socket.socket) -> ssl.SSLSocket:
        context = ssl.create_default_context()
        return context.wrap_socket(sock, server_hostname=self._host)

    def _attach(self, sock: socket.socket) -> None:
        # A new file object is needed after a TLS upgrade; the old one
        # would keep reading the raw socket.
        if self._file is not None:
            self._file.close()
        self._sock = sock
        self._file = sock.makefile("rb")
