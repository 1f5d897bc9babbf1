"""Shared fixtures: an in-memory POP3 stream and a client wired to it."""

import pytest

from facteur.pop3 import Pop3Client

GREETING_APOP = "+OK POP3 server ready <1896.697170952@dbc.mtview.ca.us>"
GREETING_PLAIN = "+OK POP3 server ready"


class FakeStream:
    """Scripted stand-in for Transport.

    Lines given to the constructor are what the "server" sends, in order;
    everything the client writes is recorded in `sent`.
    """

    def __init__(self, lines=(), write_ok=True, tls_ok=True, connect_error=None):
        self.incoming = [_to_bytes(line) for line in lines]
        self.sent: list[str] = []
        self.write_ok = write_ok
        self.tls_ok = tls_ok
        self.connect_error = connect_error
        self.connected = False
        self.tls_started = False
        self.closed = 0

    def feed(self, *lines) -> None:
        self.incoming.extend(_to_bytes(line) for line in lines)

    def connect(self, timeout=30) -> None:
        if self.connect_error is not None:
            raise self.connect_error
        self.connected = True

    def read_line(self) -> bytes:
        if not self.incoming:
            return b""
        return self.incoming.pop(0)

    def write(self, data: bytes) -> bool:
        self.sent.append(data.decode("utf-8"))
        return self.write_ok

    def start_tls(self) -> None:
        if not self.tls_ok:
            raise OSError("handshake failed")
        self.tls_started = True

    def close(self) -> None:
        self.connected = False
        self.closed += 1

    @property
    def commands(self) -> list[str]:
        """Commands written so far, without their CRLF."""
        return [line.rstrip("\r\n") for line in self.sent]


def _to_bytes(line) -> bytes:
    if isinstance(line, bytes):
        return line
    if not line.endswith("\n"):
        line += "\r\n"
    return line.encode("utf-8")


def multiline(*lines: str) -> list[str]:
    """A +OK status followed by a dot-terminated data block."""
    return ["+OK", *lines, "."]


@pytest.fixture
def stream() -> FakeStream:
    return FakeStream()


@pytest.fixture
def make_client(stream: FakeStream):
    """Build a Pop3Client whose transport is the shared FakeStream."""

    def _make(**kwargs) -> Pop3Client:
        kwargs.setdefault("host", "pop.example.com")
        kwargs.setdefault("username", "alice")
        kwargs.setdefault("password", "tanstaaf")
        return Pop3Client(
            transport_factory=lambda host, port, use_ssl: stream,
            **kwargs,
        )

    return _make
