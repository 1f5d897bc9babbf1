"""POP3 mailbox client.

Pop3Client owns one connection to one mailbox. The connection is opened
lazily: any mailbox operation logs in first if needed.

Example:
    client = Pop3Client("pop.example.com", "alice", "secret", use_ssl=True)
    try:
        print(client.total_count())
        for index, raw in client.list(start=0, range=5).items():
            print(index, len(raw))
    finally:
        client.disconnect()
"""

import logging
from collections.abc import Callable, Iterable

from facteur.errors import (
    ArgumentError,
    LoginError,
    ProtocolError,
    ServerError,
    TLSError,
)
from facteur.mime import Message, parse_message
from facteur.pop3.auth import AuthMethod, ConnectionState, Pop3Dialect
from facteur.pop3.framing import Pop3Framing, Reply
from facteur.pop3.pagination import describe_window, pagination_window
from facteur.pop3.transport import DEFAULT_TIMEOUT, LineStream, Transport

logger = logging.getLogger(__name__)

# Standard POP3 ports
PORTS = {
    "secured": 995,
    "default": 110,
}

# Builds the stream for (host, port, use_ssl); replaced in tests.
TransportFactory = Callable[[str, int, bool], LineStream]

MessageIds = int | str | Iterable[int | str]


class Pop3Client:
    """A single POP3 session.

    Attributes:
        host: Server host name.
        port: Server port (995 with use_ssl, 110 otherwise, unless given).
        username: Mailbox user name.
        use_ssl: Connect with implicit TLS (POP3S).
        use_tls: Upgrade a plain connection with STLS before logging in.
        debug: Log every command and response line at DEBUG level.
    """

    def __init__(
        self,
        host: str,
        username: str,
        password: str,
        port: int | None = None,
        use_ssl: bool = False,
        use_tls: bool = False,
        debug: bool = False,
        transport_factory: TransportFactory = Transport,
        dialect: Pop3Dialect | None = None,
    ):
        _check_type("host", host, str)
        _check_type("username", username, str)
        _check_type("password", password, str)
        if port is not None and (isinstance(port, bool) or not isinstance(port, int)):
            raise ArgumentError(f"port must be an int or None, got {type(port).__name__}")
        _check_type("use_ssl", use_ssl, bool)
        _check_type("use_tls", use_tls, bool)
        _check_type("debug", debug, bool)
        if not host:
            raise ArgumentError("host must not be empty")

        self.host = host
        self.username = username
        self._password = password
        self.use_ssl = use_ssl
        self.use_tls = use_tls
        self.debug = debug
        self.port = port if port is not None else PORTS["secured" if use_ssl else "default"]

        self._transport_factory = transport_factory
        self._dialect = dialect or Pop3Dialect()
        self._transport: LineStream | None = None
        self._framing: Pop3Framing | None = None
        self._state = ConnectionState.DISCONNECTED
        self._timestamp: str | None = None
        self._auth_method: AuthMethod | None = None

    def __enter__(self) -> "Pop3Client":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.disconnect()

    def __repr__(self) -> str:
        return (
            f"Pop3Client(host={self.host!r}, port={self.port}, "
            f"username={self.username!r}, state={self._state.value})"
        )

    @property
    def state(self) -> ConnectionState:
        return self._state

    @property
    def authenticated(self) -> bool:
        return self._state is ConnectionState.AUTHENTICATED

    @property
    def timestamp(self) -> str | None:
        """APOP challenge from the last greeting, with its angle brackets."""
        return self._timestamp

    @property
    def auth_method(self) -> AuthMethod | None:
        """How the current session logged in, or None if it has not."""
        return self._auth_method

    @property
    def address(self) -> str:
        host = f"ssl://{self.host}" if self.use_ssl else self.host
        return f"{host}:{self.port}"

    # --- Connection lifecycle ---

    def connect(self, timeout: float = DEFAULT_TIMEOUT, test: bool = False) -> "Pop3Client":
        """Open the connection, read the greeting and log in.

        Does nothing if the session is already authenticated.

        Args:
            timeout: Connection timeout in seconds.
            test: Only check that the server answers: disconnect right
                  after the greeting (and STLS) without logging in.

        Raises:
            ServerError: If the server could not be reached.
            TLSError: If use_tls is set and STLS failed.
            LoginError: If the credentials were rejected.
        """
        if self.authenticated:
            return self

        if self._state is ConnectionState.DISCONNECTED:
            self._open(timeout)

        if test:
            self.disconnect()
            return self

        return self.login(timeout)

    def login(self, timeout: float = DEFAULT_TIMEOUT) -> "Pop3Client":
        """Authenticate, connecting first if needed.

        Raises:
            ServerError, TLSError: If the connection could not be set up.
            LoginError: If USER/PASS was rejected.
        """
        if self.authenticated:
            return self

        if self._state is ConnectionState.DISCONNECTED:
            self._open(timeout)

        try:
            method = self._dialect.authorize(
                self._framing, self.username, self._password, self._timestamp
            )
        except (LoginError, ProtocolError):
            self.disconnect()
            raise

        self._state = ConnectionState.AUTHENTICATED
        self._auth_method = method
        logger.info("Logged in to %s as %s (%s)", self.address, self.username, method.value)
        return self

    def disconnect(self) -> "Pop3Client":
        """Log out (if logged in) and close the connection.

        Safe to call on a closed session. A failing QUIT is ignored.
        """
        if self.authenticated and self._framing is not None:
            try:
                self._dialect.logout(self._framing)
            except (OSError, ProtocolError) as e:
                logger.debug("Ignoring logout failure: %s", e)

        if self._transport is not None:
            self._transport.close()
            logger.debug("Disconnected from %s", self.address)

        self._transport = None
        self._framing = None
        self._state = ConnectionState.DISCONNECTED
        self._auth_method = None
        return self

    def _open(self, timeout: float) -> None:
        """Connect the transport, parse the greeting and run STLS."""
        transport = self._transport_factory(self.host, self.port, self.use_ssl)
        self._transport = transport

        try:
            transport.connect(timeout)
        except ServerError:
            self.disconnect()
            raise
        except OSError as e:
            self.disconnect()
            raise ServerError(self.address, str(e)) from e

        self._framing = Pop3Framing(transport, debug=self.debug)

        try:
            greeting = self._framing.receive()
        except ProtocolError as e:
            self.disconnect()
            raise ServerError(self.address, str(e)) from e

        if not greeting:
            self.disconnect()
            detail = f"{greeting.status} {greeting.message}".strip()
            raise ServerError(self.address, f"unexpected greeting: {detail or 'none'}")

        self._timestamp = self._dialect.parse_greeting(greeting)
        self._state = ConnectionState.CONNECTED
        logger.info("Connected to %s", self.address)

        if self.use_tls:
            try:
                self._dialect.start_tls(self._framing, transport, self.address)
            except (TLSError, ProtocolError) as e:
                self.disconnect()
                if isinstance(e, TLSError):
                    raise
                raise TLSError(self.address, str(e)) from e

    def _call(self, command: str, multiline: bool = False) -> Reply:
        """Run a command on the logged-in session.

        A dropped connection is fatal: the session is disconnected and
        the ProtocolError propagates.
        """
        try:
            return self._framing.call(command, multiline)
        except ProtocolError:
            self.disconnect()
            raise

    # --- Mailbox operations ---

    def total_count(self) -> int:
        """Number of messages in the mailbox (from STAT)."""
        self.login()
        reply = self._call("STAT")
        count, _, _ = reply.message.partition(" ")
        return int(count) if _is_number(count) else 0

    def size(self) -> int:
        """Total size of the mailbox in octets (from STAT)."""
        self.login()
        reply = self._call("STAT")
        parts = reply.message.split(" ")
        if len(parts) < 2 or not _is_number(parts[1]):
            return 0
        return int(parts[1])

    def noop(self) -> bool:
        """Keep the session alive. Returns whether the server answered +OK."""
        self.login()
        return bool(self._call("NOOP"))

    def reset(self) -> bool:
        """Unmark every message marked for deletion in this session (RSET)."""
        self.login()
        return bool(self._call("RSET"))

    def retrieve(self, number: int) -> str | None:
        """Raw text of one message, or None if RETR failed."""
        self.login()
        reply = self._call(f"RETR {number}", multiline=True)
        return reply.message if reply else None

    def fetch(self, ids: MessageIds) -> Message | dict[int, Message] | None:
        """Retrieve and parse messages.

        Args:
            ids: A single message number, or a collection of them.

        Returns:
            For a single number, the parsed Message (None if RETR failed).
            For a collection, a dict of number to Message; numbers whose
            RETR failed are left out.

        Raises:
            ArgumentError: If an id is not a positive message number.
        """
        single = _is_single_id(ids)
        numbers = _normalize_ids(ids)
        self.login()

        messages: dict[int, Message] = {}
        for number in numbers:
            raw = self.retrieve(number)
            if raw is None:
                logger.warning("Could not retrieve message %d", number)
                continue
            messages[number] = parse_message(raw)

        if single:
            return messages.get(numbers[0])
        return messages

    def remove(self, ids: MessageIds) -> dict[int, bool]:
        """Mark messages for deletion (DELE).

        Each deletion is independent: a refused DELE does not stop the
        remaining ones. Deletions take effect when the session QUITs.

        Returns:
            Dict of message number to whether the server accepted it.
        """
        numbers = _normalize_ids(ids)
        self.login()

        results: dict[int, bool] = {}
        for number in numbers:
            accepted = bool(self._call(f"DELE {number}"))
            if not accepted:
                logger.warning("Server refused to delete message %d", number)
            results[number] = accepted
        return results

    def list(
        self,
        start: int = 0,
        range: int = 10,
        indices: MessageIds | None = None,
    ) -> dict[int, str]:
        """Retrieve a page of raw messages, newest page first.

        Args:
            start: Offset from the newest message (0 = newest).
            range: Page size.
            indices: Explicit message number(s) to retrieve instead of a
                     computed page.

        Returns:
            Dict of message number to raw message text, in ascending
            message number order. Empty if the mailbox is empty.

        Raises:
            ArgumentError: If start or range is not an int.
        """
        if indices is None:
            _check_type("start", start, int)
            _check_type("range", range, int)

        self.login()
        total = self.total_count()
        if total == 0:
            return {}

        if indices is not None:
            numbers = _normalize_ids(indices)
        else:
            window = pagination_window(start, range, total)
            logger.debug("Listing messages %s of %d", describe_window(window), total)
            numbers = window

        emails: dict[int, str] = {}
        for number in numbers:
            reply = self._call(f"RETR {number}", multiline=True)
            emails[number] = reply.message if reply else ""
        return emails


def _check_type(name: str, value, expected: type) -> None:
    # bool is an int subclass; don't let True pass as a message number
    if expected is int and isinstance(value, bool):
        raise ArgumentError(f"{name} must be an int, got bool")
    if not isinstance(value, expected):
        raise ArgumentError(
            f"{name} must be {expected.__name__}, got {type(value).__name__}"
        )


def _is_number(text: str) -> bool:
    # isdigit() alone accepts superscript digits, which int() rejects
    return text.isascii() and text.isdigit()


def _is_single_id(ids) -> bool:
    return isinstance(ids, (int, str))


def _normalize_ids(ids) -> list[int]:
    """Turn a message number or collection of them into a list of ints."""
    items = [ids] if _is_single_id(ids) else ids
    try:
        items = [*items]
    except TypeError:
        raise ArgumentError(
            f"Expected a message number or a collection of them, got {type(ids).__name__}"
        ) from None

    numbers = []
    for item in items:
        if isinstance(item, bool):
            raise ArgumentError("Message numbers must be int or str, got bool")
        if isinstance(item, str):
            item = item.strip()
            if not _is_number(item):
                raise ArgumentError(f"Invalid message number: {item!r}")
            item = int(item)
        if not isinstance(item, int):
            raise ArgumentError(f"Invalid message number: {item!r}")
        if item < 1:
            raise ArgumentError(f"Message numbers start at 1, got {item}")
        numbers.append(item)
    return numbers
