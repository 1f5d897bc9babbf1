"""POP3 command/response framing.

Sends CRLF-terminated command lines and reads either a single status line
or a multi-line block terminated by a lone ".", undoing dot-stuffing.
"""

import logging
from dataclasses import dataclass

from facteur.errors import ProtocolError
from facteur.pop3.transport import LineStream

logger = logging.getLogger(__name__)

CRLF = "\r\n"

# Bytes that are not valid UTF-8 survive decoding and can be recovered
# with .encode("utf-8", "surrogateescape").
WIRE_ENCODING = "utf-8"
WIRE_ERRORS = "surrogateescape"

# Commands whose arguments must not end up in debug logs
_SECRET_COMMANDS = ("PASS ", "APOP ")


@dataclass
class Reply:
    """A parsed POP3 response.

    A Reply is truthy only for +OK responses, so callers can write
    `if not framing.call("DELE 3"): ...`.

    Attributes:
        ok: True if the status was +OK.
        status: The status token ("+OK", "-ERR", or "" if nothing was read).
        message: The rest of the status line, or the whole multi-line body.
    """

    ok: bool
    status: str = ""
    message: str = ""

    def __bool__(self) -> bool:
        return self.ok

    @classmethod
    def failed(cls) -> "Reply":
        return cls(ok=False)


class Pop3Framing:
    """Line-level POP3 conversation over a LineStream.

    Example:
        framing = Pop3Framing(transport, debug=True)
        reply = framing.call("RETR 1", multiline=True)
        if reply:
            print(reply.message)
    """

    def __init__(self, stream: LineStream, debug: bool = False):
        self._stream = stream
        self._debug = debug

    def send(self, command: str) -> bool:
        """Write a command line.

        Returns:
            True if the write succeeded.
        """
        if self._debug:
            logger.debug("Sending: %s", _mask(command))
        return self._stream.write((command + CRLF).encode(WIRE_ENCODING, WIRE_ERRORS))

    def receive(self, multiline: bool = False) -> Reply:
        """Read a response.

        Args:
            multiline: Read the data block that follows a +OK status line.

        Returns:
            The parsed Reply. A -ERR (or empty) status gives a falsy Reply
            and the data block, if any, is not read.

        Raises:
            ProtocolError: If the stream ends inside a multi-line block.
        """
        line = self._read()
        if self._debug:
            logger.debug("Receiving: %s", line.rstrip(CRLF))

        status, _, message = line.strip().partition(" ")
        if status != "+OK":
            return Reply(ok=False, status=status, message=message)

        if not multiline:
            return Reply(ok=True, status=status, message=message)

        chunks = []
        while True:
            line = self._read()
            if not line:
                raise ProtocolError("Connection closed before end of multi-line response")
            if line.rstrip(CRLF) == ".":
                break
            if line.startswith("."):
                line = line[1:]
            if self._debug:
                logger.debug("Receiving: %s", line.rstrip(CRLF))
            chunks.append(line)

        return Reply(ok=True, status=status, message="".join(chunks))

    def call(self, command: str, multiline: bool = False) -> Reply:
        """Send a command and read its response.

        Returns a failed Reply without reading anything if the send failed.
        """
        if not self.send(command):
            return Reply.failed()
        return self.receive(multiline)

    def _read(self) -> str:
        return self._stream.read_line().decode(WIRE_ENCODING, WIRE_ERRORS)


def _mask(command: str) -> str:
    """Hide the password (or APOP digest) in a command line."""
    if not command.upper().startswith(_SECRET_COMMANDS):
        return command
    head, _, rest = command.partition(" ")
    if head.upper() == "APOP":
        user = rest.split(" ")[0]
        return f"{head} {user} ********"
    return f"{head} ********"
