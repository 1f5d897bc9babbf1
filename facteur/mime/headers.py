"""Header block parsing.

Turns a raw header block into a HeaderMap: lowercase header names mapped
to the values of every occurrence, with folded continuation lines joined.
"""

import re
from collections.abc import Iterable, Iterator, Mapping

# A header line starts with a field name followed by a colon
_FIELD = re.compile(r"^([a-zA-Z0-9-]+):")

# Header and body are separated by the first blank line
_BLANK_LINE = re.compile(r"\n\s*\n")


class HeaderMap(Mapping):
    """Ordered mapping of lowercase header name to its value(s).

    Indexing returns a str for a header seen once and a list[str] for a
    repeated header such as Received. Use first(), last() or all() when a
    call site needs one shape.

    Example:
        headers = parse_header_block("Received: a\\nReceived: b\\nSubject: Hi")
        headers["subject"]        # "Hi"
        headers["received"]       # ["a", "b"]
        headers.first("received") # "a"
    """

    def __init__(self, items: Iterable[tuple[str, str]] = ()):
        self._values: dict[str, list[str]] = {}
        for name, value in items:
            self.add(name, value)

    def add(self, name: str, value: str) -> None:
        self._values.setdefault(name.lower(), []).append(value)

    def __getitem__(self, name: str) -> str | list[str]:
        values = self._values[name.lower()]
        if len(values) == 1:
            return values[0]
        return list(values)

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and name.lower() in self._values

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __repr__(self) -> str:
        return f"HeaderMap({dict(self)!r})"

    def all(self, name: str) -> list[str]:
        """Every value of a header, in order. Empty if absent."""
        return list(self._values.get(name.lower(), []))

    def first(self, name: str, default: str | None = None) -> str | None:
        values = self._values.get(name.lower())
        return values[0] if values else default

    def last(self, name: str, default: str | None = None) -> str | None:
        values = self._values.get(name.lower())
        return values[-1] if values else default

    def append_continuation(self, name: str, text: str) -> None:
        """Fold a continuation line into the latest value of a header."""
        values = self._values[name.lower()]
        values[-1] = f"{values[-1]} {text}"


def parse_header_block(head: str | Iterable[str]) -> HeaderMap:
    """Parse a header block into a HeaderMap.

    Lines are trimmed. A line that begins with whitespace continues the
    previous header, joined by one space. Otherwise a line that starts with
    "Name:" opens a header and any other non-empty line continues the
    previous one. Lines before the first header are ignored.
    """
    lines = head.split("\n") if isinstance(head, str) else head

    headers = HeaderMap()
    key = None
    for line in lines:
        # Indented lines always continue the previous header, even when
        # they contain a colon
        if key is not None and line[:1].isspace():
            if line.strip():
                headers.append_continuation(key, line.strip())
            continue

        line = line.strip()
        match = _FIELD.match(line)
        if match:
            key = match.group(1)
            headers.add(key, line[match.end():].strip())
            continue

        if key is not None and line:
            headers.append_continuation(key, line)

    return headers


def split_message(content: str) -> tuple[str, str | None]:
    """Split raw message text on the first blank line.

    Returns:
        (head, body); body is None when there is no blank line.
    """
    parts = _BLANK_LINE.split(content, maxsplit=1)
    if len(parts) == 1:
        return parts[0], None
    return parts[0], parts[1]


def unfold(head: str) -> str:
    """Join folded header lines so each header sits on one line.

    Lines are trimmed; a line starting with whitespace is appended to the
    previous one with a single space.
    """
    unfolded: list[str] = []
    for line in head.split("\n"):
        if line.strip() and line[:1].isspace() and unfolded:
            unfolded[-1] = f"{unfolded[-1]} {line.strip()}"
            continue
        unfolded.append(line.strip())
    return "\n".join(unfolded)
