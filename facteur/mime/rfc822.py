"""RFC 822 header extraction.

Pulls the envelope fields (Message-ID, From, To, Cc, Bcc, Subject, Date)
out of a raw header block with one pattern per field, and decodes address
strings and RFC 2047 encoded words.
"""

import html
import logging
import re
from dataclasses import dataclass, field
from datetime import datetime
from email.errors import HeaderParseError
from email.header import decode_header, make_header
from email.utils import parsedate_to_datetime

from facteur.mime.headers import unfold
from facteur.mime.models import Address

logger = logging.getLogger(__name__)

NO_SUBJECT = "(no subject)"


def _field(name: str) -> re.Pattern:
    return re.compile(rf"^{name}:([^\n]*)", re.IGNORECASE | re.MULTILINE)


_MESSAGE_ID = _field("Message-ID")
_FROM = _field("From")
_TO = _field("To")
_CC = _field("Cc")
_BCC = _field("Bcc")
_SUBJECT = _field("Subject")
_DATE = _field("Date")

# "Name <addr>" with the name optional
_ANGLED = re.compile(r"([^<]*)<([^>]*)>")
_LOCAL_AND_HOST = re.compile(r"([^@]*)@(.*)")
_COMMENT = re.compile(r"\(.*\)")
_ENCODED_WORD = re.compile(r"=\?[^?\s]+\?[bBqQ]\?[^?\s]*\?=")


@dataclass
class RFC822Headers:
    """Envelope fields of a message header block."""

    message_id: str = ""
    from_: Address = field(default_factory=Address)
    to: list[Address] = field(default_factory=list)
    cc: list[Address] = field(default_factory=list)
    bcc: list[Address] = field(default_factory=list)
    subject: str = NO_SUBJECT
    date: datetime | None = None


def parse_rfc822_headers(head: str) -> RFC822Headers:
    """Extract the envelope fields from a raw header block.

    Angle brackets in the block are entity-encoded before matching so that
    stray "<" or ">" cannot break the field patterns; extracted values are
    decoded again.

    Args:
        head: The header block (folded or not).

    Returns:
        RFC822Headers. Missing fields get empty values, a missing or blank
        Subject becomes "(no subject)".
    """
    block = html.escape(unfold(head).replace("\r", ""), quote=False)

    from_value = _match(_FROM, block)
    if from_value is None:
        logger.debug("Header block has no From field")

    subject = _match(_SUBJECT, block)
    if subject is None or not subject.strip():
        subject = NO_SUBJECT

    return RFC822Headers(
        message_id=_match(_MESSAGE_ID, block) or "",
        from_=decode_address(from_value or ""),
        to=parse_address_list(_match(_TO, block)),
        cc=parse_address_list(_match(_CC, block)),
        bcc=parse_address_list(_match(_BCC, block)),
        subject=subject.strip(),
        date=parse_date(_match(_DATE, block)),
    )


def _match(pattern: re.Pattern, block: str) -> str | None:
    match = pattern.search(block)
    if match is None:
        return None
    return html.unescape(match.group(1)).strip()


def parse_address_list(value: str | None) -> list[Address]:
    """Decode each address of a comma-separated header value."""
    if not value:
        return []
    return [decode_address(item) for item in split_addresses(value)]


def split_addresses(value: str) -> list[str]:
    """Split an address header on commas outside quotes and angle brackets.

    Example:
        >>> split_addresses('"Doe, John" <j@x.org>, k@y.org')
        ['"Doe, John" <j@x.org>', 'k@y.org']
    """
    items = []
    current = []
    in_quotes = False
    in_angle = False
    for char in value:
        if char == '"' and not in_angle:
            in_quotes = not in_quotes
        elif char == "<" and not in_quotes:
            in_angle = True
        elif char == ">" and not in_quotes:
            in_angle = False
        elif char == "," and not in_quotes and not in_angle:
            items.append("".join(current))
            current = []
            continue
        current.append(char)
    items.append("".join(current))

    return [item.strip() for item in items if item.strip()]


def decode_address(text: str) -> Address:
    """Decode one address string.

    "Name <addr>" gives the name and the address inside the brackets; a bare
    string is all address. The address is split on "@" into mailbox and
    host; missing parts are empty strings.

    Examples:
        >>> decode_address("John Doe <john@example.com>")
        Address(name='John Doe', mailbox='john', host='example.com')
        >>> decode_address("john@example.com")
        Address(name='', mailbox='john', host='example.com')
    """
    text = html.unescape(text).strip()

    match = _ANGLED.search(text) if "<" in text else None
    if match:
        name = match.group(1).strip()
        email = match.group(2).strip()
    else:
        name = ""
        email = text

    if len(name) >= 2 and name[0] == name[-1] == '"':
        name = name[1:-1].strip()
    name = decode_mime_words(name)

    parts = _LOCAL_AND_HOST.match(email)
    if parts:
        mailbox, host = parts.group(1).strip(), parts.group(2).strip()
    else:
        mailbox, host = email.strip(), ""

    return Address(name=name, mailbox=mailbox, host=host)


def decode_mime_words(text: str) -> str:
    """Decode RFC 2047 encoded words ("=?utf-8?Q?...?=").

    Text without encoded words is returned unchanged. When decoding
    happens, underscores are turned into spaces.
    """
    if not text or not _ENCODED_WORD.search(text):
        return text
    try:
        decoded = str(make_header(decode_header(text)))
    except (HeaderParseError, LookupError, UnicodeDecodeError) as e:
        logger.debug("Could not decode %r: %s", text, e)
        return text
    return decoded.replace("_", " ")


def parse_date(value: str | None) -> datetime | None:
    """Parse a Date header value, ignoring trailing "(comments)".

    Returns None for a missing or unparseable date.
    """
    if not value:
        return None
    value = _COMMENT.sub("", value).strip()
    if not value:
        return None
    try:
        return parsedate_to_datetime(value)
    except (ValueError, TypeError, IndexError):
        return None
