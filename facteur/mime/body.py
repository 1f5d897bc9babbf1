"""MIME body decoding.

Walks a message (or part) recursively: multipart containers are split on
their boundary and each section decoded in turn; leaf parts have their
transfer encoding undone and are filed either as inline content, keyed by
content type, or as named attachments.
"""

import base64
import binascii
import logging
import quopri
from dataclasses import dataclass, field

from facteur.mime.headers import parse_header_block, split_message
from facteur.mime.models import Attachment

logger = logging.getLogger(__name__)

# Raw text comes off the wire decoded as UTF-8 with surrogateescape, so the
# original bytes can always be recovered.
RAW_ENCODING = "utf-8"
RAW_ERRORS = "surrogateescape"

# 7bit parts are assumed to be in the legacy Japanese mail charset, which
# is a superset of ASCII.
SEVEN_BIT_CHARSET = "iso2022_jp"

DEFAULT_CHARSET = "utf-8"


@dataclass
class ContentType:
    """A parsed Content-Type header value."""

    type: str
    parameters: dict[str, str] = field(default_factory=dict)

    @property
    def boundary(self) -> str | None:
        return self.parameters.get("boundary")

    @property
    def name(self) -> str | None:
        return self.parameters.get("name")

    @property
    def charset(self) -> str | None:
        return self.parameters.get("charset")

    @property
    def is_multipart(self) -> bool:
        return self.boundary is not None


@dataclass
class DecodedBody:
    """Result of decoding a message body.

    Attributes:
        parts: Inline content keyed by content type. Text types are str,
               everything else bytes.
        attachments: Named parts, in the order they appear.
    """

    parts: dict[str, str | bytes] = field(default_factory=dict)
    attachments: list[Attachment] = field(default_factory=list)

    def __bool__(self) -> bool:
        return bool(self.parts or self.attachments)


def parse_content_type(value: str) -> ContentType:
    """Split a Content-Type value into its type and parameters.

    Parameter names are lowercased and quotes are stripped from values.

    Example:
        >>> parse_content_type('multipart/mixed; boundary="XYZ"')
        ContentType(type='multipart/mixed', parameters={'boundary': 'XYZ'})
    """
    content_type, _, rest = value.partition(";")

    parameters = {}
    for item in rest.replace('"', "").replace("'", "").split(";"):
        key, eq, param = item.strip().partition("=")
        if eq:
            parameters[key.strip().lower()] = param.strip()

    return ContentType(type=content_type.strip().lower(), parameters=parameters)


def decode_body(content: str, result: DecodedBody | None = None) -> DecodedBody:
    """Decode a message or MIME part.

    Args:
        content: Raw text of the part, headers included.
        result: Accumulator shared across the recursion.

    Returns:
        The DecodedBody with every leaf part found so far. A part without a
        Content-Type header adds nothing.
    """
    if result is None:
        result = DecodedBody()

    head, body = split_message(content)
    headers = parse_header_block(head)

    raw_type = headers.last("content-type")
    if raw_type is None:
        return result

    content_type = parse_content_type(raw_type)
    body = body or ""

    if content_type.is_multipart:
        for section in split_sections(body, content_type.boundary):
            decode_body(section, result)
        return result

    payload = decode_transfer_encoding(body, headers.first("content-transfer-encoding"))

    if content_type.name is not None:
        result.attachments.append(
            Attachment(
                name=content_type.name,
                content_type=content_type.type,
                payload=payload,
            )
        )
    else:
        result.parts[content_type.type] = _as_text(payload, content_type)

    return result


def split_sections(body: str, boundary: str) -> list[str]:
    """Split a multipart body on its boundary.

    The preamble before the first boundary and the epilogue after the
    closing boundary are dropped. The segment after the last boundary
    line is always treated as the epilogue, so a body that never closes
    loses its final part. The line break that precedes each boundary
    belongs to the delimiter and is removed from the sections.
    """
    boundary = boundary.strip("\"'")
    sections = body.split(f"--{boundary}")
    return [_trim_delimiter(section) for section in sections[1:-1]]


def _trim_delimiter(section: str) -> str:
    if section.endswith("\r\n"):
        return section[:-2]
    if section.endswith("\n"):
        return section[:-1]
    return section


def decode_transfer_encoding(body: str, encoding: str | None) -> str | bytes:
    """Undo a Content-Transfer-Encoding.

    base64 and quoted-printable give bytes, binary gives the original bytes,
    7bit is read as ISO-2022-JP text, and any other declared encoding only
    has newlines and spaces removed. Without an encoding the body is
    returned as is.
    """
    if encoding is None:
        return body

    encoding = encoding.strip().lower()
    raw = body.encode(RAW_ENCODING, RAW_ERRORS)

    if encoding == "base64":
        try:
            return base64.b64decode(raw)
        except (binascii.Error, ValueError) as e:
            logger.warning("Invalid base64 payload: %s", e)
            return b""
    if encoding == "quoted-printable":
        return quopri.decodestring(raw)
    if encoding == "binary":
        return raw
    if encoding == "7bit":
        return raw.decode(SEVEN_BIT_CHARSET, errors="replace")

    return body.replace("\n", "").replace(" ", "")


def _as_text(payload: str | bytes, content_type: ContentType) -> str | bytes:
    """Decode text/* payloads with their charset; leave other bytes alone."""
    if isinstance(payload, str) or not content_type.type.startswith("text/"):
        return payload
    charset = content_type.charset or DEFAULT_CHARSET
    try:
        return payload.decode(charset, errors="replace")
    except LookupError:
        return payload.decode(DEFAULT_CHARSET, errors="replace")
