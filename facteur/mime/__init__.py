"""RFC 822 / MIME message parsing.

Usage:
    from facteur.mime import parse_message

    message = parse_message(raw_text)
    print(message.subject, message.from_.email)
    print(message.body.get("text/plain"))
"""

from facteur.mime.body import DecodedBody, decode_body, parse_content_type
from facteur.mime.headers import HeaderMap, parse_header_block, split_message
from facteur.mime.message import parse_message
from facteur.mime.models import Address, Attachment, Message
from facteur.mime.rfc822 import (
    NO_SUBJECT,
    decode_address,
    decode_mime_words,
    parse_rfc822_headers,
)

__all__ = [
    "Address",
    "Attachment",
    "Message",
    "DecodedBody",
    "HeaderMap",
    "NO_SUBJECT",
    "parse_message",
    "decode_body",
    "parse_content_type",
    "parse_header_block",
    "split_message",
    "parse_rfc822_headers",
    "decode_address",
    "decode_mime_words",
]
