"""Message assembly.

Combines the envelope fields, the header map and the decoded body of a
raw message into a Message record.
"""

import hashlib
import uuid
from collections.abc import Iterable

from facteur.mime.body import decode_body
from facteur.mime.headers import parse_header_block, split_message, unfold
from facteur.mime.models import Message
from facteur.mime.rfc822 import decode_mime_words, parse_rfc822_headers

# Windows-1252 right single quote read as UTF-8
_MOJIBAKE_APOSTROPHE = "â€™"


def parse_message(raw: str, flags: Iterable[str] = ()) -> Message:
    """Parse the raw text of a message into a Message.

    Args:
        raw: The message as retrieved (headers, blank line, body).
        flags: Flags to attach to the record.

    Returns:
        The assembled Message. It always has an id (generated when the
        Message-ID header is missing) and a subject ("(no subject)" when
        blank).
    """
    head, body = split_message(raw)
    head = unfold(head.replace("\r", ""))

    envelope = parse_rfc822_headers(head)
    headers = parse_header_block(head)

    subject = envelope.subject.replace("<", "").replace(">", "").strip()
    subject = decode_mime_words(subject).replace(_MOJIBAKE_APOSTROPHE, "'")

    thread_topic = headers.first("thread-topic")
    topic = decode_mime_words(thread_topic) if thread_topic else subject

    in_reply_to = headers.first("in-reply-to")
    parent = in_reply_to.replace('"', "") if in_reply_to is not None else None

    message_id = headers.first("message-id")
    if message_id is not None:
        message_id = message_id.replace('"', "")
    else:
        message_id = generate_message_id()

    content_type = headers.last("content-type") or ""

    message = Message(
        id=message_id,
        parent=parent,
        topic=topic,
        date=envelope.date,
        subject=subject,
        from_=envelope.from_,
        to=envelope.to,
        cc=envelope.cc,
        bcc=envelope.bcc,
        flags=list(flags),
        has_attachments=content_type.lower().startswith("multipart/mixed"),
        raw=raw,
    )

    if body is not None and body.strip() and body.strip() != ")":
        decoded = decode_body(raw)
        message.body = decoded.parts or {"text/plain": body}
        message.attachments = decoded.attachments

    return message


def generate_message_id() -> str:
    """Unique placeholder id for messages without a Message-ID header."""
    digest = hashlib.md5(uuid.uuid4().bytes).hexdigest()
    return f"<no-id-{digest}>"
