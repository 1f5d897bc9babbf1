"""Data models for parsed messages."""

from dataclasses import dataclass, field
from datetime import datetime

# POP3 has a single mailbox
POP3_MAILBOX = "INBOX"


@dataclass
class Address:
    """One mailbox from an address header.

    For "John Doe <john@example.com>": name="John Doe", mailbox="john",
    host="example.com".
    """

    name: str = ""  # Display name, RFC 2047 decoded
    mailbox: str = ""  # Local part
    host: str = ""  # Domain

    @property
    def email(self) -> str:
        """mailbox@host, or whichever part is present."""
        if self.mailbox and self.host:
            return f"{self.mailbox}@{self.host}"
        return self.mailbox or self.host

    def __str__(self) -> str:
        if self.name:
            return f"{self.name} <{self.email}>"
        return self.email

    def to_dict(self) -> dict:
        return {"name": self.name, "email": self.email}


@dataclass
class Attachment:
    """A named MIME part, decoded."""

    name: str
    content_type: str
    payload: bytes | str

    @property
    def size(self) -> int:
        return len(self.payload)

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "content_type": self.content_type,
            "size": self.size,
        }


@dataclass
class Message:
    """A message retrieved from a POP3 mailbox, fully parsed.

    Contains the thread details, addresses, decoded body parts and
    attachments, plus the raw text it was parsed from.
    """

    id: str  # Message-ID, or a generated "<no-id-...>"
    subject: str
    from_: Address
    topic: str  # Thread-Topic, falling back to the subject
    parent: str | None = None  # In-Reply-To
    mailbox: str = POP3_MAILBOX
    date: datetime | None = None
    to: list[Address] = field(default_factory=list)
    cc: list[Address] = field(default_factory=list)
    bcc: list[Address] = field(default_factory=list)
    flags: list[str] = field(default_factory=list)
    has_attachments: bool = False  # Top-level type is multipart/mixed
    attachments: list[Attachment] = field(default_factory=list)
    body: dict[str, str | bytes] = field(default_factory=dict)
    # Body parts keyed by content type, e.g. {"text/plain": "...", "text/html": "..."}
    raw: str = ""

    @property
    def text(self) -> str | None:
        """The text/plain body, if there is one."""
        value = self.body.get("text/plain")
        return value if isinstance(value, str) else None

    @property
    def html(self) -> str | None:
        """The text/html body, if there is one."""
        value = self.body.get("text/html")
        return value if isinstance(value, str) else None

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization.

        Binary body parts are reported by size only.
        """
        return {
            "id": self.id,
            "parent": self.parent,
            "topic": self.topic,
            "mailbox": self.mailbox,
            "date": self.date.isoformat() if self.date else None,
            "subject": self.subject,
            "from": self.from_.to_dict(),
            "to": [addr.to_dict() for addr in self.to],
            "cc": [addr.to_dict() for addr in self.cc],
            "bcc": [addr.to_dict() for addr in self.bcc],
            "flags": self.flags,
            "has_attachments": self.has_attachments,
            "attachments": [att.to_dict() for att in self.attachments],
            "body": {
                content_type: value if isinstance(value, str) else f"<{len(value)} bytes>"
                for content_type, value in self.body.items()
            },
        }
