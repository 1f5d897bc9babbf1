"""Tests for assembling Message records from raw text."""

import json
import re
from datetime import datetime, timezone

from facteur.mime import NO_SUBJECT, parse_message

# Sample messages

PLAIN_EMAIL = """\
Return-Path: <marie@example.com>
Received: from mx1.example.com by pop.example.com
Received: from mail.example.com
 by mx1.example.com
From: Marie Curie <marie@example.com>
To: Pierre Curie <pierre@example.com>
Cc: Irene <irene@example.com>
Date: Wed, 21 Feb 2024 08:30:00 +0000
Subject: Lab results
Message-ID: <lab001@example.com>
In-Reply-To: "<prev456@example.com>"
Content-Type: text/plain; charset="utf-8"

Pierre,

The samples are ready.
"""

MULTIPART_EMAIL = """\
From: Marie Curie <marie@example.com>
To: Pierre Curie <pierre@example.com>
Date: Thu, 22 Feb 2024 17:45:00 +0000
Subject: Radium samples
Message-ID: <lab002@example.com>
MIME-Version: 1.0
Content-Type: multipart/mixed; boundary="sep-42"

--sep-42
Content-Type: text/plain; charset="utf-8"

Plain text body.
--sep-42
Content-Type: text/html; charset="utf-8"

<p>Samples <b>ready</b>.</p>
--sep-42
Content-Type: application/pdf; name="report.pdf"
Content-Disposition: attachment
Content-Transfer-Encoding: base64

SlZCRVJpMHhMamNLJWVvZgo=
--sep-42--
"""

NO_HEADERS_EMAIL = """\
From: someone@example.com

A body with no content type.
"""


class TestParseMessage:
    """Tests for parse_message()."""

    def test_envelope(self):
        msg = parse_message(PLAIN_EMAIL)

        assert msg.id == "<lab001@example.com>"
        assert msg.subject == "Lab results"
        assert msg.topic == "Lab results"
        assert msg.mailbox == "INBOX"
        assert msg.from_.name == "Marie Curie"
        assert msg.from_.email == "marie@example.com"
        assert [str(addr) for addr in msg.to] == ["Pierre Curie <pierre@example.com>"]
        assert [addr.email for addr in msg.cc] == ["irene@example.com"]
        assert msg.bcc == []
        assert msg.date == datetime(2024, 2, 21, 8, 30, tzinfo=timezone.utc)

    def test_parent_quotes_stripped(self):
        msg = parse_message(PLAIN_EMAIL)

        assert msg.parent == "<prev456@example.com>"

    def test_plain_body(self):
        msg = parse_message(PLAIN_EMAIL)

        assert msg.body == {"text/plain": "Pierre,\n\nThe samples are ready.\n"}
        assert msg.text.startswith("Pierre,")
        assert msg.html is None
        assert msg.has_attachments is False
        assert msg.attachments == []

    def test_raw_kept(self):
        assert parse_message(PLAIN_EMAIL).raw == PLAIN_EMAIL

    def test_multipart_body_and_attachment(self):
        msg = parse_message(MULTIPART_EMAIL)

        assert msg.body == {
            "text/plain": "Plain text body.",
            "text/html": "<p>Samples <b>ready</b>.</p>",
        }
        assert msg.has_attachments is True
        assert [att.name for att in msg.attachments] == ["report.pdf"]
        assert msg.attachments[0].content_type == "application/pdf"
        assert isinstance(msg.attachments[0].payload, bytes)

    def test_mixed_flag_without_decodable_attachment(self):
        raw = (
            "From: a@x.org\n"
            "Content-Type: multipart/mixed; boundary=B\n\n"
            "--B\nContent-Type: text/plain\n\nonly text\n--B--\n"
        )

        msg = parse_message(raw)

        assert msg.has_attachments is True
        assert msg.attachments == []

    def test_undecodable_body_wrapped_as_plain_text(self):
        msg = parse_message(NO_HEADERS_EMAIL)

        assert msg.body == {"text/plain": "A body with no content type.\n"}

    def test_missing_message_id_generates_one(self):
        first = parse_message(NO_HEADERS_EMAIL)
        second = parse_message(NO_HEADERS_EMAIL)

        assert re.fullmatch(r"<no-id-[0-9a-f]{32}>", first.id)
        assert first.id != second.id

    def test_missing_subject_placeholder(self):
        msg = parse_message(NO_HEADERS_EMAIL)

        assert msg.subject == NO_SUBJECT
        assert msg.topic == NO_SUBJECT

    def test_thread_topic_overrides_subject(self):
        raw = "From: a@x.org\nSubject: Re: plans\nThread-Topic: plans\n\nbody\n"

        msg = parse_message(raw)

        assert msg.subject == "Re: plans"
        assert msg.topic == "plans"

    def test_subject_angle_brackets_removed(self):
        msg = parse_message("From: a@x.org\nSubject: <b>Sale</b> today\n\nbody\n")

        assert msg.subject == "bSale/b today"

    def test_encoded_subject_decoded(self):
        msg = parse_message("From: a@x.org\nSubject: =?utf-8?Q?Caf=C3=A9_ouvert?=\n\nbody\n")

        assert msg.subject == "Café ouvert"

    def test_mojibake_apostrophe_repaired(self):
        msg = parse_message("From: a@x.org\nSubject: Itâ€™s here\n\nbody\n")

        assert msg.subject == "It's here"

    def test_folded_subject(self):
        msg = parse_message("From: a@x.org\nSubject: Hello\n  World\n\nbody\n")

        assert msg.subject == "Hello World"

    def test_headers_only_has_empty_body(self):
        msg = parse_message("From: a@x.org\nSubject: nothing")

        assert msg.body == {}

    def test_blank_body_is_empty(self):
        msg = parse_message("From: a@x.org\n\n   \n")

        assert msg.body == {}

    def test_crlf_message(self):
        msg = parse_message(MULTIPART_EMAIL.replace("\n", "\r\n"))

        assert msg.subject == "Radium samples"
        assert msg.id == "<lab002@example.com>"
        assert msg.body["text/plain"] == "Plain text body."
        assert msg.attachments[0].name == "report.pdf"

    def test_flags(self):
        msg = parse_message(PLAIN_EMAIL, flags=("seen",))

        assert msg.flags == ["seen"]

    def test_to_dict_is_json_serializable(self):
        data = parse_message(MULTIPART_EMAIL).to_dict()

        json.dumps(data)

        assert data["from"] == {"name": "Marie Curie", "email": "marie@example.com"}
        assert data["date"] == "2024-02-22T17:45:00+00:00"
        assert data["attachments"][0]["name"] == "report.pdf"
        assert "raw" not in data

    def test_repeated_content_type_uses_last(self):
        raw = (
            "From: a@x.org\n"
            "Content-Type: multipart/mixed; boundary=B\n"
            "Content-Type: text/plain\n\n"
            "plain body\n"
        )

        msg = parse_message(raw)

        assert msg.has_attachments is False
        assert msg.body == {"text/plain": "plain body\n"}
