"""Tests for greeting parsing, STLS and the APOP/USER-PASS login."""

import pytest

from conftest import GREETING_APOP, FakeStream
from facteur.errors import LoginError, TLSError
from facteur.pop3.auth import (
    AuthMethod,
    Pop3Dialect,
    apop_digest,
    parse_apop_token,
)
from facteur.pop3.framing import Pop3Framing, Reply

RFC_TOKEN = "<1896.697170952@dbc.mtview.ca.us>"


class TestParseApopToken:
    """Tests for parse_apop_token()."""

    def test_extracts_token_with_brackets(self):
        assert parse_apop_token(GREETING_APOP) == RFC_TOKEN

    def test_no_token(self):
        assert parse_apop_token("+OK POP3 ready") is None

    def test_token_without_at_is_ignored(self):
        assert parse_apop_token("+OK ready <1896.697170952>") is None

    def test_only_first_bracket_pair_counts(self):
        assert parse_apop_token("+OK <abc> <1.2@host>") is None

    def test_unterminated_token(self):
        assert parse_apop_token("+OK ready <1.2@host") == "<1.2@host>"

    def test_dialect_reads_reply_message(self):
        reply = Reply(ok=True, status="+OK", message=f"POP3 ready {RFC_TOKEN}")
        assert Pop3Dialect().parse_greeting(reply) == RFC_TOKEN


def test_apop_digest_matches_rfc1939_example():
    assert apop_digest(RFC_TOKEN, "tanstaaf") == "c4c9334bac560ecc979e58001b3e22fb"


class TestAuthorize:
    """Tests for Pop3Dialect.authorize()."""

    def test_apop_success_skips_user_pass(self):
        stream = FakeStream(["+OK maildrop has 2 messages"])
        framing = Pop3Framing(stream)

        method = Pop3Dialect().authorize(framing, "mrose", "tanstaaf", RFC_TOKEN)

        assert method is AuthMethod.APOP
        assert stream.commands == ["APOP mrose c4c9334bac560ecc979e58001b3e22fb"]

    def test_apop_failure_falls_back_to_user_pass(self):
        stream = FakeStream(["-ERR permission denied", "+OK", "+OK logged in"])
        framing = Pop3Framing(stream)

        method = Pop3Dialect().authorize(framing, "mrose", "tanstaaf", RFC_TOKEN)

        assert method is AuthMethod.USER_PASS
        assert stream.commands == [
            "APOP mrose c4c9334bac560ecc979e58001b3e22fb",
            "USER mrose",
            "PASS tanstaaf",
        ]

    def test_no_token_uses_user_pass(self):
        stream = FakeStream(["+OK", "+OK logged in"])
        framing = Pop3Framing(stream)

        method = Pop3Dialect().authorize(framing, "mrose", "tanstaaf", None)

        assert method is AuthMethod.USER_PASS
        assert stream.commands == ["USER mrose", "PASS tanstaaf"]

    def test_rejected_pass_raises_login_error(self):
        stream = FakeStream(["+OK", "-ERR invalid password"])
        framing = Pop3Framing(stream)

        with pytest.raises(LoginError, match="mrose"):
            Pop3Dialect().authorize(framing, "mrose", "wrong", None)

    def test_rejected_user_still_sends_pass(self):
        stream = FakeStream(["-ERR", "+OK logged in"])
        framing = Pop3Framing(stream)

        method = Pop3Dialect().authorize(framing, "mrose", "tanstaaf", None)

        assert method is AuthMethod.USER_PASS
        assert stream.commands[-1] == "PASS tanstaaf"


class TestStartTls:
    """Tests for Pop3Dialect.start_tls()."""

    def test_upgrades_stream(self):
        stream = FakeStream(["+OK begin TLS"])
        framing = Pop3Framing(stream)

        Pop3Dialect().start_tls(framing, stream, "pop.example.com:110")

        assert stream.commands == ["STLS"]
        assert stream.tls_started is True

    def test_refused_stls(self):
        stream = FakeStream(["-ERR command not supported"])
        framing = Pop3Framing(stream)

        with pytest.raises(TLSError) as excinfo:
            Pop3Dialect().start_tls(framing, stream, "pop.example.com:110")

        assert excinfo.value.address == "pop.example.com:110"
        assert stream.tls_started is False

    def test_failed_handshake(self):
        stream = FakeStream(["+OK begin TLS"], tls_ok=False)
        framing = Pop3Framing(stream)

        with pytest.raises(TLSError, match="handshake failed"):
            Pop3Dialect().start_tls(framing, stream, "pop.example.com:110")


def test_logout_sends_quit_without_reading():
    stream = FakeStream(["+OK bye"])
    framing = Pop3Framing(stream)

    Pop3Dialect().logout(framing)

    assert stream.commands == ["QUIT"]
    assert len(stream.incoming) == 1
