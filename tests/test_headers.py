"""Tests for header block parsing."""

from facteur.mime.headers import HeaderMap, parse_header_block, split_message, unfold


class TestParseHeaderBlock:
    """Tests for parse_header_block()."""

    def test_lowercases_names(self):
        headers = parse_header_block("Subject: Hi\nX-Mailer: test")

        assert list(headers) == ["subject", "x-mailer"]
        assert headers["subject"] == "Hi"

    def test_folds_continuation_lines(self):
        headers = parse_header_block("Subject: Hello\n  World")

        assert headers["subject"] == "Hello World"

    def test_folds_tab_continuation(self):
        headers = parse_header_block(
            'Content-Type: multipart/mixed;\n\tboundary="XYZ"'
        )

        assert headers["content-type"] == 'multipart/mixed; boundary="XYZ"'

    def test_indented_line_with_colon_is_continuation(self):
        headers = parse_header_block("Subject: Hello\n  Re: World")

        assert dict(headers) == {"subject": "Hello Re: World"}

    def test_repeated_headers_become_list(self):
        headers = parse_header_block(
            "Received: from a\nReceived: from b\n  by c\nSubject: x"
        )

        assert headers["received"] == ["from a", "from b by c"]
        assert headers.first("received") == "from a"
        assert headers.last("received") == "from b by c"
        assert headers.all("subject") == ["x"]

    def test_crlf_lines(self):
        headers = parse_header_block("Subject: Hi\r\nFrom: a@b.c\r\n")

        assert headers["subject"] == "Hi"
        assert headers["from"] == "a@b.c"

    def test_lines_before_first_header_ignored(self):
        headers = parse_header_block("  stray\nSubject: Hi")

        assert dict(headers) == {"subject": "Hi"}

    def test_accepts_line_list(self):
        headers = parse_header_block(["Subject: Hi", "To: a@b.c"])

        assert headers["to"] == "a@b.c"


class TestHeaderMap:
    """Tests for HeaderMap lookups."""

    def test_case_insensitive(self):
        headers = HeaderMap([("Content-Type", "text/plain")])

        assert "CONTENT-TYPE" in headers
        assert headers["Content-Type"] == "text/plain"

    def test_missing_header_defaults(self):
        headers = HeaderMap()

        assert headers.get("subject") is None
        assert headers.first("subject") is None
        assert headers.last("subject", "") == ""
        assert headers.all("subject") == []


class TestSplitMessage:
    """Tests for split_message()."""

    def test_splits_on_first_blank_line(self):
        head, body = split_message("Subject: Hi\n\nline 1\n\nline 2")

        assert head == "Subject: Hi"
        assert body == "line 1\n\nline 2"

    def test_crlf_blank_line(self):
        head, body = split_message("Subject: Hi\r\n\r\nBody\r\n")

        assert head == "Subject: Hi\r"
        assert body == "Body\r\n"

    def test_no_body(self):
        head, body = split_message("Subject: Hi")

        assert head == "Subject: Hi"
        assert body is None


def test_unfold_joins_continuations():
    assert unfold("Subject: Hello\n  World\nTo: a@b.c") == "Subject: Hello World\nTo: a@b.c"
