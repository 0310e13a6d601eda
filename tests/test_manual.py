"""Tests for manual copy/paste delivery."""

from __future__ import annotations

import io

import pytest

from gworkspace_auth.auth.manual import (
    INSTRUCTIONS,
    ManualCodeCollector,
    parse_callback_input,
)
from gworkspace_auth.utils.errors import CallbackErrorKind, CallbackProtocolError


class TestParseCallbackInput:
    """Tests for parse_callback_input."""

    def test_full_url(self):
        result = parse_callback_input(
            "http://localhost:51122/oauth-callback?code=4/0Abc&state=s1", "s1"
        )
        assert result.code == "4/0Abc"
        assert result.state == "s1"

    def test_url_with_whitespace(self):
        result = parse_callback_input(
            "  http://localhost:51122/oauth-callback?code=xyz&state=s1\n", "s1"
        )
        assert result.code == "xyz"

    def test_url_without_state_uses_expected(self):
        result = parse_callback_input(
            "http://localhost:51122/oauth-callback?code=xyz", "s1"
        )
        assert result.state == "s1"

    def test_url_state_is_returned_verbatim(self):
        result = parse_callback_input(
            "http://localhost:51122/oauth-callback?code=xyz&state=other", "s1"
        )
        assert result.state == "other"

    def test_url_without_scheme(self):
        """Address bars that hide http:// still yield the query parameters."""
        result = parse_callback_input("localhost:51122/oauth-callback?code=X&state=Y", "E")
        assert result.code == "X"
        assert result.state == "Y"

    def test_host_and_path_without_port_or_scheme(self):
        result = parse_callback_input("localhost/oauth-callback?code=X&state=s1#frag", "s1")
        assert result.code == "X"
        assert result.state == "s1"

    def test_empty_state_is_rejected(self):
        with pytest.raises(CallbackProtocolError) as exc_info:
            parse_callback_input(
                "http://localhost:51122/oauth-callback?code=xyz&state=", "s1"
            )
        assert exc_info.value.kind is CallbackErrorKind.STATE_MISMATCH
        assert exc_info.value.message == "Missing 'state' parameter. Paste the full URL."

    def test_empty_code_is_missing(self):
        with pytest.raises(CallbackProtocolError) as exc_info:
            parse_callback_input("localhost:51122/oauth-callback?code=&state=s1", "s1")
        assert exc_info.value.kind is CallbackErrorKind.MISSING_CODE

    def test_bare_code(self):
        result = parse_callback_input("4/0AbcDefGhi", "s1")
        assert result.code == "4/0AbcDefGhi"
        assert result.state == "s1"

    def test_url_without_code(self):
        with pytest.raises(CallbackProtocolError) as exc_info:
            parse_callback_input("http://localhost:51122/oauth-callback?state=s1", "s1")
        assert exc_info.value.kind is CallbackErrorKind.MISSING_CODE
        assert exc_info.value.message == "Missing code parameter"

    @pytest.mark.parametrize("text", ["", "   ", "\n"])
    def test_blank_input(self, text):
        with pytest.raises(CallbackProtocolError) as exc_info:
            parse_callback_input(text, "s1")
        assert exc_info.value.kind is CallbackErrorKind.NO_INPUT


class TestManualCodeCollector:
    """Tests for the interactive collector."""

    def test_collect_prints_instructions_and_reads_line(self):
        stream = io.StringIO()
        collector = ManualCodeCollector(
            read_line=lambda: "http://localhost:51122/oauth-callback?code=abc&state=s1\n",
            stream=stream,
        )

        result = collector.collect("s1")

        assert result.code == "abc"
        output = stream.getvalue()
        assert INSTRUCTIONS in output
        assert "VPS/Remote Mode - Manual OAuth" in output
        assert "http://localhost:51122/oauth-callback?code=xxx&state=yyy" in output
        assert output.endswith("Paste the redirect URL here: ")

    def test_state_mismatch(self):
        collector = ManualCodeCollector(
            read_line=lambda: "http://localhost:51122/oauth-callback?code=abc&state=evil",
            stream=io.StringIO(),
        )

        with pytest.raises(CallbackProtocolError) as exc_info:
            collector.collect("s1")

        assert exc_info.value.kind is CallbackErrorKind.STATE_MISMATCH
        assert exc_info.value.message == "OAuth state mismatch - please try again"

    def test_eof_is_no_input(self):
        collector = ManualCodeCollector(read_line=lambda: "", stream=io.StringIO())

        with pytest.raises(CallbackProtocolError) as exc_info:
            collector.collect("s1")

        assert exc_info.value.kind is CallbackErrorKind.NO_INPUT

    def test_bare_code_accepted(self):
        collector = ManualCodeCollector(read_line=lambda: "4/0Abc\n", stream=io.StringIO())
        result = collector.collect("s1")
        assert result.code == "4/0Abc"
        assert result.state == "s1"
