"""
Tests for the Protocol Parser

These tests verify the ProtocolParser class:
- parse_request(): Parse raw commands into Command objects
- format_response(): Format Response objects into wire frames

Run with: python -m pytest tests/test_protocol.py -v
"""

import pytest
from kvsession.exceptions import ProtocolError
from kvsession.protocol.commands import CommandType, Response, ResponseStatus
from kvsession.protocol.framing import HEADER
from kvsession.protocol.parser import REPLY_TOO_LONG, ProtocolParser


class TestParseRequestStoreCommands:
    """Test parsing GET, PUT and DELETE."""

    def test_parse_put_basic(self, parser: ProtocolParser):
        cmd = parser.parse_request("PUT key value")

        assert cmd.type == CommandType.PUT
        assert cmd.key == "key"
        assert cmd.value == "value"

    def test_parse_put_extra_tokens_ignored(self, parser: ProtocolParser):
        """Test only the third token is taken as the value."""
        cmd = parser.parse_request("PUT key first second")

        assert cmd.type == CommandType.PUT
        assert cmd.value == "first"

    def test_parse_put_any_whitespace(self, parser: ProtocolParser):
        cmd = parser.parse_request("PUT\tkey   value\n")

        assert cmd.key == "key"
        assert cmd.value == "value"

    @pytest.mark.parametrize("raw", ["PUT", "PUT key"])
    def test_parse_put_missing_args(self, parser: ProtocolParser, raw):
        with pytest.raises(ProtocolError) as exc_info:
            parser.parse_request(raw)
        assert str(exc_info.value) == "Invalid PUT command. Format: PUT <key> <value>"

    def test_parse_get(self, parser: ProtocolParser):
        cmd = parser.parse_request("GET key")

        assert cmd.type == CommandType.GET
        assert cmd.key == "key"

    def test_parse_get_missing_key(self, parser: ProtocolParser):
        with pytest.raises(ProtocolError) as exc_info:
            parser.parse_request("GET")
        assert str(exc_info.value) == "Invalid GET command. Format: GET <key>"

    def test_parse_get_long_key_passes_parser(self, parser: ProtocolParser):
        """Test key length is left to the store."""
        cmd = parser.parse_request("GET averyverylongkey")
        assert cmd.key == "averyverylongkey"

    def test_parse_delete(self, parser: ProtocolParser):
        cmd = parser.parse_request("DELETE *")

        assert cmd.type == CommandType.DELETE
        assert cmd.key == "*"

    def test_parse_delete_missing_key(self, parser: ProtocolParser):
        with pytest.raises(ProtocolError) as exc_info:
            parser.parse_request("DELETE")
        assert str(exc_info.value) == "Invalid DELETE command. Format: DELETE <key>"


class TestParseRequestControlCommands:
    """Test parsing KEYS, SELECTED, QUIT and unknown verbs."""

    def test_parse_keys(self, parser: ProtocolParser):
        assert parser.parse_request("KEYS").type == CommandType.KEYS

    def test_parse_quit(self, parser: ProtocolParser):
        assert parser.parse_request("QUIT").type == CommandType.QUIT

    def test_parse_selected(self, parser: ProtocolParser):
        cmd = parser.parse_request("SELECTED 1234-abcd")

        assert cmd.type == CommandType.SELECTED
        assert cmd.key == "1234-abcd"

    @pytest.mark.parametrize("raw", ["SELECTED", "SELECTED a b"])
    def test_parse_selected_wrong_token_count(self, parser: ProtocolParser, raw):
        with pytest.raises(ProtocolError) as exc_info:
            parser.parse_request(raw)
        assert str(exc_info.value) == "Invalid SELECTED command. Format: SELECTED <key>"

    @pytest.mark.parametrize("raw", ["put key value", "Get key", "quit", "keys"])
    def test_verbs_are_case_sensitive(self, parser: ProtocolParser, raw):
        assert parser.parse_request(raw).type == CommandType.UNKNOWN

    @pytest.mark.parametrize("raw", ["", "   ", "EXISTS key", "HELLO"])
    def test_unknown_commands(self, parser: ProtocolParser, raw):
        assert parser.parse_request(raw).type == CommandType.UNKNOWN

    @pytest.mark.parametrize("raw", [" PUT abc 1", "\tGET abc", "\nKEYS", "  QUIT"])
    def test_leading_whitespace_is_unknown(self, parser: ProtocolParser, raw):
        """Test a leading separator leaves an empty verb."""
        assert parser.parse_request(raw).type == CommandType.UNKNOWN

    def test_leading_whitespace_skips_usage_check(self, parser: ProtocolParser):
        """Test ' PUT' is an unknown command, not a malformed PUT."""
        assert parser.parse_request(" PUT").type == CommandType.UNKNOWN

    def test_trailing_whitespace_is_ignored(self, parser: ProtocolParser):
        cmd = parser.parse_request("GET abc  \n")

        assert cmd.type == CommandType.GET
        assert cmd.parts == ["GET", "abc"]

    def test_raw_is_kept(self, parser: ProtocolParser):
        assert parser.parse_request("KEYS").raw == "KEYS"


class TestFormatResponse:
    """Test format_response()."""

    def test_format_is_framed(self, parser: ProtocolParser):
        frame = parser.format_response(Response.stored())
        body = b"Value stored successfully"

        assert frame == HEADER.pack(len(body)) + body

    def test_format_empty_message(self, parser: ProtocolParser):
        """Test an empty KEYS reply is a zero-length frame."""
        assert parser.format_response(Response.keys_response([])) == b"\x00\x00"

    def test_format_oversized_reply(self, parser: ProtocolParser):
        frame = parser.format_response(Response.ok("x" * 70000))
        body = REPLY_TOO_LONG.encode()

        assert frame == HEADER.pack(len(body)) + body


class TestResponses:
    """Test the fixed reply texts."""

    def test_reply_texts(self):
        assert Response.stored().message == "Value stored successfully"
        assert Response.deleted().message == "Key deleted successfully"
        assert Response.deleted_all().message == "All values were deleted"
        assert Response.closed().message == "Connection closed"
        assert Response.selected().message == "Selected client disconnected other clients"
        assert Response.invalid_command().message == "Invalid command"

    def test_keys_response_joins_with_comma_space(self):
        assert Response.keys_response(["a", "b"]).message == "a, b"

    def test_statuses(self):
        assert Response.value_response("v").status == ResponseStatus.OK
        assert Response.invalid_command().status == ResponseStatus.ERROR
