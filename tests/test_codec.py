"""
Tests for the wire codec and response records

Run with: python -m pytest tests/test_codec.py -v
"""

import json

import pytest

from kvclient.errors import ProtocolError, ServerError
from kvclient.protocol.codec import WireCodec
from kvclient.protocol.commands import Command
from kvclient.protocol.responses import Entry, QueryPage


class TestEncodeCommand:
    """Test request line encoding."""

    def test_encode_command(self, codec: WireCodec):
        """Test a command becomes one newline-terminated JSON object."""
        cmd = Command.build("put").add_param("cacheName", "c").set_body({"key": "k", "val": 1})

        line = codec.encode_command(cmd)

        assert line.endswith(b"\n")
        assert line.count(b"\n") == 1
        message = json.loads(line)
        assert message["cmd"] == "put"
        assert message["params"] == {"cacheName": "c"}
        assert json.loads(message["body"]) == {"key": "k", "val": 1}

    def test_encode_keeps_param_order(self, codec: WireCodec):
        """Test parameters are written in insertion order."""
        cmd = Command.build("qryfetch").add_param("cacheName", "c").add_param("qryId", 1).add_param("psz", 2)

        line = codec.encode_command(cmd).decode()

        assert line.index("cacheName") < line.index("qryId") < line.index("psz")

    def test_decode_command(self, codec: WireCodec):
        """Test a request line decodes into an equal command."""
        cmd = Command.build("get").add_param("cacheName", "c").set_body({"key": "k"})

        decoded = codec.decode_command(codec.encode_command(cmd))

        assert decoded.name == "get"
        assert list(decoded.params.items()) == [("cacheName", "c")]
        assert decoded.json() == {"key": "k"}

    @pytest.mark.parametrize("line", [b"not json\n", b"[1, 2]\n", b'{"params": {}}\n'])
    def test_decode_bad_command(self, codec: WireCodec, line):
        with pytest.raises(ProtocolError):
            codec.decode_command(line)


class TestDecodeResponse:
    """Test response line decoding."""

    def test_success(self, codec: WireCodec):
        """Test a successful reply yields its response field."""
        assert codec.decode_response(b'{"successStatus": 0, "error": null, "response": [1]}\n') == [1]

    def test_success_without_response(self, codec: WireCodec):
        assert codec.decode_response(b'{"successStatus": 0}') is None

    def test_server_failure(self, codec: WireCodec):
        """Test a non-zero status raises ServerError with the server message."""
        with pytest.raises(ServerError) as excinfo:
            codec.decode_response(b'{"successStatus": 1, "error": "Failed to find cache"}\n')

        assert str(excinfo.value) == "Failed to find cache"
        assert excinfo.value.status == 1

    @pytest.mark.parametrize("line", [
        b"garbage\n",
        b"\xff\xfe\n",
        b'"text"\n',
        b'{"response": 1}\n',
        b'{"successStatus": "0"}\n',
        b'{"successStatus": true}\n',
    ])
    def test_malformed(self, codec: WireCodec, line):
        """Test malformed replies raise ProtocolError."""
        with pytest.raises(ProtocolError):
            codec.decode_response(line)

    def test_encode_response(self, codec: WireCodec):
        """Test server-side helpers produce lines the client decodes."""
        assert codec.decode_response(codec.encode_response({"a": 1})) == {"a": 1}
        with pytest.raises(ServerError):
            codec.decode_response(codec.encode_response(error="nope"))


class TestResponseRecords:
    """Test typed response records."""

    def test_entry_from_record(self):
        entry = Entry.from_record({"key": "a", "value": 1})

        assert entry == Entry("a", 1)
        assert entry.to_record() == {"key": "a", "value": 1}

    def test_entry_is_immutable(self):
        entry = Entry("a", 1)
        with pytest.raises(AttributeError):
            entry.key = "b"

    @pytest.mark.parametrize("record", [None, "a", {"key": "a"}, {"value": 1}])
    def test_entry_malformed(self, record):
        with pytest.raises(ProtocolError):
            Entry.from_record(record)

    def test_query_page_last(self):
        page = QueryPage.from_result({"items": [1], "last": True})

        assert page.items == [1]
        assert page.last is True
        assert page.query_id is None

    def test_query_page_with_id(self):
        """Test a non-final page keeps the query id."""
        page = QueryPage.from_result({"items": [], "last": False, "queryId": 0})

        assert page.last is False
        assert page.query_id == 0
