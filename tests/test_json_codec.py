"""Tests for the incremental JSON codec."""

from __future__ import annotations

import json

import pytest

from ircrelay.errors import DecodeError, EncodeError
from ircrelay.irc.json_codec import JsonCodec
from ircrelay.irc.message import TAG_FLAG, Message, Numeric, Token
from tests.fixtures.sample_lines import PRIVMSG_JSON


class TestSerialize:
    def test_privmsg_shape(self):
        msg = Message(command="PRIVMSG", args=["#chan", "hi"])
        assert JsonCodec.serialize(msg) == PRIVMSG_JSON

    def test_field_order_and_values(self):
        msg = Message(
            command="001", args=["nick", "Welcome"], sender="irc.example.com",
            tags={"time": "now", "+flag": TAG_FLAG},
        )
        doc = json.loads(JsonCodec.serialize(msg))
        assert list(doc) == ["tags", "source", "verb", "params"]
        assert doc == {
            "tags": {"time": "now", "+flag": True},
            "source": "irc.example.com",
            "verb": 1,
            "params": ["nick", "Welcome"],
        }

    def test_ctcp_prefix_kept(self):
        doc = json.loads(JsonCodec.serialize(Message(command="ctcp_action", args=["#c"])))
        assert doc["verb"] == "ctcp_action"

    def test_non_ascii_written_as_utf8(self):
        out = JsonCodec.serialize(Message(command="privmsg", args=["#c", "héllo"]))
        assert "héllo".encode() in out

    def test_bad_tag_value_type_is_encode_error(self):
        msg = Message(command="privmsg", args=["#c"], tags={"n": 5})
        with pytest.raises(EncodeError):
            JsonCodec.serialize(msg)


class TestParse:
    def test_round_trip(self):
        msg = Message(
            command="kick", args=["#room", "bob", "bye now"], sender="",
            tags={"label": "x", "+f": TAG_FLAG},
        )
        assert JsonCodec.parse(JsonCodec.serialize(msg)) == msg

    def test_numeric_verb_from_string_or_int(self):
        assert JsonCodec.parse('{"verb": "001"}').command == Numeric(1)
        assert JsonCodec.parse('{"verb": 1}').command == Numeric(1)
        assert JsonCodec.parse('{"verb": 1000}').command == Token("1000")

    def test_defaults_for_missing_fields(self):
        msg = JsonCodec.parse('{"verb": "PING"}')
        assert msg == Message(command="ping", args=[], sender=None, tags={})

    def test_tag_keys_lowercased(self):
        assert JsonCodec.parse('{"verb":"x","tags":{"Time":"t"}}').tags == {"time": "t"}

    def test_extra_fields_ignored(self):
        assert JsonCodec.parse('{"verb":"x","extra":1}').command == Token("x")

    @pytest.mark.parametrize(
        "raw",
        [
            "{}",
            '{"verb": ""}',
            '{"verb": true}',
            '{"verb": "x", "params": [1]}',
            '{"verb": "x", "tags": {"a": false}}',
            '{"verb": "x", "source": 3}',
            '{"verb": "x",}',
        ],
    )
    def test_invalid_documents(self, raw):
        with pytest.raises(DecodeError) as exc_info:
            JsonCodec.parse(raw)
        assert exc_info.value.data["wire_format"] == "json"


class TestIncremental:
    def test_back_to_back_values_without_separator(self):
        codec = JsonCodec()
        got = codec.add_data(PRIVMSG_JSON + PRIVMSG_JSON + PRIVMSG_JSON)
        assert len(got) == 3
        assert codec.buffer == b""

    def test_value_spanning_chunks(self):
        codec = JsonCodec()
        expected = JsonCodec().add_data(PRIVMSG_JSON)
        for cut in range(1, len(PRIVMSG_JSON)):
            codec = JsonCodec()
            assert codec.add_data(PRIVMSG_JSON[:cut]) == []
            assert codec.add_data(PRIVMSG_JSON[cut:]) == expected

    def test_braces_and_quotes_inside_strings(self):
        raw = json.dumps({"verb": "privmsg", "params": ["#c", 'a } " { ] \\ [']}).encode()
        codec = JsonCodec()
        (msg,) = codec.add_data(raw[:10]) + codec.add_data(raw[10:] + PRIVMSG_JSON[:5])
        assert msg.args == ["#c", 'a } " { ] \\ [']
        assert codec.buffer == PRIVMSG_JSON[:5]

    def test_whitespace_between_values(self):
        codec = JsonCodec()
        assert len(codec.add_data(PRIVMSG_JSON + b"\r\n  " + PRIVMSG_JSON + b"\n")) == 2
        assert codec.finish() == b""

    def test_non_object_value_rejected(self):
        with pytest.raises(DecodeError):
            JsonCodec().add_data(b'["verb"]')

    def test_native_line_rejected(self):
        with pytest.raises(DecodeError):
            JsonCodec().add_data(b"PRIVMSG #c :hi\r\n")

    def test_unterminated_value_reported_at_finish(self):
        codec = JsonCodec()
        codec.add_data(b'{"verb": "pri')
        with pytest.raises(DecodeError):
            codec.finish()
