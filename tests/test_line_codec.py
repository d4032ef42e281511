"""Tests for the native line codec."""

from __future__ import annotations

import pytest

from ircrelay.errors import DecodeError, EncodeError
from ircrelay.irc.line_codec import LineCodec
from ircrelay.irc.message import TAG_FLAG, Message, Numeric, Token
from tests.fixtures.sample_lines import NATIVE_SESSION, TAGGED_PRIVMSG, WELCOME_LINE


class TestParse:
    def test_welcome_numeric(self):
        msg = LineCodec.parse(WELCOME_LINE.decode())
        assert msg.sender == "irc.example.com"
        assert msg.command == Numeric(1)
        assert msg.args == ["nick", "Welcome"]
        assert msg.tags == {}

    def test_tags_flag_and_sender(self):
        msg = LineCodec.parse(TAGGED_PRIVMSG.decode())
        assert msg.tags == {
            "time": "2015-01-01T00:00:00Z",
            "account": "alice",
            "+draft/typing": TAG_FLAG,
        }
        assert msg.sender == "alice!a@host"
        assert msg.command == Token("privmsg")
        assert msg.args == ["#chan", "hello there"]

    def test_tag_keys_case_folded_and_empty_value_kept(self):
        msg = LineCodec.parse("@Msgid=;FOO=Bar PING\r\n")
        assert msg.tags == {"msgid": "", "foo": "Bar"}

    def test_no_sender_is_absent(self):
        assert LineCodec.parse("PING :x\r\n").sender is None

    def test_sender_followed_by_several_spaces(self):
        msg = LineCodec.parse(":srv   NOTICE * :hi\r\n")
        assert msg.sender == "srv"
        assert msg.args == ["*", "hi"]

    def test_bare_colon_sender_ignored(self):
        msg = LineCodec.parse(": PING x\r\n")
        assert msg.sender is None
        assert msg.command == Token("ping")

    def test_bare_lf_terminator(self):
        assert LineCodec.parse("QUIT\n").command == Token("quit")

    def test_empty_trailing_parameter(self):
        msg = LineCodec.parse("PRIVMSG #c :\r\n")
        assert msg.args == ["#c", ""]

    def test_trailing_may_contain_colon_sequences(self):
        msg = LineCodec.parse("PRIVMSG #c :a :b c\r\n")
        assert msg.args == ["#c", "a :b c"]

    def test_formatting_codes_kept_in_last_parameter(self):
        (msg,) = LineCodec().add_data(b"PRIVMSG #chan \x1dword \x1fx\r\n")
        assert msg.args == ["#chan", "\x1dword", "\x1fx"]
        assert LineCodec.serialize(msg) == b"PRIVMSG #chan \x1dword \x1fx\r\n"

    def test_tab_inside_middle_parameter(self):
        msg = LineCodec.parse("PRIVMSG a\tb :hi\r\n")
        assert msg.args == ["a\tb", "hi"]

    def test_non_space_whitespace_round_trips(self):
        msg = Message(command="mode", args=["#caf\xe9\xa0x\ty", "+o"])
        assert LineCodec.parse(LineCodec.serialize(msg).decode("utf-8")) == msg

    @pytest.mark.parametrize("line", [":only.sender\r\n", "@a=b :srv\r\n", "@a=b\r\n"])
    def test_missing_command_is_decode_error(self, line):
        with pytest.raises(DecodeError) as exc_info:
            LineCodec.parse(line)
        assert exc_info.value.data["wire_format"] == "rfc1459"


class TestSerialize:
    def test_welcome_round_trip_is_byte_identical(self):
        msg = LineCodec.parse(WELCOME_LINE.decode())
        assert LineCodec.serialize(msg) == WELCOME_LINE

    def test_tagged_round_trip_is_byte_identical(self):
        msg = LineCodec.parse(TAGGED_PRIVMSG.decode())
        assert LineCodec.serialize(msg) == TAGGED_PRIVMSG

    def test_command_only(self):
        assert LineCodec.serialize(Message(command="startjson")) == b"STARTJSON\r\n"

    def test_numeric_padded(self):
        msg = Message(command=Numeric(5), args=["nick", "ok"])
        assert LineCodec.serialize(msg) == b"005 nick ok\r\n"

    def test_last_parameter_with_space_gets_colon(self):
        msg = Message(command="privmsg", args=["#c", "hi there"], sender="n!u@h")
        assert LineCodec.serialize(msg) == b":n!u@h PRIVMSG #c :hi there\r\n"

    def test_empty_sender_not_emitted(self):
        msg = Message(command="ping", args=["x"], sender="")
        assert LineCodec.serialize(msg) == b"PING x\r\n"

    def test_flag_tag_renders_bare_key(self):
        msg = Message(command="tagmsg", args=["#c"], tags={"+typing": TAG_FLAG, "a": "1"})
        assert LineCodec.serialize(msg) == b"@+typing;a=1 TAGMSG #c\r\n"

    def test_ctcp_prefix_stripped(self):
        msg = Message(command="ctcp_action", args=["#c", "waves"])
        assert LineCodec.serialize(msg) == b"ACTION #c waves\r\n"

    def test_empty_and_colon_last_parameters_stay_parseable(self):
        for last in ("", ":)"):
            msg = Message(command="privmsg", args=["#c", last])
            assert LineCodec.parse(LineCodec.serialize(msg).decode()) == msg

    @pytest.mark.parametrize(
        "msg",
        [
            Message(command="privmsg", args=["#a b", "x"]),
            Message(command="privmsg", args=["", "x"]),
            Message(command="privmsg", args=["#c", "line\r\nbreak"]),
            Message(command="privmsg", args=["#c"], sender="a b"),
            Message(command="privmsg", args=["#c"], tags={"bad;key": "v"}),
            Message(command="privmsg", args=["#c"], tags={"k": "has space"}),
            Message(command=Token("two words")),
        ],
    )
    def test_unrepresentable_message_is_encode_error(self, msg):
        with pytest.raises(EncodeError):
            LineCodec.serialize(msg)

    def test_round_trip_of_constructed_message(self):
        msg = Message(
            command="kick",
            args=["#room", "bob", "too much noise"],
            sender="op!o@h",
            tags={"label": "7", "+flag": TAG_FLAG},
        )
        assert LineCodec.parse(LineCodec.serialize(msg).decode()) == msg


class TestIncremental:
    def test_partial_line_stays_buffered(self):
        codec = LineCodec()
        assert codec.add_data(b"PING :ab") == []
        assert codec.buffer == b"PING :ab"
        assert codec.add_data(b"c\r\n") == [Message(command="ping", args=["abc"])]
        assert codec.buffer == b""

    def test_split_at_every_boundary_matches_single_feed(self):
        expected = LineCodec().add_data(NATIVE_SESSION)
        assert len(expected) == 5
        for cut in range(1, len(NATIVE_SESSION)):
            codec = LineCodec()
            got = codec.add_data(NATIVE_SESSION[:cut]) + codec.add_data(NATIVE_SESSION[cut:])
            assert got == expected

    def test_byte_at_a_time(self):
        codec = LineCodec()
        got = []
        for i in range(len(NATIVE_SESSION)):
            got.extend(codec.add_data(NATIVE_SESSION[i : i + 1]))
        assert [m.command for m in got] == [
            Token("nick"), Token("user"), Token("join"), Token("privmsg"), Token("mode"),
        ]

    def test_blank_lines_skipped(self):
        assert LineCodec().add_data(b"\r\n  \r\nPING x\r\n") == [
            Message(command="ping", args=["x"])
        ]

    def test_next_message_consumes_one_line_at_a_time(self):
        codec = LineCodec()
        codec.feed(b"PING a\r\nPING b\r\n{")
        assert codec.next_message().args == ["a"]
        assert codec.buffer == b"PING b\r\n{"

    def test_invalid_utf8_replaced(self):
        (msg,) = LineCodec().add_data(b"PRIVMSG #c :\xff\r\n")
        assert msg.args == ["#c", "�"]

    def test_finish_returns_unterminated_fragment(self):
        codec = LineCodec()
        codec.add_data(b"PING x\r\nPAR")
        assert codec.finish() == b"PAR"
        assert codec.buffer == b""
