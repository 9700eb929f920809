import pytest

from ts_observer.errors.internal import DecodeError, QueryError
from ts_observer.query.codec import (
    decode_records,
    decode_status,
    encode_command,
    escape,
    is_frame_complete,
    parse_query_string,
    split_lines,
    unescape,
)
from ts_observer.query.models import ClientRecord, EnterEvent, LeftEvent


@pytest.mark.parametrize(
    "raw,escaped",
    [
        ("plain", "plain"),
        ("two words", "two\\swords"),
        ("a|b", "a\\pb"),
        ("path/to", "path\\/to"),
        ("back\\slash", "back\\\\slash"),
        ("tab\there", "tab\\there"),
        ("line\nbreak\r", "line\\nbreak\\r"),
    ],
)
def test_escape_and_unescape(raw, escaped):
    assert escape(raw) == escaped
    assert unescape(escaped) == raw


def test_escaped_value_never_contains_separators():
    escaped = escape("a b|c\r\nd")
    for ch in (" ", "|", "\r", "\n"):
        assert ch not in escaped


def test_unescape_rejects_unknown_sequence():
    with pytest.raises(DecodeError):
        unescape("bad\\x")


def test_unescape_rejects_dangling_backslash():
    with pytest.raises(DecodeError):
        unescape("trailing\\")


def test_parse_query_string_handles_flags_and_empty_values():
    fields = parse_query_string("notifycliententerview clid=5 client_nickname=Foo\\sBar empty=")
    assert fields == {
        "notifycliententerview": "",
        "clid": "5",
        "client_nickname": "Foo Bar",
        "empty": "",
    }


def test_parse_query_string_rejects_empty_key():
    with pytest.raises(DecodeError):
        parse_query_string("clid=5 =oops")


class TestEncodeCommand:
    """Command line construction."""

    def test_positional_args_are_escaped(self):
        assert encode_command("login", "serveradmin", "p w|d") == b"login serveradmin p\\sw\\pd\r\n"

    def test_options_rendered_as_key_value(self):
        payload = encode_command("servernotifyregister", options={"event": "server"})
        assert payload == b"servernotifyregister event=server\r\n"

    def test_integer_and_bool_arguments(self):
        assert encode_command("use", 1) == b"use 1\r\n"
        assert encode_command("flag", options={"on": True, "off": False}) == b"flag on=1 off=0\r\n"

    def test_bare_command(self):
        assert encode_command("clientlist") == b"clientlist\r\n"

    @pytest.mark.parametrize("name", ["", "two words", "bad\r\n"])
    def test_invalid_name_rejected(self, name):
        with pytest.raises(ValueError):
            encode_command(name)

    def test_invalid_option_key_rejected(self):
        with pytest.raises(ValueError):
            encode_command("use", options={"a=b": 1})


class TestDecodeStatus:
    """Status line handling."""

    def test_success(self):
        status = decode_status("error id=0 msg=ok\n\r")
        assert status.ok
        assert status.code == 0
        assert status.message == "ok"

    def test_failure_message_is_unescaped_verbatim(self):
        with pytest.raises(QueryError) as exc_info:
            decode_status("error id=520 msg=invalid\\sloginname\\sor\\spassword\n\r")
        assert exc_info.value.code == 520
        assert exc_info.value.message == "invalid loginname or password"
        assert str(exc_info.value) == "invalid loginname or password(520)"

    def test_status_after_data_line(self):
        assert decode_status("clid=1\n\rerror id=0 msg=ok\n\r").ok

    def test_crlf_terminators_accepted(self):
        assert decode_status("clid=1\r\nerror id=0 msg=ok\r\n").ok

    def test_missing_status_is_decode_error(self):
        with pytest.raises(DecodeError):
            decode_status("clid=1\n\r")

    def test_malformed_status_is_decode_error(self):
        with pytest.raises(DecodeError):
            decode_status("error id=abc msg=ok\n\r")


class TestDecodeRecords:
    """Data line decoding into typed records."""

    LISTING = (
        "clid=8 cid=1 client_database_id=1 client_nickname=serveradmin client_type=1 "
        "client_unique_identifier=serveradmin|"
        "clid=5 cid=2 client_database_id=9 client_nickname=Foo\\sBar client_type=0\n\r"
        "error id=0 msg=ok\n\r"
    )

    def test_records_decoded_in_order(self):
        records = decode_records(self.LISTING, ClientRecord)
        assert [r.client_id for r in records] == [8, 5]
        assert records[0].is_query_client
        assert records[1].nickname == "Foo Bar"
        assert not records[1].is_query_client

    def test_missing_data_line_is_none(self):
        assert decode_records("error id=0 msg=ok\n\r", ClientRecord) is None

    def test_blank_data_line_is_empty_list(self):
        assert decode_records("\n\rerror id=0 msg=ok\n\r", ClientRecord) == []

    def test_failed_status_wins_over_data(self):
        with pytest.raises(QueryError) as exc_info:
            decode_records("clid=1 cid=1\n\rerror id=1024 msg=invalid\\sserverID\n\r", ClientRecord)
        assert exc_info.value.code == 1024

    def test_missing_field_is_decode_error(self):
        with pytest.raises(DecodeError):
            decode_records("clid=1\n\rerror id=0 msg=ok\n\r", ClientRecord)


def test_event_models_from_notification_lines():
    enter = parse_query_string(
        "notifycliententerview cfid=0 ctid=1 clid=5 client_unique_identifier=abc\\/def= "
        "client_nickname=Foo client_country=US"
    )
    event = EnterEvent.model_validate(enter)
    assert event.client_id == 5
    assert event.unique_identifier == "abc/def="
    assert event.country == "US"

    left = LeftEvent.model_validate(parse_query_string("notifyclientleftview cfid=1 clid=5"))
    assert left.client_id == 5
    assert left.reason == ""


def test_split_lines_keeps_blank_result_line():
    assert split_lines("\n\rerror id=0 msg=ok\n\r") == ["", "error id=0 msg=ok"]


@pytest.mark.parametrize(
    "buffer,expected",
    [
        (b"error id=0 msg=ok\n\r", True),
        (b"clid=1\n\rerror id=0 msg=ok\r\n", True),
        (b"error id=0 msg=o", False),
        (b"notifyclientleftview clid=5\n\r", False),
    ],
)
def test_is_frame_complete(buffer, expected):
    assert is_frame_complete(buffer) is expected


def test_listing_response_round_trip():
    records = [
        ClientRecord(client_id=1, channel_id=1, client_database_id=1, client_type=1, nickname="serveradmin"),
        ClientRecord(client_id=7, channel_id=3, client_database_id=42, client_type=0, nickname="A|B c\\d"),
    ]
    assert encode_command("clientlist") == b"clientlist\r\n"

    line = "|".join(
        f"clid={r.client_id} cid={r.channel_id} client_database_id={r.client_database_id} "
        f"client_nickname={escape(r.nickname)} client_type={r.client_type}"
        for r in records
    )
    response = f"{line}\n\rerror id=0 msg=ok\n\r"
    assert decode_records(response, ClientRecord) == records
