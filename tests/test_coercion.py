from datetime import datetime, timezone

import pytest

from zeektsv.coercion import EMPTY, UNSET, decode, encode
from zeektsv.errors import CoercionError

ALL_TYPES = ["string", "addr", "enum", "date", "port", "count", "int", "interval", "bool", "set[addr]"]


@pytest.mark.parametrize("type_name", ALL_TYPES)
def test_sentinels_win_over_declared_type(type_name):
    assert decode("(empty)", type_name) is EMPTY
    assert decode("-", type_name) is UNSET


@pytest.mark.parametrize("type_name", ALL_TYPES)
def test_custom_sentinels(type_name):
    assert decode("<none>", type_name, empty_field="<none>", unset_field="??") is EMPTY
    assert decode("??", type_name, empty_field="<none>", unset_field="??") is UNSET
    # the defaults are plain text once overridden
    assert decode("-", "string", empty_field="<none>", unset_field="??") == "-"


def test_empty_and_unset_are_distinct():
    assert EMPTY is not UNSET
    assert EMPTY != UNSET
    assert encode(EMPTY, "count") == "(empty)"
    assert encode(UNSET, "count") == "-"


def test_date_epoch_seconds():
    ts = decode("1700000000", "date")
    assert ts == datetime.fromtimestamp(1700000000, tz=timezone.utc)
    assert ts.tzinfo is not None
    assert encode(ts, "date") == "1700000000"


def test_date_fraction_is_truncated():
    ts = decode("1700000000.987654", "date")
    assert ts == datetime.fromtimestamp(1700000000, tz=timezone.utc)
    assert encode(ts, "date") == "1700000000"


def test_encode_naive_datetime_as_utc():
    assert encode(datetime(2023, 11, 14, 22, 13, 20), "date") == "1700000000"
    assert encode(1700000000, "date") == "1700000000"


def test_count_and_port_reject_negative():
    assert decode("443", "port") == 443
    assert decode("0", "count") == 0
    with pytest.raises(CoercionError, match="negative"):
        decode("-3", "count")
    with pytest.raises(CoercionError):
        decode("+3", "port")
    with pytest.raises(CoercionError, match="negative"):
        encode(-1, "count")


def test_int_allows_sign():
    assert decode("-42", "int") == -42
    assert decode("+7", "int") == 7
    assert encode(-42, "int") == "-42"


@pytest.mark.parametrize("text,type_name", [
    ("abc", "count"),
    ("5\n", "count"),
    ("-5\n", "int"),
    ("2.5\n", "interval"),
    ("1700000000\n", "date"),
    ("1_000", "count"),
    (" 5", "int"),
    ("1.5", "int"),
    ("nan", "interval"),
    ("inf", "interval"),
    ("", "interval"),
    ("yesterday", "date"),
])
def test_malformed_numbers(text, type_name):
    with pytest.raises(CoercionError):
        decode(text, type_name)


def test_interval():
    assert decode("0.25", "interval") == 0.25
    assert decode("3", "interval") == 3.0
    assert decode("1e-05", "interval") == 1e-05
    assert encode(0.25, "interval") == "0.25"


def test_numeric_round_trip_is_numeric_only():
    assert encode(decode("007", "count"), "count") == "7"
    assert encode(decode("3.50", "interval"), "interval") == "3.5"
    assert decode(encode(decode("3.50", "interval"), "interval"), "interval") == 3.5


def test_bool():
    assert decode("T", "bool") is True
    assert decode("F", "bool") is False
    assert decode("true", "bool") is False
    assert encode(True, "bool") == "T"
    assert encode(False, "bool") == "F"
    for v in (True, False):
        assert decode(encode(v, "bool"), "bool") is v


def test_bool_encode_rejects_non_bool():
    with pytest.raises(CoercionError):
        encode(1, "bool")
    with pytest.raises(CoercionError):
        encode(True, "count")


@pytest.mark.parametrize("text,type_name", [
    ("hello world", "string"),
    ("fe80::1", "addr"),
    ("tcp", "enum"),
    ("a,b,c", "set[string]"),
    ("whatever", "subnet"),
])
def test_text_types_round_trip(text, type_name):
    value = decode(text, type_name)
    assert value == text
    assert encode(value, type_name) == text
