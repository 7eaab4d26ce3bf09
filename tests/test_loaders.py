from datetime import datetime, timezone

import pytest

from zeektsv.coercion import EMPTY, UNSET
from zeektsv.errors import CoercionError, FormatError, ParityError
from zeektsv.loaders import load_zeek_tsv, parse


def _log(*lines):
    return "\n".join(lines) + "\n"


def test_two_record_scenario():
    doc = parse("#separator\t\\x09\n#fields\tid\tcount\n#types\tstring\tcount\nfoo\t3\nbar\t-\n")
    assert len(doc) == 2
    assert doc[0].to_dict() == {"id": "foo", "count": 3}
    assert doc[1]["id"] == "bar"
    assert doc[1]["count"] is UNSET


def test_conn_log(conn_log):
    doc = parse(conn_log)
    assert doc.path == "conn"
    assert doc.open == datetime(2024, 1, 15, 10, 0, 0)
    assert doc.close == datetime(2024, 1, 15, 11, 0, 0)
    assert doc.fields[:3] == ("ts", "uid", "id.orig_h")

    first, second = doc.records
    assert first["ts"] == datetime.fromtimestamp(1700000000, tz=timezone.utc)
    assert first["id.orig_p"] == 5353
    assert first["duration"] == 0.25
    assert first["orig_bytes"] == 120
    assert first["local_orig"] is True
    assert first["tunnel_parents"] is EMPTY
    assert second["service"] is UNSET
    assert second["orig_bytes"] is UNSET
    assert second["local_orig"] is False
    # set types are not split, only kept verbatim
    assert second["tunnel_parents"] == "Cx,Cy"
    assert list(first) == list(doc.fields)


def test_comma_separator_applies_to_directives_and_data():
    doc = parse(_log(
        "#separator \\x2c",
        "#fields,host,note",
        "#types,addr,string",
        "10.0.0.1,has space\tand tab",
        "#close,2024-01-15-11-00-00",
    ))
    assert doc.separator == ","
    assert doc.fields == ("host", "note")
    assert doc[0]["note"] == "has space\tand tab"
    assert doc.close == datetime(2024, 1, 15, 11, 0, 0)


def test_parity_error_has_line_number():
    text = _log(
        "#separator \\x09",
        "#fields\ta\tb\tc\td",
        "#types\tstring\tstring\tstring\tstring",
        "1\t2\t3\t4",
        "1\t2\t3",
    )
    with pytest.raises(ParityError) as info:
        parse(text)
    assert info.value.lineno == 5
    assert "line 5" in str(info.value)


def test_coercion_error_aborts_parse():
    text = _log(
        "#separator \\x09",
        "#fields\tid\tn",
        "#types\tstring\tcount",
        "a\t1",
        "b\tlots",
    )
    with pytest.raises(CoercionError) as info:
        parse(text)
    assert info.value.lineno == 5


def test_data_before_schema():
    with pytest.raises(FormatError) as info:
        parse(_log("#separator \\x09", "foo\tbar"))
    assert info.value.lineno == 2


def test_bad_separator_escape():
    with pytest.raises(FormatError) as info:
        parse(_log("#path conn", "#separator \\t", "#fields\ta", "#types\tstring", "x"))
    assert info.value.lineno == 2


def test_footer_is_merged_and_blank_lines_skipped():
    doc = parse(_log(
        "",
        "#separator \\x09",
        "#fields\tid",
        "#types\tstring",
        "a",
        "",
        "b",
        "#close\t2024-01-15-11-00-00",
        "",
        "",
    ))
    assert [r["id"] for r in doc] == ["a", "b"]
    assert doc.metadata["close"] == "2024-01-15-11-00-00"


def test_header_only_document():
    doc = parse(_log("#separator \\x09", "#fields\tid", "#types\tstring"))
    assert len(doc) == 0
    assert doc.fields == ("id",)


def test_crlf_line_endings():
    doc = parse("#separator \\x09\r\n#fields\tid\tn\r\n#types\tstring\tcount\r\nfoo\t3\r\n")
    assert doc[0].to_dict() == {"id": "foo", "n": 3}


def test_opaque_directives_preserved():
    doc = parse(_log(
        "#separator \\x09",
        "#zeek_version\t6.0.1",
        "#fields\tid",
        "#types\tstring",
        "a",
    ))
    assert doc.metadata["zeek_version"] == "6.0.1"


def test_document_accessors(conn_log):
    doc = parse(conn_log)
    assert doc.get(1, "uid") == "Cabc2"
    assert doc.column("proto") == ["udp", "tcp"]
    assert doc.rows(1) == [doc[1]]
    assert doc.to_dicts()[0]["uid"] == "Cabc1"
    with pytest.raises(KeyError):
        doc.get(0, "nope")
    with pytest.raises(KeyError):
        doc.column("nope")


def test_load_zeek_tsv(conn_log_path, conn_log):
    assert load_zeek_tsv(conn_log_path) == parse(conn_log)
