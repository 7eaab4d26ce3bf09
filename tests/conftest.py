import pytest

CONN_LOG = "\n".join([
    "#separator \\x09",
    "#set_separator\t,",
    "#empty_field\t(empty)",
    "#unset_field\t-",
    "#path\tconn",
    "#open\t2024-01-15-10-00-00",
    "#fields\tts\tuid\tid.orig_h\tid.orig_p\tproto\tservice\tduration\torig_bytes\tlocal_orig\ttunnel_parents",
    "#types\tdate\tstring\taddr\tport\tenum\tstring\tinterval\tcount\tbool\tset[string]",
    "1700000000\tCabc1\t10.0.0.1\t5353\tudp\tdns\t0.25\t120\tT\t(empty)",
    "1700000005\tCabc2\t10.0.0.2\t443\ttcp\t-\t1.5\t-\tF\tCx,Cy",
    "#close\t2024-01-15-11-00-00",
]) + "\n"


@pytest.fixture
def conn_log():
    return CONN_LOG


@pytest.fixture
def conn_log_path(tmp_path):
    path = tmp_path / "conn.log"
    path.write_text(CONN_LOG, encoding="utf-8")
    return path
