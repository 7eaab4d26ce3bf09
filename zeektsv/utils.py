# zeektsv/utils.py
import json
from datetime import datetime

from zeektsv.coercion import EMPTY, UNSET
from zeektsv.errors import FormatError

STAMP_FORMAT = "%Y-%m-%d-%H-%M-%S"


def parse_stamp(stamp):
    """
    Parse an #open/#close stamp (YYYY-MM-DD-HH-MM-SS) into a naive datetime.

    Zeek writes these in the sensor's wall-clock time, so no timezone is
    attached. Returns None for None.
    """
    if stamp is None:
        return None
    if not isinstance(stamp, str):
        raise FormatError(f"timestamp directive must be a single token, got {stamp!r}")
    try:
        return datetime.strptime(stamp, STAMP_FORMAT)
    except ValueError as exc:
        raise FormatError(f"malformed timestamp {stamp!r} (expected YYYY-MM-DD-HH-MM-SS)") from exc


def format_stamp(dt):
    return dt.strftime(STAMP_FORMAT)


def to_jsonable(value, timestamps="iso"):
    """
    Render one decoded value for JSON output.

    EMPTY becomes None; UNSET must be filtered out by the caller.
    """
    if value is EMPTY:
        return None
    if isinstance(value, datetime):
        if timestamps == "epoch":
            return int(value.timestamp())
        return value.isoformat()
    return value


def record_to_json(record, timestamps="iso"):
    """
    Plain dict for a Record, UNSET fields dropped.
    """
    return {
        name: to_jsonable(value, timestamps)
        for name, value in record.items()
        if value is not UNSET
    }


def metadata_to_json(metadata):
    return {
        name: list(value) if isinstance(value, tuple) else value
        for name, value in metadata.items()
    }


def write_json_lines(objects, fp):
    """
    Write one JSON document per line to an open text stream.
    Returns the number of lines written.
    """
    n = 0
    for obj in objects:
        fp.write(json.dumps(obj) + "\n")
        n += 1
    return n
