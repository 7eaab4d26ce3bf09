# zeektsv/coercion.py
import enum
import re
from datetime import datetime, timezone

from zeektsv.errors import CoercionError

DEFAULT_EMPTY_FIELD = "(empty)"
DEFAULT_UNSET_FIELD = "-"

TRUE_TOKEN = "T"
FALSE_TOKEN = "F"

_UNSIGNED_RE = re.compile(r"[0-9]+")
_SIGNED_RE = re.compile(r"[+-]?[0-9]+")
_EPOCH_RE = re.compile(r"([+-]?[0-9]+)(?:\.[0-9]*)?")
_FLOAT_RE = re.compile(r"[+-]?(?:[0-9]+(?:\.[0-9]*)?|\.[0-9]+)(?:[eE][+-]?[0-9]+)?")


class Missing(enum.Enum):
    """The two ways a field can carry no value."""

    EMPTY = "empty"
    UNSET = "unset"

    def __repr__(self):
        return self.name


EMPTY = Missing.EMPTY
UNSET = Missing.UNSET


# ----------------------------------------------------------------------
# Type registry
# ----------------------------------------------------------------------
# Each entry defines:
#   - desc:   short description (for --list-types)
#   - python: the Python type decode() produces
TYPES = {
    "string": {"desc": "Text, stored verbatim.", "python": str},
    "addr": {"desc": "Network address, stored verbatim.", "python": str},
    "enum": {"desc": "Enumeration label, stored verbatim.", "python": str},
    "date": {"desc": "Unix epoch seconds (fraction truncated).", "python": datetime},
    "port": {"desc": "Transport port, unsigned integer.", "python": int},
    "count": {"desc": "Counter, unsigned integer.", "python": int},
    "int": {"desc": "Signed integer.", "python": int},
    "interval": {"desc": "Duration in seconds.", "python": float},
    "bool": {"desc": "T is true, anything else false.", "python": bool},
}


def _decode_unsigned(text, type_name):
    if not _UNSIGNED_RE.fullmatch(text):
        if text.startswith("-") and _SIGNED_RE.fullmatch(text):
            raise CoercionError(f"{type_name} must not be negative: {text!r}")
        raise CoercionError(f"not a valid {type_name}: {text!r}")
    return int(text)


def _decode_int(text, type_name):
    if not _SIGNED_RE.fullmatch(text):
        raise CoercionError(f"not a valid {type_name}: {text!r}")
    return int(text)


def _decode_interval(text, type_name):
    if not _FLOAT_RE.fullmatch(text):
        raise CoercionError(f"not a valid {type_name}: {text!r}")
    return float(text)


def _decode_date(text, type_name):
    m = _EPOCH_RE.fullmatch(text)
    if not m:
        raise CoercionError(f"not a valid {type_name}: {text!r}")
    try:
        return datetime.fromtimestamp(int(m.group(1)), tz=timezone.utc)
    except (OverflowError, OSError, ValueError) as exc:
        raise CoercionError(f"{type_name} out of range: {text!r}") from exc


def _decode_bool(text, type_name):
    return text == TRUE_TOKEN


_DECODERS = {
    "date": _decode_date,
    "port": _decode_unsigned,
    "count": _decode_unsigned,
    "int": _decode_int,
    "interval": _decode_interval,
    "bool": _decode_bool,
}


def decode(text, type_name, empty_field=DEFAULT_EMPTY_FIELD, unset_field=DEFAULT_UNSET_FIELD):
    """
    Turn one token into its typed value.

    The sentinels win over the declared type: a token equal to 'empty_field'
    is EMPTY and one equal to 'unset_field' is UNSET, whatever the type.
    string/addr/enum and unrecognized type tags keep the text verbatim.
    """
    if text == empty_field:
        return EMPTY
    if text == unset_field:
        return UNSET

    decoder = _DECODERS.get(type_name)
    if decoder is None:
        return text
    return decoder(text, type_name)


def _is_integer(value):
    # bool is an int subclass but never a valid count/int
    return isinstance(value, int) and not isinstance(value, bool)


def _encode_date(value, type_name):
    if isinstance(value, datetime):
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        return str(int(value.timestamp()))
    if _is_integer(value):
        return str(value)
    raise CoercionError(f"cannot encode {value!r} as {type_name}")


def _encode_unsigned(value, type_name):
    if not _is_integer(value):
        raise CoercionError(f"cannot encode {value!r} as {type_name}")
    if value < 0:
        raise CoercionError(f"{type_name} must not be negative: {value!r}")
    return str(value)


def _encode_int(value, type_name):
    if not _is_integer(value):
        raise CoercionError(f"cannot encode {value!r} as {type_name}")
    return str(value)


def _encode_interval(value, type_name):
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise CoercionError(f"cannot encode {value!r} as {type_name}")
    return repr(float(value))


def _encode_bool(value, type_name):
    if not isinstance(value, bool):
        raise CoercionError(f"cannot encode {value!r} as {type_name}")
    return TRUE_TOKEN if value else FALSE_TOKEN


_ENCODERS = {
    "date": _encode_date,
    "port": _encode_unsigned,
    "count": _encode_unsigned,
    "int": _encode_int,
    "interval": _encode_interval,
    "bool": _encode_bool,
}


def encode(value, type_name, empty_field=DEFAULT_EMPTY_FIELD, unset_field=DEFAULT_UNSET_FIELD):
    """
    Inverse of decode(): turn a typed value back into its token.

    Numeric types only promise numeric equality on a round trip, not the
    original formatting (leading zeros, trailing '.0', fractional seconds).
    """
    if value is EMPTY:
        return empty_field
    if value is UNSET:
        return unset_field

    encoder = _ENCODERS.get(type_name)
    if encoder is None:
        return str(value)
    return encoder(value, type_name)
