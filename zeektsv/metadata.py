# zeektsv/metadata.py
import logging
import re
from collections.abc import Mapping

from zeektsv.coercion import DEFAULT_EMPTY_FIELD, DEFAULT_UNSET_FIELD
from zeektsv.errors import FormatError, ParityError
from zeektsv.utils import parse_stamp

logger = logging.getLogger(__name__)

MARKER = "#"
DEFAULT_SEPARATOR = "\t"
DEFAULT_SET_SEPARATOR = ","

RESERVED = (
    "separator",
    "set_separator",
    "empty_field",
    "unset_field",
    "path",
    "open",
    "fields",
    "types",
    "close",
)

_ESCAPE_RE = re.compile(r"\\x([0-9a-fA-F]{2})")


def decode_separator(token):
    """
    Decode a '\\xHH' token into the character it names.
    """
    if not isinstance(token, str):
        raise FormatError(f"separator must be a single token, got {token!r}")
    m = _ESCAPE_RE.fullmatch(token)
    if not m:
        raise FormatError(f"undecodable separator escape {token!r} (expected \\xHH)")
    return chr(int(m.group(1), 16))


def encode_separator(char):
    if len(char) != 1 or ord(char) > 0xFF:
        raise FormatError(f"separator {char!r} cannot be written as \\xHH")
    return "\\x%02x" % ord(char)


def is_directive(line):
    return line.startswith(MARKER)


def parse_directive(line, separator=None):
    """
    Split one '#name<sep>value...' line into (name, value).

    'separator' None means the default whitespace split, used until a
    #separator directive has been read. One value token gives a str,
    several give a tuple.
    """
    if not is_directive(line):
        raise FormatError(f"expected a directive line starting with {MARKER!r}: {line!r}")

    body = line[len(MARKER):]
    tokens = body.split() if separator is None else body.split(separator)
    if len(tokens) < 2 or not tokens[0]:
        raise FormatError(f"directive without a value: {line!r}")

    name, values = tokens[0], tokens[1:]
    if len(values) == 1:
        return name, values[0]
    return name, tuple(values)


class Metadata(Mapping):
    """
    Read-only, ordered view of a log's directives.

    Indexing gives the raw directive values (str or tuple of str); the
    properties interpret the reserved ones and fill in Zeek's defaults.
    """

    def __init__(self, directives=None):
        self._directives = dict(directives or {})

    def __getitem__(self, name):
        return self._directives[name]

    def __iter__(self):
        return iter(self._directives)

    def __len__(self):
        return len(self._directives)

    def __repr__(self):
        return f"Metadata({self._directives!r})"

    def _scalar(self, name, default=None):
        value = self._directives.get(name, default)
        if isinstance(value, tuple):
            raise FormatError(f"#{name} must be a single token, got {len(value)}")
        return value

    def _sequence(self, name):
        value = self._directives.get(name)
        if value is None:
            return None
        if isinstance(value, str):
            return (value,)
        return value

    @property
    def separator(self):
        if "separator" not in self._directives:
            return DEFAULT_SEPARATOR
        return decode_separator(self._directives["separator"])

    @property
    def set_separator(self):
        return self._scalar("set_separator", DEFAULT_SET_SEPARATOR)

    @property
    def empty_field(self):
        return self._scalar("empty_field", DEFAULT_EMPTY_FIELD)

    @property
    def unset_field(self):
        return self._scalar("unset_field", DEFAULT_UNSET_FIELD)

    @property
    def path(self):
        return self._scalar("path")

    @property
    def open(self):
        return parse_stamp(self._directives.get("open"))

    @property
    def close(self):
        return parse_stamp(self._directives.get("close"))

    @property
    def fields(self):
        return self._sequence("fields")

    @property
    def types(self):
        return self._sequence("types")

    def has_schema(self):
        return "fields" in self._directives and "types" in self._directives

    def schema(self):
        """
        Return ((field, type), ...) or raise if the schema is missing or
        #fields and #types disagree in length.
        """
        if not self.has_schema():
            raise FormatError("data line before #fields and #types")
        fields, types = self.fields, self.types
        if len(fields) != len(types):
            raise ParityError(f"#fields declares {len(fields)} names but #types declares {len(types)}")
        return tuple(zip(fields, types))

    def opaque(self):
        """Directives with no reserved meaning, in declaration order."""
        return [(name, value) for name, value in self._directives.items() if name not in RESERVED]


class DirectiveParser:
    """
    Accumulates directive lines into a Metadata block.

    Tracks the active separator: whitespace until a #separator directive is
    read, the declared character afterwards.
    """

    def __init__(self):
        self.separator = None
        self.directives = {}

    def feed(self, line):
        """
        Consume one blank or directive line. Blank lines are skipped.
        The line is fully parsed before any state changes.
        """
        if line == "":
            return None

        name, value = parse_directive(line, self.separator)
        if name == "separator":
            separator = decode_separator(value)
            logger.debug(f"Adopted separator {separator!r}")
            self.separator = separator
        self.directives[name] = value
        return name

    def feed_block(self, lines):
        for line in lines:
            self.feed(line)

    def metadata(self):
        """Snapshot of what has been read so far."""
        return Metadata(self.directives)


def parse_metadata(lines):
    """
    Parse a block of header (or footer) lines into Metadata.
    """
    parser = DirectiveParser()
    parser.feed_block(lines)
    return parser.metadata()
