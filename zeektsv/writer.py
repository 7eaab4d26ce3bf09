# zeektsv/writer.py
import logging

from zeektsv.coercion import encode
from zeektsv.metadata import MARKER, encode_separator
from zeektsv.utils import format_stamp

logger = logging.getLogger(__name__)


def _directive(name, value, separator):
    if isinstance(value, tuple):
        value = separator.join(value)
    return f"{MARKER}{name}{separator}{value}"


def header_lines(metadata):
    """
    Header directives in the canonical Zeek order, followed by any
    directives without a reserved meaning.
    """
    sep = metadata.separator
    # Zeek always writes #separator with a space: it is read before the
    # separator is known.
    yield f"{MARKER}separator {encode_separator(sep)}"
    yield _directive("set_separator", metadata.set_separator, sep)
    yield _directive("empty_field", metadata.empty_field, sep)
    yield _directive("unset_field", metadata.unset_field, sep)
    if metadata.path is not None:
        yield _directive("path", metadata.path, sep)
    if metadata.open is not None:
        yield _directive("open", format_stamp(metadata.open), sep)
    if metadata.fields is not None:
        yield _directive("fields", metadata.fields, sep)
    if metadata.types is not None:
        yield _directive("types", metadata.types, sep)
    for name, value in metadata.opaque():
        yield _directive(name, value, sep)


def footer_lines(metadata):
    if metadata.close is not None:
        yield _directive("close", format_stamp(metadata.close), metadata.separator)


def record_line(record, metadata):
    empty, unset = metadata.empty_field, metadata.unset_field
    tokens = [
        encode(record[name], type_name, empty, unset)
        for name, type_name in record.schema
    ]
    return metadata.separator.join(tokens)


def iter_lines(document):
    """
    Yield the canonical text of 'document' line by line (no newlines).
    """
    metadata = document.metadata
    yield from header_lines(metadata)
    for record in document:
        yield record_line(record, metadata)
    yield from footer_lines(metadata)


def serialize(document):
    """
    Canonical text of 'document', one '\\n'-terminated line per entry.

    The #separator line is always written as '#separator \\xHH' with a
    single space and a lowercase escape, so input spelled '#separator\\t\\x09'
    or '\\x2C' does not come back byte for byte. Parsing the output again
    and re-serializing it does.
    """
    return "".join(line + "\n" for line in iter_lines(document))


def dump(document, fp):
    n = 0
    for line in iter_lines(document):
        fp.write(line + "\n")
        n += 1
    return n


def write_zeek_tsv(document, path):
    with open(path, "w", encoding="utf-8", newline="") as f:
        n = dump(document, f)
    logger.debug(f"Wrote {n} lines to {path}")
