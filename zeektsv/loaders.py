# zeektsv/loaders.py
import logging

from zeektsv.errors import ZeekTSVError
from zeektsv.metadata import DirectiveParser, is_directive
from zeektsv.records import LogDocument, RecordDecoder

logger = logging.getLogger(__name__)


def _is_meta_line(line):
    return line == "" or is_directive(line)


def parse(text):
    """
    Parse the full text of one Zeek TSV log into a LogDocument.

    The leading block of blank/#-lines is the header, the trailing block the
    footer; everything in between is data. Both blocks go through the same
    DirectiveParser, so the footer is split with the separator the header
    declared. Any error aborts the whole parse and carries the 1-based line
    number it happened on.
    """
    lines = [line.rstrip("\r") for line in text.split("\n")]
    n = len(lines)

    start = 0
    while start < n and _is_meta_line(lines[start]):
        start += 1

    stop = n
    while stop > start and _is_meta_line(lines[stop - 1]):
        stop -= 1

    directives = DirectiveParser()
    for lineno, line in _numbered(lines, 0, start):
        _feed_directive(directives, line, lineno)
    for lineno, line in _numbered(lines, stop, n):
        _feed_directive(directives, line, lineno)
    metadata = directives.metadata()

    records = []
    decoder = None
    for lineno, line in _numbered(lines, start, stop):
        if line == "":
            continue
        try:
            if decoder is None:
                decoder = RecordDecoder(metadata)
            records.append(decoder.decode_line(line))
        except ZeekTSVError as exc:
            raise exc.at_line(lineno) from exc

    logger.debug(f"Parsed {len(records)} records ({len(metadata)} directives)")
    return LogDocument(metadata, records)


def _numbered(lines, start, stop):
    for i in range(start, stop):
        yield i + 1, lines[i]


def _feed_directive(parser, line, lineno):
    try:
        parser.feed(line)
    except ZeekTSVError as exc:
        raise exc.at_line(lineno) from exc


def load_zeek_tsv(path):
    """
    Load a Zeek TSV file (conn.log, dns.log, etc.) into a LogDocument.
    """
    with open(path, "r", encoding="utf-8", newline="") as f:
        text = f.read()
    logger.debug(f"Read {len(text)} characters from {path}")
    return parse(text)
