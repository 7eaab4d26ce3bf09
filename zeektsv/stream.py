# zeektsv/stream.py
import logging

from zeektsv.errors import ZeekTSVError
from zeektsv.metadata import DirectiveParser, is_directive
from zeektsv.records import RecordDecoder

logger = logging.getLogger(__name__)

AWAITING_SCHEMA = "AwaitingSchema"
IN_BODY = "InBody"


class StreamParser:
    """
    Line-at-a-time Zeek TSV parser.

    feed() takes one line and returns a Record for data lines, None for
    blank and directive lines. finish() returns the accumulated Metadata
    once the input is exhausted.

    Directive lines update the metadata wherever they appear, so footer
    lines after the data (#close) are merged too. A header block arriving
    after data is not treated as a new schema for earlier records; it
    simply replaces the schema used for later lines.

    Not thread-safe: one caller per instance.
    """

    def __init__(self):
        self._directives = DirectiveParser()
        self._decoder = None
        self._lineno = 0
        self._finished = False

    @property
    def state(self):
        if self._directives.metadata().has_schema():
            return IN_BODY
        return AWAITING_SCHEMA

    @property
    def lineno(self):
        return self._lineno

    def feed(self, line):
        if self._finished:
            raise RuntimeError("feed() called after finish()")

        self._lineno += 1
        line = line.rstrip("\r\n")
        if line == "":
            return None

        try:
            if is_directive(line):
                self._directives.feed(line)
                self._decoder = None
                return None

            if self._decoder is None:
                self._decoder = RecordDecoder(self._directives.metadata())
            return self._decoder.decode_line(line)
        except ZeekTSVError as exc:
            raise exc.at_line(self._lineno) from exc

    def finish(self):
        if self._finished:
            raise RuntimeError("finish() called twice")
        self._finished = True
        logger.debug(f"Stream finished after {self._lineno} lines")
        return self._directives.metadata()


def iter_stream(lines):
    """
    Parse lines lazily: yields one Record per data line, then the Metadata
    as the last item. Tell them apart with isinstance().
    """
    parser = StreamParser()
    for line in lines:
        record = parser.feed(line)
        if record is not None:
            yield record
    yield parser.finish()


def stream_zeek_tsv(path):
    """
    Like iter_stream(), reading 'path' one line at a time.
    """
    with open(path, "r", encoding="utf-8", newline="") as f:
        yield from iter_stream(f)
