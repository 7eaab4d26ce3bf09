# zeektsv/errors.py


class ZeekTSVError(ValueError):
    """
    Base class for everything the codec raises on bad input.

    'lineno' is the 1-based line of the document the error was found on,
    or None when the error did not come from a specific line.
    """

    def __init__(self, msg, lineno=None):
        self.msg = msg
        self.lineno = lineno
        if lineno is not None:
            msg = f"line {lineno}: {msg}"
        super().__init__(msg)

    def at_line(self, lineno):
        """Return a copy of this error pinned to 'lineno'."""
        return type(self)(self.msg, lineno)


class FormatError(ZeekTSVError):
    """Malformed directive, bad separator escape, or data before schema."""


class ParityError(ZeekTSVError):
    """Token count of a data line does not match the declared fields."""


class CoercionError(ZeekTSVError):
    """A token can't be read as (or a value written as) its declared type."""
