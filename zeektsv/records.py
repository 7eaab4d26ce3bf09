# zeektsv/records.py
from collections.abc import Mapping

from zeektsv.coercion import decode
from zeektsv.errors import ParityError


class Record(Mapping):
    """
    One data line: an immutable, ordered mapping of field name to value.

    Values are typed Python objects, EMPTY or UNSET. The declared Zeek type
    of each field travels with the record (see type_of()).
    """

    __slots__ = ("_schema", "_values", "_index")

    def __init__(self, schema, values):
        schema = tuple(schema)
        values = tuple(values)
        if len(schema) != len(values):
            raise ParityError(f"expected {len(schema)} values, got {len(values)}")
        self._schema = schema
        self._values = values
        self._index = {name: i for i, (name, _) in enumerate(schema)}

    def __getitem__(self, name):
        return self._values[self._index[name]]

    def __iter__(self):
        return (name for name, _ in self._schema)

    def __len__(self):
        return len(self._values)

    def __eq__(self, other):
        if isinstance(other, Record):
            return self._schema == other._schema and self._values == other._values
        return super().__eq__(other)

    def __hash__(self):
        return hash((self._schema, self._values))

    def __repr__(self):
        inner = ", ".join(f"{name}={value!r}" for name, value in self.items())
        return f"Record({inner})"

    @property
    def schema(self):
        return self._schema

    @property
    def fields(self):
        return tuple(name for name, _ in self._schema)

    def type_of(self, name):
        return self._schema[self._index[name]][1]

    def replace(self, **changes):
        """Return a new Record with some values swapped out."""
        unknown = set(changes) - set(self._index)
        if unknown:
            raise KeyError(f"unknown field(s): {', '.join(sorted(unknown))}")
        values = [changes.get(name, value) for name, value in self.items()]
        return Record(self._schema, values)

    def to_dict(self):
        return dict(self.items())


class RecordDecoder:
    """
    Turns data lines into Records for one fixed Metadata block.
    """

    def __init__(self, metadata):
        self.schema = metadata.schema()
        self.separator = metadata.separator
        self.empty_field = metadata.empty_field
        self.unset_field = metadata.unset_field

    def decode_line(self, line):
        tokens = line.split(self.separator)
        if len(tokens) != len(self.schema):
            raise ParityError(f"expected {len(self.schema)} fields, got {len(tokens)}")
        values = [
            decode(token, type_name, self.empty_field, self.unset_field)
            for token, (_, type_name) in zip(tokens, self.schema)
        ]
        return Record(self.schema, values)


class LogDocument:
    """
    A fully parsed log: its Metadata block and its Records in file order.
    """

    def __init__(self, metadata, records):
        self._metadata = metadata
        self._records = tuple(records)

    def __len__(self):
        return len(self._records)

    def __iter__(self):
        return iter(self._records)

    def __getitem__(self, index):
        return self._records[index]

    def __eq__(self, other):
        if not isinstance(other, LogDocument):
            return NotImplemented
        return self._metadata == other._metadata and self._records == other._records

    def __repr__(self):
        return f"LogDocument(path={self.path!r}, records={len(self._records)})"

    @property
    def metadata(self):
        return self._metadata

    @property
    def records(self):
        return self._records

    @property
    def separator(self):
        return self._metadata.separator

    @property
    def set_separator(self):
        return self._metadata.set_separator

    @property
    def empty_field(self):
        return self._metadata.empty_field

    @property
    def unset_field(self):
        return self._metadata.unset_field

    @property
    def path(self):
        return self._metadata.path

    @property
    def open(self):
        return self._metadata.open

    @property
    def close(self):
        return self._metadata.close

    @property
    def fields(self):
        return self._metadata.fields or ()

    @property
    def types(self):
        return self._metadata.types or ()

    def rows(self, start=0, stop=None):
        return list(self._records[start:stop])

    def get(self, index, field):
        """
        Value of 'field' in record 'index'. Unknown fields raise KeyError.
        """
        if field not in self.fields:
            raise KeyError(f"unknown field {field!r}")
        return self._records[index][field]

    def column(self, field):
        if field not in self.fields:
            raise KeyError(f"unknown field {field!r}")
        return [record[field] for record in self._records]

    def to_dicts(self):
        return [record.to_dict() for record in self._records]
