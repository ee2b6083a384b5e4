"""
Flat-record codec (``housing_kernel.records.codec``).

Responsibility
--------------
Encoding rules shared by every table: the primary ``|`` delimiter, packed
lists (``;`` between tuples, ``,`` between tuple fields), backslash
escaping of every leaf, the ``NULL`` sentinel, and the date and price
formats.  Per-table codecs subclass ``RecordCodec`` and only map entity
fields to columns.

Architecture position
---------------------
**Kernel records layer** -- pure string transformation.  ZERO I/O.  The
store reads and writes lines; codecs turn lines into entities and back.

Invariants enforced
-------------------
* Every leaf is escaped for ``\\``, ``|``, ``;``, ``,``, newline and
  carriage return, so any text survives a round trip.
* Splitting honours escapes at every nesting level; leaves are unescaped
  only after the last split.
* ``NULL`` always means "no value".  A literal ``"NULL"`` string is
  written as ``\\NULL``.
* An empty packed field is an empty list.

Failure modes
-------------
* ``MalformedRecordError`` when a line has the wrong column count or a
  field cannot be decoded.  The store logs and skips such rows.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Sequence
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Generic, TypeVar

from housing_kernel.exceptions import MalformedRecordError, ValidationError

T = TypeVar("T")

FIELD_SEPARATOR = "|"
TUPLE_SEPARATOR = ";"
ITEM_SEPARATOR = ","
ESCAPE = "\\"
NULL = "NULL"
DATE_FORMAT = "%d %m %Y"

_SPECIAL = frozenset({ESCAPE, FIELD_SEPARATOR, TUPLE_SEPARATOR, ITEM_SEPARATOR})
_ESCAPED_CONTROL = {"\n": "n", "\r": "r"}
_UNESCAPED_CONTROL = {v: k for k, v in _ESCAPED_CONTROL.items()}


# =========================================================================
# Leaf escaping
# =========================================================================


def escape(value: str) -> str:
    """Escape one leaf value so it contains no live separator."""
    if value == NULL:
        return ESCAPE + NULL
    out: list[str] = []
    for ch in value:
        if ch in _SPECIAL:
            out.append(ESCAPE + ch)
        elif ch in _ESCAPED_CONTROL:
            out.append(ESCAPE + _ESCAPED_CONTROL[ch])
        else:
            out.append(ch)
    return "".join(out)


def unescape(token: str) -> str:
    """Inverse of ``escape``.  Raises ValueError on a dangling backslash."""
    out: list[str] = []
    i = 0
    while i < len(token):
        ch = token[i]
        if ch == ESCAPE:
            if i + 1 >= len(token):
                raise ValueError(f"dangling escape in {token!r}")
            nxt = token[i + 1]
            out.append(_UNESCAPED_CONTROL.get(nxt, nxt))
            i += 2
        else:
            out.append(ch)
            i += 1
    return "".join(out)


def split_escaped(text: str, separator: str) -> list[str]:
    """
    Split ``text`` on unescaped ``separator``.

    Escape sequences are kept intact in the pieces so that a later split at
    a deeper level (or the final ``unescape``) still sees them.
    """
    pieces: list[str] = []
    current: list[str] = []
    i = 0
    while i < len(text):
        ch = text[i]
        if ch == ESCAPE and i + 1 < len(text):
            current.append(text[i:i + 2])
            i += 2
            continue
        if ch == separator:
            pieces.append("".join(current))
            current = []
        else:
            current.append(ch)
        i += 1
    pieces.append("".join(current))
    return pieces


# =========================================================================
# Optional values and scalar formats
# =========================================================================


def encode_optional(value: str | None) -> str:
    return NULL if value is None else escape(value)


def decode_optional(token: str) -> str | None:
    return None if token == NULL else unescape(token)


def encode_date(value: date | None) -> str:
    return NULL if value is None else value.strftime(DATE_FORMAT)


def decode_date(token: str) -> date | None:
    if token == NULL or token == "":
        return None
    return datetime.strptime(unescape(token), DATE_FORMAT).date()


def require_date(token: str) -> date:
    value = decode_date(token)
    if value is None:
        raise ValueError("date is required")
    return value


def encode_decimal(value: Decimal) -> str:
    return str(value)


def decode_decimal(token: str) -> Decimal:
    return Decimal(unescape(token))


def encode_bool(value: bool) -> str:
    return "true" if value else "false"


def decode_bool(token: str) -> bool:
    lowered = unescape(token).strip().lower()
    if lowered in ("true", "1", "yes"):
        return True
    if lowered in ("false", "0", "no"):
        return False
    raise ValueError(f"not a boolean: {token!r}")


# =========================================================================
# Packed lists
# =========================================================================


def pack(rows: Sequence[Sequence[str]]) -> str:
    """Pack tuples of already-encoded leaves into one field."""
    return TUPLE_SEPARATOR.join(ITEM_SEPARATOR.join(row) for row in rows)


def unpack(field: str) -> list[list[str]]:
    """Split a packed field into tuples of still-encoded leaves."""
    if field == "" or field == NULL:
        return []
    return [
        split_escaped(chunk, ITEM_SEPARATOR)
        for chunk in split_escaped(field, TUPLE_SEPARATOR)
    ]


def pack_ids(ids: Sequence[str]) -> str:
    """Comma-joined ID list (a single packed tuple)."""
    return ITEM_SEPARATOR.join(escape(i) for i in ids)


def unpack_ids(field: str) -> tuple[str, ...]:
    if field == "" or field == NULL:
        return ()
    return tuple(
        unescape(tok).strip()
        for tok in split_escaped(field, ITEM_SEPARATOR)
        if tok.strip() and tok.strip() != NULL
    )


# =========================================================================
# Row codec base
# =========================================================================


def encode_row(fields: Sequence[str]) -> str:
    return FIELD_SEPARATOR.join(fields)


def decode_row(line: str) -> list[str]:
    return split_escaped(line, FIELD_SEPARATOR)


class RecordCodec(ABC, Generic[T]):
    """
    Maps one entity type to the columns of one table.

    Contract:
        ``encode_fields`` returns already-encoded column strings;
        ``decode_fields`` receives still-encoded column strings.

    Guarantees:
        - ``decode_line`` raises only ``MalformedRecordError``.

    Non-goals:
        - Does not read or write files; see ``housing_kernel.db``.
    """

    table: str
    columns: tuple[str, ...]

    @abstractmethod
    def key(self, entity: T) -> str:
        """Primary key of ``entity`` within the table."""

    @abstractmethod
    def encode_fields(self, entity: T) -> list[str]:
        ...

    @abstractmethod
    def decode_fields(self, fields: list[str]) -> T:
        ...

    @property
    def header(self) -> str:
        return encode_row(self.columns)

    def encode_line(self, entity: T) -> str:
        fields = self.encode_fields(entity)
        if len(fields) != len(self.columns):
            raise ValueError(
                f"{self.table}: encoder produced {len(fields)} fields, "
                f"expected {len(self.columns)}"
            )
        return encode_row(fields)

    def decode_line(self, line: str, line_number: int | None = None) -> T:
        fields = decode_row(line)
        if len(fields) != len(self.columns):
            raise MalformedRecordError(
                self.table,
                f"expected {len(self.columns)} fields, found {len(fields)}",
                line_number,
            )
        try:
            return self.decode_fields(fields)
        except (ValueError, KeyError, IndexError, InvalidOperation, ValidationError) as exc:
            raise MalformedRecordError(self.table, str(exc), line_number) from exc
