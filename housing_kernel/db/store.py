"""
Module: housing_kernel.db.store
Responsibility: ``RecordStore[T]`` -- the in-memory map of one table, kept
    in step with its backing by rewriting the whole table on every change.
Architecture position: Kernel > DB.  Uses records/ codecs and a Backing.

Invariants enforced:
    - The in-memory map is the source of truth while the process runs; the
      backing is written after each mutation.
    - A failed write restores the previous in-memory state before the
      ``PersistenceError`` propagates, so memory never runs ahead of disk.
    - Stores hold entities and IDs only, never references into other stores.

Failure modes:
    - Malformed rows are skipped at load with a ``record_row_skipped``
      warning; loading continues.
    - Duplicate keys at load keep the first row and log
      ``record_duplicate_key``.
    - PersistenceError (TableWriteError) on write failure.
"""

from __future__ import annotations

from collections.abc import Callable, Iterator, Sequence
from typing import Generic, TypeVar

from housing_kernel.db.backing import Backing
from housing_kernel.exceptions import MalformedRecordError, PersistenceError
from housing_kernel.logging_config import get_logger
from housing_kernel.records.codec import RecordCodec

logger = get_logger("db.store")

T = TypeVar("T")


class RecordStore(Generic[T]):
    """
    Uniform get / put / delete / list / find over one table.

    Contract:
        The whole table is loaded at construction.  Each mutation rewrites
        the whole table through the backing.

    Guarantees:
        - ``list()`` preserves load and insertion order.
        - ``apply()`` applies several puts and deletes with a single rewrite
          and is all-or-nothing for this store.

    Non-goals:
        - Multi-store atomicity (see ``services.unit_of_work.UnitOfWork``).
    """

    def __init__(self, codec: RecordCodec[T], backing: Backing):
        self.codec = codec
        self.backing = backing
        self._records: dict[str, T] = {}
        self.skipped_rows = 0
        self._load()

    @property
    def table(self) -> str:
        return self.codec.table

    def _load(self) -> None:
        # Line 1 of the table is the header.
        for line_number, line in enumerate(self.backing.read(self.table), start=2):
            try:
                entity = self.codec.decode_line(line, line_number)
            except MalformedRecordError as exc:
                self.skipped_rows += 1
                logger.warning(
                    "record_row_skipped",
                    extra={
                        "table": self.table,
                        "line_number": line_number,
                        "reason": exc.reason,
                    },
                )
                continue
            key = self.codec.key(entity)
            if key in self._records:
                self.skipped_rows += 1
                logger.warning(
                    "record_duplicate_key",
                    extra={"table": self.table, "line_number": line_number, "key": key},
                )
                continue
            self._records[key] = entity
        logger.info(
            "table_loaded",
            extra={
                "table": self.table,
                "rows": len(self._records),
                "skipped": self.skipped_rows,
            },
        )

    def _flush(self) -> None:
        lines = [self.codec.encode_line(e) for e in self._records.values()]
        self.backing.write(self.table, self.codec.header, lines)

    # -- reads --------------------------------------------------------------

    def get(self, key: str) -> T | None:
        return self._records.get(key)

    def list(self) -> list[T]:
        return list(self._records.values())

    def find(self, predicate: Callable[[T], bool]) -> list[T]:
        return [e for e in self._records.values() if predicate(e)]

    def __contains__(self, key: object) -> bool:
        return key in self._records

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self) -> Iterator[T]:
        return iter(list(self._records.values()))

    # -- writes -------------------------------------------------------------

    def put(self, entity: T) -> None:
        self.apply(puts=(entity,))

    def delete(self, key: str) -> bool:
        """Remove ``key``; returns False (and writes nothing) if absent."""
        if key not in self._records:
            return False
        self.apply(deletes=(key,))
        return True

    def apply(self, puts: Sequence[T] = (), deletes: Sequence[str] = ()) -> None:
        """Apply puts then deletes with one table rewrite."""
        if not puts and not deletes:
            return
        previous = dict(self._records)
        for entity in puts:
            self._records[self.codec.key(entity)] = entity
        for key in deletes:
            self._records.pop(key, None)
        try:
            self._flush()
        except PersistenceError:
            self._records = previous
            logger.error(
                "store_write_reverted",
                extra={"table": self.table, "puts": len(puts), "deletes": len(deletes)},
            )
            raise

    def repair(self, entity: T) -> None:
        """
        Replace ``entity`` in memory only.

        Used when loading reconciles cross-table references.  The repaired
        value reaches the backing with the next write to this table.
        """
        self._records[self.codec.key(entity)] = entity

    def reload(self) -> None:
        """Discard memory and load the table again from the backing."""
        self._records = {}
        self.skipped_rows = 0
        self._load()
