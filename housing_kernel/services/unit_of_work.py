"""
housing_kernel.services.unit_of_work -- Staged multi-store commits.

Responsibility:
    Collects puts and deletes across several record stores and commits them
    store by store in a fixed order.  If store *k* fails to write, the
    stores already committed (0..k-1) are reverted to their previous values
    and the ``PersistenceError`` propagates.

Architecture position:
    Kernel > Services.  May import from db/ and domain/.

Invariants enforced:
    - Multi-effect operations (booking, withdrawal restitution, officer
      approval, application/snapshot updates) fully apply or fully roll back.
    - Commit order is the order in which stores were first staged.

Failure modes:
    - PersistenceError (the original write failure) after a successful
      compensation.
    - RollbackFailedError if compensating an earlier store also fails.
      Each store's memory still matches what its backing holds.
"""

from __future__ import annotations

from typing import Any

from housing_kernel.db.store import RecordStore
from housing_kernel.exceptions import PersistenceError, RollbackFailedError
from housing_kernel.logging_config import get_logger

logger = get_logger("services.unit_of_work")


class _StagedChanges:
    __slots__ = ("store", "puts", "deletes")

    def __init__(self, store: RecordStore[Any]):
        self.store = store
        self.puts: dict[str, Any] = {}
        self.deletes: list[str] = []


class UnitOfWork:
    """
    Staged writes across stores.

    Usage:
        uow = UnitOfWork()
        uow.put(repos.applications, application)
        uow.put(repos.projects, project)
        uow.commit()

    or as a context manager, which commits on clean exit and discards the
    staged changes when the block raises.
    """

    def __init__(self, label: str = "unit_of_work") -> None:
        self.label = label
        self._staged: list[_StagedChanges] = []
        self._committed = False

    def _entry(self, store: RecordStore[Any]) -> _StagedChanges:
        for entry in self._staged:
            if entry.store is store:
                return entry
        entry = _StagedChanges(store)
        self._staged.append(entry)
        return entry

    def put(self, store: RecordStore[Any], entity: Any) -> None:
        entry = self._entry(store)
        key = store.codec.key(entity)
        entry.puts[key] = entity
        if key in entry.deletes:
            entry.deletes.remove(key)

    def delete(self, store: RecordStore[Any], key: str) -> None:
        entry = self._entry(store)
        entry.puts.pop(key, None)
        if key not in entry.deletes:
            entry.deletes.append(key)

    @property
    def tables(self) -> tuple[str, ...]:
        return tuple(e.store.table for e in self._staged)

    def commit(self) -> None:
        if self._committed:
            raise RuntimeError(f"{self.label} already committed")
        self._committed = True

        done: list[tuple[_StagedChanges, dict[str, Any]]] = []
        for entry in self._staged:
            touched = list(entry.puts) + entry.deletes
            previous = {key: entry.store.get(key) for key in touched}
            try:
                entry.store.apply(
                    puts=tuple(entry.puts.values()),
                    deletes=tuple(entry.deletes),
                )
            except PersistenceError as exc:
                logger.error(
                    "unit_of_work_failed",
                    extra={
                        "label": self.label,
                        "failed_table": entry.store.table,
                        "committed_tables": [e.store.table for e, _ in done],
                    },
                )
                self._compensate(done, entry.store.table, exc)
                raise
            done.append((entry, previous))

        logger.debug(
            "unit_of_work_committed",
            extra={"label": self.label, "tables": list(self.tables)},
        )

    def _compensate(
        self,
        done: list[tuple[_StagedChanges, dict[str, Any]]],
        failed_table: str,
        cause: PersistenceError,
    ) -> None:
        unreverted: list[str] = []
        for entry, previous in reversed(done):
            restore = tuple(v for v in previous.values() if v is not None)
            remove = tuple(k for k, v in previous.items() if v is None)
            try:
                entry.store.apply(puts=restore, deletes=remove)
            except PersistenceError:
                logger.critical(
                    "unit_of_work_revert_failed",
                    extra={"label": self.label, "table": entry.store.table},
                    exc_info=True,
                )
                unreverted.append(entry.store.table)
        if unreverted:
            raise RollbackFailedError(failed_table, tuple(unreverted)) from cause
        logger.warning(
            "unit_of_work_reverted",
            extra={
                "label": self.label,
                "failed_table": failed_table,
                "reverted_tables": [e.store.table for e, _ in done],
            },
        )

    def __enter__(self) -> UnitOfWork:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if exc_type is None and not self._committed:
            self.commit()
