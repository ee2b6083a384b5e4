"""
Module: housing_kernel.db.backing
Responsibility: Where a table's lines physically live.  A ``Backing`` reads
    and rewrites whole tables; it knows nothing about entities or columns.
Architecture position: Kernel > DB.  Lowest persistence layer.  MUST NOT
    import from records/, services/, selectors/ or outer layers.

Invariants enforced:
    - Whole-table rewrite: every write replaces the entire table, header
      included.  There is no append or in-place update path.
    - Failed writes surface as ``TableWriteError`` (a PersistenceError); no
      OSError escapes a backing.

Failure modes:
    - TableWriteError when the file cannot be written or replaced.
    - A missing table reads as empty.
    - A line that is not valid UTF-8 is skipped with a
      ``record_row_skipped`` warning.
"""

from __future__ import annotations

import os
import tempfile
from abc import ABC, abstractmethod
from collections.abc import Sequence
from pathlib import Path

from housing_kernel.exceptions import TableWriteError
from housing_kernel.logging_config import get_logger

logger = get_logger("db.backing")


class Backing(ABC):
    """
    Storage for whole tables of encoded lines.

    Contract:
        ``read`` returns data lines only (no header), in stored order.
        ``write`` atomically replaces the table with ``header`` + ``lines``
        or raises ``TableWriteError`` leaving the previous content intact.
    """

    @abstractmethod
    def read(self, table: str) -> list[str]:
        ...

    @abstractmethod
    def write(self, table: str, header: str, lines: Sequence[str]) -> None:
        ...


class InMemoryBacking(Backing):
    """Tables held in a dict.  Used by tests and by the ``memory`` backend."""

    def __init__(self, tables: dict[str, list[str]] | None = None):
        self._tables: dict[str, tuple[str, list[str]]] = {
            name: ("", list(lines)) for name, lines in (tables or {}).items()
        }

    def read(self, table: str) -> list[str]:
        entry = self._tables.get(table)
        return list(entry[1]) if entry else []

    def write(self, table: str, header: str, lines: Sequence[str]) -> None:
        self._tables[table] = (header, list(lines))

    def header(self, table: str) -> str | None:
        entry = self._tables.get(table)
        return entry[0] if entry else None


class FlatFileBacking(Backing):
    """
    One ``<Table>.csv`` file per table in ``directory``.

    Files are UTF-8, newline-terminated, with the column header as the first
    line.  Writes go to a temporary file in the same directory which then
    replaces the target, so a crash mid-write never truncates a table.
    """

    suffix = ".csv"

    def __init__(self, directory: str | os.PathLike[str]):
        self.directory = Path(directory)

    def path_for(self, table: str) -> Path:
        return self.directory / f"{table}{self.suffix}"

    def read(self, table: str) -> list[str]:
        path = self.path_for(table)
        if not path.exists():
            logger.info("table_file_missing", extra={"table": table, "path": str(path)})
            return []
        lines: list[str] = []
        # Line 1 is the header; each line is decoded on its own so one bad
        # byte costs one row, not the table.
        for line_number, raw in enumerate(path.read_bytes().split(b"\n")[1:], start=2):
            try:
                line = raw.rstrip(b"\r").decode("utf-8")
            except UnicodeDecodeError as exc:
                logger.warning(
                    "record_row_skipped",
                    extra={
                        "table": table,
                        "line_number": line_number,
                        "reason": f"not valid UTF-8 at byte {exc.start}",
                    },
                )
                continue
            if line.strip():
                lines.append(line)
        return lines

    def write(self, table: str, header: str, lines: Sequence[str]) -> None:
        path = self.path_for(table)
        tmp_name = None
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                prefix=f".{table}.", suffix=".tmp", dir=self.directory
            )
            with os.fdopen(fd, "w", encoding="utf-8", newline="") as fh:
                fh.write(header + "\n")
                for line in lines:
                    fh.write(line + "\n")
            os.replace(tmp_name, path)
            tmp_name = None
        except OSError as exc:
            logger.error(
                "table_write_failed",
                extra={"table": table, "path": str(path), "error": str(exc)},
            )
            raise TableWriteError(table, str(exc)) from exc
        finally:
            if tmp_name is not None and os.path.exists(tmp_name):
                os.unlink(tmp_name)
        logger.debug("table_written", extra={"table": table, "rows": len(lines)})
