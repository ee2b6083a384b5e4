"""
Module: housing_kernel.db.sql_backing
Responsibility: ``Backing`` implementation over a SQL database.
Architecture position: Kernel > DB.

Each table rewrite is one transaction: delete every row of the logical
table, then insert header and lines with their positions.  A database
error rolls the transaction back and surfaces as ``TableWriteError``.
"""

from __future__ import annotations

from collections.abc import Sequence

from sqlalchemy import delete, select
from sqlalchemy.exc import SQLAlchemyError

from housing_kernel.db.backing import Backing
from housing_kernel.db.engine import session_scope
from housing_kernel.db.models import RecordRowModel
from housing_kernel.exceptions import TableWriteError
from housing_kernel.logging_config import get_logger

logger = get_logger("db.sql_backing")


class SqlBacking(Backing):
    """
    Tables stored as rows of ``record_rows``.

    Preconditions: the engine is initialized (``init_engine_from_url``) and
        ``create_tables()`` has run.
    """

    def read(self, table: str) -> list[str]:
        with session_scope() as session:
            rows = session.execute(
                select(RecordRowModel.line)
                .where(RecordRowModel.table_name == table)
                .where(RecordRowModel.position > 0)
                .order_by(RecordRowModel.position)
            ).scalars().all()
        return [line for line in rows if line.strip()]

    def write(self, table: str, header: str, lines: Sequence[str]) -> None:
        try:
            with session_scope() as session:
                session.execute(
                    delete(RecordRowModel).where(RecordRowModel.table_name == table)
                )
                session.add_all(
                    RecordRowModel(table_name=table, position=pos, line=line)
                    for pos, line in enumerate([header, *lines])
                )
        except SQLAlchemyError as exc:
            logger.error("table_write_failed", extra={"table": table, "error": str(exc)})
            raise TableWriteError(table, str(exc)) from exc
        logger.debug("table_written", extra={"table": table, "rows": len(lines)})
