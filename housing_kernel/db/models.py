"""
Module: housing_kernel.db.models
Responsibility: ORM model for flat-record rows stored in a SQL database.

Every logical table (ApplicantList, ProjectList, ...) shares the single
``record_rows`` table, keyed by ``table_name`` and ordered by ``position``.
The SQL backing stores the same encoded lines a flat file would hold, so the
codecs are identical for both backings.
"""

from sqlalchemy import Index, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from housing_kernel.db.base import Base


class RecordRowModel(Base):
    """One encoded line of one logical table.  Position 0 holds the header."""

    __tablename__ = "record_rows"
    __table_args__ = (
        UniqueConstraint("table_name", "position", name="uq_record_rows_table_position"),
        Index("idx_record_rows_table", "table_name"),
    )

    table_name: Mapped[str] = mapped_column(String(64), nullable=False)
    position: Mapped[int] = mapped_column(Integer, nullable=False)
    line: Mapped[str] = mapped_column(Text, nullable=False)

    def __repr__(self) -> str:
        return f"<RecordRowModel {self.table_name}[{self.position}]>"
