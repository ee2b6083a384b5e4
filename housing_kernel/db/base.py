"""
Module: housing_kernel.db.base
Responsibility: Declarative base class for the SQLAlchemy models used by the
    SQL backing.
Architecture position: Kernel > DB.  Lowest-level import target for ORM
    models.  MUST NOT import from records/, services/, selectors/, domain/
    or outer layers.

Invariants enforced:
    - Integer surrogate primary keys so SQLite assigns them as rowid aliases.
    - datetime maps to DateTime(timezone=True).
"""

from datetime import datetime
from typing import ClassVar

from sqlalchemy import DateTime, Integer
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """
    Declarative base for all SQLAlchemy models.

    Contract:
        Every ORM model inherits from Base and gets an integer primary key.
    """

    type_annotation_map: ClassVar[dict] = {
        datetime: DateTime(timezone=True),
    }

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
