#!/usr/bin/env python3
"""
Repositories (DAOs) for users and trades.

Each repository is a thin, synchronous wrapper around one ORM model:
    get_by_id / list_all / list_page / count / add / update / delete

Every SQLAlchemy failure is re-raised as DatabaseError carrying the name of
the operation that failed, so callers never see driver exceptions.

Rows are returned detached (sessions use expire_on_commit=False) and are
safe to read after the session has closed.

Author: System Architect
Date: 2026-10-19
"""

from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any, Generic, TypeVar

from pydantic.alias_generators import to_snake
from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from tradeapi.core.exceptions import DatabaseError
from tradeapi.core.logging.logger import get_logger
from tradeapi.infrastructure.database.models import TradeRecord, UserRecord
from tradeapi.infrastructure.database.session import Database

logger = get_logger(__name__)

RecordT = TypeVar("RecordT", UserRecord, TradeRecord)


class SqlRepository(Generic[RecordT]):
    """
    Generic CRUD repository over a single mapped class.

    Subclasses only set ``model`` (and optionally ``sortable_columns``).
    """

    model: type[RecordT]
    sortable_columns: frozenset[str] = frozenset({"id"})

    def __init__(self, database: Database):
        self._database = database

    @property
    def table_name(self) -> str:
        return self.model.__tablename__

    @contextmanager
    def _operation(self, name: str) -> Iterator[Session]:
        try:
            with self._database.session_scope() as session:
                yield session
        except SQLAlchemyError as e:
            logger.error(
                "Database operation failed",
                table=self.table_name,
                operation=name,
                error=str(e),
            )
            raise DatabaseError.for_operation(f"{self.table_name}.{name}", e) from e

    # =========================================================================
    # Reads
    # =========================================================================

    def get_by_id(self, record_id: int) -> RecordT | None:
        with self._operation("get_by_id") as session:
            return session.get(self.model, record_id)

    def list_all(self) -> list[RecordT]:
        with self._operation("list_all") as session:
            return list(session.scalars(select(self.model).order_by(self.model.id)))

    def list_page(
        self,
        offset: int,
        limit: int,
        sort_by: str | None = None,
        descending: bool = False,
    ) -> list[RecordT]:
        """
        One window of rows.

        Rows are ordered by ``sort_by`` when it names a sortable column,
        otherwise by primary key. ``sort_by`` may be the camelCase field name
        clients see on the wire (``tradeDate``) or the column name
        (``trade_date``). ``id`` is always the tie-breaker so that pages
        never overlap.
        """
        column = self._sort_column(sort_by)
        order = column.desc() if descending else column.asc()

        stmt = select(self.model).order_by(order)
        if column is not self.model.id:
            stmt = stmt.order_by(self.model.id)
        stmt = stmt.offset(offset).limit(limit)

        with self._operation("list_page") as session:
            return list(session.scalars(stmt))

    def _sort_column(self, sort_by: str | None):
        name = to_snake(sort_by) if sort_by else None
        if name in self.sortable_columns:
            return getattr(self.model, name)
        return self.model.id

    def count(self) -> int:
        """SELECT COUNT(*) without loading rows."""
        with self._operation("count") as session:
            return session.scalar(select(func.count()).select_from(self.model)) or 0

    # =========================================================================
    # Writes
    # =========================================================================

    def add(self, **fields: Any) -> RecordT:
        with self._operation("add") as session:
            record = self.model(**fields)
            session.add(record)
            session.flush()
            return record

    def update(self, record_id: int, **fields: Any) -> RecordT | None:
        """Overwrite the given columns. Returns None when the row is absent."""
        with self._operation("update") as session:
            record = session.get(self.model, record_id)
            if record is None:
                return None
            for name, value in fields.items():
                setattr(record, name, value)
            session.flush()
            return record

    def delete(self, record_id: int) -> bool:
        """Returns False when the row is absent."""
        with self._operation("delete") as session:
            record = session.get(self.model, record_id)
            if record is None:
                return False
            session.delete(record)
            return True


class UserRepository(SqlRepository[UserRecord]):
    model = UserRecord
    sortable_columns = frozenset({"id", "name"})


class TradeRepository(SqlRepository[TradeRecord]):
    model = TradeRecord
    sortable_columns = frozenset(
        {
            "id",
            "symbol",
            "quantity",
            "price",
            "type",
            "status",
            "trade_date",
            "settlement_date",
            "counterparty",
        }
    )
