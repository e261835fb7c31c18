"""Shared store of active filters.

Every control reads the full filter list when it loads options and writes
its own phrase filter when a value is selected. There are no transactions:
controls see each other's writes immediately.
"""

import logging
from abc import ABC, abstractmethod
from typing import Optional

from sqlalchemy.engine import Engine
from sqlmodel import Column, Field as SQLField, JSON, Session, SQLModel, select

from control_models import Filter

log = logging.getLogger(__name__)


class FilterStore(ABC):
    """Abstract get/add/remove interface over the active filters."""

    @abstractmethod
    def get_filters(self) -> list[Filter]: ...

    @abstractmethod
    def add_filter(self, filter_: Filter) -> None:
        """Add ``filter_``, replacing any filter with the same id."""

    @abstractmethod
    def remove_filter(self, filter_id: str) -> None:
        """Remove a filter by id. Unknown ids are ignored."""


class InMemoryFilterStore(FilterStore):

    def __init__(self, filters: Optional[list[Filter]] = None):
        self._filters: dict[str, Filter] = {f.id: f for f in filters or []}

    def get_filters(self) -> list[Filter]:
        return list(self._filters.values())

    def add_filter(self, filter_: Filter) -> None:
        self._filters[filter_.id] = filter_

    def remove_filter(self, filter_id: str) -> None:
        self._filters.pop(filter_id, None)


# ── SQLModel-backed store ─────────────────────────────────────────────


class ActiveFilter(SQLModel, table=True):
    __tablename__ = "active_filters"

    id: str = SQLField(primary_key=True)
    body: dict = SQLField(default={}, sa_column=Column(JSON))


class SqlFilterStore(FilterStore):
    """Filter store shared by every control served from one database."""

    def __init__(self, engine: Engine):
        self.engine = engine

    def get_filters(self) -> list[Filter]:
        with Session(self.engine) as session:
            rows = session.exec(select(ActiveFilter)).all()
            return [Filter(**row.body) for row in rows]

    def add_filter(self, filter_: Filter) -> None:
        with Session(self.engine) as session:
            row = session.get(ActiveFilter, filter_.id)
            if row is None:
                row = ActiveFilter(id=filter_.id)
            row.body = filter_.model_dump()
            session.add(row)
            session.commit()
        log.info("Stored filter %s", filter_.id)

    def remove_filter(self, filter_id: str) -> None:
        with Session(self.engine) as session:
            row = session.get(ActiveFilter, filter_id)
            if row is None:
                return
            session.delete(row)
            session.commit()
        log.info("Removed filter %s", filter_id)
