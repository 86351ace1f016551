"""Base repository utilities."""

from __future__ import annotations

from typing import Generic, TypeVar

from sqlalchemy import Table
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.orm import Session

TModel = TypeVar("TModel")

_UPSERT_DIALECTS = {
    "postgresql": postgresql.insert,
    "sqlite": sqlite.insert,
}


class SQLAlchemyRepository(Generic[TModel]):
    """Minimal base repository storing the SQLAlchemy session."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def add(self, instance: TModel) -> TModel:
        self.session.add(instance)
        return instance

    def refresh(self, instance: TModel) -> TModel:
        self.session.refresh(instance)
        return instance

    def commit(self) -> None:
        self.session.commit()

    def flush(self) -> None:
        self.session.flush()

    def upsert_statement(self, table: Table):
        """Return a dialect ``INSERT`` that supports ``on_conflict_do_update``."""
        dialect = self.session.get_bind().dialect.name
        try:
            factory = _UPSERT_DIALECTS[dialect]
        except KeyError:
            raise NotImplementedError(f"Upsert is not supported on {dialect}") from None
        return factory(table)
