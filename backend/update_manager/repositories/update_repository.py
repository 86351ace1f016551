"""Update log persistence."""

from __future__ import annotations

from typing import Any, Optional, Sequence

from sqlalchemy import delete, select
from sqlalchemy.orm import Session

from update_manager.db import UpdateRecord
from update_manager.db.models import generate_uuid
from update_manager.domain.compliance import ACTIVE_UPDATE_STATUSES
from update_manager.repositories.base import SQLAlchemyRepository

# Columns refreshed when a (device, kb_number) row already exists.
_UPSERT_COLUMNS = (
    "title",
    "severity",
    "status",
    "size_mb",
    "error_code",
    "detected_date",
    "installed_date",
    "tenant_id",
    "organisation_id",
)


class UpdateRecordRepository(SQLAlchemyRepository[UpdateRecord]):
    def __init__(self, session: Session) -> None:
        super().__init__(session)

    def delete_active(self, device_id: str) -> int:
        """Remove the device's pending and failed rows; installed history stays."""
        result = self.session.execute(
            delete(UpdateRecord)
            .where(
                UpdateRecord.device_id == device_id,
                UpdateRecord.status.in_(ACTIVE_UPDATE_STATUSES),
            )
            .execution_options(synchronize_session=False)
        )
        return result.rowcount

    def upsert_many(self, rows: Sequence[dict[str, Any]]) -> int:
        """Upsert rows keyed on ``(device_id, kb_number)``, last write wins.

        Rows must already be unique per key; a statement may not touch the same
        row twice on PostgreSQL.
        """
        if not rows:
            return 0
        table = UpdateRecord.__table__
        stmt = self.upsert_statement(table).values(
            [{"id": generate_uuid(), **row} for row in rows]
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=[table.c.device_id, table.c.kb_number],
            set_={column: stmt.excluded[column] for column in _UPSERT_COLUMNS},
        )
        self.session.execute(stmt)
        return len(rows)

    def list_for_device(
        self,
        device_id: str,
        status: Optional[str] = None,
    ) -> Sequence[UpdateRecord]:
        stmt = select(UpdateRecord).where(UpdateRecord.device_id == device_id)
        if status:
            stmt = stmt.where(UpdateRecord.status == status)
        stmt = stmt.order_by(UpdateRecord.detected_date.desc(), UpdateRecord.kb_number.asc())
        return self.session.scalars(stmt).all()
