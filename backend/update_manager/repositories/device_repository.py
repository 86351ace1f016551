"""Device persistence helpers."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Iterable, Optional, Sequence, Tuple

from sqlalchemy import case, func, or_, select
from sqlalchemy.orm import Session

from update_manager.core.time import utcnow
from update_manager.db import Device
from update_manager.db.models import generate_uuid
from update_manager.domain.compliance import COMPLIANT, NON_COMPLIANT, UNKNOWN
from update_manager.domain.devices import DeviceFilters
from update_manager.repositories.base import SQLAlchemyRepository


class DeviceRepository(SQLAlchemyRepository[Device]):
    """Encapsulates all direct Device ORM access."""

    def __init__(self, session: Session) -> None:
        super().__init__(session)

    def upsert_by_key(
        self,
        values: dict[str, Any],
        *,
        update_columns: Iterable[str] = (),
        keep_existing: Iterable[str] = (),
    ) -> Device:
        """Insert or update the device identified by ``values["device_key"]``.

        ``update_columns`` are overwritten on conflict; ``keep_existing`` are
        only overwritten when the new value is not null. Runs as one statement
        so concurrent first contacts from the same host collapse into one row.
        """
        now = utcnow()
        table = Device.__table__
        row = {"id": generate_uuid(), "created_at": now, "updated_at": now, **values}

        stmt = self.upsert_statement(table).values(**row)
        set_ = {column: stmt.excluded[column] for column in update_columns}
        for column in keep_existing:
            set_[column] = func.coalesce(stmt.excluded[column], table.c[column])
        set_["updated_at"] = now

        stmt = stmt.on_conflict_do_update(index_elements=[table.c.device_key], set_=set_)
        self.session.execute(stmt)
        return self.get_by_key(values["device_key"])

    def get_by_key(self, key: str) -> Optional[Device]:
        stmt = (
            select(Device)
            .where(Device.device_key == key)
            .execution_options(populate_existing=True)
        )
        return self.session.scalars(stmt).first()

    def get_by_id(self, device_id: str) -> Optional[Device]:
        return self.session.get(Device, device_id, populate_existing=True)

    def list(self, filters: DeviceFilters) -> Tuple[int, Sequence[Device]]:
        query = self.session.query(Device)
        if filters.tenant_id is not None:
            query = query.filter(Device.tenant_id == filters.tenant_id)
        if filters.organisation_id:
            query = query.filter(Device.organisation_id == filters.organisation_id)
        if filters.compliance_status:
            query = query.filter(Device.compliance_status == filters.compliance_status)
        if filters.search:
            like = f"%{filters.search}%"
            query = query.filter(
                or_(
                    Device.hostname.ilike(like),
                    Device.serial_number.ilike(like),
                    Device.ip_address.ilike(like),
                )
            )

        total = query.count()
        records = (
            query.order_by(Device.last_seen.desc().nulls_last(), Device.hostname.asc())
            .offset(filters.skip)
            .limit(filters.limit)
            .all()
        )
        return total, records

    def summary(
        self,
        *,
        offline_before: datetime,
        tenant_id: Optional[int] = None,
        organisation_id: Optional[str] = None,
    ) -> dict[str, int]:
        """Aggregate compliance counters in a single query."""

        def count_where(condition):
            return func.coalesce(func.sum(case((condition, 1), else_=0)), 0)

        stmt = select(
            func.count(Device.id).label("total"),
            count_where(Device.compliance_status == COMPLIANT).label("compliant"),
            count_where(Device.compliance_status == NON_COMPLIANT).label("non_compliant"),
            count_where(Device.compliance_status == UNKNOWN).label("unknown"),
            count_where(
                or_(Device.last_seen.is_(None), Device.last_seen < offline_before)
            ).label("offline"),
            func.coalesce(func.sum(Device.pending_critical_count), 0).label("pending_critical"),
            func.coalesce(func.sum(Device.pending_total_count), 0).label("pending_total"),
            func.coalesce(func.sum(Device.failed_updates_count), 0).label("failed_total"),
        )
        if tenant_id is not None:
            stmt = stmt.where(Device.tenant_id == tenant_id)
        if organisation_id:
            stmt = stmt.where(Device.organisation_id == organisation_id)

        row = self.session.execute(stmt).one()
        return {key: int(value or 0) for key, value in row._mapping.items()}
