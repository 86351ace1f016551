"""Heartbeat log persistence."""

from __future__ import annotations

from typing import Sequence

from sqlalchemy import select
from sqlalchemy.orm import Session

from update_manager.db import DeviceHeartbeat
from update_manager.repositories.base import SQLAlchemyRepository


class HeartbeatRepository(SQLAlchemyRepository[DeviceHeartbeat]):
    def __init__(self, session: Session) -> None:
        super().__init__(session)

    def recent_for_device(self, device_id: str, limit: int = 50) -> Sequence[DeviceHeartbeat]:
        stmt = (
            select(DeviceHeartbeat)
            .where(DeviceHeartbeat.device_id == device_id)
            .order_by(DeviceHeartbeat.heartbeat_at.desc())
            .limit(limit)
        )
        return self.session.scalars(stmt).all()
