"""Device task queue persistence."""

from __future__ import annotations

from datetime import datetime
from typing import Optional, Sequence

from sqlalchemy import and_, or_, select
from sqlalchemy.orm import Session

from update_manager.db import DeviceTask
from update_manager.domain.tasks import TASK_IN_PROGRESS, TASK_PENDING
from update_manager.repositories.base import SQLAlchemyRepository


class TaskRepository(SQLAlchemyRepository[DeviceTask]):
    def __init__(self, session: Session) -> None:
        super().__init__(session)

    def claimable_for_device(
        self,
        device_id: str,
        stale_before: Optional[datetime] = None,
    ) -> Sequence[DeviceTask]:
        """Pending tasks, plus in-progress ones whose lease expired before ``stale_before``.

        Rows are locked (``FOR UPDATE SKIP LOCKED``) where the database supports
        it, so two concurrent polls never hand out the same task.
        """
        claimable = DeviceTask.status == TASK_PENDING
        if stale_before is not None:
            claimable = or_(
                claimable,
                and_(
                    DeviceTask.status == TASK_IN_PROGRESS,
                    DeviceTask.claimed_at < stale_before,
                ),
            )
        stmt = (
            select(DeviceTask)
            .where(DeviceTask.device_id == device_id, claimable)
            .order_by(DeviceTask.created_at.asc(), DeviceTask.id.asc())
            .with_for_update(skip_locked=True)
        )
        return self.session.scalars(stmt).all()

    def mark_claimed(self, tasks: Sequence[DeviceTask], now: datetime) -> None:
        for task in tasks:
            task.status = TASK_IN_PROGRESS
            task.claimed_at = now
            task.started_at = now
            task.claim_count = (task.claim_count or 0) + 1

    def get_by_id(self, task_id: str) -> Optional[DeviceTask]:
        return self.session.get(DeviceTask, task_id)

    def list_for_device(
        self,
        device_id: str,
        status: Optional[str] = None,
    ) -> Sequence[DeviceTask]:
        stmt = select(DeviceTask).where(DeviceTask.device_id == device_id)
        if status:
            stmt = stmt.where(DeviceTask.status == status)
        return self.session.scalars(stmt.order_by(DeviceTask.created_at.desc())).all()
