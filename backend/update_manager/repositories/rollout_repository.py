"""Rollout job persistence."""

from __future__ import annotations

from typing import Optional, Sequence, Tuple

from sqlalchemy.orm import Session

from update_manager.db import RolloutJob
from update_manager.domain.rollouts import RolloutJobFilters
from update_manager.repositories.base import SQLAlchemyRepository


class RolloutJobRepository(SQLAlchemyRepository[RolloutJob]):
    def __init__(self, session: Session) -> None:
        super().__init__(session)

    def list(self, filters: RolloutJobFilters) -> Tuple[int, Sequence[RolloutJob]]:
        query = self.session.query(RolloutJob)
        if filters.tenant_id is not None:
            query = query.filter(RolloutJob.tenant_id == filters.tenant_id)
        if filters.organisation_id:
            query = query.filter(RolloutJob.organisation_id == filters.organisation_id)
        if filters.status:
            query = query.filter(RolloutJob.status == filters.status)

        total = query.count()
        records = (
            query.order_by(RolloutJob.created_at.desc())
            .offset(filters.skip)
            .limit(filters.limit)
            .all()
        )
        return total, records

    def get_by_id(self, job_id: str) -> Optional[RolloutJob]:
        return self.session.get(RolloutJob, job_id)
