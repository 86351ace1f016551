"""Rollout job records."""

from __future__ import annotations

from typing import Sequence

from sqlalchemy.orm import Session

from update_manager.core.config import Settings
from update_manager.core.logging import get_logger
from update_manager.core.time import utcnow
from update_manager.db import RolloutJob
from update_manager.domain.exceptions import NotFoundError, ValidationError
from update_manager.domain.rollouts import FINISHED_STATUSES, JOB_STATUSES, RolloutJobFilters
from update_manager.repositories import RolloutJobRepository
from update_manager.schemas.rollout import RolloutJobCreate
from update_manager.services.organisation_service import OrganisationService

logger = get_logger(__name__)


class RolloutService:
    """Stores rollout plans and the status operators move them through.

    Nothing here executes a job; status changes only stamp timestamps.
    """

    def __init__(self, session: Session, settings: Settings) -> None:
        self.session = session
        self.settings = settings
        self.jobs = RolloutJobRepository(session)
        self.organisations = OrganisationService(session, settings)

    def create_job(self, payload: RolloutJobCreate) -> RolloutJob:
        organisation_id, tenant_id = self.organisations.resolve(payload.organisation_id)
        if organisation_id is None and payload.tenant_id is not None:
            tenant_id = payload.tenant_id

        job = RolloutJob(
            **payload.model_dump(exclude={"tenant_id", "organisation_id"}),
            status="scheduled" if payload.scheduled_at else "draft",
            tenant_id=tenant_id,
            organisation_id=organisation_id,
        )
        self.jobs.add(job)
        self.session.commit()
        self.session.refresh(job)
        logger.info("Rollout job %s created (%s)", job.id, job.status)
        return job

    def list_jobs(self, filters: RolloutJobFilters) -> tuple[int, Sequence[RolloutJob]]:
        return self.jobs.list(filters)

    def get_job(self, job_id: str) -> RolloutJob:
        job = self.jobs.get_by_id(job_id)
        if not job:
            raise NotFoundError("Rollout job not found")
        return job

    def set_status(self, job_id: str, status: str) -> RolloutJob:
        if status not in JOB_STATUSES:
            raise ValidationError(f"Invalid status: {status}")
        job = self.get_job(job_id)

        now = utcnow()
        job.status = status
        if status == "running":
            job.started_at = now
        elif status in FINISHED_STATUSES:
            job.completed_at = now

        self.session.commit()
        self.session.refresh(job)
        logger.info("Rollout job %s moved to %s", job_id, status)
        return job
