"""Device task queue."""

from __future__ import annotations

from datetime import datetime, timedelta
from typing import Any, Optional, Sequence

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from update_manager.core.config import Settings
from update_manager.core.logging import DeviceLoggerAdapter, get_logger
from update_manager.core.metrics import TASK_RESULTS_TOTAL, TASKS_CLAIMED_TOTAL
from update_manager.core.time import utcnow
from update_manager.db import DeviceTask
from update_manager.domain.exceptions import NotFoundError
from update_manager.domain.tasks import TASK_IN_PROGRESS, TASK_PENDING, status_label
from update_manager.repositories import DeviceRepository, TaskRepository
from update_manager.schemas.task import TaskCreate, TaskResponse
from update_manager.services.storage import storage_error

logger = get_logger(__name__)


class TaskService:
    """Queues tasks for devices and hands them out to polling agents.

    Claimed tasks carry a lease: an ``in_progress`` task whose ``claimed_at`` is
    older than ``task_claim_timeout_seconds`` is handed out again, so a task is
    not stranded when an agent dies between claiming and reporting.
    """

    def __init__(self, session: Session, settings: Settings) -> None:
        self.session = session
        self.settings = settings
        self.tasks = TaskRepository(session)
        self.devices = DeviceRepository(session)
        self.log = DeviceLoggerAdapter(logger, {})

    # ------------------------------------------------------------------
    # Dashboard

    def create_task(self, device_id: str, payload: TaskCreate) -> DeviceTask:
        if self.devices.get_by_id(device_id) is None:
            raise NotFoundError("Device not found")
        task = DeviceTask(
            device_id=device_id,
            task_type=payload.task_type,
            payload=payload.payload,
            status=TASK_PENDING,
        )
        self.tasks.add(task)
        self.session.commit()
        self.session.refresh(task)
        return task

    def list_for_device(self, device_id: str, status: Optional[str] = None) -> Sequence[DeviceTask]:
        if self.devices.get_by_id(device_id) is None:
            raise NotFoundError("Device not found")
        return self.tasks.list_for_device(device_id, status)

    # ------------------------------------------------------------------
    # Agent

    def stale_before(self, now: datetime) -> Optional[datetime]:
        timeout = self.settings.task_claim_timeout_seconds
        if not timeout:
            return None
        return now - timedelta(seconds=timeout)

    def claim_for_device(self, device_id: str) -> list[TaskResponse]:
        """Claim every available task for ``device_id``, oldest first.

        Returns the tasks as they were before the claim.
        """
        log = self.log.bind(device_id=device_id, request_type="get_tasks")
        now = utcnow()
        try:
            tasks = self.tasks.claimable_for_device(device_id, self.stale_before(now))
            snapshots = [TaskResponse.model_validate(task) for task in tasks]
            reclaimed = sum(1 for task in tasks if task.status == TASK_IN_PROGRESS)
            self.tasks.mark_claimed(tasks, now)
            self.session.commit()
        except SQLAlchemyError:
            self.session.rollback()
            raise storage_error(log, "task claim") from None

        if reclaimed:
            log.warning("Reclaimed %d task(s) whose lease expired", reclaimed)
            TASKS_CLAIMED_TOTAL.labels(reclaimed="true").inc(reclaimed)
        if len(snapshots) - reclaimed:
            TASKS_CLAIMED_TOTAL.labels(reclaimed="false").inc(len(snapshots) - reclaimed)
        log.info("Handed out %d task(s)", len(snapshots))
        return snapshots

    def record_result(
        self,
        task_id: str,
        status: str,
        *,
        result: Any = None,
        error_message: Optional[str] = None,
        device_id: Optional[str] = None,
    ) -> DeviceTask:
        """Store the agent's outcome for a task.

        The status string is stored as reported. Repeated reports overwrite
        the previous one.
        """
        log = self.log.bind(device_id=device_id, request_type="task_result")
        try:
            task = self.tasks.get_by_id(task_id)
            if task is None or (device_id and task.device_id != device_id):
                raise NotFoundError("Task not found")
            task.status = status
            task.completed_at = utcnow()
            task.result = result
            task.error_message = error_message
            self.session.commit()
        except SQLAlchemyError:
            self.session.rollback()
            raise storage_error(log, "task result") from None

        TASK_RESULTS_TOTAL.labels(status=status_label(status)).inc()
        log.info("Task %s reported %s", task_id, status)
        return task
