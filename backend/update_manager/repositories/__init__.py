"""Repository layer abstractions."""

from .base import SQLAlchemyRepository
from .device_repository import DeviceRepository
from .heartbeat_repository import HeartbeatRepository
from .organisation_repository import OrganisationRepository
from .rollout_repository import RolloutJobRepository
from .task_repository import TaskRepository
from .update_repository import UpdateRecordRepository

__all__ = [
    "SQLAlchemyRepository",
    "DeviceRepository",
    "HeartbeatRepository",
    "OrganisationRepository",
    "RolloutJobRepository",
    "TaskRepository",
    "UpdateRecordRepository",
]
