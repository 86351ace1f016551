"""Service layer modules."""

from .agent_service import AgentService
from .device_service import DeviceService
from .ingestion_service import IngestionService
from .organisation_service import OrganisationService
from .rollout_service import RolloutService
from .task_service import TaskService

__all__ = [
    "AgentService",
    "DeviceService",
    "IngestionService",
    "OrganisationService",
    "RolloutService",
    "TaskService",
]
