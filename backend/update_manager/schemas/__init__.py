"""Pydantic schemas for request/response validation."""

from .agent import (
    AgentRequest,
    DeviceInfo,
    FailedUpdate,
    IngestPayload,
    IngestResponse,
    InstalledUpdate,
    PendingUpdate,
)
from .device import (
    ComplianceSummary,
    DeviceListResponse,
    DeviceResponse,
    HeartbeatResponse,
    UpdateRecordResponse,
)
from .rollout import (
    RolloutJobCreate,
    RolloutJobListResponse,
    RolloutJobResponse,
    RolloutJobStatusUpdate,
)
from .task import TaskCreate, TaskResponse

__all__ = [
    "AgentRequest",
    "DeviceInfo",
    "FailedUpdate",
    "IngestPayload",
    "IngestResponse",
    "InstalledUpdate",
    "PendingUpdate",
    "ComplianceSummary",
    "DeviceListResponse",
    "DeviceResponse",
    "HeartbeatResponse",
    "UpdateRecordResponse",
    "RolloutJobCreate",
    "RolloutJobListResponse",
    "RolloutJobResponse",
    "RolloutJobStatusUpdate",
    "TaskCreate",
    "TaskResponse",
]
