"""Rollout job vocabulary and filters."""

from dataclasses import dataclass
from typing import Optional

JOB_STATUSES = ("draft", "scheduled", "running", "paused", "completed", "failed", "cancelled")
JOB_TYPES = ("standard", "staged", "emergency")
TARGET_TYPES = ("all", "selected", "group", "department", "location")

FINISHED_STATUSES = frozenset({"completed", "failed", "cancelled"})


@dataclass(slots=True)
class RolloutJobFilters:
    tenant_id: Optional[int] = None
    organisation_id: Optional[str] = None
    status: Optional[str] = None
    skip: int = 0
    limit: int = 100
