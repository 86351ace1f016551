"""Rollout job schemas."""

import re
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from update_manager.domain.rollouts import JOB_TYPES, TARGET_TYPES

WINDOW_PATTERN = re.compile(r"^([01][0-9]|2[0-3]):[0-5][0-9]$")


class RolloutJobCreate(BaseModel):
    """Rollout job creation schema."""

    name: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    job_type: str = "standard"
    target_type: str = "all"
    target_filter: dict = Field(default_factory=dict)
    scheduled_at: Optional[datetime] = None
    maintenance_window_start: Optional[str] = None
    maintenance_window_end: Optional[str] = None
    auto_reboot: bool = False
    max_retries: int = Field(default=3, ge=0, le=10)
    rollback_on_failure: bool = False
    requires_approval: bool = False
    tenant_id: Optional[int] = None
    organisation_id: Optional[str] = None

    @field_validator("job_type")
    @classmethod
    def validate_job_type(cls, v: str) -> str:
        if v not in JOB_TYPES:
            raise ValueError(f"Must be one of: {', '.join(JOB_TYPES)}")
        return v

    @field_validator("target_type")
    @classmethod
    def validate_target_type(cls, v: str) -> str:
        if v not in TARGET_TYPES:
            raise ValueError(f"Must be one of: {', '.join(TARGET_TYPES)}")
        return v

    @field_validator("maintenance_window_start", "maintenance_window_end")
    @classmethod
    def validate_window(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and not WINDOW_PATTERN.match(v):
            raise ValueError("Must be HH:MM")
        return v


class RolloutJobStatusUpdate(BaseModel):
    status: str = Field(..., min_length=1, max_length=20)


class RolloutJobResponse(BaseModel):
    """Rollout job response schema."""

    id: str
    name: str
    description: Optional[str] = None
    status: str
    job_type: str
    target_type: str
    target_filter: dict
    scheduled_at: Optional[datetime] = None
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    maintenance_window_start: Optional[str] = None
    maintenance_window_end: Optional[str] = None
    auto_reboot: bool
    max_retries: int
    rollback_on_failure: bool
    requires_approval: bool
    tenant_id: int
    organisation_id: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class RolloutJobListResponse(BaseModel):
    total: int
    jobs: list[RolloutJobResponse]
