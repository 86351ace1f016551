"""Device task schemas."""

from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, Field


class TaskCreate(BaseModel):
    """Task creation schema."""

    task_type: str = Field(..., min_length=1, max_length=50)
    payload: Optional[dict] = None


class TaskResponse(BaseModel):
    """Task response schema."""

    id: str
    device_id: str
    task_type: str
    payload: Optional[dict] = None
    status: str
    created_at: datetime
    claimed_at: Optional[datetime] = None
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    claim_count: int = 0
    result: Optional[Any] = None
    error_message: Optional[str] = None

    model_config = {"from_attributes": True}
