"""Schemas for the device agent channel."""

from typing import Any, Optional

from pydantic import BaseModel, Field


class PendingUpdate(BaseModel):
    kb_number: str = Field(..., min_length=1, max_length=50)
    title: Optional[str] = None
    severity: Optional[str] = None
    size_mb: Optional[float] = None


class InstalledUpdate(BaseModel):
    kb_number: str = Field(..., min_length=1, max_length=50)
    title: Optional[str] = None
    installed_date: Optional[str] = Field(
        default=None, description="Timestamp as reported by the OS; unparseable values are dropped"
    )


class FailedUpdate(BaseModel):
    kb_number: str = Field(..., min_length=1, max_length=50)
    title: Optional[str] = None
    error_code: Optional[str] = None


class UpdateLists(BaseModel):
    """The three update lists shared by ingestion and ``update_data`` requests."""

    pending_updates: list[PendingUpdate] = Field(default_factory=list)
    installed_updates: list[InstalledUpdate] = Field(default_factory=list)
    failed_updates: list[FailedUpdate] = Field(default_factory=list)


class IngestPayload(UpdateLists):
    """Full update snapshot pushed by an agent.

    ``hostname`` and ``os_version`` are required by the ingestion service, which
    answers with a domain validation error rather than a schema error.
    """

    hostname: Optional[str] = Field(default=None, max_length=255)
    os_version: Optional[str] = Field(default=None, max_length=100)
    os_name: Optional[str] = Field(default=None, max_length=100)
    os_build: Optional[str] = Field(default=None, max_length=100)
    serial_number: Optional[str] = Field(default=None, max_length=255)
    last_boot_time: Optional[str] = None
    ip_address: Optional[str] = Field(default=None, max_length=45)
    organisation_id: Optional[str] = None


class DeviceInfo(BaseModel):
    hostname: Optional[str] = Field(default=None, max_length=255)
    serial_number: Optional[str] = Field(default=None, max_length=255)
    os_version: Optional[str] = Field(default=None, max_length=100)
    os_build: Optional[str] = Field(default=None, max_length=100)


class AgentRequest(UpdateLists):
    """Multiplexed request on the device-agent endpoint, discriminated by ``type``."""

    type: Optional[str] = None
    device_id: Optional[str] = None
    organisation_id: Optional[str] = None
    device_info: Optional[DeviceInfo] = None
    agent_version: Optional[str] = Field(default=None, max_length=50)
    task_id: Optional[str] = None
    status: Optional[str] = Field(default=None, max_length=50)
    result: Optional[Any] = None
    error_message: Optional[str] = None


class IngestResponse(BaseModel):
    success: bool = True
    device_id: str
    hostname: str
    compliance_status: str
    updates_processed: int
