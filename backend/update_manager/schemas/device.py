"""Device dashboard schemas."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel


class DeviceResponse(BaseModel):
    """Device response schema."""

    id: str
    hostname: str
    serial_number: Optional[str] = None
    os_name: Optional[str] = None
    os_version: Optional[str] = None
    os_build: Optional[str] = None
    ip_address: Optional[str] = None
    last_boot_time: Optional[datetime] = None
    agent_version: Optional[str] = None
    last_seen: Optional[datetime] = None
    last_update_scan: Optional[datetime] = None
    compliance_status: str
    pending_critical_count: int
    pending_total_count: int
    failed_updates_count: int
    tenant_id: int
    organisation_id: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class DeviceListResponse(BaseModel):
    """Paginated device list."""

    total: int
    devices: list[DeviceResponse]


class UpdateRecordResponse(BaseModel):
    id: str
    device_id: str
    kb_number: str
    title: Optional[str] = None
    severity: Optional[str] = None
    status: str
    size_mb: Optional[float] = None
    error_code: Optional[str] = None
    detected_date: datetime
    installed_date: Optional[datetime] = None

    model_config = {"from_attributes": True}


class HeartbeatResponse(BaseModel):
    id: str
    device_id: str
    heartbeat_at: datetime
    status: str
    agent_version: Optional[str] = None

    model_config = {"from_attributes": True}


class ComplianceSummary(BaseModel):
    """Fleet-wide compliance counters."""

    total: int
    compliant: int
    non_compliant: int
    unknown: int
    offline: int
    pending_critical: int
    pending_total: int
    failed_total: int
    compliance_rate: int
