"""Database models."""

import uuid
from datetime import datetime
from typing import Optional

from sqlalchemy import (
    JSON,
    Boolean,
    DateTime,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship

from update_manager.core.time import utcnow
from update_manager.domain.compliance import UNKNOWN


def generate_uuid() -> str:
    return str(uuid.uuid4())


class Base(DeclarativeBase):
    """Base class for all models."""

    pass


class Organisation(Base):
    """Organisation directory entry; each belongs to one tenant."""

    __tablename__ = "organisations"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=generate_uuid)
    tenant_id: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, nullable=False
    )

    devices: Mapped[list["Device"]] = relationship("Device", back_populates="organisation")


class Device(Base):
    """A workstation or server reporting update state through the agent."""

    __tablename__ = "system_devices"
    __table_args__ = (
        Index("ix_system_devices_hostname", "hostname"),
        Index("ix_system_devices_tenant_org", "tenant_id", "organisation_id"),
        Index("ix_system_devices_compliance", "compliance_status"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=generate_uuid)
    # sha256(scope + hostname); see update_manager.domain.devices.device_key
    device_key: Mapped[str] = mapped_column(String(64), nullable=False, unique=True)
    hostname: Mapped[str] = mapped_column(String(255), nullable=False)
    serial_number: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    os_name: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    os_version: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    os_build: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    ip_address: Mapped[Optional[str]] = mapped_column(String(45), nullable=True)
    last_boot_time: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    agent_version: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    last_seen: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    last_update_scan: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    compliance_status: Mapped[str] = mapped_column(
        String(20), nullable=False, default=UNKNOWN
    )  # compliant, non-compliant, unknown
    pending_critical_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    pending_total_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    failed_updates_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    tenant_id: Mapped[int] = mapped_column(Integer, nullable=False)
    organisation_id: Mapped[Optional[str]] = mapped_column(
        String(36), ForeignKey("organisations.id"), nullable=True
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False
    )

    organisation: Mapped[Optional["Organisation"]] = relationship(
        "Organisation", back_populates="devices"
    )
    updates: Mapped[list["UpdateRecord"]] = relationship("UpdateRecord", back_populates="device")
    tasks: Mapped[list["DeviceTask"]] = relationship("DeviceTask", back_populates="device")
    heartbeats: Mapped[list["DeviceHeartbeat"]] = relationship(
        "DeviceHeartbeat", back_populates="device"
    )


class UpdateRecord(Base):
    """Latest known state of one update on one device."""

    __tablename__ = "system_updates"
    __table_args__ = (
        UniqueConstraint("device_id", "kb_number", name="uix_system_updates_device_kb"),
        Index("ix_system_updates_status", "status"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=generate_uuid)
    device_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("system_devices.id"), nullable=False
    )
    kb_number: Mapped[str] = mapped_column(String(50), nullable=False)
    title: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    severity: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    status: Mapped[str] = mapped_column(String(20), nullable=False)  # pending, failed, installed
    size_mb: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    error_code: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    detected_date: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, nullable=False
    )
    installed_date: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    tenant_id: Mapped[int] = mapped_column(Integer, nullable=False)
    organisation_id: Mapped[Optional[str]] = mapped_column(String(36), nullable=True)

    device: Mapped["Device"] = relationship("Device", back_populates="updates")


class DeviceTask(Base):
    """Remote action queued for an agent to pick up."""

    __tablename__ = "device_tasks"
    __table_args__ = (Index("ix_device_tasks_device_status", "device_id", "status"),)

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=generate_uuid)
    device_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("system_devices.id"), nullable=False
    )
    task_type: Mapped[str] = mapped_column(String(50), nullable=False)
    payload: Mapped[Optional[dict]] = mapped_column(JSON, nullable=True)
    status: Mapped[str] = mapped_column(
        String(50), nullable=False, default="pending"
    )  # pending, in_progress, then whatever the agent reports
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, nullable=False
    )
    claimed_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    started_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    completed_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    claim_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    result: Mapped[Optional[dict]] = mapped_column(JSON, nullable=True)
    error_message: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    device: Mapped["Device"] = relationship("Device", back_populates="tasks")


class DeviceHeartbeat(Base):
    """Append-only liveness log."""

    __tablename__ = "device_heartbeats"
    __table_args__ = (Index("ix_device_heartbeats_device_at", "device_id", "heartbeat_at"),)

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=generate_uuid)
    device_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("system_devices.id"), nullable=False
    )
    heartbeat_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, nullable=False
    )
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="online")
    agent_version: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    tenant_id: Mapped[int] = mapped_column(Integer, nullable=False)
    organisation_id: Mapped[Optional[str]] = mapped_column(String(36), nullable=True)

    device: Mapped["Device"] = relationship("Device", back_populates="heartbeats")


class RolloutJob(Base):
    """Update rollout plan; status is moved by operators, nothing executes it."""

    __tablename__ = "update_rollout_jobs"
    __table_args__ = (Index("ix_update_rollout_jobs_status", "status"),)

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=generate_uuid)
    tenant_id: Mapped[int] = mapped_column(Integer, nullable=False)
    organisation_id: Mapped[Optional[str]] = mapped_column(String(36), nullable=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="draft")
    job_type: Mapped[str] = mapped_column(String(20), nullable=False, default="standard")
    target_type: Mapped[str] = mapped_column(String(20), nullable=False, default="all")
    target_filter: Mapped[dict] = mapped_column(JSON, nullable=False, default=dict)
    scheduled_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    started_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    completed_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    maintenance_window_start: Mapped[Optional[str]] = mapped_column(String(5), nullable=True)
    maintenance_window_end: Mapped[Optional[str]] = mapped_column(String(5), nullable=True)
    auto_reboot: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    max_retries: Mapped[int] = mapped_column(Integer, nullable=False, default=3)
    rollback_on_failure: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    requires_approval: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False
    )
