"""Dashboard queries over devices and their logs."""

from __future__ import annotations

from datetime import timedelta
from typing import Optional, Sequence

from sqlalchemy.orm import Session

from update_manager.core.config import Settings
from update_manager.core.time import utcnow
from update_manager.db import Device, DeviceHeartbeat, UpdateRecord
from update_manager.domain.compliance import COMPLIANCE_STATUSES
from update_manager.domain.devices import DeviceFilters
from update_manager.domain.exceptions import NotFoundError, ValidationError
from update_manager.repositories import (
    DeviceRepository,
    HeartbeatRepository,
    UpdateRecordRepository,
)


class DeviceService:
    """Read side of the device store."""

    def __init__(self, session: Session, settings: Settings) -> None:
        self.session = session
        self.settings = settings
        self.devices = DeviceRepository(session)
        self.updates = UpdateRecordRepository(session)
        self.heartbeats = HeartbeatRepository(session)

    def list_devices(self, filters: DeviceFilters) -> tuple[int, Sequence[Device]]:
        if filters.compliance_status and filters.compliance_status not in COMPLIANCE_STATUSES:
            raise ValidationError(f"Invalid compliance_status: {filters.compliance_status}")
        return self.devices.list(filters)

    def get_device(self, device_id: str) -> Device:
        device = self.devices.get_by_id(device_id)
        if not device:
            raise NotFoundError("Device not found")
        return device

    def list_updates(self, device_id: str, status: Optional[str] = None) -> Sequence[UpdateRecord]:
        self.get_device(device_id)
        return self.updates.list_for_device(device_id, status)

    def list_heartbeats(self, device_id: str, limit: int = 50) -> Sequence[DeviceHeartbeat]:
        self.get_device(device_id)
        return self.heartbeats.recent_for_device(device_id, limit)

    def compliance_summary(
        self,
        tenant_id: Optional[int] = None,
        organisation_id: Optional[str] = None,
    ) -> dict[str, int]:
        """Counters for the dashboard header.

        A device is offline when it has never been seen or was last seen more
        than ``offline_after_days`` ago.
        """
        offline_before = utcnow() - timedelta(days=self.settings.offline_after_days)
        summary = self.devices.summary(
            offline_before=offline_before,
            tenant_id=tenant_id,
            organisation_id=organisation_id,
        )
        total = summary["total"]
        summary["compliance_rate"] = round(summary["compliant"] * 100 / total) if total else 0
        return summary
