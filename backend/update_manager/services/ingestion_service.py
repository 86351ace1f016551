"""Update snapshot ingestion.

A report is written in two steps. The device row (identity plus derived
compliance fields) is upserted and committed first; failure there fails the
request. The update log is then replaced in a second transaction whose
failure is logged and counted but never surfaces to the agent, so a bad
update row cannot roll back the device's compliance state.
"""

from __future__ import annotations

from typing import Any, Sequence

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from update_manager.core.config import Settings
from update_manager.core.logging import DeviceLoggerAdapter, get_logger
from update_manager.core.metrics import INGESTIONS_TOTAL, UPDATE_LOG_WRITE_FAILURES_TOTAL
from update_manager.core.time import parse_timestamp, utcnow
from update_manager.domain.compliance import ComplianceSnapshot, build_update_entries
from update_manager.domain.devices import device_key
from update_manager.domain.exceptions import NotFoundError, ValidationError
from update_manager.repositories import DeviceRepository, UpdateRecordRepository
from update_manager.schemas.agent import IngestPayload, UpdateLists
from update_manager.services.organisation_service import OrganisationService
from update_manager.services.storage import storage_error

logger = get_logger(__name__)

# Overwritten on every report.
_REPORT_COLUMNS = (
    "os_version",
    "os_build",
    "last_seen",
    "last_update_scan",
    "compliance_status",
    "pending_critical_count",
    "pending_total_count",
    "failed_updates_count",
)
# Only overwritten when the agent sends a value.
_OPTIONAL_COLUMNS = ("serial_number", "ip_address", "last_boot_time")


class IngestionService:
    """Applies agent update snapshots to the device and update-log stores."""

    def __init__(self, session: Session, settings: Settings) -> None:
        self.session = session
        self.settings = settings
        self.devices = DeviceRepository(session)
        self.updates = UpdateRecordRepository(session)
        self.organisations = OrganisationService(session, settings)
        self.log = DeviceLoggerAdapter(logger, {})

    def ingest(self, payload: IngestPayload) -> dict[str, Any]:
        if not payload.hostname or not payload.os_version:
            raise ValidationError("Missing required fields: hostname and os_version")

        log = self.log.bind(hostname=payload.hostname)
        snapshot = ComplianceSnapshot.from_lists(payload.pending_updates, payload.failed_updates)
        now = utcnow()

        try:
            organisation_id, tenant_id = self.organisations.resolve(payload.organisation_id)
            values = {
                "device_key": device_key(tenant_id, organisation_id, payload.hostname),
                "hostname": payload.hostname,
                "serial_number": payload.serial_number,
                "os_name": payload.os_name or self.settings.default_os_name,
                "os_version": payload.os_version,
                "os_build": payload.os_build,
                "ip_address": payload.ip_address,
                "last_boot_time": parse_timestamp(payload.last_boot_time),
                "last_seen": now,
                "last_update_scan": now,
                "compliance_status": snapshot.status,
                "pending_critical_count": snapshot.pending_critical_count,
                "pending_total_count": snapshot.pending_total_count,
                "failed_updates_count": snapshot.failed_updates_count,
                "tenant_id": tenant_id,
                "organisation_id": organisation_id,
            }
            update_columns = _REPORT_COLUMNS + (("os_name",) if payload.os_name else ())
            device = self.devices.upsert_by_key(
                values,
                update_columns=update_columns,
                keep_existing=_OPTIONAL_COLUMNS,
            )
            device_id = device.id
            self.session.commit()
        except SQLAlchemyError:
            self.session.rollback()
            raise storage_error(log, "device upsert") from None

        log = log.bind(device_id=device_id)
        log.info("Device %s is %s", payload.hostname, snapshot.status)

        processed = self._replace_update_log(
            device_id,
            payload,
            tenant_id=tenant_id,
            organisation_id=organisation_id,
            detected_date=now,
            log=log,
        )
        INGESTIONS_TOTAL.labels(source="ingest", compliance_status=snapshot.status).inc()

        return {
            "success": True,
            "device_id": device_id,
            "hostname": payload.hostname,
            "compliance_status": snapshot.status,
            "updates_processed": processed,
        }

    def apply_update_data(self, device_id: str, payload: UpdateLists) -> dict[str, Any]:
        """Apply a snapshot to a device the agent already knows the id of."""
        log = self.log.bind(device_id=device_id, request_type="update_data")
        snapshot = ComplianceSnapshot.from_lists(payload.pending_updates, payload.failed_updates)
        now = utcnow()

        try:
            device = self.devices.get_by_id(device_id)
            if device is None:
                raise NotFoundError("Device not found")
            device.last_update_scan = now
            device.compliance_status = snapshot.status
            device.pending_critical_count = snapshot.pending_critical_count
            device.pending_total_count = snapshot.pending_total_count
            device.failed_updates_count = snapshot.failed_updates_count
            hostname = device.hostname
            tenant_id = device.tenant_id
            organisation_id = device.organisation_id
            self.session.commit()
        except SQLAlchemyError:
            self.session.rollback()
            raise storage_error(log, "device compliance update") from None

        log = log.bind(hostname=hostname)
        log.info("Device %s is %s", hostname, snapshot.status)

        processed = self._replace_update_log(
            device_id,
            payload,
            tenant_id=tenant_id,
            organisation_id=organisation_id,
            detected_date=now,
            log=log,
        )
        INGESTIONS_TOTAL.labels(source="update_data", compliance_status=snapshot.status).inc()

        return {
            "success": True,
            "device_id": device_id,
            "hostname": hostname,
            "compliance_status": snapshot.status,
            "updates_processed": processed,
        }

    def _replace_update_log(
        self,
        device_id: str,
        payload: UpdateLists,
        *,
        tenant_id: int,
        organisation_id: str | None,
        detected_date,
        log: DeviceLoggerAdapter,
    ) -> int:
        """Swap the device's pending/failed rows for the reported ones.

        Returns the number of rows submitted, whether or not the write stuck.
        """
        rows: Sequence[dict[str, Any]] = []
        try:
            entries = build_update_entries(
                payload.pending_updates,
                payload.failed_updates,
                payload.installed_updates,
                installed_cap=self.settings.installed_updates_cap,
            )
            rows = [
                entry.to_row(
                    device_id=device_id,
                    tenant_id=tenant_id,
                    organisation_id=organisation_id,
                    detected_date=detected_date,
                )
                for entry in entries
            ]
            removed = self.updates.delete_active(device_id)
            self.updates.upsert_many(rows)
            self.session.commit()
        except Exception:  # best effort; device state is already committed
            self.session.rollback()
            UPDATE_LOG_WRITE_FAILURES_TOTAL.inc()
            log.exception("Update log write failed; device state was kept")
        else:
            log.debug("Update log replaced: %d removed, %d written", removed, len(rows))

        return len(rows)
