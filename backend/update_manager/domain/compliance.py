"""Compliance classification and update-log row construction.

Both agent surfaces (the ingestion endpoint and the ``update_data`` request
type) share these rules, so they live here as plain functions over the
reported update lists.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Iterable, Optional, Sequence

from update_manager.core.time import parse_timestamp

COMPLIANT = "compliant"
NON_COMPLIANT = "non-compliant"
UNKNOWN = "unknown"
COMPLIANCE_STATUSES = (COMPLIANT, NON_COMPLIANT, UNKNOWN)

CRITICAL_SEVERITY = "critical"
DEFAULT_SEVERITY = "Unknown"

UPDATE_PENDING = "pending"
UPDATE_FAILED = "failed"
UPDATE_INSTALLED = "installed"
ACTIVE_UPDATE_STATUSES = (UPDATE_PENDING, UPDATE_FAILED)


def is_critical(update: object) -> bool:
    severity = getattr(update, "severity", None)
    return bool(severity) and str(severity).lower() == CRITICAL_SEVERITY


def count_critical(pending: Iterable[object]) -> int:
    return sum(1 for update in pending if is_critical(update))


def compute_compliance(
    pending: Sequence[object],
    failed: Optional[Sequence[object]] = None,
) -> str:
    """Classify a snapshot from its pending and failed update lists.

    Non-compliant when any pending update is critical (case-insensitive) or
    any update failed. No stored history is consulted.
    """
    if failed:
        return NON_COMPLIANT
    if any(is_critical(update) for update in pending):
        return NON_COMPLIANT
    return COMPLIANT


@dataclass(slots=True)
class ComplianceSnapshot:
    """Derived device fields for one report."""

    status: str
    pending_critical_count: int
    pending_total_count: int
    failed_updates_count: int

    @classmethod
    def from_lists(
        cls,
        pending: Sequence[object],
        failed: Optional[Sequence[object]] = None,
    ) -> "ComplianceSnapshot":
        failed = failed or []
        return cls(
            status=compute_compliance(pending, failed),
            pending_critical_count=count_critical(pending),
            pending_total_count=len(pending),
            failed_updates_count=len(failed),
        )


@dataclass(slots=True)
class UpdateEntry:
    """One row destined for the update log, before device/tenant scoping."""

    kb_number: str
    title: Optional[str]
    status: str
    severity: Optional[str] = None
    size_mb: Optional[float] = None
    error_code: Optional[str] = None
    installed_date: Optional[datetime] = None

    def to_row(
        self,
        *,
        device_id: str,
        tenant_id: int,
        organisation_id: Optional[str],
        detected_date: datetime,
    ) -> dict:
        return {
            "device_id": device_id,
            "kb_number": self.kb_number,
            "title": self.title,
            "severity": self.severity,
            "status": self.status,
            "size_mb": self.size_mb,
            "error_code": self.error_code,
            "installed_date": self.installed_date,
            "detected_date": detected_date,
            "tenant_id": tenant_id,
            "organisation_id": organisation_id,
        }


def build_update_entries(
    pending: Sequence[object],
    failed: Optional[Sequence[object]],
    installed: Optional[Sequence[object]],
    *,
    installed_cap: int = 10,
) -> list[UpdateEntry]:
    """Build deduplicated update-log entries from a report.

    Entries are produced pending, then failed, then the first ``installed_cap``
    installed updates in input order. A ``kb_number`` keeps its first
    occurrence, so a KB reported both pending and installed stays pending.

    Dedup only shapes the log. ``ComplianceSnapshot`` counts the lists as
    reported, so a KB listed both pending and failed is logged as pending yet
    still counts toward ``failed_updates_count`` and makes the device
    non-compliant.
    """
    entries: list[UpdateEntry] = []

    for update in pending:
        entries.append(
            UpdateEntry(
                kb_number=update.kb_number,
                title=getattr(update, "title", None),
                status=UPDATE_PENDING,
                severity=getattr(update, "severity", None) or DEFAULT_SEVERITY,
                size_mb=getattr(update, "size_mb", None),
            )
        )

    for update in failed or []:
        entries.append(
            UpdateEntry(
                kb_number=update.kb_number,
                title=getattr(update, "title", None),
                status=UPDATE_FAILED,
                error_code=getattr(update, "error_code", None),
            )
        )

    for update in list(installed or [])[:installed_cap]:
        entries.append(
            UpdateEntry(
                kb_number=update.kb_number,
                title=getattr(update, "title", None),
                status=UPDATE_INSTALLED,
                installed_date=parse_timestamp(getattr(update, "installed_date", None)),
            )
        )

    return dedupe_entries(entries)


def dedupe_entries(entries: Iterable[UpdateEntry]) -> list[UpdateEntry]:
    seen: dict[str, UpdateEntry] = {}
    for entry in entries:
        seen.setdefault(entry.kb_number, entry)
    return list(seen.values())
