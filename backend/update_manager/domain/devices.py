"""Device-specific domain helpers."""

import hashlib
from dataclasses import dataclass
from typing import Optional


def device_key(tenant_id: int, organisation_id: Optional[str], hostname: str) -> str:
    """Deterministic identity of a device within its organisation (or tenant).

    Hostnames are only unique inside an organisation; when the organisation is
    unknown the tenant is the scope. The digest is the conflict target for the
    atomic find-or-create upsert.
    """
    scope = f"org:{organisation_id}" if organisation_id else f"tenant:{tenant_id}"
    return hashlib.sha256(f"{scope}\x1f{hostname}".encode("utf-8")).hexdigest()


@dataclass(slots=True)
class DeviceFilters:
    """Filters accepted by the device listing endpoint."""

    tenant_id: Optional[int] = None
    organisation_id: Optional[str] = None
    compliance_status: Optional[str] = None
    search: Optional[str] = None
    skip: int = 0
    limit: int = 100
