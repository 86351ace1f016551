"""Device dashboard endpoints."""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query, status

from update_manager.dependencies import (
    get_device_service,
    get_task_service,
    require_dashboard_token,
)
from update_manager.domain.devices import DeviceFilters
from update_manager.schemas.device import (
    ComplianceSummary,
    DeviceListResponse,
    DeviceResponse,
    HeartbeatResponse,
    UpdateRecordResponse,
)
from update_manager.schemas.task import TaskCreate, TaskResponse
from update_manager.services.device_service import DeviceService
from update_manager.services.task_service import TaskService

router = APIRouter(
    prefix="/devices",
    tags=["devices"],
    dependencies=[Depends(require_dashboard_token)],
)


@router.get("", response_model=DeviceListResponse)
def list_devices(
    tenant_id: Optional[int] = None,
    organisation_id: Optional[str] = None,
    compliance_status: Optional[str] = None,
    search: Optional[str] = None,
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=500),
    service: DeviceService = Depends(get_device_service),
) -> DeviceListResponse:
    """List devices, most recently seen first."""
    filters = DeviceFilters(
        tenant_id=tenant_id,
        organisation_id=organisation_id,
        compliance_status=compliance_status,
        search=search,
        skip=skip,
        limit=limit,
    )
    total, devices = service.list_devices(filters)
    return DeviceListResponse(
        total=total,
        devices=[DeviceResponse.model_validate(device) for device in devices],
    )


@router.get("/summary", response_model=ComplianceSummary)
def compliance_summary(
    tenant_id: Optional[int] = None,
    organisation_id: Optional[str] = None,
    service: DeviceService = Depends(get_device_service),
) -> ComplianceSummary:
    return ComplianceSummary(**service.compliance_summary(tenant_id, organisation_id))


@router.get("/{device_id}", response_model=DeviceResponse)
def get_device(
    device_id: str,
    service: DeviceService = Depends(get_device_service),
) -> DeviceResponse:
    return DeviceResponse.model_validate(service.get_device(device_id))


@router.get("/{device_id}/updates", response_model=list[UpdateRecordResponse])
def list_device_updates(
    device_id: str,
    status_filter: Optional[str] = Query(None, alias="status"),
    service: DeviceService = Depends(get_device_service),
) -> list[UpdateRecordResponse]:
    """Update log for one device, optionally filtered by status."""
    records = service.list_updates(device_id, status_filter)
    return [UpdateRecordResponse.model_validate(record) for record in records]


@router.get("/{device_id}/heartbeats", response_model=list[HeartbeatResponse])
def list_device_heartbeats(
    device_id: str,
    limit: int = Query(50, ge=1, le=500),
    service: DeviceService = Depends(get_device_service),
) -> list[HeartbeatResponse]:
    beats = service.list_heartbeats(device_id, limit)
    return [HeartbeatResponse.model_validate(beat) for beat in beats]


@router.get("/{device_id}/tasks", response_model=list[TaskResponse])
def list_device_tasks(
    device_id: str,
    status_filter: Optional[str] = Query(None, alias="status"),
    service: TaskService = Depends(get_task_service),
) -> list[TaskResponse]:
    tasks = service.list_for_device(device_id, status_filter)
    return [TaskResponse.model_validate(task) for task in tasks]


@router.post(
    "/{device_id}/tasks",
    response_model=TaskResponse,
    status_code=status.HTTP_201_CREATED,
)
def create_device_task(
    device_id: str,
    payload: TaskCreate,
    service: TaskService = Depends(get_task_service),
) -> TaskResponse:
    """Queue a task for the device's agent to pick up on its next poll."""
    return TaskResponse.model_validate(service.create_task(device_id, payload))
