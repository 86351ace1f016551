"""Rollout job endpoints."""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query, status

from update_manager.dependencies import get_rollout_service, require_dashboard_token
from update_manager.domain.rollouts import RolloutJobFilters
from update_manager.schemas.rollout import (
    RolloutJobCreate,
    RolloutJobListResponse,
    RolloutJobResponse,
    RolloutJobStatusUpdate,
)
from update_manager.services.rollout_service import RolloutService

router = APIRouter(
    prefix="/rollout-jobs",
    tags=["rollout-jobs"],
    dependencies=[Depends(require_dashboard_token)],
)


@router.get("", response_model=RolloutJobListResponse)
def list_rollout_jobs(
    tenant_id: Optional[int] = None,
    organisation_id: Optional[str] = None,
    status_filter: Optional[str] = Query(None, alias="status"),
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=500),
    service: RolloutService = Depends(get_rollout_service),
) -> RolloutJobListResponse:
    filters = RolloutJobFilters(
        tenant_id=tenant_id,
        organisation_id=organisation_id,
        status=status_filter,
        skip=skip,
        limit=limit,
    )
    total, jobs = service.list_jobs(filters)
    return RolloutJobListResponse(
        total=total,
        jobs=[RolloutJobResponse.model_validate(job) for job in jobs],
    )


@router.post("", response_model=RolloutJobResponse, status_code=status.HTTP_201_CREATED)
def create_rollout_job(
    payload: RolloutJobCreate,
    service: RolloutService = Depends(get_rollout_service),
) -> RolloutJobResponse:
    """Create a rollout job; it starts as scheduled when a time is given, else draft."""
    return RolloutJobResponse.model_validate(service.create_job(payload))


@router.get("/{job_id}", response_model=RolloutJobResponse)
def get_rollout_job(
    job_id: str,
    service: RolloutService = Depends(get_rollout_service),
) -> RolloutJobResponse:
    return RolloutJobResponse.model_validate(service.get_job(job_id))


@router.patch("/{job_id}/status", response_model=RolloutJobResponse)
def set_rollout_job_status(
    job_id: str,
    payload: RolloutJobStatusUpdate,
    service: RolloutService = Depends(get_rollout_service),
) -> RolloutJobResponse:
    return RolloutJobResponse.model_validate(service.set_status(job_id, payload.status))
