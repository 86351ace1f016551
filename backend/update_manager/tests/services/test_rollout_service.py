"""Tests for RolloutService."""

import pytest

from update_manager.domain.exceptions import NotFoundError, ValidationError
from update_manager.schemas.rollout import RolloutJobCreate
from update_manager.services.rollout_service import RolloutService


def test_create_uses_explicit_tenant_without_organisation(db_session, test_settings):
    job = RolloutService(db_session, test_settings).create_job(
        RolloutJobCreate(name="Tenant rollout", tenant_id=5)
    )
    assert job.tenant_id == 5
    assert job.organisation_id is None
    assert job.status == "draft"


@pytest.mark.parametrize("status", ["failed", "cancelled"])
def test_finishing_statuses_stamp_completion(db_session, test_settings, status):
    service = RolloutService(db_session, test_settings)
    job = service.create_job(RolloutJobCreate(name="Job"))
    updated = service.set_status(job.id, status)
    assert updated.completed_at is not None
    assert updated.started_at is None


def test_paused_stamps_nothing(db_session, test_settings):
    service = RolloutService(db_session, test_settings)
    job = service.create_job(RolloutJobCreate(name="Job"))
    updated = service.set_status(job.id, "paused")
    assert updated.started_at is None
    assert updated.completed_at is None


def test_set_status_validates(db_session, test_settings):
    with pytest.raises(ValidationError):
        RolloutService(db_session, test_settings).set_status("any", "bogus")


def test_set_status_unknown_job(db_session, test_settings):
    with pytest.raises(NotFoundError):
        RolloutService(db_session, test_settings).set_status("missing", "running")
