"""Shared FastAPI dependency factories."""

from typing import Optional

from fastapi import Depends, Header
from sqlalchemy.orm import Session

from update_manager.core.config import Settings, get_settings
from update_manager.core.security import verify_bearer_token
from update_manager.db import get_db
from update_manager.services import (
    AgentService,
    DeviceService,
    IngestionService,
    RolloutService,
    TaskService,
)


def get_session(db: Session = Depends(get_db)) -> Session:
    """Expose the SQLAlchemy session (alias for clarity)."""
    return db


def require_agent_token(
    authorization: Optional[str] = Header(default=None),
    settings: Settings = Depends(get_settings),
) -> None:
    """Reject agent calls that do not carry the shared device-agent secret."""
    verify_bearer_token(authorization, settings.device_agent_api_key, surface="agent")


def require_dashboard_token(
    authorization: Optional[str] = Header(default=None),
    settings: Settings = Depends(get_settings),
) -> None:
    verify_bearer_token(authorization, settings.dashboard_api_key, surface="dashboard")


def get_ingestion_service(
    session: Session = Depends(get_session),
    settings: Settings = Depends(get_settings),
) -> IngestionService:
    return IngestionService(session, settings)


def get_agent_service(
    session: Session = Depends(get_session),
    settings: Settings = Depends(get_settings),
) -> AgentService:
    return AgentService(session, settings)


def get_device_service(
    session: Session = Depends(get_session),
    settings: Settings = Depends(get_settings),
) -> DeviceService:
    return DeviceService(session, settings)


def get_task_service(
    session: Session = Depends(get_session),
    settings: Settings = Depends(get_settings),
) -> TaskService:
    return TaskService(session, settings)


def get_rollout_service(
    session: Session = Depends(get_session),
    settings: Settings = Depends(get_settings),
) -> RolloutService:
    return RolloutService(session, settings)
