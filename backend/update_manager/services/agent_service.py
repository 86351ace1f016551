"""Device agent channel: heartbeats, update data, task polling and results."""

from __future__ import annotations

from typing import Any, Callable

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from update_manager.core.config import Settings
from update_manager.core.logging import DeviceLoggerAdapter, get_logger
from update_manager.core.metrics import HEARTBEATS_TOTAL
from update_manager.core.time import utcnow
from update_manager.db import DeviceHeartbeat
from update_manager.domain.devices import device_key
from update_manager.domain.exceptions import (
    NotFoundError,
    UnknownRequestTypeError,
    ValidationError,
)
from update_manager.repositories import DeviceRepository, HeartbeatRepository
from update_manager.schemas.agent import AgentRequest
from update_manager.services.ingestion_service import IngestionService
from update_manager.services.organisation_service import OrganisationService
from update_manager.services.storage import storage_error
from update_manager.services.task_service import TaskService

logger = get_logger(__name__)

HEARTBEAT_ONLINE = "online"


class AgentService:
    """Dispatches agent requests on their ``type`` discriminator."""

    def __init__(self, session: Session, settings: Settings) -> None:
        self.session = session
        self.settings = settings
        self.devices = DeviceRepository(session)
        self.heartbeats = HeartbeatRepository(session)
        self.organisations = OrganisationService(session, settings)
        self.ingestion = IngestionService(session, settings)
        self.task_queue = TaskService(session, settings)
        self.log = DeviceLoggerAdapter(logger, {})

    def handle(self, request: AgentRequest) -> dict[str, Any]:
        handlers: dict[str, Callable[[AgentRequest], dict[str, Any]]] = {
            "heartbeat": self.heartbeat,
            "update_data": self.update_data,
            "get_tasks": self.get_tasks,
            "task_result": self.task_result,
        }
        handler = handlers.get(request.type or "")
        if handler is None:
            self.log.warning("Rejected agent request with type %r", request.type)
            raise UnknownRequestTypeError(request.type)
        return handler(request)

    def heartbeat(self, request: AgentRequest) -> dict[str, Any]:
        log = self.log.bind(device_id=request.device_id, request_type="heartbeat")
        info = request.device_info
        if not request.device_id and (info is None or not info.hostname):
            raise ValidationError("Missing required field: device_info.hostname")

        now = utcnow()
        try:
            if request.device_id:
                device = self.devices.get_by_id(request.device_id)
                if device is None:
                    raise NotFoundError("Device not found")
                if info is not None:
                    for field in ("serial_number", "os_version", "os_build"):
                        value = getattr(info, field)
                        if value:
                            setattr(device, field, value)
                if request.agent_version:
                    device.agent_version = request.agent_version
                device.last_seen = now
            else:
                organisation_id, tenant_id = self.organisations.resolve(request.organisation_id)
                device = self.devices.upsert_by_key(
                    {
                        "device_key": device_key(tenant_id, organisation_id, info.hostname),
                        "hostname": info.hostname,
                        "serial_number": info.serial_number,
                        "os_name": self.settings.default_os_name,
                        "os_version": info.os_version,
                        "os_build": info.os_build,
                        "agent_version": request.agent_version,
                        "last_seen": now,
                        "tenant_id": tenant_id,
                        "organisation_id": organisation_id,
                    },
                    update_columns=("last_seen",),
                    keep_existing=("serial_number", "os_version", "os_build", "agent_version"),
                )

            device_id = device.id
            self.heartbeats.add(
                DeviceHeartbeat(
                    device_id=device_id,
                    heartbeat_at=now,
                    status=HEARTBEAT_ONLINE,
                    agent_version=request.agent_version,
                    tenant_id=device.tenant_id,
                    organisation_id=device.organisation_id,
                )
            )
            self.session.commit()
        except SQLAlchemyError:
            self.session.rollback()
            raise storage_error(log, "heartbeat") from None

        HEARTBEATS_TOTAL.inc()
        log.bind(device_id=device_id).debug("Heartbeat recorded")
        return {"success": True, "device_id": device_id, "message": "Heartbeat received"}

    def update_data(self, request: AgentRequest) -> dict[str, Any]:
        if not request.device_id:
            raise ValidationError("Missing required field: device_id")
        return self.ingestion.apply_update_data(request.device_id, request)

    def get_tasks(self, request: AgentRequest) -> dict[str, Any]:
        if not request.device_id:
            raise ValidationError("Missing required field: device_id")
        tasks = self.task_queue.claim_for_device(request.device_id)
        return {"success": True, "tasks": [task.model_dump(mode="json") for task in tasks]}

    def task_result(self, request: AgentRequest) -> dict[str, Any]:
        if not request.task_id or not request.status:
            raise ValidationError("Missing required fields: task_id and status")
        self.task_queue.record_result(
            request.task_id,
            request.status,
            result=request.result,
            error_message=request.error_message,
            device_id=request.device_id,
        )
        return {"success": True, "message": "Task result recorded"}
