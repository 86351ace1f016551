"""Database module initialization."""

from .models import (
    Base,
    Device,
    DeviceHeartbeat,
    DeviceTask,
    Organisation,
    RolloutJob,
    UpdateRecord,
)
from .session import SessionLocal, engine, get_db
from .utils import init_db

__all__ = [
    "Base",
    "Device",
    "DeviceHeartbeat",
    "DeviceTask",
    "Organisation",
    "RolloutJob",
    "UpdateRecord",
    "get_db",
    "engine",
    "SessionLocal",
    "init_db",
]
