"""Database utility helpers."""

from __future__ import annotations

from update_manager.core import settings
from update_manager.core.logging import get_logger
from update_manager.db.models import Base, Organisation

logger = get_logger(__name__)

DEFAULT_ORGANISATION_NAME = "Default Organisation"


def init_db(db_session) -> None:
    """Create tables and seed a default organisation outside production (idempotent)."""
    if settings.is_production:
        logger.info("Skipping schema bootstrap in production; run migrations instead")
        return

    bind = db_session.get_bind()
    if bind is not None:
        Base.metadata.create_all(bind=bind)

    existing = (
        db_session.query(Organisation)
        .filter(
            Organisation.name == DEFAULT_ORGANISATION_NAME,
            Organisation.tenant_id == settings.default_tenant_id,
        )
        .first()
    )
    if not existing:
        db_session.add(
            Organisation(name=DEFAULT_ORGANISATION_NAME, tenant_id=settings.default_tenant_id)
        )
        db_session.commit()
        logger.info("Created %s", DEFAULT_ORGANISATION_NAME)
