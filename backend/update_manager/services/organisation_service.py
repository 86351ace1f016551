"""Organisation resolution for agent payloads."""

from __future__ import annotations

from typing import Optional

from sqlalchemy.orm import Session

from update_manager.core.config import Settings
from update_manager.core.logging import get_logger
from update_manager.domain.exceptions import ValidationError
from update_manager.repositories import OrganisationRepository

logger = get_logger(__name__)

DROP_TO_TENANT = "drop_to_tenant"
REJECT = "reject"


class OrganisationService:
    def __init__(self, session: Session, settings: Settings) -> None:
        self.session = session
        self.settings = settings
        self.organisations = OrganisationRepository(session)

    def resolve(self, organisation_id: Optional[str]) -> tuple[Optional[str], int]:
        """Map a reported organisation id to ``(organisation_id, tenant_id)``.

        Unknown ids are dropped (default tenant) or rejected depending on
        ``on_invalid_organisation``.
        """
        if not organisation_id:
            return None, self.settings.default_tenant_id

        organisation = self.organisations.get_by_id(organisation_id)
        if organisation is None:
            if self.settings.on_invalid_organisation == REJECT:
                raise ValidationError("Invalid organisation_id")
            logger.warning(
                "Unknown organisation_id %s; falling back to default tenant",
                organisation_id,
            )
            return None, self.settings.default_tenant_id

        return organisation.id, organisation.tenant_id
