"""Organisation directory lookups."""

from __future__ import annotations

from typing import Optional

from sqlalchemy.orm import Session

from update_manager.db import Organisation
from update_manager.repositories.base import SQLAlchemyRepository


class OrganisationRepository(SQLAlchemyRepository[Organisation]):
    def __init__(self, session: Session) -> None:
        super().__init__(session)

    def get_by_id(self, organisation_id: str) -> Optional[Organisation]:
        return self.session.get(Organisation, organisation_id)
