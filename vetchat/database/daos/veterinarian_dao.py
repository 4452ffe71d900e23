"""
Veterinarian DAO

Read-only access to `veterinarian` profiles, which are maintained by the
veterinarian catalogue. The chat core reads existence, chat availability,
display name and the owning user.
"""

import logging
from uuid import UUID

from sqlalchemy.orm import Session

from vetchat.database.entities.veterinarian import Veterinarian

logger = logging.getLogger(__name__)


class VeterinarianDao:
    """
    Data Access Object (DAO) for `Veterinarian` lookups.
    """

    def fetchVeterinarianById(self, session: Session, veterinarian_id: UUID) -> Veterinarian | None:
        try:
            return session.get(Veterinarian, veterinarian_id)
        except Exception:
            logger.exception("Error in VeterinarianDao.fetchVeterinarianById (id=%s)", veterinarian_id)
            raise
