"""
User DAO

Purpose
-------
Read-only access to `app_user`. Accounts are created, updated and deleted by
the user-lifecycle service; the chat core only needs to know whether a user
exists and what their display name is.

Design
------
- The DAO expects an active SQLAlchemy `Session` supplied by the caller.
"""

import logging
from uuid import UUID

from sqlalchemy.orm import Session

from vetchat.database.entities.user import User

logger = logging.getLogger(__name__)


class UserDao:
    """
    Data Access Object (DAO) for `User` lookups.
    """

    def fetchUserById(self, session: Session, user_id: UUID) -> User | None:
        """
        Fetch a user by id.

        Parameters
        ----------
        session : Session
            Active SQLAlchemy session.
        user_id : UUID
            Unique identifier of the user.

        Returns
        -------
        User | None
            The user, or None when no such account exists.
        """
        try:
            return session.get(User, user_id)
        except Exception:
            logger.exception("Error in UserDao.fetchUserById (id=%s)", user_id)
            raise
