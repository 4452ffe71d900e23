"""
Conversation DAO

Purpose
-------
Provides the data-access layer for the `Conversation` ORM entity:
- Guarded creation of ACTIVE conversations (one per user/veterinarian pair)
- Lookup by id (optionally row-locked), by active pair, by participant
- Conditional, monotonic summary updates (new message, read, close)
- Bulk deletion for the user-deletion cascade

Design
------
- Requires an active SQLAlchemy `Session` supplied by the caller (no session
  creation inside the DAO). Transaction boundaries live in the core layer.
- State changes that race with other writers are expressed as single
  conditional `UPDATE` statements (``WHERE status = 'ACTIVE'``) that only ever
  set unread flags to true, so a concurrent writer can never overwrite them
  with a stale read.
- A participant is either the conversation's user or the user that owns the
  conversation's veterinarian profile; participant queries join `veterinarian`.

Error Handling
--------------
- Methods log storage errors with `logger.exception` and re-raise them.
- `insertActiveConversation` is the one exception: an `IntegrityError` on the
  active-pair index is the expected outcome of losing a creation race and is
  reported as ``False``.
"""

import logging
from datetime import datetime
from uuid import UUID

from sqlalchemy import and_, delete, func, or_, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from vetchat.database.entities.conversations import Conversation, ConversationStatus
from vetchat.database.entities.veterinarian import Veterinarian

logger = logging.getLogger(__name__)

USER_SIDE = "user"
VET_SIDE = "vet"


def _participant_filter(user_id: UUID):
    return or_(Conversation.user_id == user_id, Veterinarian.user_id == user_id)


class ConversationDao:
    """
    Data Access Object (DAO) for managing Conversation entities.
    """

    def insertActiveConversation(self, session: Session, conversation: Conversation) -> bool:
        """
        Insert a new ACTIVE conversation inside a SAVEPOINT.

        Parameters
        ----------
        session : Session
            Active SQLAlchemy session.
        conversation : Conversation
            New conversation entity (status ACTIVE).

        Returns
        -------
        bool
            True when the row was inserted; False when another ACTIVE
            conversation for the same pair already exists (the savepoint is
            rolled back and the outer transaction stays usable).
        """
        try:
            with session.begin_nested():
                session.add(conversation)
                session.flush()
            return True
        except IntegrityError:
            logger.info(
                "Active conversation for user %s and veterinarian %s created concurrently",
                conversation.user_id,
                conversation.veterinarian_id,
            )
            return False

    def fetchConversationById(self, session: Session, conversation_id: UUID, for_update: bool = False) -> Conversation | None:
        """
        Fetch a conversation by id.

        Parameters
        ----------
        session : Session
            Active SQLAlchemy session.
        conversation_id : UUID
            Conversation identifier.
        for_update : bool
            Take a row lock (``SELECT ... FOR UPDATE``) that is held until the
            surrounding transaction ends.

        Returns
        -------
        Conversation | None
        """
        try:
            stmt = select(Conversation).where(Conversation.id == conversation_id)
            if for_update:
                stmt = stmt.with_for_update(of=Conversation)
            return session.scalars(stmt).first()
        except Exception:
            logger.exception("Error in ConversationDao.fetchConversationById (id=%s)", conversation_id)
            raise

    def fetchActiveConversation(self, session: Session, user_id: UUID, veterinarian_id: UUID) -> Conversation | None:
        """Return the ACTIVE conversation of a (user, veterinarian) pair, if any."""
        try:
            return session.scalars(
                select(Conversation).where(
                    Conversation.user_id == user_id,
                    Conversation.veterinarian_id == veterinarian_id,
                    Conversation.status == ConversationStatus.ACTIVE,
                )
            ).first()
        except Exception:
            logger.exception("Error in ConversationDao.fetchActiveConversation")
            raise

    def fetchConversationsForParticipant(
        self,
        session: Session,
        user_id: UUID,
        offset: int,
        limit: int,
        order_by_recent: bool = False,
        status: ConversationStatus | None = None,
    ) -> tuple[list[Conversation], int]:
        """
        Fetch one page of the conversations a user takes part in, on either side.

        Parameters
        ----------
        session : Session
            Active SQLAlchemy session.
        user_id : UUID
            The participant.
        offset, limit : int
            Window over the ordered result.
        order_by_recent : bool
            Order by ``last_message_at`` (newest first) instead of the default
            ``created_at`` (newest first).
        status : ConversationStatus | None
            Optional status filter.

        Returns
        -------
        tuple[list[Conversation], int]
            The page and the total number of matching conversations.
        """
        try:
            conditions = [_participant_filter(user_id)]
            if status is not None:
                conditions.append(Conversation.status == status)

            primary = Conversation.last_message_at if order_by_recent else Conversation.created_at
            stmt = (
                select(Conversation)
                .join(Veterinarian, Conversation.veterinarian_id == Veterinarian.id)
                .where(*conditions)
                .order_by(primary.desc(), Conversation.id)
                .offset(offset)
                .limit(limit)
            )
            total = session.scalar(
                select(func.count(Conversation.id))
                .join(Veterinarian, Conversation.veterinarian_id == Veterinarian.id)
                .where(*conditions)
            )
            return list(session.scalars(stmt).all()), int(total or 0)
        except Exception:
            logger.exception("Error in ConversationDao.fetchConversationsForParticipant")
            raise

    def countUnreadForParticipant(self, session: Session, user_id: UUID) -> int:
        """Count conversations whose unread flag for the given participant is set."""
        try:
            as_user = and_(Conversation.user_id == user_id, Conversation.user_unread.is_(True))
            as_vet = and_(
                Veterinarian.user_id == user_id,
                Conversation.user_id != user_id,
                Conversation.vet_unread.is_(True),
            )
            total = session.scalar(
                select(func.count(Conversation.id))
                .join(Veterinarian, Conversation.veterinarian_id == Veterinarian.id)
                .where(or_(as_user, as_vet))
            )
            return int(total or 0)
        except Exception:
            logger.exception("Error in ConversationDao.countUnreadForParticipant")
            raise

    def recordNewMessage(self, session: Session, conversation_id: UUID, sent_at: datetime, recipient_side: str) -> int | None:
        """
        Apply the summary update that accompanies a new message.

        Sets ``last_message_at``, raises the recipient's unread flag and
        advances ``message_seq`` in one statement guarded by
        ``status = 'ACTIVE'``.

        Returns
        -------
        int | None
            The sequence number reserved for the new message, or None when the
            conversation is not ACTIVE (nothing was changed).
        """
        flag = Conversation.vet_unread if recipient_side == VET_SIDE else Conversation.user_unread
        try:
            result = session.execute(
                update(Conversation)
                .where(Conversation.id == conversation_id, Conversation.status == ConversationStatus.ACTIVE)
                .values({
                    Conversation.last_message_at: sent_at,
                    flag: True,
                    Conversation.message_seq: Conversation.message_seq + 1,
                })
                .returning(Conversation.message_seq)
                .execution_options(synchronize_session=False)
            )
            return result.scalar_one_or_none()
        except Exception:
            logger.exception("Error in ConversationDao.recordNewMessage (id=%s)", conversation_id)
            raise

    def clearUnread(self, session: Session, conversation_id: UUID, side: str) -> None:
        """Clear the unread flag of one side of a conversation."""
        flag = Conversation.vet_unread if side == VET_SIDE else Conversation.user_unread
        try:
            session.execute(
                update(Conversation)
                .where(Conversation.id == conversation_id)
                .values({flag: False})
                .execution_options(synchronize_session=False)
            )
        except Exception:
            logger.exception("Error in ConversationDao.clearUnread (id=%s)", conversation_id)
            raise

    def closeConversation(self, session: Session, conversation_id: UUID, closed_at: datetime) -> bool:
        """
        Transition ACTIVE → CLOSED.

        Returns
        -------
        bool
            True if this call closed the conversation; False if it was already
            CLOSED (``closed_at`` keeps its original value).
        """
        try:
            result = session.execute(
                update(Conversation)
                .where(Conversation.id == conversation_id, Conversation.status == ConversationStatus.ACTIVE)
                .values(status=ConversationStatus.CLOSED, closed_at=closed_at)
                .execution_options(synchronize_session=False)
            )
            return result.rowcount > 0
        except Exception:
            logger.exception("Error in ConversationDao.closeConversation (id=%s)", conversation_id)
            raise

    def deleteConversationsByUser(self, session: Session, user_id: UUID) -> int:
        """Delete every conversation where the user is the user participant. Messages must be gone first."""
        try:
            result = session.execute(
                delete(Conversation)
                .where(Conversation.user_id == user_id)
                .execution_options(synchronize_session=False)
            )
            return result.rowcount
        except Exception:
            logger.exception("Error in ConversationDao.deleteConversationsByUser (user=%s)", user_id)
            raise
