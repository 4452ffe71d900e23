"""
Chat Messages DAO

Purpose
-------
Data-access layer for the `ChatMessage` ORM entity. Provides:
- Message creation
- Lookup by id and paged retrieval by conversation (oldest first, by `seq`)
- Bulk read-marking of the other side's messages
- Deletion (single message, by sender, by owning user's conversations)

Design
------
- Requires an active SQLAlchemy `Session` provided by the caller.
- Keeps business rules (access control, validation) in the core layer.
- Ordering is always ``seq ASC``: `seq` is reserved under the conversation's
  summary update, so it is unique and strictly increasing per conversation and
  page boundaries never reorder or duplicate messages.

Error Handling
--------------
- Methods log with `logger.exception(...)` and re-raise.
"""

import logging
from datetime import datetime
from uuid import UUID

from sqlalchemy import delete, func, select, update
from sqlalchemy.orm import Session

from vetchat.database.entities.conversations import Conversation
from vetchat.database.entities.messages import ChatMessage

logger = logging.getLogger(__name__)


class MessageDao:
    """
    Data Access Object (DAO) for managing chat messages.
    """

    def createMessage(self, session: Session, message: ChatMessage) -> ChatMessage:
        """
        Stage a new message for insert.

        Parameters
        ----------
        session : Session
            Active SQLAlchemy session.
        message : ChatMessage
            Message entity instance to be added.

        Returns
        -------
        ChatMessage
            The message object that was added.
        """
        try:
            session.add(message)
            session.flush()
            return message
        except Exception:
            logger.exception("Error in MessageDao.createMessage")
            raise

    def fetchMessageById(self, session: Session, message_id: UUID) -> ChatMessage | None:
        try:
            return session.get(ChatMessage, message_id)
        except Exception:
            logger.exception("Error in MessageDao.fetchMessageById (id=%s)", message_id)
            raise

    def fetchMessagesPage(self, session: Session, conversation_id: UUID, offset: int, limit: int) -> tuple[list[ChatMessage], int]:
        """
        Fetch one page of a conversation's messages, oldest first.

        Parameters
        ----------
        session : Session
            Active SQLAlchemy session.
        conversation_id : UUID
            Unique identifier of the conversation.
        offset, limit : int
            Window over the ``seq ASC`` ordering.

        Returns
        -------
        tuple[list[ChatMessage], int]
            The page and the total number of messages in the conversation.
        """
        try:
            rows = session.scalars(
                select(ChatMessage)
                .where(ChatMessage.conversation_id == conversation_id)
                .order_by(ChatMessage.seq.asc())
                .offset(offset)
                .limit(limit)
            ).all()
            return list(rows), self.countMessages(session, conversation_id)
        except Exception:
            logger.exception("Error in MessageDao.fetchMessagesPage (conversation=%s)", conversation_id)
            raise

    def countMessages(self, session: Session, conversation_id: UUID) -> int:
        try:
            total = session.scalar(
                select(func.count(ChatMessage.id)).where(ChatMessage.conversation_id == conversation_id)
            )
            return int(total or 0)
        except Exception:
            logger.exception("Error in MessageDao.countMessages (conversation=%s)", conversation_id)
            raise

    def markAllAsRead(self, session: Session, conversation_id: UUID, reader_id: UUID, read_at: datetime) -> int:
        """
        Mark every unread message not sent by `reader_id` as read.

        Already-read messages are left untouched, so `read_at` records the
        first read only.

        Returns
        -------
        int
            Number of messages that changed state.
        """
        try:
            result = session.execute(
                update(ChatMessage)
                .where(
                    ChatMessage.conversation_id == conversation_id,
                    ChatMessage.sender_id != reader_id,
                    ChatMessage.is_read.is_(False),
                )
                .values(is_read=True, read_at=read_at)
                .execution_options(synchronize_session=False)
            )
            return result.rowcount
        except Exception:
            logger.exception("Error in MessageDao.markAllAsRead (conversation=%s)", conversation_id)
            raise

    def deleteMessage(self, session: Session, message: ChatMessage) -> None:
        try:
            session.delete(message)
        except Exception:
            logger.exception("Error in MessageDao.deleteMessage (id=%s)", message.id)
            raise

    def deleteMessagesBySender(self, session: Session, sender_id: UUID) -> int:
        """Delete every message sent by the user, in any conversation."""
        try:
            result = session.execute(
                delete(ChatMessage)
                .where(ChatMessage.sender_id == sender_id)
                .execution_options(synchronize_session=False)
            )
            return result.rowcount
        except Exception:
            logger.exception("Error in MessageDao.deleteMessagesBySender (sender=%s)", sender_id)
            raise

    def deleteMessagesInConversationsOfUser(self, session: Session, user_id: UUID) -> int:
        """Delete every message of the conversations where the user is the user participant."""
        try:
            owned = select(Conversation.id).where(Conversation.user_id == user_id)
            result = session.execute(
                delete(ChatMessage)
                .where(ChatMessage.conversation_id.in_(owned))
                .execution_options(synchronize_session=False)
            )
            return result.rowcount
        except Exception:
            logger.exception("Error in MessageDao.deleteMessagesInConversationsOfUser (user=%s)", user_id)
            raise
