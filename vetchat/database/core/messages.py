"""
Message Service: send, list and delete chat messages.

All public functions are wrapped with the `@transactional` decorator, which
manages SQLAlchemy sessions and transactions automatically. Each accepts an
injected `session: Session` and an explicit `caller_id`; call them with
keyword arguments.

Ordering
--------
Messages are listed oldest first by their per-conversation `seq`. A send locks
the conversation row, then reserves the next `seq` in the same conditional
``UPDATE`` that moves `last_message_at` and raises the recipient's unread flag,
so concurrent sends get distinct, increasing positions and neither flag update
is lost. `sent_at` never goes backwards within a conversation.
"""

import logging
import uuid
from typing import List, Optional
from uuid import UUID

from sqlalchemy.orm import Session

from vetchat.api.models import MessageView, Page
from vetchat.database.core.access import load_participant_conversation, other_side, resolve_page, to_message_view
from vetchat.database.daos.conversation_dao import ConversationDao
from vetchat.database.daos.message_dao import MessageDao
from vetchat.database.entities.conversations import Conversation, ConversationStatus
from vetchat.database.entities.messages import ChatMessage, MessageType
from vetchat.database.helpers.clock import as_utc, utcnow
from vetchat.database.helpers.transactionManagement import transactional
from vetchat.exceptions import AccessDeniedError, ConversationClosedError, DomainValidationError, EntityNotFoundError

logger = logging.getLogger(__name__)


def validate_content(content: Optional[str]) -> None:
    if content is None or not content.strip():
        raise DomainValidationError("Message content is required")


def append_message(
    session: Session,
    conversation: Conversation,
    sender_id: UUID,
    recipient_side: str,
    content: str,
    message_type: Optional[MessageType] = None,
    attachments: Optional[List[str]] = None,
) -> ChatMessage:
    """
    Append a message and update the conversation summary in the caller's transaction.

    Parameters
    ----------
    session : Session
        Active SQLAlchemy session (the caller's transaction).
    conversation : Conversation
        Target conversation; callers that can race with other writers must
        have loaded it with a row lock.
    sender_id : UUID
        The sending participant.
    recipient_side : str
        ``"user"`` or ``"vet"``: whose unread flag is raised.
    content : str
        Non-blank body.
    message_type : MessageType | None
        Defaults to TEXT.
    attachments : list[str] | None
        Attachment URLs.

    Returns
    -------
    ChatMessage
        The flushed message.

    Raises
    ------
    ConversationClosedError
        The conversation is no longer ACTIVE; nothing was written.
    """
    sent_at = max(utcnow(), as_utc(conversation.last_message_at))
    seq = ConversationDao().recordNewMessage(session, conversation.id, sent_at, recipient_side)
    if seq is None:
        raise ConversationClosedError(conversation.id)

    message = ChatMessage(
        message_id=uuid.uuid4(),
        conversation_id=conversation.id,
        sender_id=sender_id,
        content=content,
        sent_at=sent_at,
        seq=seq,
        message_type=message_type,
        attachments=attachments,
    )
    MessageDao().createMessage(session, message)
    session.refresh(conversation)
    return message


@transactional
def send_message(
    session: Session,
    caller_id: UUID,
    conversation_id: UUID,
    content: str,
    message_type: Optional[MessageType] = None,
    attachments: Optional[List[str]] = None,
) -> MessageView:
    """
    Send a message to a conversation the caller takes part in.

    Parameters
    ----------
    session : Session
        Active SQLAlchemy session (injected by @transactional).
    caller_id : UUID
        The sender.
    conversation_id : UUID
        Target conversation.
    content : str
        Message body; must not be blank.
    message_type : MessageType | None
        Defaults to TEXT.
    attachments : list[str] | None
        Attachment URLs, kept in order.

    Returns
    -------
    MessageView

    Raises
    ------
    DomainValidationError
        Blank content.
    EntityNotFoundError
        Unknown conversation.
    AccessDeniedError
        Caller is not a participant.
    ConversationClosedError
        The conversation is CLOSED; no message is appended.
    """
    validate_content(content)
    conversation, side = load_participant_conversation(session, caller_id, conversation_id, for_update=True)
    if conversation.status == ConversationStatus.CLOSED:
        raise ConversationClosedError(conversation_id)

    message = append_message(
        session,
        conversation,
        sender_id=caller_id,
        recipient_side=other_side(side),
        content=content,
        message_type=message_type,
        attachments=attachments,
    )
    logger.info("Message %s (seq %s) sent to conversation %s by %s side", message.id, message.seq, conversation_id, side)
    return to_message_view(message)


@transactional
def list_messages(
    session: Session,
    caller_id: UUID,
    conversation_id: UUID,
    page: Optional[int] = None,
    size: Optional[int] = None,
) -> Page[MessageView]:
    """
    List a conversation's messages, oldest first.

    Returns
    -------
    Page[MessageView]
        The requested window; concatenating consecutive pages yields the
        same sequence as one large page.
    """
    page, size, offset = resolve_page(page, size)
    conversation, _ = load_participant_conversation(session, caller_id, conversation_id)
    rows, total = MessageDao().fetchMessagesPage(session, conversation.id, offset=offset, limit=size)
    return Page[MessageView](
        items=[to_message_view(message) for message in rows],
        page=page,
        size=size,
        total=total,
    )


@transactional
def delete_message(session: Session, caller_id: UUID, message_id: UUID) -> None:
    """
    Hard-delete a message. Only its sender may do so.

    The conversation's `last_message_at` and unread flags are left as they are.
    """
    message_dao = MessageDao()
    message = message_dao.fetchMessageById(session, message_id)
    if message is None:
        raise EntityNotFoundError("Message", message_id)
    if message.sender_id != caller_id:
        logger.warning("User %s tried to delete message %s sent by %s", caller_id, message_id, message.sender_id)
        raise AccessDeniedError("You can only delete your own messages")

    message_dao.deleteMessage(session, message)
    logger.info("Message %s deleted from conversation %s", message_id, message.conversation_id)
