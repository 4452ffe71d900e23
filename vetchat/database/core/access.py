"""
Participant access control and view mapping shared by the chat core.

A caller takes part in a conversation either as its user or as the user that
owns its veterinarian profile. When both hold (a veterinarian talking to their
own profile), the user side wins.
"""

import logging
from uuid import UUID

from sqlalchemy.orm import Session

from vetchat.api.models import ConversationView, MessageView
from vetchat.database.config.config import settings
from vetchat.database.daos.conversation_dao import ConversationDao, USER_SIDE, VET_SIDE
from vetchat.database.entities.conversations import Conversation
from vetchat.database.entities.messages import ChatMessage
from vetchat.database.helpers.clock import as_utc
from vetchat.exceptions import AccessDeniedError, DomainValidationError, EntityNotFoundError

logger = logging.getLogger(__name__)


def participant_side(conversation: Conversation, caller_id: UUID) -> str:
    """Return ``"user"`` or ``"vet"`` for the caller, or raise AccessDeniedError."""
    if conversation.user_id == caller_id:
        return USER_SIDE
    if conversation.veterinarian.user_id == caller_id:
        return VET_SIDE
    logger.warning("User %s denied access to conversation %s", caller_id, conversation.id)
    raise AccessDeniedError("You don't have access to this conversation")


def other_side(side: str) -> str:
    return VET_SIDE if side == USER_SIDE else USER_SIDE


def load_participant_conversation(
    session: Session, caller_id: UUID, conversation_id: UUID, for_update: bool = False
) -> tuple[Conversation, str]:
    """
    Fetch a conversation and check that the caller takes part in it.

    Parameters
    ----------
    session : Session
        Active SQLAlchemy session.
    caller_id : UUID
        The caller's user id.
    conversation_id : UUID
        Conversation to load.
    for_update : bool
        Lock the conversation row for the rest of the transaction.

    Returns
    -------
    tuple[Conversation, str]
        The conversation and the caller's side.

    Raises
    ------
    EntityNotFoundError
        The conversation does not exist.
    AccessDeniedError
        The caller is not a participant.
    """
    conversation = ConversationDao().fetchConversationById(session, conversation_id, for_update=for_update)
    if conversation is None:
        raise EntityNotFoundError("Conversation", conversation_id)
    return conversation, participant_side(conversation, caller_id)


def resolve_page(page: int | None, size: int | None) -> tuple[int, int, int]:
    """
    Normalize a page request into ``(page, size, offset)``.

    `page` is zero-based; `size` defaults to ``DEFAULT_PAGE_SIZE`` and is capped
    at ``MAX_PAGE_SIZE``.
    """
    page = 0 if page is None else page
    size = settings.DEFAULT_PAGE_SIZE if size is None else size
    if page < 0:
        raise DomainValidationError("Page index must not be negative")
    if size < 1:
        raise DomainValidationError("Page size must be at least 1")
    size = min(size, settings.MAX_PAGE_SIZE)
    return page, size, page * size


def to_conversation_view(conversation: Conversation, caller_id: UUID) -> ConversationView:
    """Map a conversation to the caller's view (unread flag of the caller's own side)."""
    side = participant_side(conversation, caller_id)
    return ConversationView(
        id=conversation.id,
        user_id=conversation.user_id,
        user_name=conversation.user.name,
        vet_id=conversation.veterinarian_id,
        vet_name=conversation.veterinarian.full_name,
        subject=conversation.subject,
        status=conversation.status,
        last_message_at=as_utc(conversation.last_message_at),
        has_unread_for_caller=conversation.user_unread if side == USER_SIDE else conversation.vet_unread,
        created_at=as_utc(conversation.created_at),
        closed_at=as_utc(conversation.closed_at),
    )


def to_message_view(message: ChatMessage) -> MessageView:
    return MessageView(
        id=message.id,
        conversation_id=message.conversation_id,
        sender_id=message.sender_id,
        sender_name=message.sender.name,
        content=message.content,
        type=message.message_type,
        attachments=list(message.attachments or []),
        is_read=message.is_read,
        read_at=as_utc(message.read_at),
        is_edited=message.is_edited,
        edited_at=as_utc(message.edited_at),
        sent_at=as_utc(message.sent_at),
    )
