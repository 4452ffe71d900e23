"""
Conversation Manager: lifecycle and unread bookkeeping of user ↔ veterinarian threads.

All public functions are wrapped with the `@transactional` decorator, which
manages SQLAlchemy sessions and transactions automatically. Each accepts an
injected `session: Session` and the caller's identity as an explicit
`caller_id`; call them with keyword arguments.

State machine
-------------
ACTIVE (initial) → CLOSED (terminal), triggered only by `close_conversation`.
Closing an already CLOSED conversation is accepted and changes nothing.

Concurrency
-----------
- At most one ACTIVE conversation per (user, veterinarian): the insert runs in a
  SAVEPOINT against a partial unique index, and the loser of a race returns the
  winner's conversation.
- The conversation and its optional initial message are written in the same
  transaction.
- Unread flags are only changed by conditional UPDATE statements, under the
  conversation row lock where a clear could race with a send.
"""

import logging
import uuid
from typing import Optional
from uuid import UUID

from sqlalchemy.orm import Session

from vetchat.api.models import ConversationView, Page
from vetchat.database.core.access import load_participant_conversation, resolve_page, to_conversation_view
from vetchat.database.core.messages import append_message
from vetchat.database.daos.conversation_dao import ConversationDao, VET_SIDE
from vetchat.database.daos.message_dao import MessageDao
from vetchat.database.daos.user_dao import UserDao
from vetchat.database.daos.veterinarian_dao import VeterinarianDao
from vetchat.database.entities.conversations import Conversation, ConversationStatus
from vetchat.database.helpers.clock import utcnow
from vetchat.database.helpers.transactionManagement import transactional
from vetchat.exceptions import ConflictError, DomainValidationError, EntityNotFoundError, VeterinarianUnavailableError

logger = logging.getLogger(__name__)


@transactional
def start_conversation(
    session: Session,
    caller_id: UUID,
    veterinarian_id: UUID,
    subject: Optional[str] = None,
    initial_message: Optional[str] = None,
) -> ConversationView:
    """
    Start a conversation with a veterinarian, or return the active one.

    Parameters
    ----------
    session : Session
        Active SQLAlchemy session (injected by @transactional).
    caller_id : UUID
        The user starting the conversation.
    veterinarian_id : UUID
        The veterinarian profile to talk to.
    subject : str | None
        Optional subject line.
    initial_message : str | None
        Optional first message. When non-blank it is stored with the caller as
        sender and the veterinarian side is flagged unread.

    Returns
    -------
    ConversationView
        The new conversation, or the existing ACTIVE one for this pair
        (returned unchanged; `subject` and `initial_message` are ignored).

    Raises
    ------
    EntityNotFoundError
        Unknown veterinarian or caller.
    VeterinarianUnavailableError
        The veterinarian is not available for chat.
    DomainValidationError
        The caller owns the veterinarian profile.
    """
    veterinarian = VeterinarianDao().fetchVeterinarianById(session, veterinarian_id)
    if veterinarian is None:
        raise EntityNotFoundError("Veterinarian", veterinarian_id)
    if not veterinarian.is_available_for_chat:
        raise VeterinarianUnavailableError(veterinarian_id)
    if UserDao().fetchUserById(session, caller_id) is None:
        raise EntityNotFoundError("User", caller_id)
    if veterinarian.user_id == caller_id:
        raise DomainValidationError("Cannot start a conversation with your own veterinarian profile")

    conversation_dao = ConversationDao()
    existing = conversation_dao.fetchActiveConversation(session, caller_id, veterinarian_id)
    if existing is not None:
        logger.info("Reusing active conversation %s for user %s", existing.id, caller_id)
        return to_conversation_view(existing, caller_id)

    conversation = Conversation(
        conversation_id=uuid.uuid4(),
        user_id=caller_id,
        veterinarian_id=veterinarian_id,
        subject=subject,
        created_at=utcnow(),
    )
    if not conversation_dao.insertActiveConversation(session, conversation):
        existing = conversation_dao.fetchActiveConversation(session, caller_id, veterinarian_id)
        if existing is None:
            raise ConflictError("Conversation was modified concurrently, retry the request")
        logger.info("Reusing concurrently created conversation %s for user %s", existing.id, caller_id)
        return to_conversation_view(existing, caller_id)

    if initial_message is not None and initial_message.strip():
        append_message(
            session,
            conversation,
            sender_id=caller_id,
            recipient_side=VET_SIDE,
            content=initial_message,
        )

    logger.info("Conversation %s started by user %s with veterinarian %s", conversation.id, caller_id, veterinarian_id)
    return to_conversation_view(conversation, caller_id)


@transactional
def list_conversations(
    session: Session,
    caller_id: UUID,
    page: Optional[int] = None,
    size: Optional[int] = None,
    order_by_recent: bool = False,
    status: Optional[ConversationStatus] = None,
) -> Page[ConversationView]:
    """
    List the conversations the caller takes part in, on either side.

    Ordering is newest `last_message_at` first when `order_by_recent` is set,
    newest `created_at` first otherwise.
    """
    page, size, offset = resolve_page(page, size)
    rows, total = ConversationDao().fetchConversationsForParticipant(
        session, caller_id, offset=offset, limit=size, order_by_recent=order_by_recent, status=status
    )
    return Page[ConversationView](
        items=[to_conversation_view(conversation, caller_id) for conversation in rows],
        page=page,
        size=size,
        total=total,
    )


@transactional
def get_conversation(session: Session, caller_id: UUID, conversation_id: UUID) -> ConversationView:
    """Return one conversation; NotFound if absent, Forbidden for non-participants."""
    conversation, _ = load_participant_conversation(session, caller_id, conversation_id)
    return to_conversation_view(conversation, caller_id)


@transactional
def mark_as_read(session: Session, caller_id: UUID, conversation_id: UUID) -> None:
    """
    Mark the other side's messages read and clear the caller's unread flag.

    Messages already read keep their original `read_at`. Calling this again
    leaves the same end state.
    """
    conversation, side = load_participant_conversation(session, caller_id, conversation_id, for_update=True)
    marked = MessageDao().markAllAsRead(session, conversation.id, reader_id=caller_id, read_at=utcnow())
    ConversationDao().clearUnread(session, conversation.id, side)
    logger.info("Conversation %s read by %s side (%d messages marked)", conversation_id, side, marked)


@transactional
def close_conversation(session: Session, caller_id: UUID, conversation_id: UUID) -> None:
    """Close a conversation. Closing a CLOSED conversation is a no-op."""
    conversation, side = load_participant_conversation(session, caller_id, conversation_id)
    if ConversationDao().closeConversation(session, conversation.id, closed_at=utcnow()):
        logger.info("Conversation %s closed by %s side", conversation_id, side)
    else:
        logger.info("Conversation %s already closed", conversation_id)


@transactional
def unread_count(session: Session, caller_id: UUID) -> int:
    """Number of the caller's conversations whose own-side unread flag is set."""
    return ConversationDao().countUnreadForParticipant(session, caller_id)
