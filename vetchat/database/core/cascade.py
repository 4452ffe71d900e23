"""
Deletion hooks used by the user-lifecycle service when an account is removed.

The chat core does not delete accounts itself. Before the account row goes,
the owner of that flow calls `purge_user_chat_data`, which removes:

1. every message the user sent, in any conversation;
2. every conversation where the user is the *user* participant, with all of
   its messages.

Conversations the user holds through a veterinarian profile are purged by the
veterinarian lifecycle, not here. Nested calls share the caller's transaction.
"""

import logging
from uuid import UUID

from sqlalchemy.orm import Session

from vetchat.database.daos.conversation_dao import ConversationDao
from vetchat.database.daos.message_dao import MessageDao
from vetchat.database.helpers.transactionManagement import transactional

logger = logging.getLogger(__name__)


@transactional
def purge_messages_by_sender(session: Session, user_id: UUID) -> int:
    """Delete every message sent by the user. Returns the number deleted."""
    deleted = MessageDao().deleteMessagesBySender(session, user_id)
    logger.info("Purged %d messages sent by user %s", deleted, user_id)
    return deleted


@transactional
def purge_conversations_of_user(session: Session, user_id: UUID) -> int:
    """Delete the user's conversations (user side) and their messages. Returns the number of conversations deleted."""
    MessageDao().deleteMessagesInConversationsOfUser(session, user_id)
    deleted = ConversationDao().deleteConversationsByUser(session, user_id)
    logger.info("Purged %d conversations of user %s", deleted, user_id)
    return deleted


@transactional
def purge_user_chat_data(session: Session, user_id: UUID) -> dict:
    """
    Run both purges in one transaction.

    Returns
    -------
    dict
        {'messages': <messages sent by the user>, 'conversations': <conversations removed>}
    """
    messages = purge_messages_by_sender(user_id=user_id)
    conversations = purge_conversations_of_user(user_id=user_id)
    return {"messages": messages, "conversations": conversations}
