"""
FastAPI Router — Chat (user ↔ veterinarian)
===========================================

Purpose
-------
Defines the HTTP API for the chat core:
- Conversations: start, list, get, mark as read, close, unread count
- Messages: send, list, delete

Key Notes
---------
- Input validation via Pydantic models in `vetchat.api.models`.
- Caller identity: `Authorization: Bearer <jwt>` header, or the `token` cookie.
  The JWT `sub` claim is the caller's user id; every core call receives it
  explicitly.
- Chat errors are raised as `vetchat.exceptions` types and mapped to HTTP
  statuses by the handlers registered in `vetchat.main`.
- Endpoints are plain `def` functions: the core is synchronous and FastAPI
  runs them in its worker threadpool.
"""

from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Cookie, Depends, Header, Response

from vetchat.api.models import ConversationView, MessageView, NewMessage, Page, StartConversationDetails, UnreadCount
from vetchat.api.utils import resolve_caller_id
from vetchat.database.core.conversations import (
    close_conversation,
    get_conversation,
    list_conversations,
    mark_as_read,
    start_conversation,
    unread_count,
)
from vetchat.database.core.messages import delete_message, list_messages, send_message
from vetchat.database.entities.conversations import ConversationStatus

router = APIRouter(prefix="/api/chat", tags=["chat"])
"""Creates the FastAPI router in which we define the chat routes"""


def current_caller(
    authorization: Optional[str] = Header(None),
    token: Optional[str] = Cookie(None),
) -> UUID:
    """Resolve the caller's user id from the bearer header, falling back to the `token` cookie."""
    raw = None
    if authorization and authorization.startswith("Bearer "):
        raw = authorization[7:]
    elif token:
        raw = token
    return resolve_caller_id(raw)


@router.post('/conversations', status_code=201, response_model=ConversationView)
def start(data: StartConversationDetails, caller_id: UUID = Depends(current_caller)):
    """Start a conversation with a veterinarian, or return the active one for the pair."""
    return start_conversation(
        caller_id=caller_id,
        veterinarian_id=data.veterinarian_id,
        subject=data.subject,
        initial_message=data.initial_message,
    )


@router.get('/conversations', response_model=Page[ConversationView])
def my_conversations(
    page: int = 0,
    size: Optional[int] = None,
    recent: bool = False,
    status: Optional[ConversationStatus] = None,
    caller_id: UUID = Depends(current_caller),
):
    """List the caller's conversations (either side). `recent=true` orders by last activity."""
    return list_conversations(caller_id=caller_id, page=page, size=size, order_by_recent=recent, status=status)


@router.get('/conversations/{conversation_id}', response_model=ConversationView)
def conversation(conversation_id: UUID, caller_id: UUID = Depends(current_caller)):
    """Get one conversation the caller takes part in."""
    return get_conversation(caller_id=caller_id, conversation_id=conversation_id)


@router.post('/conversations/{conversation_id}/messages', status_code=201, response_model=MessageView)
def new_message(conversation_id: UUID, data: NewMessage, caller_id: UUID = Depends(current_caller)):
    """Append a message to an ACTIVE conversation."""
    return send_message(
        caller_id=caller_id,
        conversation_id=conversation_id,
        content=data.content,
        message_type=data.message_type,
        attachments=data.attachments,
    )


@router.get('/conversations/{conversation_id}/messages', response_model=Page[MessageView])
def messages(
    conversation_id: UUID,
    page: int = 0,
    size: Optional[int] = None,
    caller_id: UUID = Depends(current_caller),
):
    """Page through a conversation's messages, oldest first."""
    return list_messages(caller_id=caller_id, conversation_id=conversation_id, page=page, size=size)


@router.patch('/conversations/{conversation_id}/read', status_code=200)
def read(conversation_id: UUID, caller_id: UUID = Depends(current_caller)):
    """Mark the other side's messages as read and clear the caller's unread flag."""
    mark_as_read(caller_id=caller_id, conversation_id=conversation_id)
    return Response(status_code=200)


@router.patch('/conversations/{conversation_id}/close', status_code=200)
def close(conversation_id: UUID, caller_id: UUID = Depends(current_caller)):
    """Close a conversation (no-op when already closed)."""
    close_conversation(caller_id=caller_id, conversation_id=conversation_id)
    return Response(status_code=200)


@router.get('/unread-count', response_model=UnreadCount)
def unread(caller_id: UUID = Depends(current_caller)):
    """Number of the caller's conversations with unseen activity."""
    return UnreadCount(count=unread_count(caller_id=caller_id))


@router.delete('/messages/{message_id}', status_code=204)
def remove_message(message_id: UUID, caller_id: UUID = Depends(current_caller)):
    """Delete one of the caller's own messages."""
    delete_message(caller_id=caller_id, message_id=message_id)
    return Response(status_code=204)
