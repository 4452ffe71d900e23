"""
Pydantic models used for request/response validation and API data contracts.

Each class defines the structure of data expected in API endpoints, ensuring
validation and automatic OpenAPI schema generation. The chat core returns the
view models directly, so the same shapes are used in-process and on the wire.
"""

from datetime import datetime
from typing import Generic, List, Optional, TypeVar
from uuid import UUID

from pydantic import BaseModel, Field

from vetchat.database.entities.conversations import ConversationStatus
from vetchat.database.entities.messages import MessageType

T = TypeVar("T")


class StartConversationDetails(BaseModel):
    """
    Represents the details needed to start (or resume) a conversation with a veterinarian.
    """
    veterinarian_id: UUID
    """The veterinarian the caller wants to talk to."""
    subject: Optional[str] = Field(None, max_length=300)
    """Optional subject line."""
    initial_message: Optional[str] = None
    """Optional first message; ignored when blank or when an active conversation already exists."""


class NewMessage(BaseModel):
    """
    Represents a new message to be appended to a conversation.
    """
    content: str
    """The text content of the message (must not be blank)."""
    message_type: MessageType = MessageType.TEXT
    """Kind of message."""
    attachments: List[str] = Field(default_factory=list)
    """Attachment URLs, kept in the given order."""


class ConversationView(BaseModel):
    """
    A conversation as seen by one of its participants.
    """
    id: UUID
    user_id: UUID
    user_name: str
    vet_id: UUID
    vet_name: str
    subject: Optional[str] = None
    status: ConversationStatus
    last_message_at: datetime
    has_unread_for_caller: bool
    """The unread flag of the caller's own side."""
    created_at: datetime
    closed_at: Optional[datetime] = None


class MessageView(BaseModel):
    """
    A single chat message.
    """
    id: UUID
    conversation_id: UUID
    sender_id: UUID
    sender_name: str
    content: str
    type: MessageType
    attachments: List[str]
    is_read: bool
    read_at: Optional[datetime] = None
    is_edited: bool
    edited_at: Optional[datetime] = None
    sent_at: datetime


class Page(BaseModel, Generic[T]):
    """
    One offset/limit window over an ordered result.
    """
    items: List[T]
    page: int
    """Zero-based page index."""
    size: int
    """Requested page size."""
    total: int
    """Total number of items across all pages."""


class UnreadCount(BaseModel):
    """Number of the caller's conversations with unseen activity."""
    count: int
