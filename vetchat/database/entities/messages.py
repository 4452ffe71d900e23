"""
ChatMessage ORM Model
=====================

The ``ChatMessage`` ORM model represents a single message within a
conversation. Each message is tied to a ``Conversation`` via a foreign key and
to the ``User`` who sent it.

Key features
~~~~~~~~~~~~
- UUID primary key (``id``)
- Foreign keys to ``conversation.id`` and ``app_user.id`` (sender)
- Message type (``TEXT`` by default) and an ordered list of attachment URLs
- Read state (``is_read`` / ``read_at``) and edit state (``is_edited`` / ``edited_at``)
- ``sent_at`` (UTC) plus ``seq``, the per-conversation position used for ordering

"""

import enum
from datetime import datetime
from uuid import UUID

from sqlalchemy import JSON, Boolean, DateTime, Enum, ForeignKey, Integer, TEXT, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from vetchat.database.config.connection_engine import declarativeBase


class MessageType(str, enum.Enum):
    """Kind of content a message carries."""

    TEXT = "TEXT"
    IMAGE = "IMAGE"
    FILE = "FILE"
    AUDIO = "AUDIO"


class ChatMessage(declarativeBase):
    """
    ORM model for the `chat_message` table.

    Attributes
    ----------
    id : UUID
        Primary key.
    conversation_id : UUID
        Owning conversation.
    sender_id : UUID
        User who sent the message.
    content : str
        Non-blank message body.
    message_type : MessageType
        TEXT, IMAGE, FILE or AUDIO.
    attachments : list[str]
        Attachment URLs in the order given by the sender.
    is_read / read_at
        Whether (and when) the recipient has read the message.
    is_edited / edited_at
        Whether (and when) the message was edited.
    sent_at : datetime
        Immutable send time, non-decreasing within a conversation.
    seq : int
        Position of the message in its conversation (strictly increasing).
    """

    __tablename__ = "chat_message"

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True)
    """Primary key. UUID of the message."""

    conversation_id: Mapped[UUID] = mapped_column(
        Uuid, ForeignKey("conversation.id"), nullable=False, index=True
    )
    """Foreign key to the conversation this message belongs to."""

    sender_id: Mapped[UUID] = mapped_column(
        Uuid, ForeignKey("app_user.id"), nullable=False, index=True
    )
    """Foreign key to the sending user."""

    content: Mapped[str] = mapped_column(TEXT, nullable=False)

    message_type: Mapped[MessageType] = mapped_column(
        Enum(MessageType, name="message_type", native_enum=False, length=16), nullable=False
    )

    attachments: Mapped[list] = mapped_column(JSON, nullable=False, default=list)

    is_read: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    read_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    is_edited: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    edited_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    sent_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    seq: Mapped[int] = mapped_column(Integer, nullable=False)

    sender = relationship("User", lazy="joined")

    __table_args__ = (
        UniqueConstraint("conversation_id", "seq", name="uq_chat_message_conversation_seq"),
    )

    def __init__(
        self,
        message_id: UUID,
        conversation_id: UUID,
        sender_id: UUID,
        content: str,
        sent_at: datetime,
        seq: int,
        message_type: MessageType | None = None,
        attachments: list[str] | None = None,
    ):
        """
        Initialize a new, unread and unedited message.

        Parameters
        ----------
        message_id : UUID
            Unique identifier of the message.
        conversation_id : UUID
            ID of the conversation this message belongs to.
        sender_id : UUID
            ID of the sending user.
        content : str
            The message body.
        sent_at : datetime
            Send timestamp.
        seq : int
            Position within the conversation.
        message_type : MessageType | None, optional
            Defaults to ``MessageType.TEXT``.
        attachments : list[str] | None, optional
            Attachment URLs; defaults to an empty list.
        """
        self.id = message_id
        self.conversation_id = conversation_id
        self.sender_id = sender_id
        self.content = content
        self.message_type = message_type or MessageType.TEXT
        self.attachments = list(attachments or [])
        self.is_read = False
        self.read_at = None
        self.is_edited = False
        self.edited_at = None
        self.sent_at = sent_at
        self.seq = seq

    def __str__(self) -> str:
        return (
            f"Conversation: id:{self.conversation_id}, "
            f"sender: {self.sender_id}, "
            f"seq: {self.seq}, "
            f"sent_at: {self.sent_at}"
        )
