"""
Conversation ORM Model
=======================

The ``Conversation`` ORM model represents one thread between a platform user and
a veterinarian, stored in the ``conversation`` table. It is implemented with
SQLAlchemy 2.0-style typing.

Key features
~~~~~~~~~~~~
- UUID primary key (``id``)
- Participants: ``user_id`` (→ ``app_user.id``) and ``veterinarian_id`` (→ ``veterinarian.id``)
- Lifecycle ``status`` (``ACTIVE`` → ``CLOSED``, terminal) with ``closed_at``
- Per-side unread flags (``user_unread`` / ``vet_unread``)
- ``message_seq``: last sequence number handed out to a message of this thread

Integrity
~~~~~~~~~
A partial unique index on ``(user_id, veterinarian_id) WHERE status = 'ACTIVE'``
keeps at most one active thread per pair, whatever the number of concurrent
creators. ``closed_at`` is non-null exactly when ``status`` is ``CLOSED``.
"""

import enum
from datetime import datetime
from uuid import UUID

from sqlalchemy import Boolean, CheckConstraint, DateTime, Enum, ForeignKey, Index, Integer, String, Uuid, text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from vetchat.database.config.connection_engine import declarativeBase


class ConversationStatus(str, enum.Enum):
    """Lifecycle states of a conversation. ``CLOSED`` is terminal."""

    ACTIVE = "ACTIVE"
    CLOSED = "CLOSED"


class Conversation(declarativeBase):
    """
    ORM model for the `conversation` table.

    Attributes
    ----------
    id : UUID
        Primary key.
    user_id : UUID
        The platform user taking part in the conversation.
    veterinarian_id : UUID
        The veterinarian profile on the other side.
    subject : str | None
        Optional subject line (max 300 chars).
    status : ConversationStatus
        ``ACTIVE`` or ``CLOSED``.
    last_message_at : datetime
        Timestamp of the latest activity; starts at creation time.
    user_unread / vet_unread : bool
        Unseen activity for the user side / veterinarian side.
    created_at : datetime
        Creation timestamp (UTC).
    closed_at : datetime | None
        Set when the conversation is closed.
    message_seq : int
        Sequence number of the last message appended.
    """

    __tablename__ = "conversation"

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True)
    """Primary key. UUID of the conversation."""

    user_id: Mapped[UUID] = mapped_column(
        Uuid, ForeignKey("app_user.id"), nullable=False, index=True
    )
    """Foreign key to the user participant."""

    veterinarian_id: Mapped[UUID] = mapped_column(
        Uuid, ForeignKey("veterinarian.id"), nullable=False, index=True
    )
    """Foreign key to the veterinarian participant."""

    subject: Mapped[str | None] = mapped_column(String(300), nullable=True)

    status: Mapped[ConversationStatus] = mapped_column(
        Enum(ConversationStatus, name="conversation_status", native_enum=False, length=16),
        nullable=False,
    )

    last_message_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    user_unread: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    vet_unread: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    closed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    message_seq: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    user = relationship("User", lazy="joined")
    veterinarian = relationship("Veterinarian", lazy="joined")

    __table_args__ = (
        Index(
            "uq_conversation_active_pair",
            "user_id",
            "veterinarian_id",
            unique=True,
            postgresql_where=text("status = 'ACTIVE'"),
            sqlite_where=text("status = 'ACTIVE'"),
        ),
        CheckConstraint(
            "(status = 'CLOSED' AND closed_at IS NOT NULL) OR (status = 'ACTIVE' AND closed_at IS NULL)",
            name="ck_conversation_closed_at",
        ),
    )

    def __init__(
        self,
        conversation_id: UUID,
        user_id: UUID,
        veterinarian_id: UUID,
        subject: str | None,
        created_at: datetime,
    ):
        """
        Initialize a new, ACTIVE conversation with both unread flags cleared.

        Parameters
        ----------
        conversation_id : UUID
            Unique identifier for the conversation.
        user_id : UUID
            The user participant.
        veterinarian_id : UUID
            The veterinarian participant.
        subject : str | None
            Optional subject line.
        created_at : datetime
            Creation time; also the initial ``last_message_at``.
        """
        self.id = conversation_id
        self.user_id = user_id
        self.veterinarian_id = veterinarian_id
        self.subject = subject
        self.status = ConversationStatus.ACTIVE
        self.created_at = created_at
        self.last_message_at = created_at
        self.user_unread = False
        self.vet_unread = False
        self.closed_at = None
        self.message_seq = 0

    def __str__(self) -> str:
        return (
            f"Conversation: id:{self.id}, user: {self.user_id}, vet: {self.veterinarian_id}, "
            f"status: {self.status.value}, last_message_at: {self.last_message_at}"
        )
