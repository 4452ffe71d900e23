"""
Entities Package — SQLAlchemy 2.0 ORM Models (UUID + UTC)
=========================================================

The `entities` package defines the ORM models of the chat core, mapping
database tables to Python classes using SQLAlchemy 2.0-typed mappings.
These classes are consumed by DAOs (`daos` package).

Tech Stack & Conventions
------------------------
- PostgreSQL in production, SQLite in tests (generic `Uuid` columns)
- Timezone-aware timestamps (UTC)
- SQLAlchemy 2.0 style `Mapped[...]` + `mapped_column(...)`

Contents
--------
- User
    Minimal view of a platform account (id, display name, email).

- Veterinarian
    Minimal view of a veterinarian profile (owning user, display name,
    chat availability).

- Conversation
    A thread between one user and one veterinarian.
    * Status ACTIVE → CLOSED, per-side unread flags, last activity time
    * Partial unique index: one ACTIVE thread per (user, veterinarian)

- ChatMessage
    A single message of a conversation.
    * Sender, content, type, attachments, read/edit state
    * `seq` gives the stable per-conversation order

Importing this package registers every model on the shared metadata.
"""

from vetchat.database.entities.user import User
from vetchat.database.entities.veterinarian import Veterinarian
from vetchat.database.entities.conversations import Conversation, ConversationStatus
from vetchat.database.entities.messages import ChatMessage, MessageType

__all__ = [
    "User",
    "Veterinarian",
    "Conversation",
    "ConversationStatus",
    "ChatMessage",
    "MessageType",
]
