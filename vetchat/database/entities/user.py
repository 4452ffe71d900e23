"""
User ORM Model
==============

The ``User`` ORM model maps to the ``app_user`` table. Accounts are owned by the
platform's user-lifecycle service; the chat core only reads the columns it
needs to resolve participants and display names.

"""

from uuid import UUID

from sqlalchemy import VARCHAR, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from vetchat.database.config.connection_engine import declarativeBase


class User(declarativeBase):
    """
    ORM model for the `app_user` table.

    Attributes
    ----------
    id : UUID
        Primary key. Stable identity carried in access tokens (``sub``).
    name : str
        Display name shown in conversations.
    email : str
        Email address of the user.
    """

    __tablename__ = "app_user"

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True)
    """Primary key. UUID of the user."""

    name: Mapped[str] = mapped_column(VARCHAR(255), nullable=False)
    """Display name of the user (max length 255)."""

    email: Mapped[str] = mapped_column(VARCHAR(255), nullable=False, unique=True)
    """Email address of the user (max length 255)."""

    def __init__(self, user_id: UUID, name: str, email: str):
        self.id = user_id
        self.name = name
        self.email = email

    def __str__(self) -> str:
        return f"User: id:{self.id}, name: {self.name}"
