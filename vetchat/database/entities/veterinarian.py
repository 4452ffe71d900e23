"""
Veterinarian ORM Model
======================

The ``Veterinarian`` ORM model maps to the ``veterinarian`` table. Profiles are
managed by the veterinarian catalogue; the chat core reads the owning user (the
account that speaks for the vet), the display name and the chat availability
switch.
"""

from uuid import UUID

from sqlalchemy import Boolean, ForeignKey, VARCHAR, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from vetchat.database.config.connection_engine import declarativeBase


class Veterinarian(declarativeBase):
    """
    ORM model for the `veterinarian` table.

    Attributes
    ----------
    id : UUID
        Primary key of the veterinarian profile.
    user_id : UUID
        The user account behind the profile; this user acts as the vet side
        of every conversation with this veterinarian.
    full_name : str
        Display name.
    is_available_for_chat : bool
        Whether new conversations may be started with this veterinarian.
    """

    __tablename__ = "veterinarian"

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True)

    user_id: Mapped[UUID] = mapped_column(
        Uuid, ForeignKey("app_user.id"), nullable=False, unique=True
    )

    full_name: Mapped[str] = mapped_column(VARCHAR(255), nullable=False)

    is_available_for_chat: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    user = relationship("User", lazy="joined")

    def __init__(self, veterinarian_id: UUID, user_id: UUID, full_name: str, is_available_for_chat: bool = True):
        self.id = veterinarian_id
        self.user_id = user_id
        self.full_name = full_name
        self.is_available_for_chat = is_available_for_chat

    def __str__(self) -> str:
        return f"Veterinarian: id:{self.id}, name: {self.full_name}, available: {self.is_available_for_chat}"
