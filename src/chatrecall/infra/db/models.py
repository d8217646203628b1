"""SQLAlchemy ORM mappings of the chat tables.

The tables belong to the chat backend that writes them; this service
only reads.  Only the columns the context engine needs are mapped.
"""

from datetime import datetime

from sqlalchemy import BigInteger, DateTime, Text
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """Shared declarative base."""


class ChatMessageRow(Base):
    """One row of ``chat_message``.

    ``id`` grows with ``created_at``; rows with ``deleted_at`` set are
    soft-deleted and never shown to the model.
    """

    __tablename__ = "chat_message"

    id: Mapped[int] = mapped_column(BigInteger, primary_key=True)
    room_id: Mapped[int] = mapped_column(BigInteger, nullable=False)
    sender_id: Mapped[int] = mapped_column(BigInteger, nullable=False)
    content: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    deleted_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)

    def __repr__(self) -> str:
        return (
            f"<ChatMessageRow(id={self.id}, room_id={self.room_id}, "
            f"sender_id={self.sender_id})>"
        )


class ChatRoomMemberRow(Base):
    """One row of ``chat_room_member``; existence means membership."""

    __tablename__ = "chat_room_member"

    room_id: Mapped[int] = mapped_column(BigInteger, primary_key=True)
    user_id: Mapped[int] = mapped_column(BigInteger, primary_key=True)

    def __repr__(self) -> str:
        return f"<ChatRoomMemberRow(room_id={self.room_id}, user_id={self.user_id})>"
