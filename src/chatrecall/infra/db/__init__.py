"""Async PostgreSQL infrastructure (engine builder, ORM models, stores)."""

from .deps import get_membership_store, get_message_store
from .engine import build_db, get_session_factory
from .models import Base, ChatMessageRow, ChatRoomMemberRow
from .repository import SqlMembershipStore, SqlMessageStore

__all__ = [
    "Base",
    "ChatMessageRow",
    "ChatRoomMemberRow",
    "SqlMembershipStore",
    "SqlMessageStore",
    "build_db",
    "get_membership_store",
    "get_message_store",
    "get_session_factory",
]
