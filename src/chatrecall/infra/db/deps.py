"""Per-request dependency factories for the SQL stores."""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from chatrecall.core.context.stores import MembershipStore, MessageStore

from .engine import get_session_factory
from .repository import SqlMembershipStore, SqlMessageStore


def get_message_store(
    sf: Annotated[
        async_sessionmaker[AsyncSession],
        Depends(get_session_factory),
    ],
) -> MessageStore:
    """Return the message store backed by ``chat_message``."""
    return SqlMessageStore(sf)


def get_membership_store(
    sf: Annotated[
        async_sessionmaker[AsyncSession],
        Depends(get_session_factory),
    ],
) -> MembershipStore:
    """Return the membership store backed by ``chat_room_member``."""
    return SqlMembershipStore(sf)
