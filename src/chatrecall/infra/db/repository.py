"""SQL-backed message and membership stores.

Both stores take an ``async_sessionmaker`` and open one short session
per call, so a store instance can be shared freely between requests.
"""

import logging

from sqlalchemy import exists, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from chatrecall.core.context.models import Message
from chatrecall.core.context.stores import MembershipStore, MessageStore

from .models import ChatMessageRow, ChatRoomMemberRow

logger = logging.getLogger(__name__)


def _row_to_message(row: ChatMessageRow) -> Message:
    return Message(
        id=row.id,
        room_id=row.room_id,
        sender_id=row.sender_id,
        content=row.content or "",
        created_at=row.created_at,
    )


class SqlMessageStore(MessageStore):
    """Reads recent, non-deleted messages from ``chat_message``."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def fetch_recent_by_room(self, room_id: int, limit: int) -> list[Message]:
        stmt = (
            select(ChatMessageRow)
            .where(
                ChatMessageRow.room_id == room_id,
                ChatMessageRow.deleted_at.is_(None),
            )
            .order_by(ChatMessageRow.created_at.desc(), ChatMessageRow.id.desc())
            .limit(limit)
        )
        async with self._session_factory() as session:
            rows = (await session.scalars(stmt)).all()
        logger.debug("Fetched %d message(s) of room %d", len(rows), room_id)
        return [_row_to_message(row) for row in rows]

    async def fetch_recent_for_requester(
        self, requester_id: int, limit: int
    ) -> list[Message]:
        stmt = (
            select(ChatMessageRow)
            .join(
                ChatRoomMemberRow,
                ChatRoomMemberRow.room_id == ChatMessageRow.room_id,
            )
            .where(
                ChatRoomMemberRow.user_id == requester_id,
                ChatMessageRow.deleted_at.is_(None),
            )
            .order_by(ChatMessageRow.created_at.desc(), ChatMessageRow.id.desc())
            .limit(limit)
        )
        async with self._session_factory() as session:
            rows = (await session.scalars(stmt)).all()
        logger.debug(
            "Fetched %d message(s) across rooms of user %d", len(rows), requester_id
        )
        return [_row_to_message(row) for row in rows]


class SqlMembershipStore(MembershipStore):
    """Membership checks against ``chat_room_member``."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def is_member(self, room_id: int, user_id: int) -> bool:
        stmt = select(
            exists().where(
                ChatRoomMemberRow.room_id == room_id,
                ChatRoomMemberRow.user_id == user_id,
            )
        )
        async with self._session_factory() as session:
            return bool(await session.scalar(stmt))
