"""Collaborator interfaces the orchestrator depends on.

Concrete SQL implementations live in ``chatrecall.infra.db``.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from .models import Message


class MessageStore(ABC):
    """Read access to chat messages."""

    @abstractmethod
    async def fetch_recent_by_room(self, room_id: int, limit: int) -> list[Message]:
        """Return up to *limit* messages of *room_id*, most recent first."""

    @abstractmethod
    async def fetch_recent_for_requester(
        self, requester_id: int, limit: int
    ) -> list[Message]:
        """Return up to *limit* messages across every room *requester_id*
        belongs to, most recent first."""


class MembershipStore(ABC):
    """Read access to room membership."""

    @abstractmethod
    async def is_member(self, room_id: int, user_id: int) -> bool:
        """Whether *user_id* currently belongs to *room_id*."""
