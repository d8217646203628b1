"""Pydantic models for the context API.

Field names on the wire are camelCase (``roomId``, ``createdAt``) to
match the chat frontend; Python attributes stay snake_case.
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from chatrecall.core.context.models import ContextMessage, ContextResponse

# Maximum length for a context query, only short queries are allowed
QUERY_MAX_LENGTH = 1024


class _CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class FindContextRequest(_CamelModel):
    """Request body for ``POST /find-context``."""

    room_id: int | None = Field(
        default=None, alias="roomId", description="Room to search in"
    )
    query: str = Field(
        description="What the user is trying to remember",
        max_length=QUERY_MAX_LENGTH,
    )


class FindContextGlobalRequest(_CamelModel):
    """Request body for ``POST /find-context-global``."""

    query: str = Field(
        description="What the user is trying to remember",
        max_length=QUERY_MAX_LENGTH,
    )


class ContextMessageModel(_CamelModel):
    """A message the model picked and the service verified."""

    id: int = Field(description="Message id")
    content: str = Field(description="Message text")
    created_at: datetime = Field(alias="createdAt", description="When it was sent")
    room_id: int = Field(alias="roomId", description="Room the message belongs to")

    @classmethod
    def from_domain(cls, message: ContextMessage) -> "ContextMessageModel":
        return cls(
            id=message.id,
            content=message.content,
            created_at=message.created_at,
            room_id=message.room_id,
        )


class ContextResponseModel(_CamelModel):
    """Response body of both context endpoints."""

    summary: str = Field(description="One-line summary of the matching conversation")
    messages: list[ContextMessageModel] = Field(
        default_factory=list,
        description="Matching messages, in the order they were fetched",
    )

    @classmethod
    def from_domain(cls, response: ContextResponse) -> "ContextResponseModel":
        return cls(
            summary=response.summary,
            messages=[ContextMessageModel.from_domain(m) for m in response.messages],
        )


class ErrorResponse(BaseModel):
    """Body of every error response."""

    detail: str = Field(description="Human-readable error message")
    code: str = Field(description="Stable machine-readable error code")
