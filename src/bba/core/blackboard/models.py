"""Blackboard data models — sections, write results and the JSON wire shape.

``BlackboardData`` mirrors the persisted session file exactly::

    {id, targetPath, sections, totalTokens, maxTokens, createdAt, updatedAt}

Field names are snake_case in Python and camelCase on the wire.
"""

from datetime import UTC, datetime

from pydantic import BaseModel, ConfigDict, Field


def utc_now() -> datetime:
    return datetime.now(UTC)


class Section(BaseModel):
    """A named, independently sized unit of blackboard content."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    name: str
    content: str = ""
    tokens: int = 0
    updated_at: datetime = Field(default_factory=utc_now, alias="updatedAt")


class UpdateResult(BaseModel):
    """Outcome of :meth:`Blackboard.update_section`."""

    success: bool
    message: str


class BlackboardData(BaseModel):
    """Serialised form of a :class:`~bba.core.blackboard.blackboard.Blackboard`."""

    model_config = ConfigDict(populate_by_name=True)

    id: str
    target_path: str = Field(alias="targetPath")
    sections: dict[str, Section] = {}
    total_tokens: int = Field(default=0, alias="totalTokens")
    max_tokens: int = Field(default=4000, alias="maxTokens")
    created_at: datetime = Field(default_factory=utc_now, alias="createdAt")
    updated_at: datetime = Field(default_factory=utc_now, alias="updatedAt")


class SessionInfo(BaseModel):
    """Lightweight listing entry for a persisted blackboard session."""

    id: str
    target_path: str
    created_at: datetime
    updated_at: datetime
    total_tokens: int
