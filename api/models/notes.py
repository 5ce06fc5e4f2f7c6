"""Notes-related Pydantic models."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field, field_validator

from ..services.icons import IconKind
from .base import RequestModel


class NoteCreate(RequestModel):
    """Request model for creating a note."""

    title: str = Field(..., min_length=1, max_length=500)
    content: str = Field(..., min_length=1)


class NoteUpdate(RequestModel):
    """Request model for editing a note. Title and content are always replaced."""

    title: str = Field(..., min_length=1, max_length=500)
    content: str = Field(..., min_length=1)
    regenerate_summary: bool = False


class NoteResponse(BaseModel):
    """Response model for note data."""

    id: str
    user_id: str
    title: str
    content: str
    summary: str | None = None
    icon: IconKind | None = None
    created_at: datetime
    updated_at: datetime

    @field_validator("icon", mode="before")
    @classmethod
    def parse_icon(cls, value):
        """Map unknown or legacy icon keys to the default icon."""
        if value is None or isinstance(value, IconKind):
            return value
        return IconKind.parse(str(value))

    @classmethod
    def from_doc(cls, doc: dict) -> NoteResponse:
        """Build a response from a notes collection document."""
        return cls(
            id=str(doc["_id"]),
            user_id=str(doc["user_id"]),
            title=doc["title"],
            content=doc["content"],
            summary=doc.get("summary"),
            icon=doc.get("icon"),
            created_at=doc["created_at"],
            updated_at=doc["updated_at"],
        )
