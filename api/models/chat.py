"""Chat-related Pydantic models."""

from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from .base import RequestModel

MessageRole = Literal["user", "assistant"]


class ChatCreate(RequestModel):
    """Request model for creating a chat."""

    model_config = ConfigDict(str_strip_whitespace=True)

    title: str = Field(..., min_length=1, max_length=500)
    note_id: str | None = None


class MessageCreate(RequestModel):
    """Request model for appending a message to a chat."""

    model_config = ConfigDict(str_strip_whitespace=True)

    content: str = Field(..., min_length=1)
    role: MessageRole


class MessageResponse(BaseModel):
    """Response model for a chat message."""

    id: str
    chat_id: str
    role: MessageRole
    content: str
    created_at: datetime

    @classmethod
    def from_doc(cls, doc: dict) -> MessageResponse:
        return cls(
            id=str(doc["_id"]),
            chat_id=str(doc["chat_id"]),
            role=doc["role"],
            content=doc["content"],
            created_at=doc["created_at"],
        )


class NoteRef(BaseModel):
    """Minimal reference to the note a chat is anchored to."""

    id: str
    title: str


class ChatResponse(BaseModel):
    """Response model for a chat with its messages (oldest first)."""

    id: str
    user_id: str
    title: str
    note_id: str | None = None
    note: NoteRef | None = None
    created_at: datetime
    updated_at: datetime
    messages: list[MessageResponse] = Field(default_factory=list)

    @classmethod
    def from_doc(cls, doc: dict) -> ChatResponse:
        """Build a response from a hydrated chats document (see ChatRepository)."""
        note = doc.get("note")
        return cls(
            id=str(doc["_id"]),
            user_id=str(doc["user_id"]),
            title=doc["title"],
            note_id=str(doc["note_id"]) if doc.get("note_id") else None,
            note=NoteRef(id=str(note["_id"]), title=note["title"]) if note else None,
            created_at=doc["created_at"],
            updated_at=doc["updated_at"],
            messages=[MessageResponse.from_doc(msg) for msg in doc.get("messages", [])],
        )


class ChatSendRequest(RequestModel):
    """Request model for the chat endpoint.

    The reply is grounded in a note only when note_id, note_content and
    note_title are all given. Messages are saved only when chat_id is given.
    """

    message: str = Field(..., min_length=1)
    note_id: str | None = None
    note_content: str | None = None
    note_title: str | None = None
    chat_id: str | None = None


class ChatSendResponse(BaseModel):
    """Response model for the chat endpoint."""

    response: str
    chat_id: str | None = None
    saved: bool = False
