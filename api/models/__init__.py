"""Pydantic models for API requests and responses."""

from .auth import AuthResponse, LoginRequest, UserCreate, UserResponse
from .chat import (
    ChatCreate,
    ChatResponse,
    ChatSendRequest,
    ChatSendResponse,
    MessageCreate,
    MessageResponse,
    NoteRef,
)
from .notes import NoteCreate, NoteResponse, NoteUpdate

__all__ = [
    "AuthResponse",
    # Chat models
    "ChatCreate",
    "ChatResponse",
    "ChatSendRequest",
    "ChatSendResponse",
    "LoginRequest",
    "MessageCreate",
    "MessageResponse",
    # Notes models
    "NoteCreate",
    "NoteRef",
    "NoteResponse",
    "NoteUpdate",
    # Auth models
    "UserCreate",
    "UserResponse",
]
