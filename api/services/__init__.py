"""Domain services: icon inference, the generative assistant and persistence."""

from .assistant import GenerativeAssistant, get_assistant
from .icons import DEFAULT_ICON, IconKind, infer_icon
from .repositories import (
    ChatRepository,
    NoteRepository,
    get_chat_repository,
    get_note_repository,
)

__all__ = [
    "DEFAULT_ICON",
    "ChatRepository",
    "GenerativeAssistant",
    "IconKind",
    "NoteRepository",
    "get_assistant",
    "get_chat_repository",
    "get_note_repository",
    "infer_icon",
]
