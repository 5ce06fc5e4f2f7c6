"""CLI command handlers."""

from .auth import login_user, logout_user, register_user
from .chat import delete_chat, list_chats, new_chat, send_message, switch_chat, view_history
from .notes import (
    add_response,
    create_note,
    delete_note,
    edit_note,
    list_notes,
    rename_note,
    select_note,
    summarize_note,
    view_note,
)

__all__ = [
    # Auth commands
    "login_user",
    "logout_user",
    "register_user",
    # Chat commands
    "delete_chat",
    "list_chats",
    "new_chat",
    "send_message",
    "switch_chat",
    "view_history",
    # Notes commands
    "add_response",
    "create_note",
    "delete_note",
    "edit_note",
    "list_notes",
    "rename_note",
    "select_note",
    "summarize_note",
    "view_note",
]
