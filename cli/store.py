"""Dashboard state and the reducer that updates it.

All client state lives in one immutable ``DashboardState``. It only changes by
dispatching an action through ``reduce``, which is pure: it never calls the
API and never mutates its input.
"""

from collections.abc import Callable
from dataclasses import dataclass, field, replace
from enum import Enum


class ViewMode(str, Enum):
    CHAT = "chat"
    EDIT = "edit"
    NOTES = "notes"


@dataclass(frozen=True)
class DashboardState:
    notes: tuple[dict, ...] = ()
    chats: tuple[dict, ...] = ()
    selected_note_id: str | None = None
    selected_chat_id: str | None = None
    view_mode: ViewMode = ViewMode.CHAT
    search_term: str = ""


# Actions


@dataclass(frozen=True)
class NotesLoaded:
    notes: list[dict]


@dataclass(frozen=True)
class NoteUpserted:
    note: dict


@dataclass(frozen=True)
class NoteRemoved:
    note_id: str


@dataclass(frozen=True)
class ChatsLoaded:
    chats: list[dict]


@dataclass(frozen=True)
class ChatUpserted:
    chat: dict


@dataclass(frozen=True)
class ChatRemoved:
    chat_id: str


@dataclass(frozen=True)
class NoteSelected:
    note_id: str | None


@dataclass(frozen=True)
class ChatSelected:
    chat_id: str | None


@dataclass(frozen=True)
class ViewModeChanged:
    view_mode: ViewMode


@dataclass(frozen=True)
class SearchChanged:
    search_term: str


Action = (
    NotesLoaded
    | NoteUpserted
    | NoteRemoved
    | ChatsLoaded
    | ChatUpserted
    | ChatRemoved
    | NoteSelected
    | ChatSelected
    | ViewModeChanged
    | SearchChanged
)


def _find(records: tuple[dict, ...], record_id: str | None) -> dict | None:
    if record_id is None:
        return None
    return next((record for record in records if record["id"] == record_id), None)


def _upsert(records: tuple[dict, ...], record: dict) -> tuple[dict, ...]:
    # Lists are ordered by last update, so a written record moves to the front.
    return (record, *(r for r in records if r["id"] != record["id"]))


def _without(records: tuple[dict, ...], record_id: str) -> tuple[dict, ...]:
    return tuple(r for r in records if r["id"] != record_id)


def reduce(state: DashboardState, action: Action) -> DashboardState:
    """Return the state that results from applying ``action`` to ``state``."""
    if isinstance(action, NotesLoaded):
        notes = tuple(action.notes)
        selected = state.selected_note_id if _find(notes, state.selected_note_id) else None
        return replace(state, notes=notes, selected_note_id=selected)

    if isinstance(action, NoteUpserted):
        return replace(state, notes=_upsert(state.notes, action.note))

    if isinstance(action, NoteRemoved):
        was_selected = state.selected_note_id == action.note_id
        chats = tuple(
            {**chat, "note_id": None, "note": None} if chat.get("note_id") == action.note_id else chat
            for chat in state.chats
        )
        return replace(
            state,
            notes=_without(state.notes, action.note_id),
            chats=chats,
            selected_note_id=None if was_selected else state.selected_note_id,
            view_mode=ViewMode.NOTES
            if was_selected and state.view_mode == ViewMode.EDIT
            else state.view_mode,
        )

    if isinstance(action, ChatsLoaded):
        chats = tuple(action.chats)
        selected = state.selected_chat_id if _find(chats, state.selected_chat_id) else None
        return replace(state, chats=chats, selected_chat_id=selected)

    if isinstance(action, ChatUpserted):
        return replace(state, chats=_upsert(state.chats, action.chat))

    if isinstance(action, ChatRemoved):
        selected = None if state.selected_chat_id == action.chat_id else state.selected_chat_id
        return replace(state, chats=_without(state.chats, action.chat_id), selected_chat_id=selected)

    if isinstance(action, NoteSelected):
        if action.note_id == state.selected_note_id:
            return state
        # A different note starts a different conversation.
        return replace(state, selected_note_id=action.note_id, selected_chat_id=None)

    if isinstance(action, ChatSelected):
        chat = _find(state.chats, action.chat_id)
        if chat is None:
            return replace(state, selected_chat_id=None)
        return replace(
            state,
            selected_chat_id=chat["id"],
            selected_note_id=chat.get("note_id"),
            view_mode=ViewMode.CHAT,
        )

    if isinstance(action, ViewModeChanged):
        return replace(state, view_mode=action.view_mode)

    if isinstance(action, SearchChanged):
        return replace(state, search_term=action.search_term)

    raise TypeError(f"Unknown action: {action!r}")


# Selectors


def selected_note(state: DashboardState) -> dict | None:
    return _find(state.notes, state.selected_note_id)


def selected_chat(state: DashboardState) -> dict | None:
    return _find(state.chats, state.selected_chat_id)


def filtered_notes(state: DashboardState) -> list[dict]:
    """Notes whose title or content contains the search term, ignoring case."""
    term = state.search_term.strip().lower()
    if not term:
        return list(state.notes)
    return [
        note
        for note in state.notes
        if term in note["title"].lower() or term in note["content"].lower()
    ]


@dataclass
class Store:
    """Holds the current state and notifies listeners after each dispatch."""

    state: DashboardState = field(default_factory=DashboardState)
    listeners: list[Callable[[DashboardState], None]] = field(default_factory=list)

    def dispatch(self, action: Action) -> DashboardState:
        self.state = reduce(self.state, action)
        for listener in self.listeners:
            listener(self.state)
        return self.state

    def subscribe(self, listener: Callable[[DashboardState], None]) -> Callable[[], None]:
        self.listeners.append(listener)
        return lambda: self.listeners.remove(listener)
