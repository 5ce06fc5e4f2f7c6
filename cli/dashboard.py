"""Dashboard controller: user intents in, API calls out, store updated.

The server is the source of truth. Every mutating action calls the API first
and only dispatches the record the server returned; a failed call leaves the
store untouched and emits an error notification instead.
"""

import threading
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum

import httpx

from .api_client import ThoughtSortClient
from .store import (
    ChatRemoved,
    ChatSelected,
    ChatsLoaded,
    ChatUpserted,
    DashboardState,
    NoteRemoved,
    NoteSelected,
    NotesLoaded,
    NoteUpserted,
    SearchChanged,
    Store,
    ViewMode,
    ViewModeChanged,
    selected_note,
)

RESPONSE_SEPARATOR = "\n\n--- AI Response ---\n"
CREATE_NOTE_KEYWORDS = ("create", "note")
AUTO_TITLE_LENGTH = 50


class Route(str, Enum):
    NOTE_CHAT = "note_chat"
    CREATE_NOTE = "create_note"
    GENERAL_CHAT = "general_chat"


def route_message(text: str, note_selected: bool) -> Route:
    """
    Decide what a free-form message should do.

    A selected note always wins: the message becomes a chat turn about it.
    Without one, text mentioning "create" or "note" becomes a new note and
    anything else is a general chat turn.
    """
    if note_selected:
        return Route.NOTE_CHAT
    lowered = text.lower()
    if any(keyword in lowered for keyword in CREATE_NOTE_KEYWORDS):
        return Route.CREATE_NOTE
    return Route.GENERAL_CHAT


@dataclass
class SendResult:
    route: Route
    response: str | None = None
    note: dict | None = None
    chat_id: str | None = None
    saved: bool = False


Notifier = Callable[[str, str], None]


def _ignore(level: str, message: str):
    pass


class Dashboard:
    """
    Controller over ``ThoughtSortClient`` and ``Store``.

    ``notify(level, message)`` receives "success" and "error" notifications.
    ``on_unauthorized`` is called when the API answers 401.
    """

    def __init__(
        self,
        client: ThoughtSortClient,
        store: Store | None = None,
        notify: Notifier | None = None,
        on_unauthorized: Callable[[], None] | None = None,
    ):
        self.client = client
        self.store = store or Store()
        self.notify = notify or _ignore
        self.on_unauthorized = on_unauthorized
        self.last_response: str | None = None
        self._chat_lock = threading.Lock()

    @property
    def state(self) -> DashboardState:
        return self.store.state

    def reset(self):
        """Forget all loaded state, e.g. after the user changes."""
        self.store = Store(listeners=self.store.listeners)
        self.last_response = None

    def _report_failure(self, failure_message: str, error: httpx.HTTPError):
        if isinstance(error, httpx.HTTPStatusError) and error.response.status_code == 401:
            self.notify("error", "Authentication failed. Please /login again.")
            if self.on_unauthorized:
                self.on_unauthorized()
            return
        self.notify("error", failure_message)

    def _call(self, failure_message: str, func, *args, **kwargs):
        """Run an API call; on failure notify and return None."""
        try:
            return func(*args, **kwargs)
        except httpx.HTTPError as e:
            self._report_failure(failure_message, e)
            return None

    # Loading

    def refresh_notes(self) -> bool:
        notes = self._call("Failed to load notes", self.client.list_notes)
        if notes is None:
            return False
        self.store.dispatch(NotesLoaded(notes))
        return True

    def refresh_chats(self) -> bool:
        chats = self._call("Failed to load chats", self.client.list_chats)
        if chats is None:
            return False
        self.store.dispatch(ChatsLoaded(chats))
        return True

    def load(self) -> bool:
        return self.refresh_notes() and self.refresh_chats()

    # Notes

    def create_note(self, title: str, content: str) -> dict | None:
        note = self._call("Failed to create note", self.client.create_note, title, content)
        if note is None:
            return None
        self.store.dispatch(NoteUpserted(note))
        self.notify("success", f"Note created: {note['title']}")
        return note

    def update_note(
        self, note_id: str, title: str, content: str, regenerate_summary: bool = False
    ) -> dict | None:
        note = self._call(
            "Failed to update note",
            self.client.update_note,
            note_id,
            title,
            content,
            regenerate_summary=regenerate_summary,
        )
        if note is None:
            return None
        self.store.dispatch(NoteUpserted(note))
        self.notify("success", "Note updated")
        return note

    def delete_note(self, note_id: str) -> bool:
        try:
            self.client.delete_note(note_id)
        except httpx.HTTPError as e:
            self._report_failure("Failed to delete note", e)
            return False
        self.store.dispatch(NoteRemoved(note_id))
        self.notify("success", "Note deleted")
        return True

    def regenerate_summary(self, note_id: str) -> dict | None:
        note = self._call("Failed to regenerate summary", self.client.regenerate_summary, note_id)
        if note is None:
            return None
        self.store.dispatch(NoteUpserted(note))
        return note

    def add_response_to_note(self, text: str | None = None) -> dict | None:
        """
        Append an assistant reply to the selected note.

        Defaults to the last reply received. The note's summary is
        regenerated from the combined content.
        """
        note = selected_note(self.state)
        if note is None:
            self.notify("error", "Select a note first")
            return None

        text = text or self.last_response
        if not text:
            self.notify("error", "No response to add")
            return None

        content = note["content"] + RESPONSE_SEPARATOR + text
        return self.update_note(note["id"], note["title"], content, regenerate_summary=True)

    # Selection and view

    def select_note(self, note_id: str | None):
        self.store.dispatch(NoteSelected(note_id))

    def select_chat(self, chat_id: str | None):
        self.store.dispatch(ChatSelected(chat_id))

    def set_view_mode(self, view_mode: ViewMode):
        self.store.dispatch(ViewModeChanged(view_mode))

    def search(self, term: str):
        self.store.dispatch(SearchChanged(term))

    # Chats

    def new_chat(self, title: str) -> dict | None:
        """Create a chat (about the selected note, if any) and select it."""
        note = selected_note(self.state)
        chat = self._call(
            "Failed to create chat",
            self.client.create_chat,
            title,
            note_id=note["id"] if note else None,
        )
        if chat is None:
            return None
        self.store.dispatch(ChatUpserted(chat))
        self.store.dispatch(ChatSelected(chat["id"]))
        return chat

    def ensure_chat(self, first_message: str) -> str | None:
        """
        Return the selected chat's id, creating and selecting a chat first
        when none is selected.

        Serialized, so two sends racing on an empty selection share one chat.
        """
        with self._chat_lock:
            if self.state.selected_chat_id:
                return self.state.selected_chat_id
            chat = self.new_chat(first_message[:AUTO_TITLE_LENGTH])
            return chat["id"] if chat else None

    def delete_chat(self, chat_id: str) -> bool:
        try:
            self.client.delete_chat(chat_id)
        except httpx.HTTPError as e:
            self._report_failure("Failed to delete chat", e)
            return False
        self.store.dispatch(ChatRemoved(chat_id))
        self.notify("success", "Chat deleted")
        return True

    # Messages

    def send_message(self, text: str) -> SendResult | None:
        """Route a free-form message and carry it out."""
        text = text.strip()
        if not text:
            return None

        note = selected_note(self.state)
        route = route_message(text, note_selected=note is not None)

        if route == Route.CREATE_NOTE:
            created = self.create_note(text[:AUTO_TITLE_LENGTH], text)
            if created is None:
                return None
            return SendResult(route=route, note=created)

        chat_id = self.ensure_chat(text)
        data = self._call(
            "Failed to get AI response", self.client.send_chat, text, note=note, chat_id=chat_id
        )
        if data is None:
            return None

        self.last_response = data["response"]
        saved = bool(data.get("saved"))
        if chat_id:
            if not saved:
                self.notify("error", "Response was not saved to the chat")
            self._refresh_chat(chat_id)

        return SendResult(
            route=route, response=data["response"], note=note, chat_id=chat_id, saved=saved
        )

    def _refresh_chat(self, chat_id: str):
        chat = self._call("Failed to load chat", self.client.get_chat, chat_id)
        if chat is not None:
            self.store.dispatch(ChatUpserted(chat))
