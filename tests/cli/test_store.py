"""Tests for the dashboard store and reducer."""

import pytest

from cli.store import (
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
    filtered_notes,
    reduce,
    selected_chat,
    selected_note,
)


def note(note_id: str, title: str = "Title", content: str = "Body") -> dict:
    return {"id": note_id, "title": title, "content": content, "summary": None, "icon": None}


def chat(chat_id: str, note_id: str | None = None) -> dict:
    return {"id": chat_id, "title": f"Chat {chat_id}", "note_id": note_id, "messages": []}


class TestNotes:
    """Test note actions."""

    def test_notes_loaded_replaces_list(self):
        state = reduce(DashboardState(), NotesLoaded([note("a"), note("b")]))

        assert [n["id"] for n in state.notes] == ["a", "b"]

    def test_reload_drops_stale_selection(self):
        state = DashboardState(notes=(note("a"),), selected_note_id="a")

        state = reduce(state, NotesLoaded([note("b")]))

        assert state.selected_note_id is None

    def test_upsert_new_note_goes_first(self):
        state = DashboardState(notes=(note("a"),))

        state = reduce(state, NoteUpserted(note("b")))

        assert [n["id"] for n in state.notes] == ["b", "a"]

    def test_upsert_existing_note_replaces_and_moves_first(self):
        state = DashboardState(notes=(note("a"), note("b", title="Old")))

        state = reduce(state, NoteUpserted(note("b", title="New")))

        assert [n["id"] for n in state.notes] == ["b", "a"]
        assert state.notes[0]["title"] == "New"

    def test_remove_selected_note(self):
        state = DashboardState(
            notes=(note("a"), note("b")),
            chats=(chat("c1", note_id="a"), chat("c2", note_id="b")),
            selected_note_id="a",
            view_mode=ViewMode.EDIT,
        )

        state = reduce(state, NoteRemoved("a"))

        assert [n["id"] for n in state.notes] == ["b"]
        assert state.selected_note_id is None
        assert state.view_mode is ViewMode.NOTES
        assert state.chats[0]["note_id"] is None
        assert state.chats[1]["note_id"] == "b"

    def test_reducer_does_not_mutate_input(self):
        original = DashboardState(notes=(note("a"),))

        reduce(original, NoteRemoved("a"))

        assert [n["id"] for n in original.notes] == ["a"]


class TestSelection:
    """Test selection actions."""

    def test_selecting_another_note_clears_chat(self):
        state = DashboardState(
            notes=(note("a"), note("b")),
            chats=(chat("c1", note_id="a"),),
            selected_note_id="a",
            selected_chat_id="c1",
        )

        state = reduce(state, NoteSelected("b"))

        assert state.selected_note_id == "b"
        assert state.selected_chat_id is None

    def test_reselecting_same_note_keeps_chat(self):
        state = DashboardState(notes=(note("a"),), selected_note_id="a", selected_chat_id="c1")

        assert reduce(state, NoteSelected("a")) is state

    def test_selecting_chat_follows_its_note(self):
        state = DashboardState(notes=(note("a"),), chats=(chat("c1", note_id="a"),))

        state = reduce(state, ChatSelected("c1"))

        assert state.selected_chat_id == "c1"
        assert state.selected_note_id == "a"
        assert state.view_mode is ViewMode.CHAT

    def test_selecting_unknown_chat_clears(self):
        state = DashboardState(chats=(chat("c1"),), selected_chat_id="c1")

        state = reduce(state, ChatSelected("nope"))

        assert state.selected_chat_id is None

    def test_selectors(self):
        state = DashboardState(
            notes=(note("a"),), chats=(chat("c1"),), selected_note_id="a", selected_chat_id="c1"
        )

        assert selected_note(state)["id"] == "a"
        assert selected_chat(state)["id"] == "c1"
        assert selected_note(DashboardState()) is None


class TestChats:
    """Test chat actions."""

    def test_chats_loaded_keeps_valid_selection(self):
        state = DashboardState(selected_chat_id="c1")

        state = reduce(state, ChatsLoaded([chat("c1"), chat("c2")]))

        assert state.selected_chat_id == "c1"

    def test_chat_upsert_and_remove(self):
        state = reduce(DashboardState(), ChatUpserted(chat("c1")))
        state = reduce(state, ChatUpserted(chat("c2")))
        state = reduce(state, ChatSelected("c2"))

        state = reduce(state, ChatRemoved("c2"))

        assert [c["id"] for c in state.chats] == ["c1"]
        assert state.selected_chat_id is None


class TestViewAndSearch:
    """Test view mode and search."""

    def test_view_mode(self):
        state = reduce(DashboardState(), ViewModeChanged(ViewMode.NOTES))

        assert state.view_mode is ViewMode.NOTES

    @pytest.mark.parametrize("term,expected", [("", ["a", "b"]), ("JAPAN", ["a"]), ("milk", ["b"])])
    def test_filtered_notes_matches_title_or_content(self, term, expected):
        state = DashboardState(
            notes=(
                note("a", title="Trip to Japan", content="Tokyo"),
                note("b", title="Groceries", content="Milk, eggs"),
            )
        )

        state = reduce(state, SearchChanged(term))

        assert [n["id"] for n in filtered_notes(state)] == expected

    def test_unknown_action(self):
        with pytest.raises(TypeError):
            reduce(DashboardState(), object())


class TestStore:
    """Test the Store wrapper."""

    def test_dispatch_notifies_listeners(self):
        store = Store()
        seen = []
        unsubscribe = store.subscribe(seen.append)

        store.dispatch(NotesLoaded([note("a")]))
        unsubscribe()
        store.dispatch(NotesLoaded([]))

        assert len(seen) == 1
        assert seen[0].notes[0]["id"] == "a"
        assert store.state.notes == ()
