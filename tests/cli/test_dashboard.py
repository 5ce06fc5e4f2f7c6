"""Tests for the dashboard controller against a mocked API."""

import json
import threading

import httpx
import pytest

from cli.api_client import ThoughtSortClient
from cli.dashboard import RESPONSE_SEPARATOR, Dashboard, Route, route_message
from cli.store import selected_chat, selected_note


class FakeAPI:
    """In-memory stand-in for the HTTP API, served through httpx.MockTransport."""

    def __init__(self):
        self.notes: dict[str, dict] = {}
        self.chats: dict[str, dict] = {}
        self.requests: list[tuple[str, str, dict | None]] = []
        self.fail: set[tuple[str, str]] = set()
        self.unauthorized = False
        self.chat_saved = True
        self._next_id = 0

    def _id(self) -> str:
        self._next_id += 1
        return f"id{self._next_id}"

    def __call__(self, request: httpx.Request) -> httpx.Response:
        method, path = request.method, request.url.path
        body = json.loads(request.content) if request.content else None
        self.requests.append((method, path, body))

        if self.unauthorized:
            return httpx.Response(401, json={"detail": "Not authenticated"})
        if (method, path.split("/")[1]) in self.fail:
            return httpx.Response(500, json={"detail": "Internal server error"})

        parts = path.strip("/").split("/")
        if parts[0] == "notes":
            return self._notes(method, parts, body)
        if parts[0] == "chats":
            return self._chats(method, parts, body)
        if parts[0] == "chat":
            return self._send(body)
        return httpx.Response(404, json={"detail": "Not found"})

    def _notes(self, method, parts, body):
        if method == "GET" and len(parts) == 1:
            return httpx.Response(200, json=list(self.notes.values()))
        if method == "POST" and len(parts) == 1:
            note = {
                "id": self._id(),
                "title": body["title"],
                "content": body["content"],
                "summary": f"Summary of {body['title']}",
                "icon": "FileText",
                "updated_at": "2024-01-01T00:00:00Z",
            }
            self.notes[note["id"]] = note
            return httpx.Response(201, json=note)
        note = self.notes.get(parts[1])
        if note is None:
            return httpx.Response(404, json={"detail": "Note not found"})
        if method == "PUT":
            note.update(title=body["title"], content=body["content"])
            if body.get("regenerateSummary"):
                note["summary"] = "Regenerated"
            return httpx.Response(200, json=note)
        if method == "DELETE":
            del self.notes[note["id"]]
            return httpx.Response(204)
        return httpx.Response(200, json=note)

    def _chats(self, method, parts, body):
        if method == "GET" and len(parts) == 1:
            return httpx.Response(200, json=list(self.chats.values()))
        if method == "POST" and len(parts) == 1:
            chat = {
                "id": self._id(),
                "title": body["title"],
                "note_id": body.get("noteId"),
                "messages": [],
            }
            self.chats[chat["id"]] = chat
            return httpx.Response(201, json=chat)
        chat = self.chats.get(parts[1])
        if chat is None:
            return httpx.Response(404, json={"detail": "Chat not found"})
        if method == "DELETE":
            del self.chats[chat["id"]]
            return httpx.Response(204)
        return httpx.Response(200, json=chat)

    def _send(self, body):
        grounded = "noteTitle" in body
        reply = f"About {body['noteTitle']}" if grounded else f"Reply to {body['message']}"
        chat_id = body.get("chatId")
        saved = False
        if chat_id in self.chats and self.chat_saved:
            self.chats[chat_id]["messages"] += [
                {"role": "user", "content": body["message"]},
                {"role": "assistant", "content": reply},
            ]
            saved = True
        return httpx.Response(200, json={"response": reply, "chat_id": chat_id, "saved": saved})

    def paths(self, method: str) -> list[str]:
        return [path for m, path, _ in self.requests if m == method]


@pytest.fixture
def fake_api():
    return FakeAPI()


@pytest.fixture
def notifications():
    return []


@pytest.fixture
def dashboard(fake_api, notifications):
    client = ThoughtSortClient(
        base_url="http://testserver", token="token", transport=httpx.MockTransport(fake_api)
    )
    yield Dashboard(client, notify=lambda level, message: notifications.append((level, message)))
    client.close()


class TestRouteMessage:
    """Test message routing rules."""

    def test_selected_note_wins(self):
        assert route_message("create a note", note_selected=True) is Route.NOTE_CHAT

    @pytest.mark.parametrize("text", ["Create a shopping list", "note: buy milk", "NOTE this"])
    def test_create_keywords(self, text):
        assert route_message(text, note_selected=False) is Route.CREATE_NOTE

    def test_general_chat(self):
        assert route_message("What is the capital of France?", note_selected=False) is (
            Route.GENERAL_CHAT
        )


class TestSendMessage:
    """Test the send flow."""

    def test_create_note_from_message(self, dashboard, fake_api):
        text = "Create a note about " + "x" * 60

        result = dashboard.send_message(text)

        assert result.route is Route.CREATE_NOTE
        note = fake_api.requests[0][2]
        assert note["title"] == text[:50]
        assert note["content"] == text
        assert dashboard.state.notes[0]["title"] == text[:50]
        assert fake_api.paths("POST") == ["/notes"]

    def test_general_chat_creates_chat_then_sends(self, dashboard, fake_api):
        result = dashboard.send_message("Hello there")

        assert result.route is Route.GENERAL_CHAT
        assert result.response == "Reply to Hello there"
        assert result.saved is True
        assert fake_api.paths("POST") == ["/chats", "/chat"]
        sent = fake_api.requests[1][2]
        assert sent["chatId"] == result.chat_id
        assert "noteId" not in sent
        chat = selected_chat(dashboard.state)
        assert chat["id"] == result.chat_id
        assert [m["role"] for m in chat["messages"]] == ["user", "assistant"]

    def test_second_message_reuses_chat(self, dashboard, fake_api):
        first = dashboard.send_message("Hello")
        second = dashboard.send_message("Again")

        assert first.chat_id == second.chat_id
        assert fake_api.paths("POST").count("/chats") == 1
        assert len(selected_chat(dashboard.state)["messages"]) == 4

    def test_note_chat_is_grounded(self, dashboard, fake_api):
        note = dashboard.create_note("Trip", "Planning our vacation to Japan")
        dashboard.select_note(note["id"])

        result = dashboard.send_message("What should I pack?")

        assert result.route is Route.NOTE_CHAT
        assert result.response == "About Trip"
        chat_body = next(body for m, p, body in fake_api.requests if p == "/chats")
        assert chat_body["noteId"] == note["id"]
        sent = next(body for m, p, body in fake_api.requests if p == "/chat")
        assert sent["noteTitle"] == "Trip"
        assert sent["noteContent"] == "Planning our vacation to Japan"

    def test_blank_message_is_ignored(self, dashboard, fake_api):
        assert dashboard.send_message("   ") is None
        assert fake_api.requests == []

    def test_unsaved_reply_is_reported(self, dashboard, fake_api, notifications):
        fake_api.chat_saved = False

        result = dashboard.send_message("Hello")

        assert result.response == "Reply to Hello"
        assert result.saved is False
        assert ("error", "Response was not saved to the chat") in notifications

    def test_send_failure_notifies(self, dashboard, fake_api, notifications):
        fake_api.fail.add(("POST", "chat"))

        assert dashboard.send_message("Hello") is None
        assert ("error", "Failed to get AI response") in notifications


class TestEnsureChat:
    """Test chat creation before sending."""

    def test_existing_selection_is_used(self, dashboard, fake_api):
        chat = dashboard.new_chat("Existing")

        assert dashboard.ensure_chat("Hello") == chat["id"]
        assert fake_api.paths("POST") == ["/chats"]

    def test_auto_title_is_truncated(self, dashboard, fake_api):
        dashboard.ensure_chat("y" * 80)

        assert fake_api.requests[0][2]["title"] == "y" * 50

    def test_concurrent_calls_create_one_chat(self, dashboard, fake_api):
        results = []
        threads = [
            threading.Thread(target=lambda: results.append(dashboard.ensure_chat("Hello")))
            for _ in range(5)
        ]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert len(set(results)) == 1
        assert fake_api.paths("POST").count("/chats") == 1

    def test_failure_returns_none(self, dashboard, fake_api, notifications):
        fake_api.fail.add(("POST", "chats"))

        assert dashboard.ensure_chat("Hello") is None
        assert ("error", "Failed to create chat") in notifications


class TestNoteActions:
    """Test note mutations keep the store in line with the server."""

    def test_add_response_to_note(self, dashboard, fake_api):
        note = dashboard.create_note("Trip", "Planning our vacation to Japan")
        dashboard.select_note(note["id"])

        updated = dashboard.add_response_to_note("Pack light.")

        put = next(body for m, p, body in fake_api.requests if m == "PUT")
        assert put["content"] == "Planning our vacation to Japan" + RESPONSE_SEPARATOR + "Pack light."
        assert put["regenerateSummary"] is True
        assert updated["summary"] == "Regenerated"
        assert selected_note(dashboard.state)["content"] == put["content"]

    def test_add_last_response_by_default(self, dashboard, fake_api):
        note = dashboard.create_note("Trip", "Japan")
        dashboard.select_note(note["id"])
        dashboard.send_message("What should I pack?")

        dashboard.add_response_to_note()

        assert selected_note(dashboard.state)["content"].endswith("About Trip")

    def test_add_response_without_selection(self, dashboard, notifications):
        assert dashboard.add_response_to_note("text") is None
        assert ("error", "Select a note first") in notifications

    def test_failed_create_leaves_store_untouched(self, dashboard, fake_api, notifications):
        fake_api.fail.add(("POST", "notes"))

        assert dashboard.create_note("T", "Body") is None
        assert dashboard.state.notes == ()
        assert notifications == [("error", "Failed to create note")]

    def test_delete_note(self, dashboard, fake_api):
        note = dashboard.create_note("T", "Body")
        dashboard.select_note(note["id"])

        assert dashboard.delete_note(note["id"]) is True
        assert dashboard.state.notes == ()
        assert dashboard.state.selected_note_id is None

    def test_delete_missing_note(self, dashboard, notifications):
        assert dashboard.delete_note("missing") is False
        assert ("error", "Failed to delete note") in notifications

    def test_refresh_loads_server_state(self, dashboard, fake_api):
        fake_api.notes["n1"] = {"id": "n1", "title": "Server", "content": "Body"}

        assert dashboard.load() is True
        assert dashboard.state.notes[0]["title"] == "Server"

    def test_unauthorized_calls_hook(self, fake_api, notifications):
        calls = []
        client = ThoughtSortClient(
            base_url="http://testserver", transport=httpx.MockTransport(fake_api)
        )
        dashboard = Dashboard(
            client,
            notify=lambda level, message: notifications.append((level, message)),
            on_unauthorized=lambda: calls.append(True),
        )
        fake_api.unauthorized = True

        assert dashboard.refresh_notes() is False
        assert calls == [True]
        assert notifications == [("error", "Authentication failed. Please /login again.")]


class TestChatActions:
    """Test chat mutations."""

    def test_delete_chat(self, dashboard):
        chat = dashboard.new_chat("T")

        assert dashboard.delete_chat(chat["id"]) is True
        assert dashboard.state.chats == ()
        assert dashboard.state.selected_chat_id is None

    def test_selecting_other_note_starts_new_chat(self, dashboard, fake_api):
        a = dashboard.create_note("A", "alpha")
        b = dashboard.create_note("B", "beta")
        dashboard.select_note(a["id"])
        first = dashboard.send_message("question")

        dashboard.select_note(b["id"])
        second = dashboard.send_message("question")

        assert first.chat_id != second.chat_id
        assert fake_api.chats[second.chat_id]["note_id"] == b["id"]
