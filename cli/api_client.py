"""HTTP client for the Thought Sort API."""

from typing import Any

import httpx

from .config import API_URL

# Note creation waits on summary generation, so allow more than the server's
# own generation timeouts.
DEFAULT_TIMEOUT = 60.0


class ThoughtSortClient:
    """
    Thin synchronous wrapper over the REST API.

    One method per endpoint. Responses are returned as decoded JSON; any
    non-2xx response raises ``httpx.HTTPStatusError``.
    """

    def __init__(
        self,
        base_url: str = API_URL,
        token: str | None = None,
        timeout: float = DEFAULT_TIMEOUT,
        transport: httpx.BaseTransport | None = None,
    ):
        self.token = token
        self._http = httpx.Client(base_url=base_url, timeout=timeout, transport=transport)

    def __enter__(self) -> "ThoughtSortClient":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    def close(self):
        self._http.close()

    def _headers(self) -> dict[str, str]:
        if not self.token:
            return {}
        return {"Authorization": f"Bearer {self.token}"}

    def _request(self, method: str, path: str, **kwargs) -> Any:
        response = self._http.request(method, path, headers=self._headers(), **kwargs)
        response.raise_for_status()
        if response.status_code == 204 or not response.content:
            return None
        return response.json()

    # Auth

    def register(self, email: str, name: str) -> dict:
        data = self._request("POST", "/auth/register", json={"email": email, "name": name})
        self.token = data["access_token"]
        return data

    def login(self, email: str) -> dict:
        data = self._request("POST", "/auth/login", json={"email": email})
        self.token = data["access_token"]
        return data

    # Notes

    def list_notes(self) -> list[dict]:
        return self._request("GET", "/notes")

    def get_note(self, note_id: str) -> dict:
        return self._request("GET", f"/notes/{note_id}")

    def create_note(self, title: str, content: str) -> dict:
        return self._request("POST", "/notes", json={"title": title, "content": content})

    def update_note(
        self, note_id: str, title: str, content: str, regenerate_summary: bool = False
    ) -> dict:
        payload = {"title": title, "content": content, "regenerateSummary": regenerate_summary}
        return self._request("PUT", f"/notes/{note_id}", json=payload)

    def delete_note(self, note_id: str) -> None:
        self._request("DELETE", f"/notes/{note_id}")

    def regenerate_summary(self, note_id: str) -> dict:
        return self._request("POST", f"/notes/{note_id}/summary")

    # Chats

    def list_chats(self, note_id: str | None = None) -> list[dict]:
        params = {"noteId": note_id} if note_id else None
        return self._request("GET", "/chats", params=params)

    def get_chat(self, chat_id: str) -> dict:
        return self._request("GET", f"/chats/{chat_id}")

    def create_chat(self, title: str, note_id: str | None = None) -> dict:
        return self._request("POST", "/chats", json={"title": title, "noteId": note_id})

    def delete_chat(self, chat_id: str) -> None:
        self._request("DELETE", f"/chats/{chat_id}")

    def add_message(self, chat_id: str, content: str, role: str = "user") -> dict:
        return self._request(
            "POST", f"/chats/{chat_id}/messages", json={"content": content, "role": role}
        )

    def send_chat(self, message: str, note: dict | None = None, chat_id: str | None = None) -> dict:
        """
        Ask the assistant for a reply.

        With ``note`` the reply is grounded in that note's title and content.
        With ``chat_id`` the server saves the exchange to that chat.
        """
        payload: dict[str, Any] = {"message": message}
        if note is not None:
            payload.update(
                {"noteId": note["id"], "noteTitle": note["title"], "noteContent": note["content"]}
            )
        if chat_id:
            payload["chatId"] = chat_id
        return self._request("POST", "/chat", json=payload)
