"""MongoDB persistence for notes, chats and messages.

Every note and chat query is filtered by the owning user. Messages are only
reachable through a chat that has already been fetched for that user. Deletes
are hard deletes.
"""

from collections.abc import Iterator
from contextlib import contextmanager
from datetime import UTC, datetime

import structlog
from bson import ObjectId
from bson.errors import InvalidId
from motor.motor_asyncio import AsyncIOMotorDatabase
from opentelemetry import trace
from pymongo.errors import PyMongoError

from ..database import get_db
from ..errors import NotFoundError, PersistenceError, ValidationError

logger = structlog.get_logger(__name__)
tracer = trace.get_tracer(__name__)

MESSAGE_ROLES = ("user", "assistant")


def to_object_id(value: str | ObjectId | None) -> ObjectId | None:
    """Parse an id string; None when it is not a valid ObjectId."""
    if isinstance(value, ObjectId):
        return value
    if not value:
        return None
    try:
        return ObjectId(value)
    except (InvalidId, TypeError):
        return None


@contextmanager
def storage_errors(operation: str) -> Iterator[None]:
    """Translate driver failures into PersistenceError."""
    try:
        yield
    except PyMongoError as e:
        logger.error(
            "storage_operation_failed",
            operation=operation,
            error=str(e),
            error_type=type(e).__name__,
        )
        raise PersistenceError(f"Storage operation failed: {operation}") from e


class NoteRepository:
    """CRUD for the notes collection."""

    def __init__(self, db: AsyncIOMotorDatabase):
        self.db = db

    async def list_for_user(self, user_id: str) -> list[dict]:
        """All notes of a user, most recently updated first."""
        with storage_errors("notes.list"):
            cursor = self.db.notes.find({"user_id": ObjectId(user_id)}).sort(
                [("updated_at", -1), ("_id", -1)]
            )
            return await cursor.to_list(length=None)

    async def get(self, user_id: str, note_id: str) -> dict:
        """Fetch one note owned by the user.

        Raises:
            NotFoundError: note missing, not owned, or malformed id
        """
        note_obj_id = to_object_id(note_id)
        if note_obj_id is None:
            raise NotFoundError("Note not found", {"note_id": note_id})

        with storage_errors("notes.get"):
            note = await self.db.notes.find_one({"_id": note_obj_id, "user_id": ObjectId(user_id)})

        if note is None:
            raise NotFoundError("Note not found", {"note_id": note_id})
        return note

    @tracer.start_as_current_span("notes.create")
    async def create(
        self,
        user_id: str,
        title: str,
        content: str,
        summary: str | None,
        icon: str | None,
    ) -> dict:
        now = datetime.now(UTC)
        note_doc = {
            "user_id": ObjectId(user_id),
            "title": title,
            "content": content,
            "summary": summary,
            "icon": icon,
            "created_at": now,
            "updated_at": now,
        }

        with storage_errors("notes.create"):
            result = await self.db.notes.insert_one(note_doc)

        note_doc["_id"] = result.inserted_id
        return note_doc

    async def _update_fields(self, user_id: str, note_id: str, fields: dict, operation: str) -> dict:
        note_obj_id = to_object_id(note_id)
        if note_obj_id is None:
            raise NotFoundError("Note not found", {"note_id": note_id})

        query = {"_id": note_obj_id, "user_id": ObjectId(user_id)}
        fields = {**fields, "updated_at": datetime.now(UTC)}

        with storage_errors(operation):
            result = await self.db.notes.update_one(query, {"$set": fields})
            if result.matched_count == 0:
                raise NotFoundError("Note not found", {"note_id": note_id})
            note = await self.db.notes.find_one(query)

        if note is None:
            raise NotFoundError("Note not found", {"note_id": note_id})
        return note

    async def update(
        self, user_id: str, note_id: str, title: str, content: str, summary: str | None
    ) -> dict:
        """Overwrite title, content and summary. The icon is left as it was."""
        return await self._update_fields(
            user_id,
            note_id,
            {"title": title, "content": content, "summary": summary},
            "notes.update",
        )

    async def set_summary(self, user_id: str, note_id: str, summary: str) -> dict:
        return await self._update_fields(user_id, note_id, {"summary": summary}, "notes.set_summary")

    @tracer.start_as_current_span("notes.delete")
    async def delete(self, user_id: str, note_id: str) -> None:
        """Delete a note and unlink chats that were anchored to it.

        Raises:
            NotFoundError: note missing or not owned
        """
        note_obj_id = to_object_id(note_id)
        if note_obj_id is None:
            raise NotFoundError("Note not found", {"note_id": note_id})

        user_obj_id = ObjectId(user_id)
        with storage_errors("notes.delete"):
            result = await self.db.notes.delete_one({"_id": note_obj_id, "user_id": user_obj_id})
            if result.deleted_count == 0:
                raise NotFoundError("Note not found", {"note_id": note_id})

            unlinked = await self.db.chats.update_many(
                {"note_id": note_obj_id, "user_id": user_obj_id}, {"$set": {"note_id": None}}
            )

        logger.debug("note_chats_unlinked", note_id=note_id, count=unlinked.modified_count)


class ChatRepository:
    """CRUD for chats and their messages.

    Chat documents returned by list/get/create are hydrated with a
    ``messages`` list (oldest first) and a ``note`` dict (or None).
    """

    def __init__(self, db: AsyncIOMotorDatabase):
        self.db = db

    async def _hydrate(self, user_id: str, chats: list[dict]) -> list[dict]:
        if not chats:
            return chats

        chat_ids = [chat["_id"] for chat in chats]
        note_ids = list({chat["note_id"] for chat in chats if chat.get("note_id")})

        with storage_errors("chats.hydrate"):
            messages = await (
                self.db.messages.find({"chat_id": {"$in": chat_ids}})
                .sort([("created_at", 1), ("_id", 1)])
                .to_list(length=None)
            )
            notes = []
            if note_ids:
                notes = await self.db.notes.find(
                    {"_id": {"$in": note_ids}, "user_id": ObjectId(user_id)},
                    {"title": 1},
                ).to_list(length=None)

        messages_by_chat: dict[ObjectId, list[dict]] = {chat_id: [] for chat_id in chat_ids}
        for message in messages:
            messages_by_chat[message["chat_id"]].append(message)
        notes_by_id = {note["_id"]: note for note in notes}

        for chat in chats:
            chat["messages"] = messages_by_chat[chat["_id"]]
            chat["note"] = notes_by_id.get(chat.get("note_id"))
        return chats

    async def _find_owned(self, user_id: str, chat_id: str) -> dict:
        chat_obj_id = to_object_id(chat_id)
        if chat_obj_id is None:
            raise NotFoundError("Chat not found", {"chat_id": chat_id})

        with storage_errors("chats.get"):
            chat = await self.db.chats.find_one({"_id": chat_obj_id, "user_id": ObjectId(user_id)})

        if chat is None:
            raise NotFoundError("Chat not found", {"chat_id": chat_id})
        return chat

    async def list_for_user(self, user_id: str, note_id: str | None = None) -> list[dict]:
        """Chats of a user, most recently updated first, optionally for one note."""
        query: dict = {"user_id": ObjectId(user_id)}
        if note_id:
            note_obj_id = to_object_id(note_id)
            if note_obj_id is None:
                return []
            query["note_id"] = note_obj_id

        with storage_errors("chats.list"):
            chats = await (
                self.db.chats.find(query).sort([("updated_at", -1), ("_id", -1)]).to_list(length=None)
            )

        return await self._hydrate(user_id, chats)

    async def get(self, user_id: str, chat_id: str) -> dict:
        chat = await self._find_owned(user_id, chat_id)
        return (await self._hydrate(user_id, [chat]))[0]

    @tracer.start_as_current_span("chats.create")
    async def create(self, user_id: str, title: str, note_id: str | None = None) -> dict:
        """Create a chat, optionally anchored to one of the user's notes.

        Raises:
            NotFoundError: note_id given but not a note owned by the user
        """
        user_obj_id = ObjectId(user_id)
        note = None
        if note_id:
            note_obj_id = to_object_id(note_id)
            if note_obj_id is not None:
                with storage_errors("chats.create.note_lookup"):
                    note = await self.db.notes.find_one(
                        {"_id": note_obj_id, "user_id": user_obj_id}, {"title": 1}
                    )
            if note is None:
                raise NotFoundError("Note not found", {"note_id": note_id})

        now = datetime.now(UTC)
        chat_doc = {
            "user_id": user_obj_id,
            "title": title,
            "note_id": note["_id"] if note else None,
            "created_at": now,
            "updated_at": now,
        }

        with storage_errors("chats.create"):
            result = await self.db.chats.insert_one(chat_doc)

        chat_doc["_id"] = result.inserted_id
        chat_doc["messages"] = []
        chat_doc["note"] = note
        return chat_doc

    @tracer.start_as_current_span("chats.delete")
    async def delete(self, user_id: str, chat_id: str) -> None:
        """Delete a chat together with its messages."""
        chat = await self._find_owned(user_id, chat_id)

        with storage_errors("chats.delete"):
            deleted = await self.db.messages.delete_many({"chat_id": chat["_id"]})
            await self.db.chats.delete_one({"_id": chat["_id"]})

        logger.debug("chat_messages_deleted", chat_id=chat_id, count=deleted.deleted_count)

    async def _insert_message(self, chat_obj_id: ObjectId, role: str, content: str) -> dict:
        if role not in MESSAGE_ROLES:
            raise ValidationError("Invalid role", {"role": role})

        message_doc = {
            "chat_id": chat_obj_id,
            "role": role,
            "content": content,
            "created_at": datetime.now(UTC),
        }
        with storage_errors("messages.create"):
            result = await self.db.messages.insert_one(message_doc)

        message_doc["_id"] = result.inserted_id
        return message_doc

    async def _touch(self, chat_obj_id: ObjectId) -> None:
        with storage_errors("chats.touch"):
            await self.db.chats.update_one(
                {"_id": chat_obj_id}, {"$set": {"updated_at": datetime.now(UTC)}}
            )

    @tracer.start_as_current_span("messages.create")
    async def add_message(self, user_id: str, chat_id: str, role: str, content: str) -> dict:
        """Append a message to one of the user's chats and refresh its updated_at.

        Raises:
            ValidationError: role is not "user" or "assistant"
            NotFoundError: chat missing or not owned
        """
        if role not in MESSAGE_ROLES:
            raise ValidationError("Invalid role", {"role": role})

        chat = await self._find_owned(user_id, chat_id)
        message = await self._insert_message(chat["_id"], role, content)
        await self._touch(chat["_id"])
        return message

    @tracer.start_as_current_span("messages.create_exchange")
    async def add_exchange(
        self, user_id: str, chat_id: str, user_text: str, assistant_text: str
    ) -> tuple[dict, dict]:
        """Save a user message and the assistant's reply, then touch the chat.

        The three writes are not atomic; they run in this order so a failure
        part way leaves at most an unanswered user message.
        """
        chat = await self._find_owned(user_id, chat_id)
        user_message = await self._insert_message(chat["_id"], "user", user_text)
        assistant_message = await self._insert_message(chat["_id"], "assistant", assistant_text)
        await self._touch(chat["_id"])
        return user_message, assistant_message


def get_note_repository() -> NoteRepository:
    """FastAPI dependency for the notes repository."""
    return NoteRepository(get_db())


def get_chat_repository() -> ChatRepository:
    """FastAPI dependency for the chats repository."""
    return ChatRepository(get_db())
