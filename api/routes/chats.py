"""Chat record and message endpoints."""

import structlog
from fastapi import APIRouter, Depends, Query, Response

from ..auth import get_current_user
from ..models import ChatCreate, ChatResponse, MessageCreate, MessageResponse
from ..observability import get_tracer
from ..services import ChatRepository, get_chat_repository

logger = structlog.get_logger(__name__)

tracer = get_tracer(__name__)

router = APIRouter(prefix="/chats", tags=["chats"])


@router.get("", response_model=list[ChatResponse])
async def list_chats(
    note_id: str | None = Query(default=None, alias="noteId"),
    current_user: dict = Depends(get_current_user),
    chats: ChatRepository = Depends(get_chat_repository),
):
    """
    List the caller's chats with their messages.

    Chats are ordered by last activity (most recent first), messages oldest
    first. ``noteId`` restricts the list to chats about one note.
    """
    with tracer.start_as_current_span("list_chats") as span:
        user_id = str(current_user["_id"])

        span.set_attribute("user.id", user_id)
        if note_id:
            span.set_attribute("query.note_id", note_id)

        docs = await chats.list_for_user(user_id, note_id=note_id)

        span.set_attribute("result.count", len(docs))
        logger.info("chats_listed", user_id=user_id, note_id=note_id, count=len(docs))

        return [ChatResponse.from_doc(doc) for doc in docs]


@router.post("", response_model=ChatResponse, status_code=201)
async def create_chat(
    chat: ChatCreate,
    current_user: dict = Depends(get_current_user),
    chats: ChatRepository = Depends(get_chat_repository),
):
    """Create a chat, optionally about one of the caller's notes."""
    with tracer.start_as_current_span("create_chat") as span:
        user_id = str(current_user["_id"])

        span.set_attribute("user.id", user_id)

        doc = await chats.create(user_id, title=chat.title, note_id=chat.note_id)
        chat_id = str(doc["_id"])

        span.set_attribute("chat.id", chat_id)
        logger.info("chat_created", chat_id=chat_id, user_id=user_id, note_id=chat.note_id)

        return ChatResponse.from_doc(doc)


@router.get("/{chat_id}", response_model=ChatResponse)
async def get_chat(
    chat_id: str,
    current_user: dict = Depends(get_current_user),
    chats: ChatRepository = Depends(get_chat_repository),
):
    """Retrieve one chat with its messages."""
    with tracer.start_as_current_span("get_chat") as span:
        user_id = str(current_user["_id"])
        span.set_attribute("user.id", user_id)
        span.set_attribute("chat.id", chat_id)

        doc = await chats.get(user_id, chat_id)

        return ChatResponse.from_doc(doc)


@router.delete("/{chat_id}", status_code=204)
async def delete_chat(
    chat_id: str,
    current_user: dict = Depends(get_current_user),
    chats: ChatRepository = Depends(get_chat_repository),
):
    """Permanently delete a chat and all of its messages."""
    with tracer.start_as_current_span("delete_chat") as span:
        user_id = str(current_user["_id"])
        span.set_attribute("user.id", user_id)
        span.set_attribute("chat.id", chat_id)

        await chats.delete(user_id, chat_id)

        logger.info("chat_deleted", user_id=user_id, chat_id=chat_id)

        return Response(status_code=204)


@router.post("/{chat_id}/messages", response_model=MessageResponse, status_code=201)
async def add_message(
    chat_id: str,
    message: MessageCreate,
    current_user: dict = Depends(get_current_user),
    chats: ChatRepository = Depends(get_chat_repository),
):
    """Append a message to a chat. Role must be "user" or "assistant"."""
    with tracer.start_as_current_span("add_message") as span:
        user_id = str(current_user["_id"])

        span.set_attribute("user.id", user_id)
        span.set_attribute("chat.id", chat_id)
        span.set_attribute("message.role", message.role)

        doc = await chats.add_message(user_id, chat_id, role=message.role, content=message.content)

        logger.info(
            "chat_message_added",
            user_id=user_id,
            chat_id=chat_id,
            message_id=str(doc["_id"]),
            role=message.role,
        )

        return MessageResponse.from_doc(doc)
