"""Assistant chat endpoint."""

import structlog
from fastapi import APIRouter, Depends, HTTPException

from ..auth import get_current_user
from ..errors import GenerationError, NotFoundError, PersistenceError
from ..models import ChatSendRequest, ChatSendResponse
from ..observability import get_app_metrics, get_tracer
from ..services import (
    ChatRepository,
    GenerativeAssistant,
    get_assistant,
    get_chat_repository,
)

logger = structlog.get_logger(__name__)

tracer = get_tracer(__name__)
metrics = get_app_metrics()

router = APIRouter(prefix="/chat", tags=["chat"])


@router.post("", response_model=ChatSendResponse)
async def chat(
    request: ChatSendRequest,
    current_user: dict = Depends(get_current_user),
    chats: ChatRepository = Depends(get_chat_repository),
    assistant: GenerativeAssistant = Depends(get_assistant),
):
    """
    Generate an assistant reply to the user's message.

    The reply is grounded in a note when noteId, noteContent and noteTitle
    are all supplied. When chatId is supplied the exchange is saved to that
    chat afterwards; a failure to save is logged and reported as
    ``saved: false`` rather than discarding the reply.
    """
    with tracer.start_as_current_span("process_chat") as span:
        user_id = str(current_user["_id"])
        grounded = bool(request.note_id and request.note_content and request.note_title)

        span.set_attribute("user.id", user_id)
        span.set_attribute("message.length", len(request.message))
        span.set_attribute("chat.note_grounded", grounded)

        logger.info(
            "chat_message_received",
            user_id=user_id,
            message_length=len(request.message),
            note_grounded=grounded,
            chat_id=request.chat_id,
        )

        try:
            if grounded:
                response_text = await assistant.converse(
                    request.note_content, request.note_title, request.message
                )
            else:
                response_text = await assistant.converse_general(request.message)
        except GenerationError as e:
            logger.error("chat_generation_failed", user_id=user_id, error=e.message)
            raise HTTPException(
                status_code=500, detail=f"Failed to generate response: {e.message}"
            ) from e

        metrics.chat_messages.add(1, {"note_grounded": grounded})

        saved = False
        if request.chat_id:
            span.set_attribute("chat.id", request.chat_id)
            try:
                await chats.add_exchange(
                    user_id, request.chat_id, user_text=request.message, assistant_text=response_text
                )
                saved = True
            except (NotFoundError, PersistenceError) as e:
                logger.error(
                    "chat_exchange_persist_failed",
                    user_id=user_id,
                    chat_id=request.chat_id,
                    error=e.message,
                    error_type=type(e).__name__,
                )

        span.set_attribute("chat.saved", saved)
        logger.info("chat_message_processed", user_id=user_id, chat_id=request.chat_id, saved=saved)

        return ChatSendResponse(response=response_text, chat_id=request.chat_id, saved=saved)
