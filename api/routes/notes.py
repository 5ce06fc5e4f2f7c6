"""Notes endpoints."""

import asyncio

import structlog
from fastapi import APIRouter, Depends, Response

from ..auth import get_current_user
from ..models import NoteCreate, NoteResponse, NoteUpdate
from ..observability import get_app_metrics, get_tracer
from ..services import (
    GenerativeAssistant,
    NoteRepository,
    get_assistant,
    get_note_repository,
)

logger = structlog.get_logger(__name__)

tracer = get_tracer(__name__)
metrics = get_app_metrics()

router = APIRouter(prefix="/notes", tags=["notes"])


@router.get("", response_model=list[NoteResponse])
async def list_notes(
    current_user: dict = Depends(get_current_user),
    notes: NoteRepository = Depends(get_note_repository),
):
    """List the caller's notes, most recently updated first."""
    with tracer.start_as_current_span("list_notes") as span:
        user_id = str(current_user["_id"])
        span.set_attribute("user.id", user_id)

        docs = await notes.list_for_user(user_id)

        span.set_attribute("notes.count", len(docs))
        logger.info("notes_listed", user_id=user_id, count=len(docs))

        return [NoteResponse.from_doc(doc) for doc in docs]


@router.post("", response_model=NoteResponse, status_code=201)
async def create_note(
    note: NoteCreate,
    current_user: dict = Depends(get_current_user),
    notes: NoteRepository = Depends(get_note_repository),
    assistant: GenerativeAssistant = Depends(get_assistant),
):
    """
    Create a note.

    The summary and icon are generated concurrently before the note is
    stored. A summary failure fails the request; icon selection always
    yields an icon.
    """
    with tracer.start_as_current_span("create_note") as span:
        user_id = str(current_user["_id"])

        span.set_attribute("user.id", user_id)
        span.set_attribute("note.content_length", len(note.content))

        logger.info("note_creation_attempt", user_id=user_id, title=note.title)

        icon_task = asyncio.create_task(assistant.classify_icon(note.content))
        try:
            summary = await assistant.summarize(note.content)
        except BaseException:
            icon_task.cancel()
            raise
        icon = await icon_task

        doc = await notes.create(
            user_id=user_id,
            title=note.title,
            content=note.content,
            summary=summary,
            icon=icon.value,
        )
        note_id = str(doc["_id"])

        span.set_attribute("note.id", note_id)
        span.set_attribute("note.icon", icon.value)
        metrics.notes_created.add(1)

        logger.info("note_created_successfully", note_id=note_id, user_id=user_id, icon=icon.value)

        return NoteResponse.from_doc(doc)


@router.get("/{note_id}", response_model=NoteResponse)
async def get_note(
    note_id: str,
    current_user: dict = Depends(get_current_user),
    notes: NoteRepository = Depends(get_note_repository),
):
    """Retrieve one of the caller's notes."""
    with tracer.start_as_current_span("get_note") as span:
        user_id = str(current_user["_id"])
        span.set_attribute("user.id", user_id)
        span.set_attribute("note.id", note_id)

        doc = await notes.get(user_id, note_id)

        logger.info("note_retrieved", user_id=user_id, note_id=note_id)

        return NoteResponse.from_doc(doc)


@router.put("/{note_id}", response_model=NoteResponse)
async def update_note(
    note_id: str,
    note_update: NoteUpdate,
    current_user: dict = Depends(get_current_user),
    notes: NoteRepository = Depends(get_note_repository),
    assistant: GenerativeAssistant = Depends(get_assistant),
):
    """
    Update a note's title and content.

    The summary is regenerated when the content changed or when
    ``regenerateSummary`` is set; otherwise the stored summary is kept.
    The icon is never recomputed here.
    """
    with tracer.start_as_current_span("update_note") as span:
        user_id = str(current_user["_id"])

        span.set_attribute("user.id", user_id)
        span.set_attribute("note.id", note_id)

        existing = await notes.get(user_id, note_id)

        summary = existing.get("summary")
        content_changed = note_update.content != existing["content"]
        if content_changed or note_update.regenerate_summary:
            summary = await assistant.summarize(note_update.content)

        span.set_attribute("note.content_changed", content_changed)
        span.set_attribute("note.summary_regenerated", summary != existing.get("summary"))

        doc = await notes.update(
            user_id,
            note_id,
            title=note_update.title,
            content=note_update.content,
            summary=summary,
        )

        logger.info(
            "note_updated_successfully",
            user_id=user_id,
            note_id=note_id,
            content_changed=content_changed,
        )

        return NoteResponse.from_doc(doc)


@router.delete("/{note_id}", status_code=204)
async def delete_note(
    note_id: str,
    current_user: dict = Depends(get_current_user),
    notes: NoteRepository = Depends(get_note_repository),
):
    """Permanently delete a note. Chats anchored to it are kept but unlinked."""
    with tracer.start_as_current_span("delete_note") as span:
        user_id = str(current_user["_id"])

        span.set_attribute("user.id", user_id)
        span.set_attribute("note.id", note_id)

        await notes.delete(user_id, note_id)

        logger.info("note_deleted_successfully", user_id=user_id, note_id=note_id)

        return Response(status_code=204)


@router.post("/{note_id}/summary", response_model=NoteResponse)
async def regenerate_summary(
    note_id: str,
    current_user: dict = Depends(get_current_user),
    notes: NoteRepository = Depends(get_note_repository),
    assistant: GenerativeAssistant = Depends(get_assistant),
):
    """Regenerate the summary of a note from its current content."""
    with tracer.start_as_current_span("regenerate_summary") as span:
        user_id = str(current_user["_id"])

        span.set_attribute("user.id", user_id)
        span.set_attribute("note.id", note_id)

        existing = await notes.get(user_id, note_id)
        summary = await assistant.summarize(existing["content"])
        doc = await notes.set_summary(user_id, note_id, summary)

        logger.info("note_summary_regenerated", user_id=user_id, note_id=note_id)

        return NoteResponse.from_doc(doc)
