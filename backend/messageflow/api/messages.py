"""REST API for generated messages: listing, read state, favorites."""

import logging
from datetime import datetime, timezone
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel
from sqlmodel import Session, select

from messageflow.core.database import get_session
from messageflow.models.ai_model import AIModel
from messageflow.models.message import Message
from messageflow.models.schedule import ScheduledTask

router = APIRouter()
favorites_router = APIRouter()
logger = logging.getLogger(__name__)


class MessageUpdate(BaseModel):
    is_read: Optional[bool] = None
    is_favorite: Optional[bool] = None
    title: Optional[str] = None
    summary: Optional[str] = None
    priority: Optional[int] = None


def _with_details():
    return (
        select(Message, ScheduledTask, AIModel)
        .join(ScheduledTask, Message.scheduled_task_id == ScheduledTask.id)  # type: ignore[arg-type]
        .join(AIModel, ScheduledTask.ai_model_id == AIModel.id)  # type: ignore[arg-type]
    )


def _message_to_dict(m: Message, task: ScheduledTask, model: AIModel) -> dict:
    return {
        "id": m.id,
        "scheduled_task_id": m.scheduled_task_id,
        "task_execution_id": m.task_execution_id,
        "content": m.content,
        "content_format": m.content_format,
        "title": m.title,
        "summary": m.summary,
        "execution_completion_time": m.execution_completion_time.isoformat(),
        "is_read": m.is_read,
        "read_at": m.read_at.isoformat() if m.read_at else None,
        "is_favorite": m.is_favorite,
        "favorited_at": m.favorited_at.isoformat() if m.favorited_at else None,
        "priority": m.priority,
        "created_at": m.created_at.isoformat(),
        "task_name": task.name,
        "schedule_type": task.schedule_type,
        "execution_hour": task.execution_hour,
        "execution_minute": task.execution_minute,
        "prompt_content": task.prompt_content,
        "ai_model_company": model.company_name,
        "ai_model_name": model.model_name,
    }


def _get_detailed(session: Session, message_id: int) -> dict:
    row = session.exec(_with_details().where(Message.id == message_id)).first()
    if not row:
        raise HTTPException(status_code=404, detail="Message not found")
    return _message_to_dict(*row)


def _get_message(session: Session, message_id: int) -> Message:
    message = session.get(Message, message_id)
    if not message:
        logger.debug(f"Message {message_id} not found")
        raise HTTPException(status_code=404, detail="Message not found")
    return message


def _set_read(message: Message, is_read: bool) -> None:
    message.is_read = is_read
    message.read_at = datetime.now(timezone.utc) if is_read else None


def _set_favorite(message: Message, is_favorite: bool) -> None:
    message.is_favorite = is_favorite
    message.favorited_at = datetime.now(timezone.utc) if is_favorite else None


@router.get("/")
async def list_messages(
    is_read: Optional[bool] = None,
    is_favorite: Optional[bool] = None,
    task_id: Optional[int] = None,
    limit: int = 50,
    offset: int = 0,
    session: Session = Depends(get_session),
):
    query = _with_details()
    if is_read is not None:
        query = query.where(Message.is_read == is_read)
    if is_favorite is not None:
        query = query.where(Message.is_favorite == is_favorite)
    if task_id is not None:
        query = query.where(Message.scheduled_task_id == task_id)

    rows = session.exec(
        query.order_by(Message.created_at.desc(), Message.id.desc())  # type: ignore[attr-defined]
        .limit(limit)
        .offset(offset)
    ).all()
    return [_message_to_dict(*row) for row in rows]


@router.get("/{message_id}")
async def get_message(message_id: int, session: Session = Depends(get_session)):
    return _get_detailed(session, message_id)


@router.patch("/{message_id}")
async def update_message(message_id: int, body: MessageUpdate, session: Session = Depends(get_session)):
    message = _get_message(session, message_id)

    updates = body.model_dump(exclude_unset=True)
    if not updates:
        raise HTTPException(status_code=400, detail="No fields to update")

    if body.is_read is not None:
        _set_read(message, body.is_read)
    if body.is_favorite is not None:
        _set_favorite(message, body.is_favorite)
    if "title" in updates:
        message.title = body.title
    if "summary" in updates:
        message.summary = body.summary
    if body.priority is not None:
        message.priority = body.priority

    session.add(message)
    session.commit()
    return _get_detailed(session, message_id)


@router.delete("/{message_id}")
async def delete_message(message_id: int, session: Session = Depends(get_session)):
    message = _get_message(session, message_id)
    session.delete(message)
    session.commit()
    return {"status": "deleted"}


@router.post("/{message_id}/read")
async def mark_read(message_id: int, session: Session = Depends(get_session)):
    message = _get_message(session, message_id)
    _set_read(message, True)
    session.add(message)
    session.commit()
    return _get_detailed(session, message_id)


@router.post("/{message_id}/favorite")
async def add_favorite(message_id: int, session: Session = Depends(get_session)):
    message = _get_message(session, message_id)
    _set_favorite(message, True)
    session.add(message)
    session.commit()
    return _get_detailed(session, message_id)


@router.delete("/{message_id}/favorite")
async def remove_favorite(message_id: int, session: Session = Depends(get_session)):
    message = _get_message(session, message_id)
    _set_favorite(message, False)
    session.add(message)
    session.commit()
    return _get_detailed(session, message_id)


@favorites_router.get("/")
async def list_favorites(limit: int = 50, offset: int = 0, session: Session = Depends(get_session)):
    rows = session.exec(
        _with_details()
        .where(Message.is_favorite == True)  # noqa: E712
        .order_by(Message.favorited_at.desc().nulls_last())  # type: ignore[union-attr]
        .limit(limit)
        .offset(offset)
    ).all()
    return [_message_to_dict(*row) for row in rows]
