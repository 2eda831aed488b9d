"""REST API for the AI model registry."""

from datetime import datetime, timezone
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field
from sqlmodel import Session, select

from messageflow.core.database import get_session
from messageflow.models.ai_model import AIModel
from messageflow.models.schedule import ScheduledTask

router = APIRouter()


class AIModelCreate(BaseModel):
    company_name: str = Field(min_length=1)
    model_name: str = Field(min_length=1)
    remark: Optional[str] = None


class AIModelUpdate(BaseModel):
    company_name: Optional[str] = Field(default=None, min_length=1)
    model_name: Optional[str] = Field(default=None, min_length=1)
    remark: Optional[str] = None
    is_active: Optional[bool] = None


def _model_to_dict(m: AIModel) -> dict:
    return {
        "id": m.id,
        "company_name": m.company_name,
        "model_name": m.model_name,
        "remark": m.remark,
        "is_active": m.is_active,
        "created_at": m.created_at.isoformat(),
        "updated_at": m.updated_at.isoformat(),
    }


@router.get("/")
async def list_models(session: Session = Depends(get_session)):
    models = session.exec(
        select(AIModel).order_by(AIModel.created_at.desc())  # type: ignore[attr-defined]
    ).all()
    return [_model_to_dict(m) for m in models]


@router.post("/", status_code=201)
async def create_model(body: AIModelCreate, session: Session = Depends(get_session)):
    model = AIModel(company_name=body.company_name, model_name=body.model_name, remark=body.remark)
    session.add(model)
    session.commit()
    session.refresh(model)
    return _model_to_dict(model)


@router.get("/{model_id}")
async def get_model(model_id: int, session: Session = Depends(get_session)):
    model = session.get(AIModel, model_id)
    if not model:
        raise HTTPException(status_code=404, detail="AI model not found")
    return _model_to_dict(model)


@router.patch("/{model_id}")
async def update_model(model_id: int, body: AIModelUpdate, session: Session = Depends(get_session)):
    model = session.get(AIModel, model_id)
    if not model:
        raise HTTPException(status_code=404, detail="AI model not found")

    updates = body.model_dump(exclude_unset=True)
    if not updates:
        raise HTTPException(status_code=400, detail="No fields to update")
    for key in ("company_name", "model_name", "is_active"):
        if key in updates and updates[key] is None:
            raise HTTPException(status_code=422, detail=f"{key} cannot be null")

    for key, value in updates.items():
        setattr(model, key, value)

    model.updated_at = datetime.now(timezone.utc)
    session.add(model)
    session.commit()
    session.refresh(model)
    return _model_to_dict(model)


@router.delete("/{model_id}")
async def delete_model(model_id: int, session: Session = Depends(get_session)):
    model = session.get(AIModel, model_id)
    if not model:
        raise HTTPException(status_code=404, detail="AI model not found")

    in_use = session.exec(select(ScheduledTask).where(ScheduledTask.ai_model_id == model_id)).first()
    if in_use:
        raise HTTPException(status_code=409, detail="AI model is still referenced by schedules")

    session.delete(model)
    session.commit()
    return {"status": "deleted"}
