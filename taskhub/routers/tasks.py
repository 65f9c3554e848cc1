from fastapi import APIRouter, Depends, File, Query, Request, UploadFile, status
from sqlalchemy.orm import Session
from typing import List, Optional

from taskhub.core.database import get_db
from taskhub.core.config import Settings
from taskhub.core.deps import get_current_identity, get_settings
from taskhub.core.errors import ValidationFailed
from taskhub.core.security import Identity
from taskhub.models.task import TaskCategory, TaskStatus
from taskhub.schemas.task import (
    AttachmentResponse,
    CommentCreate,
    CommentResponse,
    TaskCreate,
    TaskResponse,
    TaskUpdate,
)
from taskhub.schemas.user import MessageResponse
from taskhub.services import task_service
from taskhub.services.attachment_store import AttachmentStore

router = APIRouter(prefix="/api/tasks", tags=["tasks"])


def get_attachment_store(request: Request) -> AttachmentStore:
    return request.app.state.attachment_store


def _parse_filter(enum_cls, value: Optional[str], label: str):
    # "all" ou vide = pas de contrainte
    if not value or value == "all":
        return None
    try:
        return enum_cls(value)
    except ValueError:
        raise ValidationFailed(f"Invalid {label}: {value}")


@router.get("", response_model=List[TaskResponse])
def list_tasks(
    db: Session = Depends(get_db),
    identity: Identity = Depends(get_current_identity),
    status_filter: Optional[str] = Query(None, alias="status"),
    category: Optional[str] = Query(None),
    search: Optional[str] = Query(None)
):
    return task_service.list_tasks(
        db,
        status=_parse_filter(TaskStatus, status_filter, "status"),
        category=_parse_filter(TaskCategory, category, "category"),
        search=search,
    )


@router.post("", response_model=TaskResponse, status_code=status.HTTP_201_CREATED)
def create_task(
    task_data: TaskCreate,
    db: Session = Depends(get_db),
    identity: Identity = Depends(get_current_identity)
):
    return task_service.create_task(db, task_data, identity)


@router.get("/{task_id}", response_model=TaskResponse)
def get_task(
    task_id: int,
    db: Session = Depends(get_db),
    identity: Identity = Depends(get_current_identity)
):
    return task_service.get_task(db, task_id)


@router.put("/{task_id}", response_model=TaskResponse)
def update_task(
    task_id: int,
    task_data: TaskUpdate,
    db: Session = Depends(get_db),
    identity: Identity = Depends(get_current_identity),
    app_settings: Settings = Depends(get_settings)
):
    return task_service.update_task(
        db, task_id, task_data, identity, clear_on_reopen=app_settings.CLEAR_COMPLETION_ON_REOPEN
    )


@router.delete("/{task_id}", response_model=MessageResponse)
def delete_task(
    task_id: int,
    db: Session = Depends(get_db),
    identity: Identity = Depends(get_current_identity),
    store: AttachmentStore = Depends(get_attachment_store)
):
    task_service.delete_task(db, task_id, store)
    return {"message": "Task deleted successfully"}


@router.post("/{task_id}/comments", response_model=List[CommentResponse])
def add_comment(
    task_id: int,
    comment: CommentCreate,
    db: Session = Depends(get_db),
    identity: Identity = Depends(get_current_identity)
):
    return task_service.add_comment(db, task_id, identity, comment.text)


@router.post("/{task_id}/upload", response_model=AttachmentResponse)
def upload_file(
    task_id: int,
    file: Optional[UploadFile] = File(None),
    db: Session = Depends(get_db),
    identity: Identity = Depends(get_current_identity),
    store: AttachmentStore = Depends(get_attachment_store)
):
    if file is None or not file.filename:
        raise ValidationFailed("No file uploaded")

    return task_service.add_attachment(
        db,
        task_id,
        store,
        file.file,
        file.filename,
        file.content_type,
    )
