"""Pydantic schemas for task request/response validation."""

from datetime import datetime, timezone
from typing import Annotated, Optional, List

from pydantic import AfterValidator, BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from taskhub.models.task import TaskCategory, TaskStatus
from taskhub.schemas.user import UserResponse


def _to_naive_utc(value: datetime) -> datetime:
    # la base stocke des dates UTC naïves
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


UtcDatetime = Annotated[datetime, AfterValidator(_to_naive_utc)]


def _mark_utc(value: datetime) -> datetime:
    # valeurs lues en base: UTC naïf, renvoyées avec le suffixe Z
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value


UtcTimestamp = Annotated[datetime, AfterValidator(_mark_utc)]

CAMEL_CONFIG = ConfigDict(
    alias_generator=to_camel,
    populate_by_name=True,
    from_attributes=True,
)


class TaskCreate(BaseModel):
    """Schema for creating a task. assignedBy is never read from the client."""

    title: str = Field(min_length=1)
    description: str = Field(min_length=1)
    category: TaskCategory
    due_date: UtcDatetime
    assigned_to: int

    model_config = CAMEL_CONFIG


class TaskUpdate(BaseModel):
    """Schema for updating an existing task."""

    title: Optional[str] = Field(default=None, min_length=1)
    description: Optional[str] = Field(default=None, min_length=1)
    category: Optional[TaskCategory] = None
    due_date: Optional[UtcDatetime] = None
    assigned_to: Optional[int] = None
    status: Optional[TaskStatus] = None

    model_config = CAMEL_CONFIG


class CommentCreate(BaseModel):
    text: str = Field(min_length=1)


class AttachmentResponse(BaseModel):
    id: int = Field(alias="_id")
    filename: str
    original_name: str
    path: str
    uploaded_at: UtcTimestamp

    model_config = CAMEL_CONFIG


class CommentResponse(BaseModel):
    id: int = Field(alias="_id")
    user: UserResponse
    text: str
    created_at: UtcTimestamp

    model_config = CAMEL_CONFIG


class TaskResponse(BaseModel):
    """Schema for task responses from API, relations peuplées."""

    id: int = Field(alias="_id")
    title: str
    description: str
    category: TaskCategory
    status: TaskStatus
    due_date: UtcTimestamp
    assigned_to: UserResponse
    assigned_by: UserResponse
    completed_by: Optional[UserResponse] = None
    completed_at: Optional[UtcTimestamp] = None
    attachments: List[AttachmentResponse] = []
    comments: List[CommentResponse] = []
    created_at: UtcTimestamp

    model_config = CAMEL_CONFIG


class TaskStats(BaseModel):
    in_progress: int = Field(serialization_alias="In Progress")
    postponed: int = Field(serialization_alias="Postponed")
    completed: int = Field(serialization_alias="Completed")
    overdue: int = Field(serialization_alias="Overdue")
