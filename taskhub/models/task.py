"""Task model, with its comments and attachments"""

import enum
from datetime import datetime

from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey, Enum
from sqlalchemy.orm import relationship

from taskhub.core.database import Base


class TaskCategory(str, enum.Enum):
    MARKETING = "Marketing"
    TECHNICAL = "Technical"
    SUPPORT = "Support"
    ADMINISTRATION = "Administration"


class TaskStatus(str, enum.Enum):
    IN_PROGRESS = "In Progress"
    POSTPONED = "Postponed"
    COMPLETED = "Completed"


def _enum_values(enum_cls):
    return [member.value for member in enum_cls]


class Task(Base):
    __tablename__ = "tasks"

    id = Column(Integer, primary_key=True, index=True)

    title = Column(String, nullable=False)
    description = Column(Text, nullable=False)
    category = Column(
        Enum(TaskCategory, name="task_category", values_callable=_enum_values, validate_strings=True),
        nullable=False,
    )
    status = Column(
        Enum(TaskStatus, name="task_status", values_callable=_enum_values, validate_strings=True),
        nullable=False,
        default=TaskStatus.IN_PROGRESS,
        index=True,
    )
    due_date = Column(DateTime, nullable=False, index=True)

    assigned_to_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    assigned_by_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    completed_by_id = Column(Integer, ForeignKey("users.id"), nullable=True)
    completed_at = Column(DateTime, nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow, index=True)

    assigned_to = relationship("User", foreign_keys=[assigned_to_id])
    assigned_by = relationship("User", foreign_keys=[assigned_by_id])
    completed_by = relationship("User", foreign_keys=[completed_by_id])

    attachments = relationship(
        "TaskAttachment",
        order_by="TaskAttachment.id",
        cascade="all, delete-orphan",
    )
    comments = relationship(
        "TaskComment",
        order_by="TaskComment.id",
        cascade="all, delete-orphan",
    )


class TaskAttachment(Base):
    __tablename__ = "task_attachments"

    id = Column(Integer, primary_key=True, index=True)
    task_id = Column(Integer, ForeignKey("tasks.id", ondelete="CASCADE"), nullable=False, index=True)

    filename = Column(String, unique=True, nullable=False)  # nom généré sur disque
    original_name = Column(String, nullable=False)  # nom envoyé par le client
    path = Column(String, nullable=False)
    uploaded_at = Column(DateTime, default=datetime.utcnow)


class TaskComment(Base):
    __tablename__ = "task_comments"

    id = Column(Integer, primary_key=True, index=True)
    task_id = Column(Integer, ForeignKey("tasks.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False)

    text = Column(Text, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow)

    user = relationship("User")
