"""Task service"""

import logging
from datetime import datetime
from typing import Dict, List, Optional, BinaryIO

from sqlalchemy.orm import Session

from taskhub.core.errors import TaskNotFound, ValidationFailed
from taskhub.core.security import Identity
from taskhub.models.task import Task, TaskAttachment, TaskCategory, TaskComment, TaskStatus
from taskhub.models.user import User
from taskhub.repositories.task_repository import TaskRepository
from taskhub.schemas.task import TaskCreate, TaskUpdate
from taskhub.services.attachment_store import AttachmentStore

logger = logging.getLogger(__name__)


def _check_user_exists(db: Session, user_id: int):
    if db.query(User.id).filter(User.id == user_id).first() is None:
        raise ValidationFailed("Assigned user not found")


def list_tasks(
    db: Session,
    status: Optional[TaskStatus] = None,
    category: Optional[TaskCategory] = None,
    search: Optional[str] = None,
) -> List[Task]:
    return TaskRepository(db).find(status=status, category=category, search=search)


def get_task(db: Session, task_id: int) -> Task:
    task = TaskRepository(db).find_by_id(task_id)
    if not task:
        raise TaskNotFound()
    return task


def create_task(db: Session, data: TaskCreate, identity: Identity) -> Task:
    _check_user_exists(db, data.assigned_to)

    task = Task(
        title=data.title,
        description=data.description,
        category=data.category,
        due_date=data.due_date,
        assigned_to_id=data.assigned_to,
        assigned_by_id=identity.user_id,  # jamais fourni par le client
        status=TaskStatus.IN_PROGRESS,
    )
    task = TaskRepository(db).insert(task)
    logger.info(f"Task {task.id} created by user {identity.user_id}")
    return task


def update_task(
    db: Session,
    task_id: int,
    data: TaskUpdate,
    identity: Identity,
    clear_on_reopen: bool = False,
) -> Task:
    """Met à jour les champs fournis.

    Le passage au statut Completed renseigne completedBy / completedAt avec
    l'appelant et l'heure courante, uniquement au moment de la transition.
    """
    repo = TaskRepository(db)
    current = repo.find_by_id(task_id)
    if not current:
        raise TaskNotFound()

    fields = data.model_dump(exclude_unset=True, exclude_none=True)
    if "assigned_to" in fields:
        _check_user_exists(db, fields["assigned_to"])
        fields["assigned_to_id"] = fields.pop("assigned_to")

    new_status = fields.get("status")
    if new_status == TaskStatus.COMPLETED and current.status != TaskStatus.COMPLETED:
        fields["completed_by_id"] = identity.user_id
        fields["completed_at"] = datetime.utcnow()
        logger.info(f"Task {task_id} completed by user {identity.user_id}")
    elif (
        new_status is not None
        and new_status != TaskStatus.COMPLETED
        and current.status == TaskStatus.COMPLETED
        and clear_on_reopen
    ):
        fields["completed_by_id"] = None
        fields["completed_at"] = None

    task = repo.update_fields(task_id, fields)
    if not task:
        raise TaskNotFound()
    return task


def change_status(
    db: Session,
    task_id: int,
    new_status: TaskStatus,
    identity: Identity,
    clear_on_reopen: bool = False,
) -> Task:
    return update_task(db, task_id, TaskUpdate(status=new_status), identity, clear_on_reopen)


def delete_task(db: Session, task_id: int, store: AttachmentStore) -> Task:
    task = TaskRepository(db).delete_by_id(task_id)
    if not task:
        raise TaskNotFound()

    # nettoyage disque best-effort, hors transaction
    for attachment in task.attachments:
        store.delete(attachment)

    logger.info(f"Task {task_id} deleted ({len(task.attachments)} attachment(s) removed)")
    return task


def add_comment(db: Session, task_id: int, identity: Identity, text: str) -> List[TaskComment]:
    repo = TaskRepository(db)
    task = repo.find_by_id(task_id)
    if not task:
        raise TaskNotFound()
    return repo.add_comment(task, identity.user_id, text)


def add_attachment(
    db: Session,
    task_id: int,
    store: AttachmentStore,
    stream: BinaryIO,
    original_name: str,
    content_type: str,
) -> TaskAttachment:
    repo = TaskRepository(db)
    # la tâche doit exister avant d'écrire quoi que ce soit sur le disque
    task = repo.find_by_id(task_id)
    if not task:
        raise TaskNotFound()

    attachment = store.store(task_id, stream, original_name, content_type)
    try:
        return repo.add_attachment(task, attachment)
    except Exception:
        db.rollback()
        store.delete(attachment)
        raise


def compute_stats(db: Session, now: Optional[datetime] = None) -> Dict[str, int]:
    """Compte par statut + en retard.

    Overdue est compté indépendamment: une tâche en retard est aussi
    comptée dans son statut.
    """
    repo = TaskRepository(db)
    counts = repo.count_by_status()
    return {
        "in_progress": counts.get(TaskStatus.IN_PROGRESS, 0),
        "postponed": counts.get(TaskStatus.POSTPONED, 0),
        "completed": counts.get(TaskStatus.COMPLETED, 0),
        "overdue": repo.count_overdue(now or datetime.utcnow()),
    }
