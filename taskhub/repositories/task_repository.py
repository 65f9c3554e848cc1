"""Accès aux tâches: filtres, relations peuplées, mises à jour par champ"""

from datetime import datetime
from typing import Dict, List, Optional

from sqlalchemy import func, or_
from sqlalchemy.orm import Session, joinedload, selectinload

from taskhub.models.task import Task, TaskAttachment, TaskCategory, TaskComment, TaskStatus


def _populated():
    # assignedTo / assignedBy / completedBy + auteur de chaque commentaire
    return (
        joinedload(Task.assigned_to),
        joinedload(Task.assigned_by),
        joinedload(Task.completed_by),
        selectinload(Task.attachments),
        selectinload(Task.comments).joinedload(TaskComment.user),
    )


class TaskRepository:
    def __init__(self, db: Session):
        self.db = db

    def find(
        self,
        status: Optional[TaskStatus] = None,
        category: Optional[TaskCategory] = None,
        search: Optional[str] = None,
    ) -> List[Task]:
        query = self.db.query(Task).options(*_populated())

        if status is not None:
            query = query.filter(Task.status == status)

        if category is not None:
            query = query.filter(Task.category == category)

        if search:
            query = query.filter(or_(
                Task.title.icontains(search, autoescape=True),
                Task.description.icontains(search, autoescape=True),
            ))

        # plus récentes d'abord
        return query.order_by(Task.created_at.desc(), Task.id.desc()).all()

    def find_by_id(self, task_id: int) -> Optional[Task]:
        return (
            self.db.query(Task)
            .options(*_populated())
            .populate_existing()
            .filter(Task.id == task_id)
            .first()
        )

    def insert(self, task: Task) -> Task:
        self.db.add(task)
        self.db.commit()
        return self.find_by_id(task.id)

    def update_fields(self, task_id: int, fields: Dict) -> Optional[Task]:
        task = self.db.query(Task).filter(Task.id == task_id).first()
        if not task:
            return None

        for field, value in fields.items():
            setattr(task, field, value)

        self.db.commit()
        return self.find_by_id(task_id)

    def delete_by_id(self, task_id: int) -> Optional[Task]:
        """Supprime la tâche (commentaires et pièces jointes en cascade).

        La tâche supprimée est renvoyée avec ses pièces jointes chargées:
        c'est à l'appelant d'effacer les fichiers correspondants.
        """
        task = self.find_by_id(task_id)
        if not task:
            return None

        self.db.delete(task)
        self.db.commit()
        return task

    def add_comment(self, task: Task, user_id: int, text: str) -> List[TaskComment]:
        task.comments.append(TaskComment(user_id=user_id, text=text))
        self.db.commit()
        return self.find_by_id(task.id).comments

    def add_attachment(self, task: Task, attachment: TaskAttachment) -> TaskAttachment:
        task.attachments.append(attachment)
        self.db.commit()
        self.db.refresh(attachment)
        return attachment

    def count_by_status(self) -> Dict[TaskStatus, int]:
        rows = self.db.query(Task.status, func.count(Task.id)).group_by(Task.status).all()
        return {row_status: count for row_status, count in rows}

    def count_overdue(self, now: datetime) -> int:
        return self.db.query(func.count(Task.id)).filter(
            Task.status != TaskStatus.COMPLETED,
            Task.due_date < now,
        ).scalar()
