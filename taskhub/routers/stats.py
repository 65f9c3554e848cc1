from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from taskhub.core.database import get_db
from taskhub.core.deps import get_current_identity
from taskhub.core.security import Identity
from taskhub.schemas.task import TaskStats
from taskhub.services.task_service import compute_stats

router = APIRouter(prefix="/api/stats", tags=["stats"])


@router.get("", response_model=TaskStats)
def stats(
    db: Session = Depends(get_db),
    identity: Identity = Depends(get_current_identity)
):
    return compute_stats(db)
