from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from typing import List

from taskhub.core.database import get_db
from taskhub.core.deps import get_current_identity
from taskhub.core.security import Identity
from taskhub.models.user import User
from taskhub.schemas.user import UserResponse

router = APIRouter(prefix="/api/users", tags=["users"])


@router.get("", response_model=List[UserResponse])
def list_users(
    db: Session = Depends(get_db),
    identity: Identity = Depends(get_current_identity)
):
    return db.query(User).order_by(User.id).all()
