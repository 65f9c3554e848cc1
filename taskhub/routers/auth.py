import logging

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from taskhub.core.database import get_db
from taskhub.core.config import Settings
from taskhub.core.deps import get_settings
from taskhub.core.security import create_access_token, validate_password
from taskhub.models.user import User
from taskhub.schemas.user import UserCreate, LoginRequest, LoginResponse, MessageResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["auth"])

INVALID_CREDENTIALS = "Invalid credentials"


@router.post("/register", response_model=MessageResponse, status_code=status.HTTP_201_CREATED)
def register(
    user_data: UserCreate,
    db: Session = Depends(get_db),
    app_settings: Settings = Depends(get_settings)
):
    """Créer un nouvel utilisateur"""

    # Vérifie si l'email existe déjà
    existing_user = db.query(User).filter(User.email == user_data.email).first()
    if existing_user:
        raise HTTPException(status_code=400, detail="User already exists")

    validate_password(user_data.password)

    new_user = User(name=user_data.name, email=user_data.email)
    new_user.set_password(user_data.password, app_settings.BCRYPT_ROUNDS)

    db.add(new_user)
    try:
        db.commit()
    except IntegrityError:
        # inscription concurrente avec le même email
        db.rollback()
        raise HTTPException(status_code=400, detail="User already exists")
    logger.info(f"User {new_user.id} registered")

    return {"message": "User created successfully"}


@router.post("/login", response_model=LoginResponse)
def login(
    credentials: LoginRequest,
    db: Session = Depends(get_db),
    app_settings: Settings = Depends(get_settings)
):
    """Se connecter et recevoir le token"""

    # même message pour email inconnu et mauvais password
    user = db.query(User).filter(User.email == credentials.email).first()
    if not user or not user.verify_password(credentials.password):
        logger.warning("Failed login attempt")
        raise HTTPException(status_code=400, detail=INVALID_CREDENTIALS)

    token = create_access_token(user.id, user.email, user.name, app_settings)

    return {
        "token": token,
        "user": {"id": user.id, "name": user.name, "email": user.email},
    }
