from typing import Optional

from fastapi import Depends, Header, HTTPException, Request, status

from taskhub.core.config import Settings
from taskhub.core.security import Identity, authenticate


def get_settings(request: Request) -> Settings:
    """Settings passés à create_app"""
    return request.app.state.settings


def get_current_identity(
    authorization: Optional[str] = Header(None),
    app_settings: Settings = Depends(get_settings)
) -> Identity:
    # Check token
    token = None
    if authorization:
        parts = authorization.split(" ")
        if len(parts) > 1 and parts[1]:
            token = parts[1]

    if not token:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Access token required")

    identity = authenticate(token, app_settings)
    if identity is None:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Invalid token")

    return identity
