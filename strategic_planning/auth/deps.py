"""
FastAPI dependencies that authenticate the caller.

``get_current_actor`` rejects requests without a valid bearer token. The
anonymous project endpoints do not depend on it at all.
"""

from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from ..db.base import get_db
from ..db.models import UserModel
from ..errors import AuthenticationError
from .credentials import CredentialService
from .guard import Actor

http_bearer = HTTPBearer(auto_error=False)


def get_credential_service() -> CredentialService:
    """Credential service built from the current settings."""
    return CredentialService.from_settings()


def actor_from_user(user: UserModel) -> Actor:
    return Actor(
        id=user.id,
        role=user.role,
        department=user.department,
        email=user.email,
    )


def resolve_actor(db: Session, credentials: CredentialService, token: str) -> Actor:
    """Verify ``token`` and rebuild the actor from the live user row."""
    payload = credentials.verify(token)

    user = (
        db.query(UserModel)
        .filter(UserModel.id == payload["sub"], UserModel.is_active.is_(True))
        .first()
    )
    if user is None:
        raise AuthenticationError("Invalid token: user not found or inactive")
    return actor_from_user(user)


def get_current_actor(
    bearer: Optional[HTTPAuthorizationCredentials] = Depends(http_bearer),
    db: Session = Depends(get_db),
    credentials: CredentialService = Depends(get_credential_service),
) -> Actor:
    """Authenticated actor for the request."""
    if bearer is None or not bearer.credentials:
        raise AuthenticationError("Access token required")
    return resolve_actor(db, credentials, bearer.credentials)

