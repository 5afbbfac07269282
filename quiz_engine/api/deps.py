"""FastAPI dependencies shared across routes."""

from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.orm import Session

from quiz_engine.core.security import decode_access_token
from quiz_engine.db.session import get_db
from quiz_engine.services.attempts import AttemptLifecycle
from quiz_engine.services.store import SqlAttemptStore

# Tokens are issued by the identity service; tokenUrl only feeds the OpenAPI docs.
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/auth/token")


def get_current_user_id(token: str = Depends(oauth2_scheme)) -> str:
    """Decode the bearer JWT and return its subject, or 401."""
    payload = decode_access_token(token)
    if payload is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token",
            headers={"WWW-Authenticate": "Bearer"},
        )
    user_id = payload.get("sub")
    if not user_id:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token payload"
        )
    return str(user_id)


def get_store(db: Session = Depends(get_db)) -> SqlAttemptStore:
    return SqlAttemptStore(db)


def get_lifecycle(store: SqlAttemptStore = Depends(get_store)) -> AttemptLifecycle:
    return AttemptLifecycle(store)
