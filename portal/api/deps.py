from typing import Callable, Generator

from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.orm import Session

from portal.core.actor import Actor
from portal.core.approval import ApprovalWorkflow
from portal.core.config import Settings, get_settings
from portal.core.security import decode_token
from portal.db.models import User
from portal.db.session import SessionLocal
from portal.services.notifications import NotificationDispatcher, build_dispatcher

# Tokens are issued by the identity provider; there is no login route here
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/auth/token", auto_error=False)


def get_session_factory() -> Callable[[], Session]:
    """Session factory for work that outlives the request session (sinks)."""
    return SessionLocal


def get_db(session_factory: Callable[[], Session] = Depends(get_session_factory)) -> Generator:
    """Database session dependency."""
    db = session_factory()
    try:
        yield db
    finally:
        db.close()


def get_current_user(
    db: Session = Depends(get_db),
    token: str = Depends(oauth2_scheme),
) -> User:
    """Get current authenticated user from the bearer token."""
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )

    if token:
        user_id = decode_token(token)
        if user_id is not None:
            user = db.query(User).filter(User.id == user_id).first()
            if user and user.is_active:
                return user

    raise credentials_exception


def get_current_actor(current_user: User = Depends(get_current_user)) -> Actor:
    """Request-scoped identity passed into every workflow call."""
    return Actor(user_id=current_user.id, role=current_user.role, email=current_user.email)


def get_dispatcher(
    settings: Settings = Depends(get_settings),
    session_factory: Callable[[], Session] = Depends(get_session_factory),
) -> NotificationDispatcher:
    return build_dispatcher(settings, session_factory)


def get_workflow(
    db: Session = Depends(get_db),
    dispatcher: NotificationDispatcher = Depends(get_dispatcher),
    settings: Settings = Depends(get_settings),
) -> ApprovalWorkflow:
    return ApprovalWorkflow(db, dispatcher=dispatcher, settings=settings)
