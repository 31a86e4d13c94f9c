from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.orm import Session

from csvbridge.db.session import SessionLocal
from csvbridge.core.security import decode_token
from csvbridge.db.models.connection import RemoteConnection
from csvbridge.db.models.user import User, Role
from csvbridge.crud.connections import get_user_connection
from csvbridge.crud.users import get_user_by_login
from csvbridge.services.remote.driver import Connector, connect

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/auth/login")


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_remote_connector() -> Connector:
    """Opens remote SQL Server sessions; overridden in tests."""
    return connect


def get_current_user(db: Session = Depends(get_db), token: str = Depends(oauth2_scheme)) -> User:
    try:
        payload = decode_token(token)
    except Exception:
        raise _unauthorized("Invalid token")
    login = payload.get("sub")
    if not login:
        raise _unauthorized("Invalid token")

    user = get_user_by_login(db, login)
    if not user or not user.is_active:
        raise _unauthorized("User not found/disabled")
    # a login that was deleted and re-added gets a new id
    if payload.get("uid") is not None and payload["uid"] != user.id:
        raise _unauthorized("Invalid token")
    return user


def require_roles(*roles: Role):
    allowed = {r.value for r in roles}

    def _dep(user: User = Depends(get_current_user)) -> User:
        if user.role not in allowed:
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Forbidden")
        return user
    return _dep


def get_owned_connection(db: Session, user: User, connection_id: int) -> RemoteConnection:
    c = get_user_connection(db, user.id, connection_id)
    if not c:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Connection not found")
    return c
