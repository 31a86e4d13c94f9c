import datetime as dt
from sqlalchemy.orm import Session
from csvbridge.db.models.user import User
from csvbridge.core.security import hash_password
from csvbridge.schemas.admin import UserCreateIn

def get_user_by_login(db: Session, login: str) -> User | None:
    return db.query(User).filter(User.login == login).one_or_none()

def list_users(db: Session):
    return db.query(User).order_by(User.id).all()

def create_user(db: Session, data: UserCreateIn) -> User:
    u = User(
        login=data.login,
        email=data.email,
        password_hash=hash_password(data.password) if data.password else None,
        role=data.role.value,
        full_name=data.full_name or data.login,
    )
    db.add(u)
    db.commit()
    db.refresh(u)
    return u

def delete_user(db: Session, user_id: int) -> bool:
    deleted = db.query(User).filter(User.id == user_id).delete(synchronize_session=False)
    db.commit()
    return bool(deleted)

def touch_sign_in(db: Session, user: User) -> None:
    user.last_signed_in = dt.datetime.now(dt.timezone.utc)
    db.commit()
