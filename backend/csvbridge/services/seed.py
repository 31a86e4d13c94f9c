from sqlalchemy.orm import Session
from csvbridge.db.session import SessionLocal
from csvbridge.core.config import settings
from csvbridge.core.logging import logger
from csvbridge.crud.users import get_user_by_login, create_user
from csvbridge.schemas.admin import UserCreateIn
from csvbridge.db.models.user import Role

def seed_admin():
    db: Session = SessionLocal()
    try:
        if settings.SEED_ADMIN_LOGIN and settings.SEED_ADMIN_PASSWORD:
            u = get_user_by_login(db, settings.SEED_ADMIN_LOGIN)
            if not u:
                create_user(db, UserCreateIn(
                    login=settings.SEED_ADMIN_LOGIN,
                    password=settings.SEED_ADMIN_PASSWORD,
                    role=Role.admin,
                    full_name="Administrator",
                ))
                logger.info("seed_admin_created", login=settings.SEED_ADMIN_LOGIN)
    finally:
        db.close()
