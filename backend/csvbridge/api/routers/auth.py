from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from csvbridge.core.deps import get_db, get_current_user
from csvbridge.schemas.auth import LoginIn, TokenOut, UserOut
from csvbridge.crud.users import get_user_by_login, touch_sign_in
from csvbridge.core.security import verify_password, create_access_token
from csvbridge.core.config import settings
from csvbridge.core.logging import logger

router = APIRouter()

@router.post("/login", response_model=TokenOut)
def login(data: LoginIn, db: Session = Depends(get_db)):
    user = get_user_by_login(db, data.login)
    if not user or not user.is_active:
        logger.warning("login_denied", login=data.login)
        raise HTTPException(status_code=401, detail="Invalid credentials")
    if not verify_password(data.password, user.password_hash):
        logger.warning("login_denied", login=data.login)
        raise HTTPException(status_code=401, detail="Invalid credentials")
    touch_sign_in(db, user)
    token = create_access_token(sub=user.login, role=user.role, user_id=user.id)
    return TokenOut(access_token=token, expires_in=settings.JWT_EXPIRES_MIN * 60)

@router.get("/me", response_model=UserOut)
def me(user = Depends(get_current_user)):
    return user

@router.post("/logout")
def logout(_user = Depends(get_current_user)):
    # tokens are stateless; the client drops it
    return {"success": True}
