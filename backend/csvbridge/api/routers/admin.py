from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from csvbridge.core.deps import get_db, require_roles
from csvbridge.db.models.user import Role, User
from csvbridge.schemas.admin import AdminUserOut, UserCreateIn
from csvbridge.crud.users import create_user, delete_user, get_user_by_login, list_users

router = APIRouter()

@router.get("/users", response_model=list[AdminUserOut])
def users(db: Session = Depends(get_db), _user=Depends(require_roles(Role.admin))):
    return list_users(db)

@router.post("/users", response_model=AdminUserOut)
def create_user_endpoint(data: UserCreateIn, db: Session = Depends(get_db), _user=Depends(require_roles(Role.admin))):
    if get_user_by_login(db, data.login):
        raise HTTPException(status_code=409, detail="User with this login already exists")
    return create_user(db, data)

@router.delete("/users/{user_id}")
def delete_user_endpoint(user_id: int, db: Session = Depends(get_db), user: User = Depends(require_roles(Role.admin))):
    if user_id == user.id:
        raise HTTPException(status_code=400, detail="Cannot delete your own account")
    if not delete_user(db, user_id):
        raise HTTPException(status_code=404, detail="User not found")
    return {"success": True}
