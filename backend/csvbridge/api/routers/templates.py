from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from csvbridge.core.deps import get_current_user, get_db
from csvbridge.crud.templates import create_template, delete_template, get_template, list_templates
from csvbridge.db.models.user import User
from csvbridge.schemas.templates import MappingTemplateCreate, MappingTemplateOut

router = APIRouter()

@router.get("", response_model=list[MappingTemplateOut])
def get_templates(db: Session = Depends(get_db), user: User = Depends(get_current_user)):
    return list_templates(db, user.id)

@router.post("", response_model=MappingTemplateOut)
def post_template(data: MappingTemplateCreate, db: Session = Depends(get_db), user: User = Depends(get_current_user)):
    return create_template(db, user.id, data)

@router.get("/{template_id}", response_model=MappingTemplateOut)
def get_template_endpoint(template_id: int, db: Session = Depends(get_db), user: User = Depends(get_current_user)):
    t = get_template(db, user.id, template_id)
    if not t:
        raise HTTPException(status_code=404, detail="Template not found")
    return t

@router.delete("/{template_id}")
def delete_template_endpoint(template_id: int, db: Session = Depends(get_db), user: User = Depends(get_current_user)):
    t = get_template(db, user.id, template_id)
    if not t:
        raise HTTPException(status_code=404, detail="Template not found")
    delete_template(db, t)
    return {"success": True}
