from sqlalchemy.orm import Session
from csvbridge.db.models.mapping_template import MappingTemplate
from csvbridge.schemas.templates import MappingTemplateCreate

def list_templates(db: Session, user_id: int):
    return db.query(MappingTemplate).filter(MappingTemplate.user_id == user_id).order_by(MappingTemplate.name).all()

def get_template(db: Session, user_id: int, template_id: int) -> MappingTemplate | None:
    return (
        db.query(MappingTemplate)
        .filter(MappingTemplate.id == template_id, MappingTemplate.user_id == user_id)
        .one_or_none()
    )

def create_template(db: Session, user_id: int, data: MappingTemplateCreate) -> MappingTemplate:
    t = MappingTemplate(
        user_id=user_id,
        name=data.name.strip(),
        description=data.description.strip() if data.description else None,
        mappings=data.field_mappings,
    )
    db.add(t)
    db.commit()
    db.refresh(t)
    return t

def delete_template(db: Session, t: MappingTemplate) -> None:
    db.delete(t)
    db.commit()
