from sqlalchemy import ForeignKey, JSON, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from csvbridge.db.base import Base
from csvbridge.db.models._mixins import TimestampMixin

class MappingTemplate(Base, TimestampMixin):
    __tablename__ = "mapping_template"

    id: Mapped[int] = mapped_column(primary_key=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("user.id", ondelete="CASCADE"), index=True)
    name: Mapped[str] = mapped_column(String(255))
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    mappings: Mapped[dict] = mapped_column(JSON, default=dict)
