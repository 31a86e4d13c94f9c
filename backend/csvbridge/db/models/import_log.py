from enum import Enum
from sqlalchemy import ForeignKey, Integer, JSON, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from csvbridge.db.base import Base
from csvbridge.db.models._mixins import CreatedAtMixin

class LogLevel(str, Enum):
    info = "info"
    warning = "warning"
    error = "error"

class ImportLog(Base, CreatedAtMixin):
    __tablename__ = "import_log"

    id: Mapped[int] = mapped_column(primary_key=True)
    job_id: Mapped[int] = mapped_column(ForeignKey("import_job.id"), index=True)
    row_number: Mapped[int] = mapped_column(Integer)
    level: Mapped[str] = mapped_column(String(16), default=LogLevel.info.value)
    message: Mapped[str] = mapped_column(Text)
    row_data: Mapped[dict | None] = mapped_column(JSON, nullable=True)

    job = relationship("ImportJob", back_populates="logs")
