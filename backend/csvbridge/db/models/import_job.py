import datetime as dt
from enum import Enum
from sqlalchemy import DateTime, Integer, JSON, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from csvbridge.db.base import Base
from csvbridge.db.models._mixins import CreatedAtMixin

class JobStatus(str, Enum):
    pending = "pending"
    processing = "processing"
    completed = "completed"
    failed = "failed"

class ImportJob(Base, CreatedAtMixin):
    __tablename__ = "import_job"

    id: Mapped[int] = mapped_column(primary_key=True)
    # plain ids: jobs outlive the user and connection they ran for
    user_id: Mapped[int] = mapped_column(Integer, index=True)
    connection_id: Mapped[int] = mapped_column(Integer, index=True)

    file_name: Mapped[str] = mapped_column(String(255))
    file_path: Mapped[str | None] = mapped_column(Text, nullable=True)
    field_mappings: Mapped[dict] = mapped_column(JSON, default=dict)

    status: Mapped[str] = mapped_column(String(16), default=JobStatus.pending.value)
    total_rows: Mapped[int] = mapped_column(Integer, default=0)
    processed_rows: Mapped[int] = mapped_column(Integer, default=0)
    failed_rows: Mapped[int] = mapped_column(Integer, default=0)
    error_message: Mapped[str | None] = mapped_column(Text, nullable=True)
    completed_at: Mapped[dt.datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    logs = relationship("ImportLog", back_populates="job", order_by="ImportLog.id")
