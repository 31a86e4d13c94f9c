from sqlalchemy import Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from csvbridge.db.base import Base
from csvbridge.db.models._mixins import CreatedAtMixin

class CleanupAuditLog(Base, CreatedAtMixin):
    __tablename__ = "cleanup_audit_log"

    id: Mapped[int] = mapped_column(primary_key=True)
    user_id: Mapped[int] = mapped_column(Integer, index=True)
    connection_id: Mapped[int] = mapped_column(Integer)
    customer_name: Mapped[str] = mapped_column(String(255))
    import_date: Mapped[str] = mapped_column(String(10))
    table_name: Mapped[str] = mapped_column(String(255))
    deleted_count: Mapped[int] = mapped_column(Integer, default=0)
