from sqlalchemy import ForeignKey, String, Text, Integer, Boolean
from sqlalchemy.orm import Mapped, mapped_column

from csvbridge.db.base import Base
from csvbridge.db.models._mixins import TimestampMixin

class RemoteConnection(Base, TimestampMixin):
    """Credentials and target table of a remote SQL Server database."""
    __tablename__ = "remote_connection"

    id: Mapped[int] = mapped_column(primary_key=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("user.id", ondelete="CASCADE"), index=True)
    name: Mapped[str] = mapped_column(String(255))
    server: Mapped[str] = mapped_column(String(255))
    database: Mapped[str] = mapped_column(String(255))
    username: Mapped[str] = mapped_column(String(255))
    password: Mapped[str] = mapped_column(Text)
    port: Mapped[int] = mapped_column(Integer, default=1433)
    table_name: Mapped[str] = mapped_column(String(255))
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)
