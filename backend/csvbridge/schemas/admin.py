import datetime as dt
from pydantic import BaseModel, ConfigDict, Field

from csvbridge.db.models.user import Role

class UserCreateIn(BaseModel):
    login: str = Field(..., min_length=3, max_length=320)
    password: str | None = Field(default=None, min_length=6, max_length=128)
    email: str | None = None
    role: Role = Role.user
    full_name: str | None = None

class AdminUserOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    login: str
    email: str | None
    full_name: str | None
    role: str
    is_active: bool
    last_signed_in: dt.datetime | None
