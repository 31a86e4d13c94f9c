import datetime as dt
from pydantic import BaseModel, ConfigDict, Field, field_validator

class _Trimmed(BaseModel):
    @field_validator("*", mode="before")
    @classmethod
    def _strip(cls, v):
        return v.strip() if isinstance(v, str) else v

class ConnectionCreate(_Trimmed):
    name: str = Field(..., min_length=1, max_length=255)
    server: str = Field(..., min_length=1, max_length=255)
    database: str = Field(..., min_length=1, max_length=255)
    username: str = Field(..., min_length=1, max_length=255)
    password: str = Field(..., min_length=1)
    port: int = Field(default=1433, ge=1, le=65535)
    table_name: str = Field(..., min_length=1, max_length=255)

class ConnectionUpdate(_Trimmed):
    name: str | None = None
    server: str | None = None
    database: str | None = None
    username: str | None = None
    password: str | None = None
    port: int | None = Field(default=None, ge=1, le=65535)
    table_name: str | None = None
    is_active: bool | None = None

class ConnectionTestIn(_Trimmed):
    server: str
    database: str
    username: str
    password: str
    port: int = 1433

class ConnectionTestOut(BaseModel):
    success: bool
    error: str | None = None

class ConnectionOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    server: str
    database: str
    username: str
    port: int
    table_name: str
    is_active: bool
    created_at: dt.datetime | None = None
