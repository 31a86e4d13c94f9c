import datetime as dt
from pydantic import BaseModel, ConfigDict, Field

class CleanupDeleteIn(BaseModel):
    connection_id: int
    customer_name: str = Field(..., min_length=1)
    import_date: dt.date

class CleanupDeleteOut(BaseModel):
    deleted_count: int

class CleanupAuditOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: int
    connection_id: int
    customer_name: str
    import_date: str
    table_name: str
    deleted_count: int
    created_at: dt.datetime | None
