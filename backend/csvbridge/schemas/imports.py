import datetime as dt
from typing import Any
from pydantic import BaseModel, ConfigDict, Field, field_validator

from csvbridge.schemas.mapping import dump_mapping, load_mapping

class _WithMappings(BaseModel):
    @field_validator("field_mappings", mode="before", check_fields=False)
    @classmethod
    def _validate_mappings(cls, v):
        return dump_mapping(load_mapping(v))

class CsvPreviewIn(BaseModel):
    file_content: str

class CsvPreviewOut(BaseModel):
    headers: list[str]
    preview: list[dict[str, str]]
    total_rows: int

class ImportJobCreate(_WithMappings):
    connection_id: int
    file_name: str = Field(..., min_length=1, max_length=255)
    field_mappings: dict[str, Any]
    file_content: str | None = None

class ImportExecuteIn(BaseModel):
    csv_content: str | None = None
    customer_name: str | None = None
    import_date: dt.date | None = None

class ImportJobOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    connection_id: int
    file_name: str
    status: str
    total_rows: int
    processed_rows: int
    failed_rows: int
    error_message: str | None
    field_mappings: dict[str, Any]
    created_at: dt.datetime | None
    completed_at: dt.datetime | None

class ImportLogOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    job_id: int
    row_number: int
    level: str
    message: str
    row_data: dict[str, Any] | None
    created_at: dt.datetime | None

class RowErrorOut(BaseModel):
    row: int
    error: str

class ImportResultOut(BaseModel):
    success: int
    failed: int
    errors: list[RowErrorOut]

class TargetFieldOut(BaseModel):
    name: str
    label: str
