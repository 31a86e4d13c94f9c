import datetime as dt
from typing import Any
from pydantic import BaseModel, ConfigDict, Field

from csvbridge.schemas.imports import _WithMappings

class MappingTemplateCreate(_WithMappings):
    name: str = Field(..., min_length=1, max_length=255)
    description: str | None = None
    field_mappings: dict[str, Any]

class MappingTemplateOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    description: str | None
    mappings: dict[str, Any]
    created_at: dt.datetime | None
