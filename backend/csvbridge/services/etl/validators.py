from dataclasses import dataclass, field
from typing import Any

@dataclass
class RowError:
    row_num: int
    message: str
    row_data: dict[str, Any] = field(default_factory=dict)

def is_blank(v: Any) -> bool:
    return v is None or v == ""
