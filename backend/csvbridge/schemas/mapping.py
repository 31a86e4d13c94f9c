"""Field-mapping rules.

A mapping spec is a dict keyed by target field; each value is one of three
rule variants, discriminated by ``type``:

    {"type": "literal", "text": "ACME"}
    {"type": "source", "column": "first_name"}
    {"type": "concat", "parts": [{"type": "source", "column": "first"},
                                 {"type": "literal", "text": " "},
                                 {"type": "source", "column": "last"}]}

Specs saved by the older wizard use ``csv``/``text`` tags with ``csvField``;
``normalize_legacy`` rewrites them into the shape above.
"""
from enum import Enum
from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter


class TargetField(str, Enum):
    CustomerName = "CustomerName"
    DisplayName = "DisplayName"
    FirstName = "FirstName"
    LastName = "LastName"
    CompanyName = "CompanyName"
    JobTitle = "JobTitle"
    EmployeeID = "EmployeeID"
    EmployeeType = "EmployeeType"
    EmployeeHireDate = "EmployeeHireDate"
    WorkEmail = "WorkEmail"
    Department = "Department"
    OfficeLocation = "OfficeLocation"
    StreetAddress = "StreetAddress"
    City = "City"
    State = "State"
    PostalCode = "PostalCode"
    BusinessPhone = "BusinessPhone"
    BusinessMobilePhone = "BusinessMobilePhone"
    FaxNumber = "FaxNumber"
    PersonalMobilePhone = "PersonalMobilePhone"
    ManagerEmail = "ManagerEmail"
    ImportDate = "ImportDate"


TARGET_FIELD_LABELS: dict[TargetField, str] = {
    TargetField.CustomerName: "Customer Name",
    TargetField.DisplayName: "Display Name",
    TargetField.FirstName: "First Name",
    TargetField.LastName: "Last Name",
    TargetField.CompanyName: "Company Name",
    TargetField.JobTitle: "Job Title",
    TargetField.EmployeeID: "Employee ID",
    TargetField.EmployeeType: "Employee Type",
    TargetField.EmployeeHireDate: "Employee Hire Date",
    TargetField.WorkEmail: "Work Email",
    TargetField.Department: "Department",
    TargetField.OfficeLocation: "Office Location",
    TargetField.StreetAddress: "Street Address",
    TargetField.City: "City",
    TargetField.State: "State",
    TargetField.PostalCode: "Postal Code",
    TargetField.BusinessPhone: "Business Phone",
    TargetField.BusinessMobilePhone: "Business Mobile Phone",
    TargetField.FaxNumber: "Fax Number",
    TargetField.PersonalMobilePhone: "Personal Mobile Phone",
    TargetField.ManagerEmail: "Manager Email",
    TargetField.ImportDate: "Import Date",
}

_LABEL_TO_FIELD = {label: field for field, label in TARGET_FIELD_LABELS.items()}


class LiteralRule(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: Literal["literal"] = "literal"
    text: str = ""


class SourceRule(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: Literal["source"] = "source"
    column: str


MappingPart = Annotated[Union[LiteralRule, SourceRule], Field(discriminator="type")]


class ConcatRule(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: Literal["concat"] = "concat"
    parts: tuple[MappingPart, ...] = ()


MappingRule = Annotated[Union[LiteralRule, SourceRule, ConcatRule], Field(discriminator="type")]

MappingSpec = dict[TargetField, MappingRule]

_spec_adapter = TypeAdapter(MappingSpec)


def _normalize_rule(raw: Any) -> Any:
    if not isinstance(raw, dict):
        return raw
    kind = raw.get("type")
    if kind == "csv":
        return {"type": "source", "column": raw.get("csvField") or ""}
    if kind == "text":
        return {"type": "literal", "text": raw.get("text") or ""}
    if kind == "concat":
        return {"type": "concat", "parts": [_normalize_rule(p) for p in raw.get("parts") or []]}
    return raw


def normalize_legacy(data: Any) -> Any:
    """Rewrite wizard-era keys and rule tags into the current shape."""
    if not isinstance(data, dict):
        return data
    out = {}
    for key, rule in data.items():
        out[_LABEL_TO_FIELD.get(key, key)] = _normalize_rule(rule)
    return out


def load_mapping(data: Any) -> dict[str, LiteralRule | SourceRule | ConcatRule]:
    """Validate a stored or submitted spec. Keys come back as plain column names."""
    spec = _spec_adapter.validate_python(normalize_legacy(data or {}))
    return {field.value: rule for field, rule in spec.items()}


def dump_mapping(spec: dict) -> dict[str, Any]:
    return {
        (k.value if isinstance(k, TargetField) else k): rule.model_dump(mode="json")
        for k, rule in spec.items()
    }
