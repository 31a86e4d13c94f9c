from typing import Any, Mapping

from csvbridge.schemas.mapping import ConcatRule, LiteralRule, SourceRule


def _source_value(column: str, row: Mapping[str, Any]) -> str:
    v = row.get(column)
    if v is None:
        return ""
    return v if isinstance(v, str) else str(v)


def _part_value(part: LiteralRule | SourceRule, row: Mapping[str, Any]) -> str:
    if isinstance(part, LiteralRule):
        return part.text
    if isinstance(part, SourceRule):
        return _source_value(part.column, row)
    raise TypeError(f"Unsupported concat part: {part!r}")


def resolve(rule: LiteralRule | SourceRule | ConcatRule, row: Mapping[str, Any]) -> str:
    """Resolve one mapping rule against one CSV row.

    Missing columns resolve to an empty string; nothing here fails on data.
    """
    if isinstance(rule, LiteralRule):
        return rule.text
    if isinstance(rule, SourceRule):
        return _source_value(rule.column, row)
    if isinstance(rule, ConcatRule):
        return "".join(_part_value(p, row) for p in rule.parts)
    raise TypeError(f"Unsupported mapping rule: {rule!r}")


def transform_row(
    row: Mapping[str, Any],
    spec: Mapping[str, LiteralRule | SourceRule | ConcatRule],
    base: Mapping[str, Any] | None = None,
) -> dict[str, Any]:
    record: dict[str, Any] = dict(base) if base else {}
    for field, rule in spec.items():
        value = resolve(rule, row)
        # literal values are kept even when empty
        if value != "" or isinstance(rule, LiteralRule):
            record[field] = value
    return record


def transform(
    rows: list[Mapping[str, Any]],
    spec: Mapping[str, LiteralRule | SourceRule | ConcatRule],
    base: Mapping[str, Any] | None = None,
) -> list[dict[str, Any]]:
    """One output record per input row, in input order."""
    return [transform_row(row, spec, base) for row in rows]
