import io
from dataclasses import dataclass, field

import pandas as pd

from csvbridge.services.etl.errors import CsvParseError

_READ_OPTIONS = dict(
    dtype=str,
    keep_default_na=False,
    skip_blank_lines=True,
    index_col=False,
)


@dataclass
class ParsedCsv:
    headers: list[str]
    rows: list[dict[str, str]] = field(default_factory=list)


def parse_csv(text: str) -> ParsedCsv:
    """Parse CSV text into its header row and header-keyed string rows.

    Every cell stays a string and blank lines are skipped. The header fixes the
    row width: fields past it are dropped (trailing commas from spreadsheet
    exports) and cells missing from short lines are left out of that row's
    mapping. Only text the tokenizer cannot read, such as an unclosed quote,
    raises ``CsvParseError``.
    """
    if not text or not text.strip():
        raise CsvParseError("CSV file is empty")
    body = text.lstrip("\ufeff")
    try:
        headers = [str(c) for c in pd.read_csv(io.StringIO(body), nrows=0, **_READ_OPTIONS).columns]
        # positional usecols keeps pandas from erroring on, or indexing by, extra fields
        df = pd.read_csv(io.StringIO(body), usecols=list(range(len(headers))), **_READ_OPTIONS)
    except (pd.errors.ParserError, pd.errors.EmptyDataError, UnicodeDecodeError) as e:
        raise CsvParseError(f"Unable to parse CSV: {e}") from e

    rows: list[dict[str, str]] = []
    for rec in df.itertuples(index=False, name=None):
        # short lines come back as NaN even with keep_default_na off
        rows.append({h: v for h, v in zip(headers, rec) if isinstance(v, str)})
    return ParsedCsv(headers=headers, rows=rows)


def preview(parsed: ParsedCsv, limit: int = 5) -> dict:
    return {
        "headers": parsed.headers,
        "preview": parsed.rows[:limit],
        "total_rows": len(parsed.rows),
    }
