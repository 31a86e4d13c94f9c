"""Remote SQL Server access.

One ``RemoteSession`` wraps one DBAPI connection. It is opened per batch or
per lookup and always closed by the caller (use it as a context manager).
"""
from __future__ import annotations

import datetime as dt
import re
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Callable, Sequence

from sqlalchemy import Boolean, DateTime, Float, Integer, Numeric, Unicode, bindparam, create_engine, text
from sqlalchemy.engine import Dialect, Engine, URL
from sqlalchemy.exc import DBAPIError
from sqlalchemy.pool import NullPool

from csvbridge.core.config import settings
from csvbridge.services.etl.utils import to_datetime

_SEGMENT_RE = re.compile(r'\[(?:[^\]]|\]\])*\]|"(?:[^"]|"")*"|[^.]+')


@dataclass(frozen=True)
class RemoteConfig:
    server: str
    database: str
    username: str
    password: str = field(repr=False)
    port: int = 1433

    @classmethod
    def from_connection(cls, conn) -> "RemoteConfig":
        return cls(
            server=conn.server,
            database=conn.database,
            username=conn.username,
            password=conn.password,
            port=conn.port or settings.REMOTE_DEFAULT_PORT,
        )

    def url(self) -> URL:
        query: dict[str, str] = {}
        if settings.REMOTE_DB_DRIVER.endswith("pyodbc"):
            query = {
                "driver": settings.REMOTE_ODBC_DRIVER,
                "Encrypt": "yes" if settings.REMOTE_ENCRYPT else "no",
                "TrustServerCertificate": "yes" if settings.REMOTE_TRUST_SERVER_CERTIFICATE else "no",
            }
        return URL.create(
            settings.REMOTE_DB_DRIVER,
            username=self.username,
            password=self.password,
            host=self.server,
            port=self.port,
            database=self.database,
            query=query,
        )


class RemoteSession:
    def __init__(self, engine: Engine):
        self.engine = engine
        self.conn = engine.connect()

    @property
    def dialect(self) -> Dialect:
        return self.conn.dialect

    def insert(self, table_name: str, columns: Sequence[str], values: Sequence[Any]) -> None:
        stmt = build_insert(self.dialect, table_name, columns, values)
        with self.conn.begin():
            self.conn.execute(stmt)

    def fetch_scalars(self, stmt, params: dict | None = None) -> list[Any]:
        with self.conn.begin():
            return list(self.conn.execute(stmt, params or {}).scalars())

    def execute(self, stmt, params: dict | None = None) -> int:
        """Run a write statement in its own transaction; returns rows affected."""
        with self.conn.begin():
            res = self.conn.execute(stmt, params or {})
            return res.rowcount if res.rowcount is not None and res.rowcount >= 0 else 0

    def close(self) -> None:
        try:
            self.conn.close()
        finally:
            self.engine.dispose()

    def __enter__(self) -> "RemoteSession":
        return self

    def __exit__(self, *exc) -> None:
        self.close()


def connect(config: RemoteConfig) -> RemoteSession:
    connect_args = {}
    if settings.REMOTE_DB_DRIVER.endswith("pyodbc"):
        connect_args["timeout"] = settings.REMOTE_CONNECT_TIMEOUT
    engine = create_engine(config.url(), poolclass=NullPool, connect_args=connect_args)
    try:
        return RemoteSession(engine)
    except Exception:
        engine.dispose()
        raise


Connector = Callable[[RemoteConfig], RemoteSession]


def error_message(e: Exception) -> str:
    if isinstance(e, DBAPIError) and e.orig is not None:
        return str(e.orig)
    return str(e)


# -----------------------------
# Identifiers
# -----------------------------
def _unwrap(segment: str) -> str:
    s = segment.strip()
    if len(s) >= 2 and s[0] == "[" and s[-1] == "]":
        return s[1:-1].replace("]]", "]")
    if len(s) >= 2 and s[0] == '"' and s[-1] == '"':
        return s[1:-1].replace('""', '"')
    return s


def split_identifier(name: str) -> list[str]:
    segments = [_unwrap(s) for s in _SEGMENT_RE.findall(name.strip())]
    segments = [s for s in segments if s]
    if not segments:
        raise ValueError(f"Invalid table name: {name!r}")
    return segments


def quote_column(dialect: Dialect, name: str) -> str:
    return dialect.identifier_preparer.quote_identifier(name)


def quote_table(dialect: Dialect, name: str) -> str:
    """Quote ``table`` or ``schema.table`` segment by segment."""
    return ".".join(quote_column(dialect, s) for s in split_identifier(name))


def _escape_colons(identifier: str) -> str:
    # text() would read ":name" inside an identifier as a bind parameter
    return identifier.replace(":", "\\:")


# -----------------------------
# Inserts
# -----------------------------
def is_date_column(name: str) -> bool:
    # name-based: ImportDate, EmployeeHireDate, ...
    return name.endswith("Date")


def bind_value(column: str, value: Any) -> tuple[Any, Any]:
    if isinstance(value, bool):
        return value, Boolean()
    if isinstance(value, int):
        return value, Integer()
    if isinstance(value, Decimal):
        return value, Numeric()
    if isinstance(value, float):
        return value, Float()
    if isinstance(value, (dt.date, dt.datetime)) or is_date_column(column):
        return to_datetime(value), DateTime()
    return str(value), Unicode()


def build_insert(dialect: Dialect, table_name: str, columns: Sequence[str], values: Sequence[Any]):
    if not columns or len(columns) != len(values):
        raise ValueError("columns and values must be non-empty and of equal length")

    params = []
    for idx, (col, value) in enumerate(zip(columns, values)):
        bound, type_ = bind_value(col, value)
        params.append(bindparam(f"p{idx}", bound, type_=type_))

    column_list = ", ".join(_escape_colons(quote_column(dialect, c)) for c in columns)
    param_list = ", ".join(f":p{idx}" for idx in range(len(columns)))
    sql = f"INSERT INTO {_escape_colons(quote_table(dialect, table_name))} ({column_list}) VALUES ({param_list})"
    return text(sql).bindparams(*params)
