import datetime as dt

from sqlalchemy import DateTime, Unicode, bindparam, text

from csvbridge.core.logging import logger
from csvbridge.services.etl.utils import to_date_str
from csvbridge.services.remote.driver import (
    Connector,
    RemoteConfig,
    RemoteSession,
    connect,
    error_message,
    quote_column,
    quote_table,
    split_identifier,
)

COMPANY_TABLE = "pc.PC_Customers"


def check_connection(config: RemoteConfig, connector: Connector = connect) -> dict:
    """Open a connection and run ``SELECT 1``. Never raises."""
    try:
        with connector(config) as session:
            session.fetch_scalars(text("SELECT 1"))
        return {"success": True}
    except Exception as e:
        logger.warning("remote_connection_test_failed", server=config.server, database=config.database, error=str(e))
        return {"success": False, "error": error_message(e)}


def table_columns(session: RemoteSession, table_name: str) -> list[str]:
    segments = split_identifier(table_name)
    params = {"table_name": segments[-1]}
    sql = (
        "SELECT COLUMN_NAME FROM INFORMATION_SCHEMA.COLUMNS "
        "WHERE TABLE_NAME = :table_name"
    )
    if len(segments) > 1:
        sql += " AND TABLE_SCHEMA = :table_schema"
        params["table_schema"] = segments[-2]
    sql += " ORDER BY ORDINAL_POSITION"
    return session.fetch_scalars(text(sql), params)


def company_names(session: RemoteSession) -> list[str]:
    col = quote_column(session.dialect, "companyName")
    sql = (
        f"SELECT DISTINCT {col} FROM {quote_table(session.dialect, COMPANY_TABLE)} "
        f"WHERE {col} IS NOT NULL ORDER BY {col}"
    )
    return session.fetch_scalars(text(sql))


def distinct_customers(session: RemoteSession, table_name: str) -> list[str]:
    col = quote_column(session.dialect, "CustomerName")
    sql = (
        f"SELECT DISTINCT {col} FROM {quote_table(session.dialect, table_name)} "
        f"WHERE {col} IS NOT NULL ORDER BY {col}"
    )
    return session.fetch_scalars(text(sql))


def distinct_import_dates(session: RemoteSession, table_name: str) -> list[str]:
    """Calendar days present in ``ImportDate``, newest first, as YYYY-MM-DD."""
    col = quote_column(session.dialect, "ImportDate")
    sql = f"SELECT DISTINCT {col} FROM {quote_table(session.dialect, table_name)} WHERE {col} IS NOT NULL"
    days = {d for d in (to_date_str(v) for v in session.fetch_scalars(text(sql))) if d}
    return sorted(days, reverse=True)


def delete_by_customer_and_date(session: RemoteSession, table_name: str, customer_name: str, import_date: str) -> int:
    day = dt.date.fromisoformat(import_date)
    start = dt.datetime(day.year, day.month, day.day)
    end = start + dt.timedelta(days=1)

    customer_col = quote_column(session.dialect, "CustomerName")
    date_col = quote_column(session.dialect, "ImportDate")
    stmt = text(
        f"DELETE FROM {quote_table(session.dialect, table_name)} "
        f"WHERE {customer_col} = :customer_name AND {date_col} >= :day_start AND {date_col} < :day_end"
    ).bindparams(
        bindparam("customer_name", customer_name, type_=Unicode()),
        bindparam("day_start", start, type_=DateTime()),
        bindparam("day_end", end, type_=DateTime()),
    )
    logger.info("remote_delete", table=table_name, customer_name=customer_name, import_date=import_date)
    return session.execute(stmt)
