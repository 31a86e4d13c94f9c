import datetime as dt

from sqlalchemy.orm import Session

from csvbridge.core.logging import logger
from csvbridge.crud.audit import add_cleanup_audit
from csvbridge.db.models.connection import RemoteConnection
from csvbridge.db.models.cleanup_audit import CleanupAuditLog
from csvbridge.services.remote.driver import Connector, RemoteConfig, connect
from csvbridge.services.remote.queries import delete_by_customer_and_date, distinct_customers, distinct_import_dates


class CleanupAuditError(Exception):
    def __init__(self, deleted_count: int):
        super().__init__(f"Deleted {deleted_count} records but the audit entry could not be saved")
        self.deleted_count = deleted_count


def list_customers(connection: RemoteConnection, connector: Connector = connect) -> list[str]:
    with connector(RemoteConfig.from_connection(connection)) as session:
        return distinct_customers(session, connection.table_name)


def list_import_dates(connection: RemoteConnection, connector: Connector = connect) -> list[str]:
    with connector(RemoteConfig.from_connection(connection)) as session:
        return distinct_import_dates(session, connection.table_name)


def delete_records(
    db: Session,
    user_id: int,
    connection: RemoteConnection,
    customer_name: str,
    import_date: dt.date | str,
    connector: Connector = connect,
) -> CleanupAuditLog:
    """Delete one customer's rows for one import day and record the audit entry.

    The audit entry is written even when nothing matched; a failed delete
    writes none. If the delete succeeds but the audit write fails,
    ``CleanupAuditError`` carries the number of rows removed.
    """
    day = import_date.isoformat() if isinstance(import_date, dt.date) else str(import_date)
    with connector(RemoteConfig.from_connection(connection)) as session:
        deleted = delete_by_customer_and_date(session, connection.table_name, customer_name, day)

    try:
        entry = add_cleanup_audit(
            db,
            user_id=user_id,
            connection_id=connection.id,
            customer_name=customer_name,
            import_date=day,
            table_name=connection.table_name,
            deleted_count=deleted,
        )
    except Exception as e:
        db.rollback()
        # the remote rows are already gone at this point
        logger.exception(
            "cleanup_audit_failed",
            user_id=user_id,
            connection_id=connection.id,
            table=connection.table_name,
            customer_name=customer_name,
            import_date=day,
            deleted_count=deleted,
        )
        raise CleanupAuditError(deleted) from e
    logger.info(
        "cleanup_deleted",
        user_id=user_id,
        connection_id=connection.id,
        table=connection.table_name,
        customer_name=customer_name,
        import_date=day,
        deleted_count=deleted,
    )
    return entry
