from dataclasses import dataclass, field
from typing import Any, Mapping, Sequence

from csvbridge.core.logging import logger
from csvbridge.services.etl.validators import RowError, is_blank
from csvbridge.services.remote.driver import Connector, RemoteConfig, RemoteSession, connect, error_message


@dataclass
class BatchResult:
    success: int = 0
    failed: int = 0
    skipped: int = 0
    errors: list[RowError] = field(default_factory=list)


def execute_batch(session: RemoteSession, records: Sequence[Mapping[str, Any]], table_name: str) -> BatchResult:
    """Insert records one by one. A rejected row is recorded and the batch goes on.

    Row numbers are 1-based in record order. Null and empty-string values are
    left out of a row's column list; rows left with no columns are skipped and
    counted as neither success nor failure.
    """
    result = BatchResult()
    for row_num, record in enumerate(records, start=1):
        if not record:
            result.skipped += 1
            continue

        values = {k: v for k, v in record.items() if not is_blank(v)}
        if not values:
            logger.debug("row_skipped_no_data", row=row_num)
            result.skipped += 1
            continue

        try:
            session.insert(table_name, list(values.keys()), list(values.values()))
        except Exception as e:
            msg = error_message(e)
            result.failed += 1
            result.errors.append(RowError(row_num=row_num, message=msg, row_data=dict(record)))
            logger.warning("row_insert_failed", row=row_num, table=table_name, error=msg)
        else:
            result.success += 1

    logger.info(
        "batch_finished",
        table=table_name,
        success=result.success,
        failed=result.failed,
        skipped=result.skipped,
    )
    return result


def insert_rows(
    config: RemoteConfig,
    table_name: str,
    records: Sequence[Mapping[str, Any]],
    connector: Connector = connect,
) -> BatchResult:
    with connector(config) as session:
        return execute_batch(session, records, table_name)
