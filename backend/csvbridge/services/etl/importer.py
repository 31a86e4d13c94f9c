from __future__ import annotations

import datetime as dt
from pathlib import Path
from typing import Any

from sqlalchemy.orm import Session

from csvbridge.core.logging import logger
from csvbridge.crud.connections import get_connection
from csvbridge.crud.imports import InvalidStatusTransition, add_row_errors, set_job_status, set_total_rows
from csvbridge.db.models.import_job import ImportJob, JobStatus
from csvbridge.db.session import SessionLocal
from csvbridge.schemas.mapping import TargetField, load_mapping
from csvbridge.services.etl.csv_parser import parse_csv
from csvbridge.services.etl.errors import ConnectionNotFoundError, ImportPipelineError
from csvbridge.services.etl.mapping import transform
from csvbridge.services.remote.driver import Connector, RemoteConfig, connect
from csvbridge.services.remote.executor import BatchResult, insert_rows


def _now() -> dt.datetime:
    return dt.datetime.now(dt.timezone.utc)


def stamp_values(customer_name: str | None = None, import_date: dt.date | str | None = None) -> dict[str, Any]:
    """Job-level values copied into every record before the mapping applies."""
    base: dict[str, Any] = {}
    if customer_name:
        base[TargetField.CustomerName.value] = customer_name
    if import_date:
        base[TargetField.ImportDate.value] = (
            import_date.isoformat() if isinstance(import_date, dt.date) else str(import_date)
        )
    return base


def read_job_file(job: ImportJob) -> str:
    if not job.file_path:
        raise ImportPipelineError("No uploaded file stored for this job")
    path = Path(job.file_path)
    if not path.exists():
        raise ImportPipelineError(f"File not found: {path.name}")
    return path.read_text(encoding="utf-8-sig")


def _mark_failed(db: Session, job_id: int, message: str) -> None:
    # the session may be mid-transaction after a ledger error
    try:
        db.rollback()
        set_job_status(db, job_id, JobStatus.failed, completed_at=_now(), error_message=message)
        return
    except InvalidStatusTransition as e2:
        # another run already finished this job
        logger.warning("import_failed_status_not_updated", job_id=job_id, status=e2.current)
        return
    except Exception as e2:
        logger.exception("import_failed_status_update_failed", job_id=job_id, error=str(e2))

    db2: Session = SessionLocal()
    try:
        set_job_status(db2, job_id, JobStatus.failed, completed_at=_now(), error_message=message)
    except Exception as e3:
        logger.exception("import_failed_status_update_failed_second_attempt", job_id=job_id, error=str(e3))
    finally:
        db2.close()


def run_import(
    db: Session,
    job: ImportJob,
    csv_text: str | None = None,
    customer_name: str | None = None,
    import_date: dt.date | str | None = None,
    connector: Connector = connect,
) -> BatchResult:
    """Parse, transform and insert one uploaded CSV for ``job``.

    Row-level insert failures are counted and logged against the job. Anything
    else (bad CSV, missing connection, unreachable server) marks the job failed
    and is re-raised.
    """
    job_id = job.id
    log = logger.bind(job_id=job_id)

    set_job_status(db, job_id, JobStatus.processing)
    log.info("import_start", connection_id=job.connection_id, file_name=job.file_name)

    try:
        connection = get_connection(db, job.connection_id)
        if connection is None:
            raise ConnectionNotFoundError(job.connection_id)

        if csv_text is None:
            csv_text = read_job_file(job)
        parsed = parse_csv(csv_text)
        spec = load_mapping(job.field_mappings)
        records = transform(parsed.rows, spec, base=stamp_values(customer_name, import_date))
        set_total_rows(db, job_id, len(records))

        result = insert_rows(
            RemoteConfig.from_connection(connection),
            connection.table_name,
            records,
            connector=connector,
        )

        if result.errors:
            add_row_errors(db, job_id, result.errors)

        status = JobStatus.completed if result.failed == 0 else JobStatus.failed
        set_job_status(
            db,
            job_id,
            status,
            completed_at=_now(),
            processed_rows=result.success,
            failed_rows=result.failed,
        )
    except Exception as e:
        log.exception("import_failed", error=str(e))
        _mark_failed(db, job_id, str(e))
        raise

    log.info(
        "import_finished",
        status=status.value,
        total_rows=len(records),
        processed_rows=result.success,
        failed_rows=result.failed,
        skipped_rows=result.skipped,
    )
    return result
