import datetime as dt
from sqlalchemy import update
from sqlalchemy.orm import Session
from csvbridge.db.models.import_job import ImportJob, JobStatus
from csvbridge.db.models.import_log import ImportLog, LogLevel
from csvbridge.services.etl.validators import RowError

_TRANSITIONS = {
    JobStatus.pending.value: {JobStatus.processing.value, JobStatus.failed.value},
    JobStatus.processing.value: {JobStatus.completed.value, JobStatus.failed.value},
    JobStatus.completed.value: set(),
    JobStatus.failed.value: set(),
}

class InvalidStatusTransition(ValueError):
    def __init__(self, current: str, target: str):
        super().__init__(f"Cannot move import job from {current} to {target}")
        self.current = current
        self.target = target

def get_import_job(db: Session, job_id: int) -> ImportJob | None:
    return db.query(ImportJob).filter(ImportJob.id == job_id).one_or_none()

def get_user_import_job(db: Session, user_id: int, job_id: int) -> ImportJob | None:
    return db.query(ImportJob).filter(ImportJob.id == job_id, ImportJob.user_id == user_id).one_or_none()

def create_import_job(
    db: Session,
    user_id: int,
    connection_id: int,
    file_name: str,
    field_mappings: dict,
    file_path: str | None = None,
) -> ImportJob:
    job = ImportJob(
        user_id=user_id,
        connection_id=connection_id,
        file_name=file_name,
        file_path=file_path,
        field_mappings=field_mappings,
        status=JobStatus.pending.value,
        total_rows=0,
        processed_rows=0,
        failed_rows=0,
    )
    db.add(job)
    db.commit()
    db.refresh(job)
    return job

def set_job_status(
    db: Session,
    job_id: int,
    status: JobStatus,
    completed_at: dt.datetime | None = None,
    processed_rows: int | None = None,
    failed_rows: int | None = None,
    error_message: str | None = None,
) -> ImportJob:
    """Move a job to `status` with a single conditional UPDATE.

    The row only changes when its current status may move to `status`, so two
    sessions holding the same pending job cannot both start it.
    """
    target = JobStatus(status).value
    allowed_from = [src for src, targets in _TRANSITIONS.items() if target in targets]

    values: dict = {"status": target}
    if completed_at is not None:
        values["completed_at"] = completed_at
    if processed_rows is not None:
        values["processed_rows"] = processed_rows
    if failed_rows is not None:
        values["failed_rows"] = failed_rows
    if error_message is not None:
        values["error_message"] = error_message

    res = db.execute(
        update(ImportJob)
        .where(ImportJob.id == job_id, ImportJob.status.in_(allowed_from))
        .values(**values)
        .execution_options(synchronize_session=False)
    )
    if res.rowcount != 1:
        db.rollback()
        current = db.query(ImportJob.status).filter(ImportJob.id == job_id).scalar()
        if current is None:
            raise ValueError(f"Import job {job_id} not found")
        raise InvalidStatusTransition(current, target)
    db.commit()
    # commit expired the identity map, so this reloads the stored row
    return db.get(ImportJob, job_id)

def set_total_rows(db: Session, job_id: int, total_rows: int) -> None:
    job = db.query(ImportJob).filter(ImportJob.id == job_id).one()
    job.total_rows = total_rows
    db.commit()

def list_import_jobs(db: Session, user_id: int):
    return (
        db.query(ImportJob)
        .filter(ImportJob.user_id == user_id)
        .order_by(ImportJob.created_at.desc(), ImportJob.id.desc())
        .all()
    )

def list_import_logs(db: Session, job_id: int):
    return db.query(ImportLog).filter(ImportLog.job_id == job_id).order_by(ImportLog.row_number, ImportLog.id).all()

def add_row_errors(db: Session, job_id: int, errors: list[RowError]) -> None:
    for er in errors:
        db.add(ImportLog(
            job_id=job_id,
            row_number=er.row_num,
            level=LogLevel.error.value,
            message=er.message,
            row_data=er.row_data,
        ))
    db.commit()
