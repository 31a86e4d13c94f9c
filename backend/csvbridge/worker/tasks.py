from sqlalchemy.orm import Session

from csvbridge.worker.celery_app import celery_app
from csvbridge.core.logging import logger
from csvbridge.db.session import SessionLocal
from csvbridge.crud.imports import InvalidStatusTransition, get_import_job
from csvbridge.services.etl.importer import run_import


@celery_app.task(name="imports.run_import", bind=True)
def run_import_task(self, job_id: int, customer_name: str | None = None, import_date: str | None = None):
    db: Session = SessionLocal()
    try:
        job = get_import_job(db, job_id)
        if not job:
            logger.error("import_job_missing", job_id=job_id)
            return None

        # reads the stored upload; status bookkeeping happens inside run_import
        try:
            result = run_import(db, job, customer_name=customer_name, import_date=import_date)
        except InvalidStatusTransition as e:
            # enqueued twice, or already run through /execute
            logger.warning("import_job_already_started", job_id=job_id, status=e.current)
            return None
        return {
            "success": result.success,
            "failed": result.failed,
            "errors": [{"row": er.row_num, "error": er.message} for er in result.errors],
        }
    finally:
        db.close()
