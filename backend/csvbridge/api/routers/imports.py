import json

from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile
from pydantic import ValidationError
from sqlalchemy.orm import Session

from csvbridge.core.deps import get_current_user, get_db, get_owned_connection, get_remote_connector
from csvbridge.core.logging import logger
from csvbridge.crud.imports import (
    InvalidStatusTransition,
    create_import_job,
    get_user_import_job,
    list_import_jobs,
    list_import_logs,
)
from csvbridge.db.models.import_job import JobStatus
from csvbridge.db.models.user import User
from csvbridge.schemas.imports import (
    CsvPreviewIn,
    CsvPreviewOut,
    ImportExecuteIn,
    ImportJobCreate,
    ImportJobOut,
    ImportLogOut,
    ImportResultOut,
    TargetFieldOut,
)
from csvbridge.schemas.mapping import TARGET_FIELD_LABELS, dump_mapping, load_mapping
from csvbridge.services.etl.csv_parser import parse_csv, preview
from csvbridge.services.etl.errors import ConnectionNotFoundError, ImportPipelineError
from csvbridge.services.etl.importer import run_import
from csvbridge.services.files import store_csv_text
from csvbridge.services.remote.driver import Connector, error_message
from csvbridge.worker.tasks import run_import_task

router = APIRouter()

MAX_UPLOAD_BYTES = 50 * 1024 * 1024


def _get_owned_job(db: Session, user: User, job_id: int):
    job = get_user_import_job(db, user.id, job_id)
    if not job:
        raise HTTPException(status_code=404, detail="Job not found")
    return job


def _parse_preview(content: str) -> dict:
    try:
        return preview(parse_csv(content))
    except ImportPipelineError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.get("/target-fields", response_model=list[TargetFieldOut])
def get_target_fields(_user: User = Depends(get_current_user)):
    return [TargetFieldOut(name=f.value, label=label) for f, label in TARGET_FIELD_LABELS.items()]


@router.post("/parse", response_model=CsvPreviewOut)
def parse_csv_content(data: CsvPreviewIn, _user: User = Depends(get_current_user)):
    return _parse_preview(data.file_content)


@router.get("", response_model=list[ImportJobOut])
def get_imports(db: Session = Depends(get_db), user: User = Depends(get_current_user)):
    return list_import_jobs(db, user.id)


@router.post("", response_model=ImportJobOut)
def post_import(
    data: ImportJobCreate,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    get_owned_connection(db, user, data.connection_id)
    file_path = str(store_csv_text(user.id, data.file_content)) if data.file_content else None
    job = create_import_job(db, user.id, data.connection_id, data.file_name, data.field_mappings, file_path=file_path)
    logger.info("import_job_created", job_id=job.id, user_id=user.id, connection_id=data.connection_id)
    return job


@router.post("/upload", response_model=ImportJobOut)
def upload_csv(
    connection_id: int = Form(...),
    field_mappings: str = Form(..., description="JSON object: target field -> mapping rule"),
    file: UploadFile = File(...),
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    get_owned_connection(db, user, connection_id)

    if not file.filename or not file.filename.lower().endswith(".csv"):
        raise HTTPException(status_code=400, detail="Only .csv supported")

    try:
        mappings = dump_mapping(load_mapping(json.loads(field_mappings)))
    except (json.JSONDecodeError, ValidationError) as e:
        raise HTTPException(status_code=422, detail=f"Invalid field mappings: {e}")

    raw = file.file.read(MAX_UPLOAD_BYTES + 1)
    if len(raw) > MAX_UPLOAD_BYTES:
        raise HTTPException(status_code=413, detail="File too large")
    try:
        content = raw.decode("utf-8-sig")
    except UnicodeDecodeError:
        raise HTTPException(status_code=400, detail="CSV must be UTF-8 encoded")
    _parse_preview(content)

    path = store_csv_text(user.id, content)
    job = create_import_job(db, user.id, connection_id, file.filename, mappings, file_path=str(path))
    logger.info("import_job_uploaded", job_id=job.id, user_id=user.id, file_name=file.filename)
    return job


@router.get("/{job_id}", response_model=ImportJobOut)
def get_import(job_id: int, db: Session = Depends(get_db), user: User = Depends(get_current_user)):
    return _get_owned_job(db, user, job_id)


@router.get("/{job_id}/logs", response_model=list[ImportLogOut])
def get_import_logs(job_id: int, db: Session = Depends(get_db), user: User = Depends(get_current_user)):
    _get_owned_job(db, user, job_id)
    return list_import_logs(db, job_id)


@router.post("/{job_id}/execute", response_model=ImportResultOut)
def execute_import(
    job_id: int,
    data: ImportExecuteIn,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
    connector: Connector = Depends(get_remote_connector),
):
    job = _get_owned_job(db, user, job_id)
    try:
        result = run_import(
            db,
            job,
            csv_text=data.csv_content,
            customer_name=data.customer_name,
            import_date=data.import_date,
            connector=connector,
        )
    except InvalidStatusTransition as e:
        raise HTTPException(status_code=409, detail=str(e))
    except ConnectionNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except (ImportPipelineError, ValidationError) as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        raise HTTPException(status_code=502, detail=f"Import failed: {error_message(e)}")

    return ImportResultOut(
        success=result.success,
        failed=result.failed,
        errors=[{"row": er.row_num, "error": er.message} for er in result.errors],
    )


@router.post("/{job_id}/enqueue", response_model=ImportJobOut)
def enqueue_import(
    job_id: int,
    data: ImportExecuteIn,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    job = _get_owned_job(db, user, job_id)
    if job.status != JobStatus.pending.value:
        raise HTTPException(status_code=409, detail=f"Import job is {job.status}")
    if not job.file_path:
        raise HTTPException(status_code=400, detail="No uploaded file stored for this job")

    run_import_task.delay(
        job.id,
        customer_name=data.customer_name,
        import_date=data.import_date.isoformat() if data.import_date else None,
    )
    return job
