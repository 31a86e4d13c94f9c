from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from csvbridge.core.deps import get_current_user, get_db, get_owned_connection, get_remote_connector, require_roles
from csvbridge.crud.audit import list_all_cleanup_audit, list_cleanup_audit
from csvbridge.db.models.user import Role, User
from csvbridge.schemas.cleanup import CleanupAuditOut, CleanupDeleteIn, CleanupDeleteOut
from csvbridge.services.cleanup import CleanupAuditError, delete_records, list_customers, list_import_dates
from csvbridge.services.remote.driver import Connector, error_message

router = APIRouter()


@router.get("/customers", response_model=list[str])
def get_customers(
    connection_id: int = Query(...),
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
    connector: Connector = Depends(get_remote_connector),
):
    c = get_owned_connection(db, user, connection_id)
    try:
        return list_customers(c, connector=connector)
    except Exception as e:
        raise HTTPException(status_code=502, detail=f"Failed to fetch customers: {error_message(e)}")


@router.get("/import-dates", response_model=list[str])
def get_import_dates(
    connection_id: int = Query(...),
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
    connector: Connector = Depends(get_remote_connector),
):
    c = get_owned_connection(db, user, connection_id)
    try:
        return list_import_dates(c, connector=connector)
    except Exception as e:
        raise HTTPException(status_code=502, detail=f"Failed to fetch import dates: {error_message(e)}")


@router.post("/delete", response_model=CleanupDeleteOut)
def delete_records_endpoint(
    data: CleanupDeleteIn,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
    connector: Connector = Depends(get_remote_connector),
):
    c = get_owned_connection(db, user, data.connection_id)
    try:
        entry = delete_records(db, user.id, c, data.customer_name, data.import_date, connector=connector)
    except CleanupAuditError as e:
        raise HTTPException(status_code=500, detail=str(e))
    except Exception as e:
        raise HTTPException(status_code=502, detail=f"Failed to delete records: {error_message(e)}")
    return CleanupDeleteOut(deleted_count=entry.deleted_count)


@router.get("/audit", response_model=list[CleanupAuditOut])
def get_audit_logs(
    limit: int = Query(50, ge=1, le=1000),
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    return list_cleanup_audit(db, user.id, limit)


@router.get("/audit/all", response_model=list[CleanupAuditOut])
def get_all_audit_logs(
    limit: int = Query(100, ge=1, le=1000),
    db: Session = Depends(get_db),
    _user: User = Depends(require_roles(Role.admin)),
):
    return list_all_cleanup_audit(db, limit)
