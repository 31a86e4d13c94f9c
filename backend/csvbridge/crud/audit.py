from sqlalchemy.orm import Session
from csvbridge.db.models.cleanup_audit import CleanupAuditLog

def add_cleanup_audit(
    db: Session,
    user_id: int,
    connection_id: int,
    customer_name: str,
    import_date: str,
    table_name: str,
    deleted_count: int,
) -> CleanupAuditLog:
    entry = CleanupAuditLog(
        user_id=user_id,
        connection_id=connection_id,
        customer_name=customer_name,
        import_date=import_date,
        table_name=table_name,
        deleted_count=deleted_count,
    )
    db.add(entry)
    db.commit()
    db.refresh(entry)
    return entry

def list_cleanup_audit(db: Session, user_id: int, limit: int = 50):
    return (
        db.query(CleanupAuditLog)
        .filter(CleanupAuditLog.user_id == user_id)
        .order_by(CleanupAuditLog.created_at.desc(), CleanupAuditLog.id.desc())
        .limit(limit)
        .all()
    )

def list_all_cleanup_audit(db: Session, limit: int = 100):
    return (
        db.query(CleanupAuditLog)
        .order_by(CleanupAuditLog.created_at.desc(), CleanupAuditLog.id.desc())
        .limit(limit)
        .all()
    )
