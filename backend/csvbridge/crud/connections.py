from sqlalchemy.orm import Session
from csvbridge.db.models.connection import RemoteConnection
from csvbridge.schemas.connections import ConnectionCreate, ConnectionUpdate

def get_connection(db: Session, connection_id: int) -> RemoteConnection | None:
    return db.query(RemoteConnection).filter(RemoteConnection.id == connection_id).one_or_none()

def get_user_connection(db: Session, user_id: int, connection_id: int) -> RemoteConnection | None:
    return (
        db.query(RemoteConnection)
        .filter(RemoteConnection.id == connection_id, RemoteConnection.user_id == user_id)
        .one_or_none()
    )

def list_connections(db: Session, user_id: int):
    return db.query(RemoteConnection).filter(RemoteConnection.user_id == user_id).order_by(RemoteConnection.id).all()

def create_connection(db: Session, user_id: int, data: ConnectionCreate) -> RemoteConnection:
    c = RemoteConnection(user_id=user_id, **data.model_dump())
    db.add(c)
    db.commit()
    db.refresh(c)
    return c

def update_connection(db: Session, c: RemoteConnection, data: ConnectionUpdate) -> RemoteConnection:
    for key, value in data.model_dump(exclude_unset=True).items():
        # empty strings from the edit form mean "unchanged"
        if value is None or value == "":
            continue
        setattr(c, key, value)
    db.commit()
    db.refresh(c)
    return c

def delete_connection(db: Session, c: RemoteConnection) -> None:
    db.delete(c)
    db.commit()
