from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from csvbridge.core.deps import get_current_user, get_db, get_owned_connection, get_remote_connector
from csvbridge.core.logging import logger
from csvbridge.crud.connections import (
    create_connection,
    delete_connection,
    list_connections,
    update_connection,
)
from csvbridge.db.models.user import User
from csvbridge.schemas.connections import (
    ConnectionCreate,
    ConnectionOut,
    ConnectionTestIn,
    ConnectionTestOut,
    ConnectionUpdate,
)
from csvbridge.services.remote.driver import Connector, RemoteConfig, error_message
from csvbridge.services.remote.queries import check_connection, company_names, table_columns

router = APIRouter()


@router.get("", response_model=list[ConnectionOut])
def get_connections(db: Session = Depends(get_db), user: User = Depends(get_current_user)):
    return list_connections(db, user.id)


@router.post("", response_model=ConnectionOut)
def post_connection(data: ConnectionCreate, db: Session = Depends(get_db), user: User = Depends(get_current_user)):
    c = create_connection(db, user.id, data)
    logger.info("connection_created", connection_id=c.id, user_id=user.id, server=c.server)
    return c


@router.post("/test", response_model=ConnectionTestOut)
def test_connection_endpoint(
    data: ConnectionTestIn,
    _user: User = Depends(get_current_user),
    connector: Connector = Depends(get_remote_connector),
):
    return check_connection(RemoteConfig(**data.model_dump()), connector=connector)


@router.get("/{connection_id}", response_model=ConnectionOut)
def get_connection_endpoint(connection_id: int, db: Session = Depends(get_db), user: User = Depends(get_current_user)):
    return get_owned_connection(db, user, connection_id)


@router.put("/{connection_id}", response_model=ConnectionOut)
def put_connection(
    connection_id: int,
    data: ConnectionUpdate,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    return update_connection(db, get_owned_connection(db, user, connection_id), data)


@router.delete("/{connection_id}")
def delete_connection_endpoint(connection_id: int, db: Session = Depends(get_db), user: User = Depends(get_current_user)):
    c = get_owned_connection(db, user, connection_id)
    delete_connection(db, c)
    logger.info("connection_deleted", connection_id=connection_id, user_id=user.id)
    return {"success": True}


@router.get("/{connection_id}/columns", response_model=list[str])
def get_table_columns(
    connection_id: int,
    table_name: str | None = Query(None),
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
    connector: Connector = Depends(get_remote_connector),
):
    c = get_owned_connection(db, user, connection_id)
    try:
        with connector(RemoteConfig.from_connection(c)) as session:
            return table_columns(session, table_name or c.table_name)
    except Exception as e:
        raise HTTPException(status_code=502, detail=f"Failed to fetch columns: {error_message(e)}")


@router.get("/{connection_id}/company-names", response_model=list[str])
def get_company_names(
    connection_id: int,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
    connector: Connector = Depends(get_remote_connector),
):
    c = get_owned_connection(db, user, connection_id)
    try:
        with connector(RemoteConfig.from_connection(c)) as session:
            return company_names(session)
    except Exception as e:
        raise HTTPException(status_code=502, detail=f"Failed to fetch company names: {error_message(e)}")
