import os

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("ENV", "test")

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from csvbridge.db.base import Base
from csvbridge.db import models
from csvbridge.services.remote.driver import RemoteSession

REMOTE_TABLE_DDL = """
CREATE TABLE "CustomerData" (
    "Id" INTEGER PRIMARY KEY AUTOINCREMENT,
    "CustomerName" TEXT,
    "DisplayName" TEXT,
    "FirstName" TEXT,
    "LastName" TEXT NOT NULL,
    "CompanyName" TEXT,
    "WorkEmail" TEXT,
    "EmployeeID" INTEGER,
    "EmployeeHireDate" DATETIME,
    "ImportDate" DATETIME
)
"""


class TrackingSession(RemoteSession):
    def __init__(self, engine, registry):
        super().__init__(engine)
        self.closed = False
        registry.append(self)

    def close(self):
        self.closed = True
        super().close()


@pytest.fixture()
def db_session():
    engine = create_engine("sqlite://", connect_args={"check_same_thread": False}, poolclass=StaticPool)
    Base.metadata.create_all(engine)
    SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    db = SessionLocal()
    yield db
    db.close()
    engine.dispose()


@pytest.fixture()
def remote_engine(tmp_path):
    engine = create_engine(f"sqlite:///{tmp_path / 'remote.db'}")
    with engine.begin() as conn:
        conn.exec_driver_sql(REMOTE_TABLE_DDL)
    yield engine
    engine.dispose()


@pytest.fixture()
def remote_connector(remote_engine):
    sessions: list[TrackingSession] = []

    def _connect(config):
        return TrackingSession(remote_engine, sessions)

    _connect.sessions = sessions
    return _connect


@pytest.fixture()
def remote_rows(remote_engine):
    def _rows(sql='SELECT * FROM "CustomerData" ORDER BY "Id"'):
        with remote_engine.connect() as conn:
            return [dict(r._mapping) for r in conn.exec_driver_sql(sql)]
    return _rows


@pytest.fixture()
def seed_user(db_session):
    user = models.User(login="alice@example.com", email="alice@example.com", role="user", password_hash=None)
    db_session.add(user)
    db_session.commit()
    db_session.refresh(user)
    return user


@pytest.fixture()
def seed_connection(db_session, seed_user):
    conn = models.RemoteConnection(
        user_id=seed_user.id,
        name="Contacts",
        server="sql.example.net",
        database="crm",
        username="loader",
        password="secret",
        port=1433,
        table_name="CustomerData",
    )
    db_session.add(conn)
    db_session.commit()
    db_session.refresh(conn)
    return conn


@pytest.fixture()
def ledger_sessionmaker(tmp_path):
    """Sessions on separate connections to one file-backed ledger."""
    engine = create_engine(f"sqlite:///{tmp_path / 'ledger.db'}")
    Base.metadata.create_all(engine)
    yield sessionmaker(autocommit=False, autoflush=False, bind=engine)
    engine.dispose()
