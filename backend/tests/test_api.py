import json

import pytest
from fastapi.testclient import TestClient

from csvbridge.core.config import settings
from csvbridge.core.deps import get_db, get_remote_connector
from csvbridge.crud.users import create_user
from csvbridge.db.models.user import Role
from csvbridge.main import app
from csvbridge.schemas.admin import UserCreateIn

MAPPINGS = {
    "FirstName": {"type": "source", "column": "first"},
    "LastName": {"type": "source", "column": "last"},
    "CompanyName": {"type": "literal", "text": "ACME"},
}
CSV = "first,last\nAnn,Lee\nBob,\nCid,Ray\n"


@pytest.fixture()
def client(db_session, remote_connector, tmp_path, monkeypatch):
    monkeypatch.setattr(settings, "UPLOAD_DIR", str(tmp_path / "uploads"))

    def _db():
        yield db_session

    app.dependency_overrides[get_db] = _db
    app.dependency_overrides[get_remote_connector] = lambda: remote_connector
    yield TestClient(app)
    app.dependency_overrides.clear()


def _login(client, db_session, login, role=Role.user):
    create_user(db_session, UserCreateIn(login=login, password="s3cret!", role=role))
    resp = client.post("/auth/login", json={"login": login, "password": "s3cret!"})
    assert resp.status_code == 200
    return {"Authorization": f"Bearer {resp.json()['access_token']}"}


@pytest.fixture()
def auth(client, db_session):
    return _login(client, db_session, "ann@example.com")


@pytest.fixture()
def connection_id(client, auth):
    resp = client.post("/connections", headers=auth, json={
        "name": " Contacts ",
        "server": "sql.example.net",
        "database": "crm",
        "username": "loader",
        "password": "secret",
        "table_name": "CustomerData",
    })
    assert resp.status_code == 200
    return resp.json()["id"]


def test_healthz(client):
    assert client.get("/healthz").json() == {"status": "ok"}


def test_requires_token(client):
    assert client.get("/imports").status_code == 401


def test_wrong_password(client, db_session):
    create_user(db_session, UserCreateIn(login="bob@example.com", password="s3cret!"))
    resp = client.post("/auth/login", json={"login": "bob@example.com", "password": "nope"})
    assert resp.status_code == 401


def test_me(client, auth):
    body = client.get("/auth/me", headers=auth).json()
    assert body["login"] == "ann@example.com"
    assert body["role"] == "user"


def test_connection_crud_hides_password(client, auth, connection_id):
    body = client.get(f"/connections/{connection_id}", headers=auth).json()
    assert body["name"] == "Contacts"
    assert body["port"] == 1433
    assert "password" not in body

    resp = client.put(f"/connections/{connection_id}", headers=auth, json={"table_name": "dbo.People", "password": ""})
    assert resp.json()["table_name"] == "dbo.People"

    assert client.delete(f"/connections/{connection_id}", headers=auth).json() == {"success": True}
    assert client.get(f"/connections/{connection_id}", headers=auth).status_code == 404


def test_connections_are_owner_scoped(client, db_session, connection_id):
    other = _login(client, db_session, "eve@example.com")
    assert client.get(f"/connections/{connection_id}", headers=other).status_code == 404
    assert client.get("/connections", headers=other).json() == []


def test_connection_check(client, auth):
    resp = client.post("/connections/test", headers=auth, json={
        "server": "sql.example.net", "database": "crm", "username": "loader", "password": "secret",
    })
    assert resp.json() == {"success": True, "error": None}


def test_target_fields(client, auth):
    fields = client.get("/imports/target-fields", headers=auth).json()
    assert {"name": "WorkEmail", "label": "Work Email"} in fields
    assert len(fields) == 22


def test_parse_preview(client, auth):
    resp = client.post("/imports/parse", headers=auth, json={"file_content": CSV})
    assert resp.json() == {
        "headers": ["first", "last"],
        "preview": [{"first": "Ann", "last": "Lee"}, {"first": "Bob", "last": ""}, {"first": "Cid", "last": "Ray"}],
        "total_rows": 3,
    }
    assert client.post("/imports/parse", headers=auth, json={"file_content": ""}).status_code == 400


def test_create_and_execute_import(client, auth, connection_id, remote_rows):
    resp = client.post("/imports", headers=auth, json={
        "connection_id": connection_id,
        "file_name": "people.csv",
        "field_mappings": MAPPINGS,
    })
    assert resp.status_code == 200
    job = resp.json()
    assert job["status"] == "pending"

    resp = client.post(f"/imports/{job['id']}/execute", headers=auth, json={
        "csv_content": CSV,
        "customer_name": "Contoso",
        "import_date": "2025-01-15",
    })
    assert resp.status_code == 200
    assert resp.json()["success"] == 2
    assert resp.json()["failed"] == 1
    assert resp.json()["errors"][0]["row"] == 2

    job = client.get(f"/imports/{job['id']}", headers=auth).json()
    assert job["status"] == "failed"
    assert (job["total_rows"], job["processed_rows"], job["failed_rows"]) == (3, 2, 1)

    logs = client.get(f"/imports/{job['id']}/logs", headers=auth).json()
    assert [log["row_number"] for log in logs] == [2]
    assert {r["CustomerName"] for r in remote_rows()} == {"Contoso"}

    resp = client.post(f"/imports/{job['id']}/execute", headers=auth, json={"csv_content": CSV})
    assert resp.status_code == 409


def test_invalid_mappings_rejected(client, auth, connection_id):
    resp = client.post("/imports", headers=auth, json={
        "connection_id": connection_id,
        "file_name": "people.csv",
        "field_mappings": {"Nope": {"type": "literal", "text": "x"}},
    })
    assert resp.status_code == 422


def test_unknown_connection_rejected(client, auth):
    resp = client.post("/imports", headers=auth, json={
        "connection_id": 404, "file_name": "people.csv", "field_mappings": MAPPINGS,
    })
    assert resp.status_code == 404


def test_upload_then_execute_from_stored_file(client, auth, connection_id):
    resp = client.post(
        "/imports/upload",
        headers=auth,
        data={"connection_id": str(connection_id), "field_mappings": json.dumps(MAPPINGS)},
        files={"file": ("people.csv", CSV.encode("utf-8"), "text/csv")},
    )
    assert resp.status_code == 200
    job_id = resp.json()["id"]

    resp = client.post(f"/imports/{job_id}/execute", headers=auth, json={})
    assert resp.json()["success"] == 2


def test_upload_rejects_other_files(client, auth, connection_id):
    resp = client.post(
        "/imports/upload",
        headers=auth,
        data={"connection_id": str(connection_id), "field_mappings": json.dumps(MAPPINGS)},
        files={"file": ("people.xlsx", b"xx", "application/octet-stream")},
    )
    assert resp.status_code == 400


def test_execute_bad_csv_is_400(client, auth, connection_id):
    job = client.post("/imports", headers=auth, json={
        "connection_id": connection_id, "file_name": "people.csv", "field_mappings": MAPPINGS,
    }).json()
    resp = client.post(f"/imports/{job['id']}/execute", headers=auth, json={"csv_content": ""})
    assert resp.status_code == 400
    assert client.get(f"/imports/{job['id']}", headers=auth).json()["status"] == "failed"


def test_enqueue_hands_job_to_worker(client, auth, connection_id, monkeypatch):
    import csvbridge.api.routers.imports as imports_router

    calls = []

    class FakeTask:
        def delay(self, *args, **kwargs):
            calls.append((args, kwargs))

    monkeypatch.setattr(imports_router, "run_import_task", FakeTask())
    job = client.post("/imports", headers=auth, json={
        "connection_id": connection_id, "file_name": "people.csv", "field_mappings": MAPPINGS, "file_content": CSV,
    }).json()

    resp = client.post(f"/imports/{job['id']}/enqueue", headers=auth, json={"import_date": "2025-01-15"})
    assert resp.status_code == 200
    assert calls == [((job["id"],), {"customer_name": None, "import_date": "2025-01-15"})]


def test_enqueue_without_file_is_400(client, auth, connection_id):
    job = client.post("/imports", headers=auth, json={
        "connection_id": connection_id, "file_name": "people.csv", "field_mappings": MAPPINGS,
    }).json()
    assert client.post(f"/imports/{job['id']}/enqueue", headers=auth, json={}).status_code == 400


def test_mapping_templates(client, auth):
    resp = client.post("/mapping-templates", headers=auth, json={
        "name": "HR export",
        "field_mappings": {"First Name": {"type": "csv", "csvField": "first"}},
    })
    assert resp.status_code == 200
    tpl = resp.json()
    assert tpl["mappings"] == {"FirstName": {"type": "source", "column": "first"}}

    assert [t["name"] for t in client.get("/mapping-templates", headers=auth).json()] == ["HR export"]
    assert client.delete(f"/mapping-templates/{tpl['id']}", headers=auth).json() == {"success": True}
    assert client.get(f"/mapping-templates/{tpl['id']}", headers=auth).status_code == 404


def test_cleanup_flow(client, auth, connection_id, db_session):
    job = client.post("/imports", headers=auth, json={
        "connection_id": connection_id, "file_name": "people.csv", "field_mappings": MAPPINGS,
    }).json()
    client.post(f"/imports/{job['id']}/execute", headers=auth, json={
        "csv_content": CSV, "customer_name": "Contoso", "import_date": "2025-01-15",
    })

    q = {"connection_id": connection_id}
    assert client.get("/cleanup/customers", headers=auth, params=q).json() == ["Contoso"]
    assert client.get("/cleanup/import-dates", headers=auth, params=q).json() == ["2025-01-15"]

    resp = client.post("/cleanup/delete", headers=auth, json={
        "connection_id": connection_id, "customer_name": "Contoso", "import_date": "2025-01-15",
    })
    assert resp.json() == {"deleted_count": 2}

    audit = client.get("/cleanup/audit", headers=auth).json()
    assert len(audit) == 1
    assert audit[0]["deleted_count"] == 2

    assert client.get("/cleanup/audit/all", headers=auth).status_code == 403
    admin = _login(client, db_session, "root@example.com", role=Role.admin)
    assert len(client.get("/cleanup/audit/all", headers=admin).json()) == 1


def test_admin_users(client, db_session, auth):
    admin = _login(client, db_session, "root@example.com", role=Role.admin)
    assert client.get("/admin/users", headers=auth).status_code == 403

    resp = client.post("/admin/users", headers=admin, json={"login": "new@example.com"})
    assert resp.status_code == 200
    new_id = resp.json()["id"]
    assert client.post("/admin/users", headers=admin, json={"login": "new@example.com"}).status_code == 409

    me = client.get("/auth/me", headers=admin).json()
    assert client.delete(f"/admin/users/{me['id']}", headers=admin).status_code == 400
    assert client.delete(f"/admin/users/{new_id}", headers=admin).json() == {"success": True}
    assert client.delete(f"/admin/users/{new_id}", headers=admin).status_code == 404


def test_login_reports_expiry(client, db_session):
    create_user(db_session, UserCreateIn(login="kim@example.com", password="s3cret!"))
    body = client.post("/auth/login", json={"login": "kim@example.com", "password": "s3cret!"}).json()
    assert body["token_type"] == "bearer"
    assert body["expires_in"] == settings.JWT_EXPIRES_MIN * 60


def test_token_of_recreated_login_is_rejected(client, db_session, auth):
    from csvbridge.crud.users import delete_user, get_user_by_login

    create_user(db_session, UserCreateIn(login="zed@example.com"))
    user = get_user_by_login(db_session, "ann@example.com")
    delete_user(db_session, user.id)
    create_user(db_session, UserCreateIn(login="ann@example.com", password="s3cret!"))
    assert client.get("/auth/me", headers=auth).status_code == 401


def test_cleanup_audit_failure_is_not_reported_as_failed_delete(client, auth, connection_id, monkeypatch):
    import csvbridge.services.cleanup as cleanup

    job = client.post("/imports", headers=auth, json={
        "connection_id": connection_id, "file_name": "people.csv", "field_mappings": MAPPINGS,
    }).json()
    client.post(f"/imports/{job['id']}/execute", headers=auth, json={
        "csv_content": CSV, "customer_name": "Contoso", "import_date": "2025-01-15",
    })

    def broken_audit(*args, **kwargs):
        raise RuntimeError("ledger unavailable")

    monkeypatch.setattr(cleanup, "add_cleanup_audit", broken_audit)
    resp = client.post("/cleanup/delete", headers=auth, json={
        "connection_id": connection_id, "customer_name": "Contoso", "import_date": "2025-01-15",
    })
    assert resp.status_code == 500
    assert resp.json()["detail"] == "Deleted 2 records but the audit entry could not be saved"
