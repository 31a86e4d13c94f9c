import datetime as dt

import pytest

from csvbridge.crud.audit import list_all_cleanup_audit, list_cleanup_audit
from csvbridge.db.models.cleanup_audit import CleanupAuditLog
from csvbridge.services.cleanup import delete_records, list_customers, list_import_dates
from csvbridge.services.remote.driver import RemoteConfig
from csvbridge.services.remote.executor import insert_rows


@pytest.fixture()
def loaded(seed_connection, remote_connector):
    config = RemoteConfig.from_connection(seed_connection)
    records = [
        {"CustomerName": "Contoso", "LastName": "Lee", "ImportDate": "2025-01-15"},
        {"CustomerName": "Contoso", "LastName": "Ray", "ImportDate": "2025-01-15 17:45:00"},
        {"CustomerName": "Contoso", "LastName": "Fox", "ImportDate": "2025-01-16"},
        {"CustomerName": "Fabrikam", "LastName": "Kim", "ImportDate": "2025-01-15"},
    ]
    result = insert_rows(config, "CustomerData", records, connector=remote_connector)
    assert result.success == 4
    return seed_connection


def test_list_customers(loaded, remote_connector):
    assert list_customers(loaded, connector=remote_connector) == ["Contoso", "Fabrikam"]


def test_list_import_dates_newest_first(loaded, remote_connector):
    assert list_import_dates(loaded, connector=remote_connector) == ["2025-01-16", "2025-01-15"]


def test_delete_matches_whole_day(db_session, seed_user, loaded, remote_connector, remote_rows):
    entry = delete_records(db_session, seed_user.id, loaded, "Contoso", dt.date(2025, 1, 15), connector=remote_connector)

    assert entry.deleted_count == 2
    assert entry.import_date == "2025-01-15"
    assert entry.table_name == "CustomerData"
    assert sorted(r["LastName"] for r in remote_rows()) == ["Fox", "Kim"]


def test_delete_without_matches_is_still_audited(db_session, seed_user, loaded, remote_connector, remote_rows):
    entry = delete_records(db_session, seed_user.id, loaded, "Northwind", "2025-01-15", connector=remote_connector)

    assert entry.deleted_count == 0
    assert len(remote_rows()) == 4
    audit = db_session.query(CleanupAuditLog).all()
    assert len(audit) == 1
    assert audit[0].customer_name == "Northwind"
    assert audit[0].user_id == seed_user.id
    assert audit[0].connection_id == loaded.id


def test_failed_delete_writes_no_audit(db_session, seed_user, seed_connection, remote_connector):
    seed_connection.table_name = "NoSuchTable"
    db_session.commit()
    with pytest.raises(Exception):
        delete_records(db_session, seed_user.id, seed_connection, "Contoso", "2025-01-15", connector=remote_connector)
    assert db_session.query(CleanupAuditLog).count() == 0
    assert remote_connector.sessions[0].closed


def test_audit_listing_scoped_and_limited(db_session, seed_user, loaded, remote_connector):
    for _ in range(3):
        delete_records(db_session, seed_user.id, loaded, "Northwind", "2025-01-15", connector=remote_connector)
    delete_records(db_session, seed_user.id + 1, loaded, "Northwind", "2025-01-15", connector=remote_connector)

    assert len(list_cleanup_audit(db_session, seed_user.id)) == 3
    assert len(list_cleanup_audit(db_session, seed_user.id, limit=2)) == 2
    assert len(list_all_cleanup_audit(db_session)) == 4


def test_audit_write_failure_reports_deleted_rows(db_session, seed_user, loaded, remote_connector, remote_rows, monkeypatch):
    import csvbridge.services.cleanup as cleanup

    def broken_audit(*args, **kwargs):
        raise RuntimeError("ledger unavailable")

    monkeypatch.setattr(cleanup, "add_cleanup_audit", broken_audit)
    with pytest.raises(cleanup.CleanupAuditError) as exc:
        delete_records(db_session, seed_user.id, loaded, "Contoso", "2025-01-15", connector=remote_connector)

    assert exc.value.deleted_count == 2
    assert "Deleted 2 records" in str(exc.value)
    assert len(remote_rows()) == 2
    assert db_session.query(CleanupAuditLog).count() == 0
