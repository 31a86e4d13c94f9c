import csvbridge.worker.tasks as tasks
from csvbridge.crud.imports import create_import_job, get_import_job
from csvbridge.db.models.import_job import JobStatus

MAPPINGS = {"FirstName": {"type": "source", "column": "first"}, "LastName": {"type": "source", "column": "last"}}


def _stored_job(db_session, seed_user, seed_connection, tmp_path):
    path = tmp_path / "people.csv"
    path.write_text("first,last\nAnn,Lee\nBob,Ray\n", encoding="utf-8")
    job = create_import_job(db_session, seed_user.id, seed_connection.id, "people.csv", MAPPINGS, file_path=str(path))
    return job.id


def _use_test_backends(monkeypatch, db_session, remote_connector):
    real_run_import = tasks.run_import
    monkeypatch.setattr(tasks, "SessionLocal", lambda: db_session)
    monkeypatch.setattr(tasks, "run_import", lambda db, job, **kw: real_run_import(db, job, connector=remote_connector, **kw))


def test_task_runs_stored_upload(db_session, seed_user, seed_connection, remote_connector, tmp_path, monkeypatch):
    job_id = _stored_job(db_session, seed_user, seed_connection, tmp_path)
    _use_test_backends(monkeypatch, db_session, remote_connector)

    out = tasks.run_import_task(job_id, customer_name="Contoso", import_date="2025-01-15")

    assert out == {"success": 2, "failed": 0, "errors": []}
    assert get_import_job(db_session, job_id).status == JobStatus.completed.value


def test_task_enqueued_twice_runs_once(
    db_session, seed_user, seed_connection, remote_connector, remote_rows, tmp_path, monkeypatch
):
    job_id = _stored_job(db_session, seed_user, seed_connection, tmp_path)
    _use_test_backends(monkeypatch, db_session, remote_connector)

    assert tasks.run_import_task(job_id)["success"] == 2
    assert tasks.run_import_task(job_id) is None
    assert len(remote_rows()) == 2
    assert get_import_job(db_session, job_id).status == JobStatus.completed.value


def test_task_missing_job(db_session, monkeypatch):
    monkeypatch.setattr(tasks, "SessionLocal", lambda: db_session)
    assert tasks.run_import_task(12345) is None
