from __future__ import annotations

import sqlite3

import pytest

from storage_provisioner.errors import RequestLogError
from storage_provisioner.journal.db import RequestLogStore
from storage_provisioner.journal.models import ProjectRequestRecord


@pytest.fixture
def store(tmp_path):
    log_store = RequestLogStore(str(tmp_path / "nested" / "requests.sqlite"))
    yield log_store
    log_store.close()


def test_record_and_list(store) -> None:
    first = store.record_project_request(ProjectRequestRecord("u2", 200, created_at="t1"))
    second = store.record_project_request(ProjectRequestRecord("u3", None, created_at="t2"))

    assert second == first + 1
    assert store.list_project_requests() == [
        ProjectRequestRecord("u2", 200, created_at="t1"),
        ProjectRequestRecord("u3", None, created_at="t2"),
    ]
    assert store.list_project_requests(user_name="u3") == [
        ProjectRequestRecord("u3", None, created_at="t2")
    ]


def test_only_record_columns_are_stored(store, tmp_path) -> None:
    store.record_project_request(ProjectRequestRecord("u2", 200))

    conn = sqlite3.connect(str(tmp_path / "nested" / "requests.sqlite"))
    conn.row_factory = sqlite3.Row
    try:
        row = conn.execute("SELECT * FROM project_requests WHERE user_name = ?", ("u2",)).fetchone()
    finally:
        conn.close()
    assert set(row.keys()) == {"id", "user_name", "requested_quota_gb", "created_at"}
    assert row["created_at"]


def test_created_at_defaults_to_utc_iso() -> None:
    record = ProjectRequestRecord("u2", None)
    assert record.created_at.endswith("+00:00")


def test_write_after_close_raises_request_log_error(store) -> None:
    store.close()
    with pytest.raises(RequestLogError, match="Failed to save project request"):
        store.record_project_request(ProjectRequestRecord("u2", 1))


def test_close_is_idempotent(store) -> None:
    store.close()
    store.close()


def test_large_integer_quota_is_stored_as_real(store) -> None:
    store.record_project_request(ProjectRequestRecord("u2", 10**20, created_at="t"))

    assert store.list_project_requests() == [
        ProjectRequestRecord("u2", float(10**20), created_at="t")
    ]


def test_unrepresentable_quota_raises_request_log_error(store) -> None:
    with pytest.raises(RequestLogError, match="Failed to save project request"):
        store.record_project_request(ProjectRequestRecord("u2", 10**400))
    assert store.list_project_requests() == []
