from datetime import datetime, timedelta, timezone

import pytest
from sqlmodel import SQLModel

from errors import StorageFault, TaskNotFound


def test_create_then_get_returns_same_fields(store):
    task_id = store.create("Write report", "quarterly numbers", "in-progress")

    task = store.get_by_id(task_id)

    assert task.id == task_id
    assert task.title == "Write report"
    assert task.description == "quarterly numbers"
    assert task.status == "in-progress"
    assert task.created_at is not None


def test_create_defaults_status_to_pending(store):
    task_id = store.create("Buy milk", "")

    assert store.get_by_id(task_id).status == "pending"


def test_store_does_not_validate_values(store):
    task_id = store.create("", None, "whatever")

    task = store.get_by_id(task_id)
    assert task.title == ""
    assert task.status == "whatever"


def test_get_missing_task_raises_not_found(store):
    with pytest.raises(TaskNotFound) as excinfo:
        store.get_by_id(999)
    assert excinfo.value.task_id == 999


def test_update_changes_mutable_fields_only(store):
    task_id = store.create("Old", "old desc")
    before = store.get_by_id(task_id)

    changes = store.update(task_id, "New", "new desc", "done")

    after = store.get_by_id(task_id)
    assert changes == 1
    assert after.id == before.id
    assert after.created_at == before.created_at
    assert (after.title, after.description, after.status) == ("New", "new desc", "done")


def test_update_missing_task_changes_nothing(store):
    assert store.update(42, "X", "Y", "done") == 0
    assert store.list_all() == []


def test_delete_is_idempotent(store):
    task_id = store.create("Temporary", "")

    assert store.delete(task_id) == 1
    with pytest.raises(TaskNotFound):
        store.get_by_id(task_id)

    assert store.delete(task_id) == 0
    with pytest.raises(TaskNotFound):
        store.get_by_id(task_id)


def test_list_all_is_newest_first(store):
    a = store.create("A", "")
    b = store.create("B", "")
    c = store.create("C", "")

    assert [t.id for t in store.list_all()] == [c, b, a]


def test_ids_are_not_reused_after_delete(store):
    store.create("first", "")
    second = store.create("second", "")
    store.delete(second)

    third = store.create("third", "")

    assert third > second


def test_storage_errors_become_storage_fault(store):
    SQLModel.metadata.drop_all(store.engine)

    with pytest.raises(StorageFault):
        store.list_all()
    with pytest.raises(StorageFault):
        store.create("A", "")
    with pytest.raises(StorageFault):
        store.get_by_id(1)
    with pytest.raises(StorageFault):
        store.update(1, "A", "", "done")
    with pytest.raises(StorageFault):
        store.delete(1)


def test_storage_fault_keeps_original_cause(store):
    SQLModel.metadata.drop_all(store.engine)

    with pytest.raises(StorageFault) as excinfo:
        store.list_all()
    assert excinfo.value.__cause__ is not None


def _as_utc(value):
    # SQLite hands back naive timestamps on some driver versions
    return value if value.tzinfo else value.replace(tzinfo=timezone.utc)


def test_created_at_is_stamped_in_utc(store):
    before = datetime.now(timezone.utc)
    task_id = store.create("Stamp", "")
    after = datetime.now(timezone.utc)

    created_at = _as_utc(store.get_by_id(task_id).created_at)

    assert before - timedelta(seconds=1) <= created_at <= after + timedelta(seconds=1)


def test_created_at_round_trips_unchanged(store):
    task_id = store.create("Stamp", "")
    created_at = store.get_by_id(task_id).created_at

    store.update(task_id, "Restamped?", "no", "done")

    assert store.get_by_id(task_id).created_at == created_at
    assert store.list_all()[0].created_at == created_at
