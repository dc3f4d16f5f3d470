import threading

import pytest

from chainboard.storage.entities import User
from chainboard.storage.record import (
    DeletedError,
    MutableRecord,
    NotDirtyError,
    RecordError,
    UninitializedError,
)


def test_commit_then_delete():
    record = MutableRecord()
    entity = User("x", id=999)
    record.write(entity)
    assert record.dirty_value() is entity
    record.commit()
    assert record.value().id == 999
    record.delete()
    with pytest.raises(DeletedError):
        record.dirty_value()


def test_new_record_is_uninitialized():
    record = MutableRecord()
    with pytest.raises(UninitializedError):
        record.value()
    with pytest.raises(NotDirtyError):
        record.dirty_value()
    assert record.is_dirty() is False


def test_commit_and_rollback_require_dirty():
    record = MutableRecord()
    with pytest.raises(NotDirtyError):
        record.commit()
    with pytest.raises(NotDirtyError):
        record.rollback()


def test_rollback_restores_confirmed():
    record = MutableRecord()
    record.write(User("old", id=1))
    record.commit()
    record.write(User("new", id=1))
    assert record.is_dirty() is True
    record.rollback()
    assert record.is_dirty() is False
    assert record.value().name == "old"


def test_deleted_error_carries_value():
    record = MutableRecord()
    entity = User("gone", id=3)
    record.write(entity)
    record.commit()
    record.delete()
    with pytest.raises(DeletedError) as info:
        record.dirty_value()
    assert info.value.value is entity
    record.commit()
    with pytest.raises(DeletedError):
        record.value()


def test_write_after_committed_delete_fails():
    record = MutableRecord()
    record.write(User("a", id=1))
    record.commit()
    record.delete()
    record.commit()
    with pytest.raises(DeletedError):
        record.write(User("b", id=1))
    # the failed write released the record, so another change is possible
    record.delete()
    assert record.is_dirty() is True


def test_snapshot_is_independent():
    record = MutableRecord()
    record.write(User("first", id=1))
    record.commit()
    snapshot = record.current_snapshot()
    record.write(User("second", id=1))
    record.commit()
    assert snapshot.value().name == "first"
    assert record.value().name == "second"
    assert snapshot.is_dirty() is False


def test_pending_change_blocks_other_writers():
    record = MutableRecord()
    record.write(User("a", id=1))
    finished = threading.Event()

    def writer():
        record.write(User("b", id=1))
        record.commit()
        finished.set()

    thread = threading.Thread(target=writer)
    thread.start()
    assert not finished.wait(0.1)
    record.commit()
    thread.join(2)
    assert finished.is_set()
    assert record.value().name == "b"


def test_errors_share_base():
    assert issubclass(DeletedError, RecordError)
    assert str(NotDirtyError()) == "record not dirty"