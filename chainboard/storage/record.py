"""A stored value with one pending change that is either committed or rolled back."""

from __future__ import annotations

import threading
from dataclasses import dataclass
from typing import Any


class RecordError(Exception):
    """Base of record state errors."""


class UninitializedError(RecordError):
    def __init__(self) -> None:
        super().__init__("confirmed value not initialized")


class DeletedError(RecordError):
    """The record is deleted; the deleted value is kept in ``value``."""

    def __init__(self, value: Any = None) -> None:
        super().__init__("record deleted")
        self.value = value


class NotDirtyError(RecordError):
    def __init__(self) -> None:
        super().__init__("record not dirty")


@dataclass(frozen=True)
class _Slot:
    entity: Any = None
    deleted: bool = False


_EMPTY = _Slot()


class SnapshotRecord:
    """Read-only view of a record's confirmed and pending values."""

    def __init__(self) -> None:
        self._initialized = False
        self._dirty = False
        self._confirmed = _EMPTY
        self._pending = _EMPTY

    def is_dirty(self) -> bool:
        return self._dirty

    def value(self) -> Any:
        """The confirmed value."""
        if not self._initialized:
            raise UninitializedError()
        if self._confirmed.deleted:
            raise DeletedError(self._confirmed.entity)
        return self._confirmed.entity

    def dirty_value(self) -> Any:
        """The pending, not yet committed value."""
        if not self._dirty:
            raise NotDirtyError()
        if self._pending.deleted:
            raise DeletedError(self._pending.entity)
        return self._pending.entity

    def copy(self) -> SnapshotRecord:
        snapshot = SnapshotRecord()
        snapshot._initialized = self._initialized
        snapshot._dirty = self._dirty
        snapshot._confirmed = self._confirmed
        snapshot._pending = self._pending
        return snapshot


class MutableRecord(SnapshotRecord):
    """A record allowing one pending change at a time.

    Writing or deleting holds the record until the change is committed or
    rolled back, possibly from another thread.
    """

    def __init__(self) -> None:
        super().__init__()
        self._lock = threading.Lock()

    def delete(self) -> None:
        self._lock.acquire()
        self._pending = _Slot(self._confirmed.entity, True)
        self._dirty = True

    def write(self, value: Any) -> None:
        self._lock.acquire()
        if self._confirmed.deleted:
            self._lock.release()
            raise DeletedError(self._confirmed.entity)
        self._dirty = True
        self._pending = _Slot(value, False)

    def commit(self) -> None:
        if not self._dirty:
            raise NotDirtyError()
        self._confirmed = self._pending
        self._initialized = True
        self._dirty = False
        self._lock.release()

    def rollback(self) -> None:
        if not self._dirty:
            raise NotDirtyError()
        self._dirty = False
        self._pending = self._confirmed
        self._lock.release()

    def current_snapshot(self) -> SnapshotRecord:
        return self.copy()