"""In-memory table of entities whose changes are confirmed or cancelled later."""

from __future__ import annotations

import abc
import logging
import threading
from typing import Any, Callable, Optional

from chainboard.storage.entities import Entity, unique_fields
from chainboard.storage.keys import ConstraintError, DuplicateIdError, Index
from chainboard.storage.record import (
    DeletedError,
    MutableRecord,
    RecordError,
    UninitializedError,
)

log = logging.getLogger(__name__)

NO_LIMIT = 0

Predicate = Callable[[Any], bool]
Transform = Callable[[Any], Any]


class NotFoundError(LookupError):
    """No confirmed record with the requested id."""

    def __init__(self, entity_id: Optional[int] = None) -> None:
        super().__init__("record not found")
        self.entity_id = entity_id


class TransformError(Exception):
    """The transform applied to a record failed; the cause is chained."""


class IdChangedError(Exception):
    """A transform returned an entity with a different id."""


class Receipt(abc.ABC):
    """A pending change that is later confirmed or cancelled."""

    @abc.abstractmethod
    def confirm(self) -> None:
        """Make the pending change permanent."""

    @abc.abstractmethod
    def cancel(self, error: Optional[BaseException] = None) -> None:
        """Discard the pending change."""


class InsertReceipt(Receipt):
    """Pending insertion of a new record."""

    def __init__(self, relation: Relation, record: MutableRecord) -> None:
        self._relation = relation
        self._record = record

    def _confirm(self) -> None:
        self._record.commit()

    def _cancel(self) -> None:
        self._record.rollback()
        try:
            entity = self._record.value()
        except UninitializedError:
            log.warning("failed to rollback insert: entity uninitialized")
            return
        self._relation._records.pop(entity.id, None)
        self._relation._index.remove(entity)

    def confirm(self) -> None:
        with self._relation._lock:
            self._confirm()

    def cancel(self, error: Optional[BaseException] = None) -> None:
        with self._relation._lock:
            self._cancel()


class DeleteReceipt(Receipt):
    """Pending removal of a record."""

    def __init__(self, relation: Relation, record: MutableRecord) -> None:
        self._relation = relation
        self._record = record

    def deleted_value(self) -> Any:
        """The entity the pending deletion removes."""
        try:
            self._record.dirty_value()
        except DeletedError as deleted:
            return deleted.value
        raise RuntimeError("illegal state: record not marked deleted")

    def confirm(self) -> None:
        with self._relation._lock:
            try:
                indexed = self._record.value()
            except RecordError as exc:
                raise RuntimeError(f"illegal state: {exc}") from exc
            self._record.commit()
            self._relation._index.remove(indexed)
            self._relation._records.pop(indexed.id, None)

    def cancel(self, error: Optional[BaseException] = None) -> None:
        with self._relation._lock:
            self._record.rollback()


class UpdateReceipt(Receipt):
    """Pending replacement of a record's value."""

    def __init__(self, relation: Relation, record: MutableRecord) -> None:
        self._relation = relation
        self._record = record

    def new_value(self) -> Any:
        """The value the pending update writes."""
        try:
            return self._record.dirty_value()
        except RecordError as exc:
            raise RuntimeError(f"illegal state: {exc}") from exc

    def confirm(self) -> None:
        with self._relation._lock:
            old = self._record.value()
            new = self._record.dirty_value()
            try:
                self._relation._index.replace(old, new)
            except (DuplicateIdError, ConstraintError, ValueError):
                self._record.rollback()
                raise
            self._record.commit()

    def cancel(self, error: Optional[BaseException] = None) -> None:
        with self._relation._lock:
            self._record.rollback()


class Relation:
    """Records of one entity type keyed by id, with a unique-field index."""

    def __init__(self, entity_type: type) -> None:
        self.entity_type = entity_type
        self._lock = threading.Lock()
        self._index = Index(*unique_fields(entity_type))
        self._records: dict[int, MutableRecord] = {}

    def _get_record(self, entity_id: int) -> MutableRecord:
        try:
            return self._records[entity_id]
        except KeyError:
            raise NotFoundError(entity_id) from None

    def get(self, entity_id: int) -> Any:
        """The confirmed entity with this id; a record with a pending change is not found."""
        with self._lock:
            record = self._get_record(entity_id)
            if record.is_dirty():
                raise NotFoundError(entity_id)
            return record.value()

    def get_predicate(self, predicate: Predicate, limit: int = NO_LIMIT) -> list[Any]:
        """Confirmed entities matching predicate, at most limit of them (0: all)."""
        if limit < 0:
            raise ValueError("limit must be non-negative")
        values: list[Any] = []
        with self._lock:
            for record in self._records.values():
                try:
                    entity = record.value()
                except RecordError:
                    continue
                if predicate(entity):
                    values.append(entity)
                if limit != NO_LIMIT and len(values) == limit:
                    break
        return values

    def get_all(self) -> list[Any]:
        return self.get_predicate(lambda _: True, NO_LIMIT)

    def count(self) -> int:
        with self._lock:
            return len(self._records)

    def _get_transform(self, entity_id: int, transform: Transform) -> Any:
        record = self._get_record(entity_id)
        current = record.value()
        try:
            updated = transform(current)
        except Exception as exc:
            raise TransformError(f"failed to transform: {exc}") from exc
        if updated.id != entity_id:
            raise IdChangedError("id changed")
        return updated

    def get_transform(self, entity_id: int, transform: Transform) -> Any:
        """Apply transform to the confirmed entity without storing the result."""
        with self._lock:
            return self._get_transform(entity_id, transform)

    def _insert_unsafe(self, entity: Entity) -> InsertReceipt:
        self._index.add(entity)
        record = MutableRecord()
        record.write(entity)
        self._records[entity.id] = record
        return InsertReceipt(self, record)

    def insert(self, entity: Entity) -> InsertReceipt:
        with self._lock:
            return self._insert_unsafe(entity)

    def delete(self, entity_id: int) -> DeleteReceipt:
        with self._lock:
            record = self._get_record(entity_id)
            record.delete()
            return DeleteReceipt(self, record)

    def update(self, entity_id: int, transform: Transform) -> UpdateReceipt:
        with self._lock:
            updated = self._get_transform(entity_id, transform)
            record = self._get_record(entity_id)
            record.write(updated)
            return UpdateReceipt(self, record)

    def import_records(self, snapshot: list[Entity]) -> None:
        """Fill an empty relation with already confirmed entities."""
        with self._lock:
            if self._records:
                raise ValueError("cannot import into non-empty relation")
            self._index.reset()
            for entity in snapshot:
                self._insert_unsafe(entity)._confirm()