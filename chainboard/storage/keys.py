"""Unique-constraint index built on FNV-1a hashes of selected fields."""

from __future__ import annotations

import dataclasses
from typing import Any, Iterable

from chainboard.storage.entities import Entity

_FNV_OFFSET = 0xCBF29CE484222325
_FNV_PRIME = 0x100000001B3
_MASK = (1 << 64) - 1


class DuplicateIdError(ValueError):
    """An entity with the same id is already indexed."""


class ConstraintError(ValueError):
    """An entity with the same unique fields is already indexed."""


def _field_items(obj: Any) -> list[tuple[str, Any]]:
    if dataclasses.is_dataclass(obj) and not isinstance(obj, type):
        return [(f.name, getattr(obj, f.name)) for f in dataclasses.fields(obj)]
    try:
        return list(vars(obj).items())
    except TypeError:
        raise TypeError("not a struct") from None


def _encode(value: Any) -> bytes:
    if isinstance(value, bool):
        raise TypeError("unsupported pk field type: bool")
    if isinstance(value, str):
        return value.encode("utf-8")
    if isinstance(value, int):
        return (value & _MASK).to_bytes(8, "little")
    if type(value).__str__ is not object.__str__:
        return str(value).encode("utf-8")
    raise TypeError(f"unsupported pk field type: {type(value).__name__}")


def struct_hash(obj: Any, fields: Iterable[str]) -> int:
    """64-bit FNV-1a hash over the named fields of obj, in declaration order."""
    wanted = set(fields)
    h = _FNV_OFFSET
    for name, value in _field_items(obj):
        if name not in wanted:
            continue
        for byte in _encode(value):
            h ^= byte
            h = (h * _FNV_PRIME) & _MASK
    return h


class Index:
    """Tracks used ids and unique-field hashes of a relation's entities."""

    def __init__(self, *fields: str) -> None:
        self.indexed_fields = tuple(fields)
        self._hashes: set[int] = set()
        self._ids: set[int] = set()

    def add(self, entity: Entity) -> None:
        if entity.id in self._ids:
            raise DuplicateIdError("duplicate id")
        if not self.indexed_fields:
            return
        key = struct_hash(entity, self.indexed_fields)
        if key in self._hashes:
            raise ConstraintError("unique constraint violation")
        self._hashes.add(key)
        self._ids.add(entity.id)

    def remove(self, entity: Entity) -> None:
        self._ids.discard(entity.id)
        if self.indexed_fields:
            self._hashes.discard(struct_hash(entity, self.indexed_fields))

    def replace(self, old: Entity, new: Entity) -> None:
        if old.id != new.id:
            raise ValueError("cannot replace entities with different ids")
        current = struct_hash(old, self.indexed_fields)
        self.remove(old)
        try:
            self.add(new)
        except (DuplicateIdError, ConstraintError):
            self._hashes.add(current)
            raise

    def reset(self) -> None:
        self._hashes = set()
        self._ids = set()