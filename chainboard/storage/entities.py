"""Board entities and their conversion to and from replicated messages."""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from chainboard.messages import (
    DataMessage,
    LikeRecord,
    MessageRecord,
    TopicRecord,
    UserRecord,
)


def _unique(**kwargs: Any) -> Any:
    """Declare a field that takes part in the unique constraint."""
    return field(metadata={"db": "unique"}, **kwargs)


@dataclass
class Entity:
    """Base of every stored entity; carries the numeric id."""

    id: int = field(default=0, kw_only=True)


@dataclass
class User(Entity):
    name: str = _unique()


@dataclass
class Topic(Entity):
    name: str = _unique()


@dataclass
class Like(Entity):
    user_id: int = _unique()
    message_id: int = _unique()


@dataclass
class Message(Entity):
    topic_id: int = _unique()
    user_id: int = _unique()
    text: str = ""
    created_at: datetime = _unique(default=None)


def unique_fields(entity_type: Any) -> tuple[str, ...]:
    """Names of the fields of an entity type marked unique, in declaration order."""
    cls = entity_type if isinstance(entity_type, type) else type(entity_type)
    if not dataclasses.is_dataclass(cls):
        raise TypeError("entity type must be a dataclass")
    return tuple(
        f.name for f in dataclasses.fields(cls) if f.metadata.get("db") == "unique"
    )


def datalink_to_entity(message: DataMessage) -> Entity:
    """Build the entity carried by a replicated message."""
    match message.payload:
        case UserRecord(id=entity_id, name=name):
            return User(name, id=entity_id)
        case MessageRecord(
            id=entity_id, topic_id=topic_id, user_id=user_id, text=text, created_at=created
        ):
            return Message(topic_id, user_id, text, created, id=entity_id)
        case LikeRecord(id=entity_id, user_id=user_id, message_id=message_id):
            return Like(user_id, message_id, id=entity_id)
        case TopicRecord(id=entity_id, name=name):
            return Topic(name, id=entity_id)
        case _:
            raise ValueError("invalid payload")


def entity_to_datalink(entity: Entity) -> DataMessage:
    """Wrap an entity in a replicated message."""
    match entity:
        case User():
            return DataMessage(payload=UserRecord(id=entity.id, name=entity.name))
        case Message():
            return DataMessage(
                payload=MessageRecord(
                    id=entity.id,
                    topic_id=entity.topic_id,
                    user_id=entity.user_id,
                    text=entity.text,
                    created_at=entity.created_at,
                )
            )
        case Topic():
            return DataMessage(payload=TopicRecord(id=entity.id, name=entity.name))
        case Like():
            return DataMessage(
                payload=LikeRecord(user_id=entity.user_id, message_id=entity.message_id)
            )
        case _:
            raise TypeError("illegal state: unsupported entity")