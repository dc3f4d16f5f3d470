"""Records exchanged between chain nodes and carried in database snapshots."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional, Union

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


class Operation(enum.Enum):
    """The change a replicated message applies to its entity."""

    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"


@dataclass
class UserRecord:
    """A user as it travels over the wire."""

    id: int = 0
    name: str = ""


@dataclass
class TopicRecord:
    """A topic as it travels over the wire."""

    id: int = 0
    name: str = ""


@dataclass
class LikeRecord:
    """A like as it travels over the wire."""

    id: int = 0
    user_id: int = 0
    message_id: int = 0


@dataclass
class MessageRecord:
    """A board message as it travels over the wire."""

    id: int = 0
    topic_id: int = 0
    user_id: int = 0
    text: str = ""
    created_at: datetime = field(default_factory=lambda: EPOCH)
    likes: int = 0


Payload = Union[UserRecord, TopicRecord, LikeRecord, MessageRecord]

_PAYLOAD_KINDS = {
    UserRecord: "user",
    MessageRecord: "message",
    TopicRecord: "topic",
    LikeRecord: "like",
}


@dataclass
class DataMessage:
    """One replicated operation sent down the chain."""

    payload: Optional[Payload] = None
    message_index: int = 0
    request_id: str = ""
    op: Operation = Operation.CREATE

    def payload_kind(self) -> Optional[str]:
        """Name the kind of payload carried, or None when there is none."""
        if self.payload is None:
            return None
        try:
            return _PAYLOAD_KINDS[type(self.payload)]
        except KeyError:
            raise TypeError(
                f"unsupported payload type: {type(self.payload).__name__}"
            ) from None


@dataclass
class Confirmation:
    """Acknowledgement of a replicated message travelling back up the chain."""

    message_index: int = 0
    request_id: str = ""
    ok: bool = False
    error: str = ""


@dataclass
class DatabaseSnapshot:
    """Full contents of a node's database, used to seed a new successor."""

    users: list[UserRecord] = field(default_factory=list)
    topics: list[TopicRecord] = field(default_factory=list)
    messages: list[MessageRecord] = field(default_factory=list)
    likes: list[LikeRecord] = field(default_factory=list)
    op_count: int = 0