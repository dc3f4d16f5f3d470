import pytest

from chainboard.messages import (
    Confirmation,
    DatabaseSnapshot,
    DataMessage,
    LikeRecord,
    MessageRecord,
    Operation,
    TopicRecord,
    UserRecord,
)


def test_payload_kind_user_and_message():
    assert DataMessage(payload=UserRecord(id=1, name="alice")).payload_kind() == "user"
    assert DataMessage(payload=MessageRecord(id=2, text="hi")).payload_kind() == "message"


def test_payload_kinds_are_distinct():
    payloads = [UserRecord(), TopicRecord(), LikeRecord(), MessageRecord()]
    kinds = {DataMessage(payload=p).payload_kind() for p in payloads}
    assert len(kinds) == 4
    assert all(isinstance(kind, str) for kind in kinds)


def test_payload_kind_none_when_empty():
    assert DataMessage().payload_kind() is None


def test_payload_kind_rejects_unknown_payload():
    with pytest.raises(TypeError):
        DataMessage(payload=object()).payload_kind()


def test_data_message_defaults():
    message = DataMessage()
    assert message.op is Operation.CREATE
    assert message.message_index == 0
    assert message.request_id == ""


def test_confirmation_defaults():
    confirmation = Confirmation()
    assert confirmation.ok is False
    assert confirmation.error == ""
    assert confirmation.message_index == 0


def test_snapshots_do_not_share_lists():
    first = DatabaseSnapshot()
    second = DatabaseSnapshot()
    first.users.append(UserRecord(id=1, name="bob"))
    assert second.users == []
    assert first.op_count == 0


def test_message_record_equality_round_trip():
    record = MessageRecord(id=3, topic_id=4, user_id=5, text="text")
    copy = MessageRecord(**vars(record))
    assert copy == record