import pytest

from src.messaging.domain.entities.message import Message
from src.messaging.domain.exceptions import (
    InvalidStatusTransitionError,
    WhatsAppMessageIdImmutableError,
)
from src.messaging.domain.value_objects import MessageStatus, is_valid_phone_number


def _message(status=MessageStatus.PENDING, wamid=None) -> Message:
    return Message(
        id=None,
        from_number="15550001111",
        to_number="15550002222",
        message_text="hi",
        status=status,
        whatsapp_message_id=wamid,
    )


@pytest.mark.parametrize(
    "current,target",
    [
        ("pending", "sent"),
        ("pending", "delivered"),
        ("sent", "delivered"),
        ("delivered", "read"),
        ("sent", "failed"),
        ("pending", "failed"),
    ],
)
def test_forward_transitions_allowed(current, target):
    assert MessageStatus(current).can_transition_to(MessageStatus(target))


@pytest.mark.parametrize(
    "current,target",
    [
        ("delivered", "sent"),
        ("sent", "pending"),
        ("read", "delivered"),
        ("read", "failed"),
        ("failed", "sent"),
        ("failed", "read"),
    ],
)
def test_backward_or_out_of_terminal_rejected(current, target):
    assert not MessageStatus(current).can_transition_to(MessageStatus(target))


def test_reapplying_current_status_is_noop():
    msg = _message(MessageStatus.DELIVERED)
    assert msg.apply_status(MessageStatus.DELIVERED) is False
    assert msg.status == MessageStatus.DELIVERED


def test_apply_status_raises_on_backward_move():
    msg = _message(MessageStatus.READ)
    with pytest.raises(InvalidStatusTransitionError):
        msg.apply_status(MessageStatus.SENT)
    assert msg.status == MessageStatus.READ


def test_apply_status_updates_timestamp():
    msg = _message()
    assert msg.apply_status("sent") is True
    assert msg.status == MessageStatus.SENT
    assert msg.updated_at is not None


def test_whatsapp_message_id_is_immutable_once_set():
    msg = _message(wamid="wamid.HBgLAAA")
    assert msg.assign_whatsapp_message_id("wamid.HBgLAAA") is False
    with pytest.raises(WhatsAppMessageIdImmutableError):
        msg.assign_whatsapp_message_id("wamid.HBgLBBB")
    assert msg.whatsapp_message_id == "wamid.HBgLAAA"


@pytest.mark.parametrize(
    "value,ok",
    [("+14155552671", True), ("15551234567", True), ("0123", False), ("+1", False), ("", False), ("12ab", False)],
)
def test_phone_number_validation(value, ok):
    assert is_valid_phone_number(value) is ok
