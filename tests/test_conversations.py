# tests/test_conversations.py
"""
Conversation Store Tests
Find-or-create, messaging, read state and the conversation list.
"""

from datetime import timedelta

import pytest

from barter.config import settings
from barter.crud import conversation as conversation_crud
from barter.exceptions import (
    AccessDenied,
    ContentTooLong,
    EmptyContent,
    InvalidParticipants,
    NotFound,
)
from barter.models.conversation import Conversation, Message, MessageType, pair_key
from barter.models.swap import SwapStatus
from barter.services import conversation_service
from barter.utils.clock import utcnow

from conftest import create_swap


# ======================
# FIND OR CREATE
# ======================

def test_pair_key_is_order_independent():
    assert pair_key(3, 11) == pair_key(11, 3) == "3:11"


def test_two_party_conversation_flow(db_session, alice, bob):
    conversation = conversation_service.find_or_create_conversation(db_session, alice.id, bob.id)
    assert conversation.participant_ids == sorted([alice.id, bob.id])
    assert conversation_service.get_messages(db_session, conversation.id, alice.id) == []

    same = conversation_service.find_or_create_conversation(db_session, bob.id, alice.id)
    assert same.id == conversation.id

    created_at = conversation.updated_at
    m1 = conversation_service.send_message(db_session, conversation.id, alice.id, "hi")
    db_session.refresh(conversation)
    assert conversation.updated_at >= created_at
    assert conversation.updated_at == m1.created_at

    messages = conversation_service.get_messages(db_session, conversation.id, bob.id)
    assert [m.id for m in messages] == [m1.id]
    assert messages[0].read is False

    assert conversation_service.mark_read(db_session, conversation.id, bob.id) == 1
    assert conversation_service.mark_read(db_session, conversation.id, bob.id) == 0

    db_session.expire_all()
    messages = conversation_service.get_messages(db_session, conversation.id, bob.id)
    assert len(messages) == 1
    assert messages[0].read is True


def test_outsider_cannot_read_messages(db_session, alice, bob, carol):
    conversation = conversation_service.find_or_create_conversation(db_session, alice.id, bob.id)
    conversation_service.send_message(db_session, conversation.id, alice.id, "private")

    with pytest.raises(AccessDenied):
        conversation_service.get_messages(db_session, conversation.id, carol.id)
    with pytest.raises(AccessDenied):
        conversation_service.send_message(db_session, conversation.id, carol.id, "let me in")
    with pytest.raises(AccessDenied):
        conversation_service.mark_read(db_session, conversation.id, carol.id)


def test_unknown_conversation_not_found(db_session, alice):
    with pytest.raises(NotFound):
        conversation_service.get_messages(db_session, 12345, alice.id)


def test_conversation_with_self_is_rejected(db_session, alice):
    with pytest.raises(InvalidParticipants):
        conversation_service.find_or_create_conversation(db_session, alice.id, alice.id)


def test_conversation_with_unknown_user(db_session, alice):
    with pytest.raises(NotFound):
        conversation_service.find_or_create_conversation(db_session, alice.id, 9999)


def test_swap_link_must_be_between_the_same_users(db_session, alice, bob, carol):
    swap = create_swap(db_session, alice, carol)
    with pytest.raises(NotFound):
        conversation_service.find_or_create_conversation(
            db_session, alice.id, bob.id, swap_request_id=swap.id
        )
    assert db_session.query(Conversation).count() == 0


def test_existing_conversation_keeps_its_swap_link(db_session, alice, bob):
    first_swap = create_swap(db_session, alice, bob)
    second_swap = create_swap(db_session, bob, alice)

    conversation = conversation_service.find_or_create_conversation(
        db_session, alice.id, bob.id, swap_request_id=first_swap.id
    )
    again = conversation_service.find_or_create_conversation(
        db_session, bob.id, alice.id, swap_request_id=second_swap.id
    )

    assert again.id == conversation.id
    assert again.swap_request_id == first_swap.id


def test_conversation_outlives_cancelled_swap(db_session, alice, bob):
    swap = create_swap(db_session, alice, bob, status=SwapStatus.CANCELLED)
    conversation = conversation_service.find_or_create_conversation(
        db_session, alice.id, bob.id, swap_request_id=swap.id
    )
    message = conversation_service.send_message(db_session, conversation.id, bob.id, "still here")
    assert message.id is not None


def test_concurrent_first_contact_returns_the_winner(db_session, alice, bob, monkeypatch):
    # The other caller's insert committed after our lookup missed it
    winner = conversation_crud.create_conversation(db_session, bob.id, alice.id)
    db_session.commit()

    original = conversation_crud.get_conversation_for_pair
    calls = []

    def missed_first(db, user_a_id, user_b_id):
        calls.append((user_a_id, user_b_id))
        if len(calls) == 1:
            return None
        return original(db, user_a_id, user_b_id)

    monkeypatch.setattr(conversation_crud, "get_conversation_for_pair", missed_first)

    conversation = conversation_service.find_or_create_conversation(db_session, alice.id, bob.id)

    assert conversation.id == winner.id
    assert len(calls) == 2
    assert db_session.query(Conversation).count() == 1


def test_find_conversation_between_never_creates(db_session, alice, bob):
    assert conversation_service.find_conversation_between(db_session, alice.id, bob.id) is None
    assert db_session.query(Conversation).count() == 0

    created = conversation_service.find_or_create_conversation(db_session, alice.id, bob.id)
    found = conversation_service.find_conversation_between(db_session, bob.id, alice.id)
    assert found.id == created.id


# ======================
# MESSAGES
# ======================

@pytest.mark.parametrize("content", ["", "   ", "\n\t", None])
def test_blank_message_rejected(db_session, alice, bob, content):
    conversation = conversation_service.find_or_create_conversation(db_session, alice.id, bob.id)
    with pytest.raises(EmptyContent):
        conversation_service.send_message(db_session, conversation.id, alice.id, content)
    assert db_session.query(Message).count() == 0


def test_blank_image_message_rejected(db_session, alice, bob):
    conversation = conversation_service.find_or_create_conversation(db_session, alice.id, bob.id)
    with pytest.raises(EmptyContent):
        conversation_service.send_message(
            db_session, conversation.id, alice.id, " ", message_type=MessageType.IMAGE
        )


def test_overlong_message_rejected(db_session, alice, bob):
    conversation = conversation_service.find_or_create_conversation(db_session, alice.id, bob.id)
    with pytest.raises(ContentTooLong):
        conversation_service.send_message(
            db_session, conversation.id, alice.id, "x" * (settings.MESSAGE_MAX_LENGTH + 1)
        )


def test_image_message_keeps_type(db_session, alice, bob):
    conversation = conversation_service.find_or_create_conversation(db_session, alice.id, bob.id)
    message = conversation_service.send_message(
        db_session,
        conversation.id,
        alice.id,
        "https://cdn.example.com/a.png",
        message_type=MessageType.IMAGE,
    )
    assert message.type == MessageType.IMAGE
    assert conversation_service.message_to_dict(message)["type"] == MessageType.IMAGE


def test_messages_oldest_first_and_limited_to_latest(db_session, alice, bob):
    conversation = conversation_service.find_or_create_conversation(db_session, alice.id, bob.id)
    sent = [
        conversation_service.send_message(db_session, conversation.id, alice.id, f"msg {i}")
        for i in range(5)
    ]

    everything = conversation_service.get_messages(db_session, conversation.id, bob.id)
    assert [m.content for m in everything] == [f"msg {i}" for i in range(5)]

    latest = conversation_service.get_messages(db_session, conversation.id, bob.id, limit=2)
    assert [m.id for m in latest] == [sent[3].id, sent[4].id]


def test_send_after_clock_step_back_stays_last(db_session, alice, bob, monkeypatch):
    conversation = conversation_service.find_or_create_conversation(db_session, alice.id, bob.id)
    first = conversation_service.send_message(db_session, conversation.id, alice.id, "first")

    earlier = utcnow() - timedelta(seconds=1)
    monkeypatch.setattr(conversation_service, "utcnow", lambda: earlier)
    second = conversation_service.send_message(db_session, conversation.id, bob.id, "second")

    assert second.created_at >= first.created_at
    messages = conversation_service.get_messages(db_session, conversation.id, alice.id)
    assert [m.content for m in messages] == ["first", "second"]
    assert messages[-1].id == second.id

    newer = conversation_service.get_messages_after(db_session, conversation.id, alice.id, first.id)
    assert [m.id for m in newer] == [second.id]


def test_text_message_keeps_whitespace(db_session, alice, bob):
    conversation = conversation_service.find_or_create_conversation(db_session, alice.id, bob.id)
    snippet = "    def greet():\n        return \"hi\"\n"
    message = conversation_service.send_message(db_session, conversation.id, alice.id, snippet)

    db_session.expire_all()
    assert db_session.get(Message, message.id).content == snippet


def test_image_url_is_trimmed(db_session, alice, bob):
    conversation = conversation_service.find_or_create_conversation(db_session, alice.id, bob.id)
    message = conversation_service.send_message(
        db_session,
        conversation.id,
        alice.id,
        "  https://cdn.example.com/b.png \n",
        message_type=MessageType.IMAGE,
    )
    assert message.content == "https://cdn.example.com/b.png"


def test_messages_after_cursor(db_session, alice, bob):
    conversation = conversation_service.find_or_create_conversation(db_session, alice.id, bob.id)
    first = conversation_service.send_message(db_session, conversation.id, alice.id, "one")
    second = conversation_service.send_message(db_session, conversation.id, bob.id, "two")

    newer = conversation_service.get_messages_after(db_session, conversation.id, alice.id, first.id)
    assert [m.id for m in newer] == [second.id]


@pytest.mark.parametrize(
    "requested, expected",
    [(None, 100), (0, 1), (-5, 1), (10, 10), (10_000, 500)],
)
def test_clamp_limit(requested, expected, monkeypatch):
    monkeypatch.setattr(settings, "MESSAGE_PAGE_DEFAULT", 100)
    monkeypatch.setattr(settings, "MESSAGE_PAGE_MAX", 500)
    assert conversation_service.clamp_limit(requested) == expected


def test_mark_read_only_touches_incoming(db_session, alice, bob):
    conversation = conversation_service.find_or_create_conversation(db_session, alice.id, bob.id)
    mine = conversation_service.send_message(db_session, conversation.id, alice.id, "from alice")
    theirs = conversation_service.send_message(db_session, conversation.id, bob.id, "from bob")

    assert conversation_service.mark_read(db_session, conversation.id, alice.id) == 1

    db_session.expire_all()
    assert db_session.get(Message, theirs.id).read is True
    assert db_session.get(Message, mine.id).read is False


# ======================
# LIST VIEW
# ======================

def test_list_conversations_with_last_message_and_unread(db_session, alice, bob, carol):
    with_bob = conversation_service.find_or_create_conversation(db_session, alice.id, bob.id)
    with_carol = conversation_service.find_or_create_conversation(db_session, alice.id, carol.id)

    conversation_service.send_message(db_session, with_bob.id, bob.id, "first")
    conversation_service.send_message(db_session, with_carol.id, carol.id, "hello")
    conversation_service.send_message(db_session, with_bob.id, bob.id, "second")

    items = conversation_service.list_conversations(db_session, alice.id)

    assert [item["id"] for item in items] == [with_bob.id, with_carol.id]
    assert items[0]["last_message"]["content"] == "second"
    assert items[0]["unread_count"] == 2
    assert items[1]["unread_count"] == 1
    assert {p["name"] for p in items[0]["participants"]} == {"Alice", "Bob"}

    # Bob sent them, so nothing is unread for him
    bob_items = conversation_service.list_conversations(db_session, bob.id)
    assert [item["id"] for item in bob_items] == [with_bob.id]
    assert bob_items[0]["unread_count"] == 0


def test_list_conversations_empty_conversation_has_no_last_message(db_session, alice, bob):
    conversation_service.find_or_create_conversation(db_session, alice.id, bob.id)
    items = conversation_service.list_conversations(db_session, bob.id)
    assert items[0]["last_message"] is None
    assert items[0]["unread_count"] == 0


def test_latest_messages_one_per_conversation(db_session, alice, bob, carol):
    with_bob = conversation_service.find_or_create_conversation(db_session, alice.id, bob.id)
    with_carol = conversation_service.find_or_create_conversation(db_session, alice.id, carol.id)
    empty = conversation_service.find_or_create_conversation(db_session, bob.id, carol.id)

    conversation_service.send_message(db_session, with_bob.id, alice.id, "one")
    last_bob = conversation_service.send_message(db_session, with_bob.id, bob.id, "two")
    last_carol = conversation_service.send_message(db_session, with_carol.id, carol.id, "three")

    latest = conversation_crud.latest_messages(db_session, [with_bob.id, with_carol.id, empty.id])

    assert {cid: m.id for cid, m in latest.items()} == {
        with_bob.id: last_bob.id,
        with_carol.id: last_carol.id,
    }
    assert conversation_crud.latest_messages(db_session, []) == {}
