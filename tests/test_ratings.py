# tests/test_ratings.py
"""
Rating Ledger Tests
Complete end-to-end testing of rating rules and aggregates
"""

import pytest

from barter.crud import rating as rating_crud
from barter.exceptions import (
    DuplicateRating,
    InvalidRating,
    NotFound,
    NotOwner,
    NotParticipant,
    SwapNotCompleted,
)
from barter.models.rating import Rating
from barter.models.swap import SwapStatus
from barter.services import rating_service, swap_service

from conftest import create_skill, create_swap


@pytest.fixture
def completed_swap(db_session, alice, bob):
    return create_swap(db_session, alice, bob, status=SwapStatus.COMPLETED)


# ======================
# FULL LIFECYCLE
# ======================

def test_request_to_rating_lifecycle(db_session, alice, bob):
    guitar = create_skill(db_session, alice, "Guitar")
    spanish = create_skill(db_session, bob, "Spanish")

    swap = swap_service.create_swap_request(db_session, alice.id, bob.id, guitar.id, spanish.id)
    assert swap.status == SwapStatus.PENDING

    swap_service.transition_swap_request(db_session, swap.id, bob.id, SwapStatus.ACCEPTED)
    swap_service.transition_swap_request(db_session, swap.id, alice.id, SwapStatus.COMPLETED)

    entry = rating_service.rate_swap(db_session, swap.id, alice.id, 5)
    assert entry.to_user_id == bob.id
    assert rating_service.average_for(db_session, bob.id) == 5

    with pytest.raises(DuplicateRating):
        rating_service.rate_swap(db_session, swap.id, alice.id, 4)

    assert db_session.query(Rating).count() == 1
    assert rating_service.average_for(db_session, bob.id) == 5


# ======================
# RATE
# ======================

def test_both_sides_can_rate_once(db_session, alice, bob, completed_swap):
    from_alice = rating_service.rate_swap(db_session, completed_swap.id, alice.id, 4, "Great lessons")
    from_bob = rating_service.rate_swap(db_session, completed_swap.id, bob.id, 3)

    assert from_alice.to_user_id == bob.id
    assert from_alice.comment == "Great lessons"
    assert from_bob.to_user_id == alice.id
    assert from_bob.comment is None


@pytest.mark.parametrize(
    "status",
    [SwapStatus.PENDING, SwapStatus.ACCEPTED, SwapStatus.CANCELLED, SwapStatus.REJECTED],
)
def test_only_completed_swaps_can_be_rated(db_session, alice, bob, status):
    swap = create_swap(db_session, alice, bob, status=status)
    with pytest.raises(SwapNotCompleted):
        rating_service.rate_swap(db_session, swap.id, alice.id, 5)


def test_outsider_cannot_rate(db_session, carol, completed_swap):
    with pytest.raises(NotParticipant):
        rating_service.rate_swap(db_session, completed_swap.id, carol.id, 5)


def test_unknown_swap(db_session, alice):
    with pytest.raises(NotFound):
        rating_service.rate_swap(db_session, 999, alice.id, 5)


@pytest.mark.parametrize("value", [0, 6, -1, 4.5, 3.0, True, "5", None])
def test_invalid_rating_values(db_session, alice, completed_swap, value):
    with pytest.raises(InvalidRating):
        rating_service.rate_swap(db_session, completed_swap.id, alice.id, value)
    assert db_session.query(Rating).count() == 0


def test_duplicate_insert_race_maps_to_duplicate_rating(db_session, alice, bob, completed_swap, monkeypatch):
    rating_service.rate_swap(db_session, completed_swap.id, alice.id, 5)

    # Simulate the pre-check missing a concurrent insert
    monkeypatch.setattr(rating_crud, "get_rating_for", lambda db, swap_id, from_user_id: None)

    with pytest.raises(DuplicateRating):
        rating_service.rate_swap(db_session, completed_swap.id, alice.id, 2)
    assert db_session.query(Rating).count() == 1


# ======================
# UPDATE
# ======================

def test_update_rating_in_place(db_session, alice, bob, completed_swap):
    entry = rating_service.rate_swap(db_session, completed_swap.id, alice.id, 2, "Meh")
    created_at = entry.created_at

    updated = rating_service.update_rating(db_session, entry.id, alice.id, 4)

    assert updated.id == entry.id
    assert updated.rating == 4
    assert updated.comment == "Meh"
    assert updated.to_user_id == bob.id
    assert updated.created_at == created_at
    assert rating_service.average_for(db_session, bob.id) == 4


def test_update_rating_replaces_comment(db_session, alice, completed_swap):
    entry = rating_service.rate_swap(db_session, completed_swap.id, alice.id, 2, "Meh")
    updated = rating_service.update_rating(db_session, entry.id, alice.id, 3, "Better on reflection")
    assert updated.comment == "Better on reflection"


def test_only_rater_can_update(db_session, alice, bob, completed_swap):
    entry = rating_service.rate_swap(db_session, completed_swap.id, alice.id, 5)
    with pytest.raises(NotOwner):
        rating_service.update_rating(db_session, entry.id, bob.id, 1)


def test_update_enforces_range(db_session, alice, completed_swap):
    entry = rating_service.rate_swap(db_session, completed_swap.id, alice.id, 5)
    with pytest.raises(InvalidRating):
        rating_service.update_rating(db_session, entry.id, alice.id, 9)


def test_update_unknown_rating(db_session, alice):
    with pytest.raises(NotFound):
        rating_service.update_rating(db_session, 77, alice.id, 3)


# ======================
# AGGREGATES
# ======================

def test_average_is_zero_without_ratings(db_session, alice):
    assert rating_service.average_for(db_session, alice.id) == 0


def test_average_and_distribution(db_session, alice, bob, carol):
    first = create_swap(db_session, alice, bob, status=SwapStatus.COMPLETED)
    second = create_swap(db_session, carol, bob, status=SwapStatus.COMPLETED)

    rating_service.rate_swap(db_session, first.id, alice.id, 5)
    rating_service.rate_swap(db_session, second.id, carol.id, 2)

    assert rating_service.average_for(db_session, bob.id) == 3.5

    summary = rating_service.rating_summary(db_session, bob.id)
    assert summary["total_ratings"] == 2
    assert summary["average_rating"] == 3.5
    assert summary["distribution"] == {1: 0, 2: 1, 3: 0, 4: 0, 5: 1}


def test_given_and_received_listings(db_session, alice, bob, completed_swap):
    rating_service.rate_swap(db_session, completed_swap.id, alice.id, 4)

    given = rating_service.ratings_given(db_session, alice.id)
    received = rating_service.ratings_received(db_session, bob.id)

    assert len(given) == 1
    assert given[0]["to_user_name"] == "Bob"
    assert given[0]["skill_offered_name"] == "Offer Alice"
    assert received[0]["from_user_name"] == "Alice"
    assert rating_service.ratings_received(db_session, alice.id) == []


def test_describe_reflects_my_rating(db_session, alice, bob, completed_swap):
    entry = rating_service.rate_swap(db_session, completed_swap.id, alice.id, 4)
    db_session.refresh(completed_swap)

    mine = swap_service.describe(completed_swap, alice.id)
    theirs = swap_service.describe(completed_swap, bob.id)

    assert mine["my_rating_id"] == entry.id
    assert mine["can_rate"] is False
    assert theirs["can_rate"] is True
