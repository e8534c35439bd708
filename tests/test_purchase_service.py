"""Tests for purchases and the ticket counters they move."""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
import logging
from uuid import uuid4

import pytest

from Accounts import account_service
from errors import (
    InsufficientInventoryError,
    InternalError,
    NotFoundError,
    ValidationError,
)
from Park import facility_service, purchase_service, ticket_service

from conftest import FakeDB


@pytest.fixture()
def park(fake_db: FakeDB):
    """One account, one facility and one ticket line with 10 available."""

    user = account_service.register(fake_db, "Ada", "ada@example.com", "pw")
    facility = facility_service.create_facility(fake_db, "Roller Coaster", "Loops and drops")
    ticket = ticket_service.create_ticket(fake_db, facility.id, "Adult", 50, available=10, sold=0)
    return fake_db, user, facility, ticket


def _buy(db: FakeDB, user, ticket, quantity: int, total: float | None = None):
    return purchase_service.purchase(
        db,
        user_id=user.id,
        ticket_id=ticket.id,
        facility_name=ticket.facility_name,
        type=ticket.type,
        price=ticket.price,
        quantity=quantity,
        total=ticket.price * quantity if total is None else total,
    )


def _counters(db: FakeDB) -> tuple[int, int]:
    row = db.tickets[0]
    return row["available"], row["sold"]


def test_purchase_moves_tickets_from_available_to_sold(park) -> None:
    db, user, facility, ticket = park

    record = _buy(db, user, ticket, 3)

    assert _counters(db) == (7, 3)
    assert record.total == 150
    assert record.facility_name == "Roller Coaster"
    assert [row["id"] for row in db.purchases] == [str(record.id)]


def test_purchase_then_delete_facility_scenario(park) -> None:
    db, user, facility, ticket = park

    _buy(db, user, ticket, 3)
    listed = ticket_service.list_tickets(db)
    assert (listed[0].available, listed[0].sold) == (7, 3)

    facility_service.delete_facility(db, facility.id)

    assert ticket.id not in {view.id for view in ticket_service.list_tickets(db)}
    # the purchase keeps its facility name snapshot
    assert purchase_service.list_purchases(db, user.id)[0].facility_name == "Roller Coaster"


def test_purchase_of_every_remaining_ticket_is_accepted(park) -> None:
    db, user, _, ticket = park

    _buy(db, user, ticket, 10)

    assert _counters(db) == (0, 10)


def test_purchase_beyond_availability_is_rejected_without_side_effects(park) -> None:
    db, user, _, ticket = park

    with pytest.raises(InsufficientInventoryError):
        _buy(db, user, ticket, 11)

    assert _counters(db) == (10, 0)
    assert db.purchases == []


@pytest.mark.parametrize(
    ("quantity", "total", "message"),
    [
        (0, 0, "quantity must be a positive integer"),
        (-2, -100, "quantity must be a positive integer"),
        (3, 100, "total must equal price multiplied by quantity"),
    ],
)
def test_purchase_validates_quantity_and_total(park, quantity: int, total: float, message: str) -> None:
    db, user, _, ticket = park

    with pytest.raises(ValidationError, match=message):
        _buy(db, user, ticket, quantity, total=total)

    assert _counters(db) == (10, 0)
    assert db.rpc_calls == []


def test_purchase_of_unknown_ticket_raises_not_found(park) -> None:
    db, user, _, ticket = park
    ghost = ticket.model_copy(update={"id": uuid4()})

    with pytest.raises(NotFoundError, match="Ticket not found"):
        _buy(db, user, ghost, 1)

    assert db.purchases == []


def test_purchase_by_unknown_user_raises_not_found(park) -> None:
    db, user, _, ticket = park
    stranger = user.model_copy(update={"id": uuid4()})

    with pytest.raises(NotFoundError, match="User not found"):
        _buy(db, stranger, ticket, 1)

    assert _counters(db) == (10, 0)


def test_failed_purchase_insert_releases_inventory(park, caplog: pytest.LogCaptureFixture) -> None:
    db, user, _, ticket = park
    db.fail("purchases", "insert")

    with caplog.at_level(logging.INFO), pytest.raises(InternalError):
        _buy(db, user, ticket, 4)

    assert _counters(db) == (10, 0)
    assert [call[0] for call in db.rpc_calls] == ["reserve_ticket_inventory", "release_ticket_inventory"]
    assert any("Partial failure" in record.getMessage() for record in caplog.records)


def test_failed_release_is_logged_for_manual_repair(park, caplog: pytest.LogCaptureFixture) -> None:
    db, user, _, ticket = park
    db.fail("purchases", "insert")
    db.rpc_failures.add("release_ticket_inventory")

    with caplog.at_level(logging.ERROR), pytest.raises(InternalError):
        _buy(db, user, ticket, 4)

    assert _counters(db) == (6, 4)
    assert any("manual repair" in record.getMessage() for record in caplog.records)


def test_concurrent_purchases_never_oversell(park) -> None:
    db, user, _, ticket = park

    def attempt(_: int) -> bool:
        try:
            _buy(db, user, ticket, 1)
        except InsufficientInventoryError:
            return False
        return True

    with ThreadPoolExecutor(max_workers=8) as pool:
        outcomes = list(pool.map(attempt, range(25)))

    assert outcomes.count(True) == 10
    assert _counters(db) == (0, 10)
    assert len(db.purchases) == 10


def test_list_purchases_filters_by_user_newest_first(park) -> None:
    db, user, _, ticket = park
    other = account_service.register(db, "Bob", "bob@example.com", "pw")
    first = _buy(db, user, ticket, 1)
    second = _buy(db, user, ticket, 2)
    _buy(db, other, ticket, 1)
    db.purchases[0]["date"] = "2024-01-01T00:00:00+00:00"
    db.purchases[1]["date"] = "2024-02-01T00:00:00+00:00"

    history = purchase_service.list_purchases(db, user.id)

    assert [purchase.id for purchase in history] == [second.id, first.id]
    assert purchase_service.list_purchases(db, uuid4()) == []


def test_store_rounds_money_columns_to_the_cent(fake_db: FakeDB) -> None:
    stored = fake_db.table("purchases").insert({"price": 0.125, "total": 0.25}).execute().data[0]

    assert (stored["price"], stored["total"]) == (0.13, 0.25)


def test_purchase_rejects_fractions_of_a_cent_before_reserving(park) -> None:
    db, user, _, ticket = park

    with pytest.raises(ValidationError, match="price must have at most 2 decimal places"):
        purchase_service.purchase(
            db,
            user_id=user.id,
            ticket_id=ticket.id,
            facility_name=ticket.facility_name,
            type=ticket.type,
            price=0.125,
            quantity=2,
            total=0.25,
        )

    assert _counters(db) == (10, 0)
    assert db.rpc_calls == []
    assert db.purchases == []


def test_purchase_with_cent_amounts_reads_back_after_store_rounding(park) -> None:
    db, user, _, ticket = park
    cheap = ticket_service.create_ticket(db, ticket.facility_id, "Promo", 19.99, available=5)

    record = _buy(db, user, cheap, 3, total=59.97)

    assert record.total == pytest.approx(59.97)
    assert [row.id for row in purchase_service.list_purchases(db, user.id)] == [record.id]


def test_list_purchases_returns_rows_as_stored(park) -> None:
    db, user, _, ticket = park
    # price and total rounded independently by the store
    db.purchases.append(
        {
            "id": str(uuid4()),
            "user_id": str(user.id),
            "ticket_id": str(ticket.id),
            "facility_name": "Roller Coaster",
            "type": "Adult",
            "price": 0.13,
            "quantity": 2,
            "total": 0.25,
            "date": "2024-01-01T00:00:00+00:00",
        }
    )

    history = purchase_service.list_purchases(db, user.id)

    assert [(row.price, row.total) for row in history] == [(0.13, 0.25)]
