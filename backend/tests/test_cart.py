from datetime import date
from decimal import Decimal

import pytest

from liquor_pos.errors import NotFoundError, ValidationError
from liquor_pos.services.cart import Cart

BEER = {"id": 1, "name": "Beer", "price": Decimal("20.00")}
WINE = {"id": 2, "name": "Wine", "price": Decimal("15.00")}

TEN_OFF_BEER = {
    "name": "Beer promo",
    "type": "percentage",
    "value": Decimal("10"),
    "applicable_items": "Beer",
    "start_date": date(2026, 1, 1),
    "end_date": date(2026, 12, 31),
}


@pytest.fixture
def cart():
    return Cart()


def test_add_new_item_creates_line_with_quantity_one(cart):
    line = cart.add(BEER)
    assert (line.id, line.name, line.quantity, line.price) == (1, "Beer", 1, Decimal("20.00"))
    assert len(cart) == 1


def test_add_existing_item_increments_and_reprices(cart):
    cart.add(BEER)
    line = cart.add(BEER, [TEN_OFF_BEER])
    assert line.quantity == 2
    assert line.price == Decimal("18.00")
    assert len(cart) == 1


def test_total_sums_price_times_quantity(cart):
    cart.add(BEER)
    cart.add(WINE)
    assert cart.total() == Decimal("35.00")


def test_set_quantity_replaces_quantity_and_keeps_price(cart):
    cart.add(BEER, [TEN_OFF_BEER])
    cart.set_quantity(1, 3)
    assert cart.line(1).quantity == 3
    assert cart.line(1).price == Decimal("18.00")
    assert cart.total() == Decimal("54.00")


def test_set_quantity_zero_is_remove(cart):
    cart.add(BEER)
    cart.add(WINE)
    other = Cart()
    other.add(BEER)
    other.add(WINE)

    cart.set_quantity(1, 0)
    other.remove(1)

    assert cart.snapshot() == other.snapshot()
    assert 1 not in cart


def test_set_quantity_negative_rejected(cart):
    cart.add(BEER)
    with pytest.raises(ValidationError):
        cart.set_quantity(1, -1)
    assert cart.line(1).quantity == 1


def test_set_quantity_unknown_item_not_found(cart):
    with pytest.raises(NotFoundError):
        cart.set_quantity(99, 2)


def test_remove_absent_item_is_noop(cart):
    cart.add(BEER)
    cart.remove(99)
    assert len(cart) == 1


def test_snapshot_is_a_copy(cart):
    cart.add(BEER)
    snap = cart.snapshot()
    snap[0]["quantity"] = 50
    assert cart.line(1).quantity == 1
    assert snap == [{"id": 1, "name": "Beer", "quantity": 50, "price": Decimal("20.00")}]


def test_clear_empties_cart(cart):
    cart.add(BEER)
    cart.clear()
    assert cart.is_empty
    assert cart.total() == Decimal("0")
