# Overview: In-memory cart for the sale in progress at one register.

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Iterable, Iterator

from ..errors import NotFoundError, ValidationError
from .pricing import compute_price, field


@dataclass
class CartItem:
    """One cart line. id is the item id; price is already promotion-adjusted."""
    id: int
    name: str
    price: Decimal
    quantity: int = 1

    @property
    def line_total(self) -> Decimal:
        return self.price * self.quantity

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "quantity": self.quantity,
            "price": self.price,
        }


class Cart:
    """
    Lines for one checkout session, keyed by item id in insertion order.

    Not thread-safe; one register session owns one cart.
    """

    def __init__(self):
        self._lines: dict[int, CartItem] = {}

    def __len__(self) -> int:
        return len(self._lines)

    def __iter__(self) -> Iterator[CartItem]:
        return iter(list(self._lines.values()))

    def __contains__(self, item_id) -> bool:
        return item_id in self._lines

    @property
    def is_empty(self) -> bool:
        return not self._lines

    def line(self, item_id: int) -> CartItem:
        try:
            return self._lines[item_id]
        except KeyError:
            raise NotFoundError(f"Item {item_id} is not in the cart", details={"item_id": item_id})

    def add(self, item, promotions: Iterable = ()) -> CartItem:
        """
        Add one unit of item.

        The price is recomputed from the item's base price on every add, so a
        promotion that became active mid-sale applies to the whole line.
        """
        promotions = list(promotions)
        item_id = field(item, "id")
        price = compute_price(item, promotions)

        existing = self._lines.get(item_id)
        if existing is not None:
            existing.quantity += 1
            existing.price = price
            return existing

        line = CartItem(id=item_id, name=field(item, "name"), price=price, quantity=1)
        self._lines[item_id] = line
        return line

    def remove(self, item_id: int) -> None:
        self._lines.pop(item_id, None)

    def set_quantity(self, item_id: int, quantity: int) -> None:
        if isinstance(quantity, bool) or not isinstance(quantity, int):
            raise ValidationError("quantity must be an integer")
        if quantity < 0:
            raise ValidationError("quantity must be >= 0")
        if quantity == 0:
            self.remove(item_id)
            return
        self.line(item_id).quantity = quantity

    def total(self) -> Decimal:
        return sum((line.line_total for line in self._lines.values()), Decimal("0"))

    def snapshot(self) -> list[dict]:
        return [line.to_dict() for line in self._lines.values()]

    def clear(self) -> None:
        self._lines.clear()
