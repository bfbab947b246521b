from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Iterable, List

from domain.errors import EmptyItemList, InvalidQuantity, ItemNotFound, MissingIdentifier


@dataclass(frozen=True)
class OrderItem:
    id: str
    name: str
    price: float
    product_id: str
    quantity: int

    def total_price(self) -> float:
        return self.price * self.quantity

    def with_quantity(self, quantity: int) -> "OrderItem":
        return replace(self, quantity=quantity)


class Order:
    """Order aggregate: a customer reference plus its item lines.

    The total is always derived from the current items; nothing is cached.
    """

    def __init__(self, id: str, customer_id: str, items: Iterable[OrderItem]):
        self._id = id
        self._customer_id = customer_id
        self._items: List[OrderItem] = list(items)
        self.validate()

    @property
    def id(self) -> str:
        return self._id

    @property
    def customer_id(self) -> str:
        return self._customer_id

    @property
    def items(self) -> List[OrderItem]:
        return list(self._items)

    def total(self) -> float:
        return sum(item.total_price() for item in self._items)

    def validate(self) -> bool:
        self._check(self._id, self._customer_id, self._items)
        return True

    @staticmethod
    def _check(order_id: str, customer_id: str, items: List[OrderItem]) -> None:
        if not order_id:
            raise MissingIdentifier("Id is required")
        if not customer_id:
            raise MissingIdentifier("CustomerId is required")
        if not items:
            raise EmptyItemList("Items are required")
        if any(item.quantity <= 0 for item in items):
            raise InvalidQuantity("Quantity must be greater than 0")

    def find_item(self, item_id: str) -> OrderItem:
        for item in self._items:
            if item.id == item_id:
                return item
        raise ItemNotFound("Order item not found")

    def change_item_quantity(self, order_item: OrderItem, new_quantity: int) -> None:
        current = self.find_item(order_item.id)
        candidate = list(self._items)
        if new_quantity > 0:
            candidate[candidate.index(current)] = order_item.with_quantity(new_quantity)
        self._check(self._id, self._customer_id, candidate)
        self._items = candidate

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Order):
            return NotImplemented
        return (
            self._id == other._id
            and self._customer_id == other._customer_id
            and self._sorted_items() == other._sorted_items()
        )

    def _sorted_items(self) -> List[OrderItem]:
        # item order is not part of identity; storage reloads by item id
        return sorted(self._items, key=lambda item: item.id)

    __hash__ = None  # mutable aggregate

    def __repr__(self) -> str:
        return f"Order(id={self._id!r}, customer_id={self._customer_id!r}, items={self._items!r})"
