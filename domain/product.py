from __future__ import annotations

from domain.errors import MissingIdentifier, ValidationError


class Product:
    def __init__(self, id: str, name: str, price: float):
        self.id = id
        self.name = name
        self.price = price
        self.validate()

    def validate(self) -> bool:
        if not self.id:
            raise MissingIdentifier("Id is required")
        if not self.name:
            raise ValidationError("Name is required")
        if self.price < 0:
            raise ValidationError("Price must not be negative")
        return True

    def change_name(self, name: str) -> None:
        if not name:
            raise ValidationError("Name is required")
        self.name = name
        self.validate()

    def change_price(self, price: float) -> None:
        if price < 0:
            raise ValidationError("Price must not be negative")
        self.price = price
        self.validate()

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Product):
            return NotImplemented
        return (self.id, self.name, self.price) == (other.id, other.name, other.price)

    __hash__ = None
