from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from domain.errors import MissingIdentifier, ValidationError


@dataclass(frozen=True)
class Address:
    street: str
    number: int
    zipcode: str
    city: str

    def __str__(self) -> str:
        return f"{self.street}, {self.number}, {self.zipcode} {self.city}"


class Customer:
    def __init__(
        self,
        id: str,
        name: str,
        address: Optional[Address] = None,
        active: bool = False,
        reward_points: int = 0,
    ):
        self.id = id
        self.name = name
        self.address = address
        self.active = active
        self.reward_points = reward_points
        self.validate()

    def validate(self) -> bool:
        if not self.id:
            raise MissingIdentifier("Id is required")
        if not self.name:
            raise ValidationError("Name is required")
        if self.active and self.address is None:
            raise ValidationError("Address is mandatory to activate a customer")
        return True

    def change_name(self, name: str) -> None:
        if not name:
            raise ValidationError("Name is required")
        self.name = name
        self.validate()

    def change_address(self, address: Optional[Address]) -> None:
        if address is None and self.active:
            raise ValidationError("Address is mandatory to activate a customer")
        self.address = address
        self.validate()

    def activate(self) -> None:
        if self.address is None:
            raise ValidationError("Address is mandatory to activate a customer")
        self.active = True
        self.validate()

    def deactivate(self) -> None:
        self.active = False
        self.validate()

    def add_reward_points(self, points: int) -> None:
        if points < 0:
            raise ValidationError("Reward points must not be negative")
        self.reward_points += points
        self.validate()

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Customer):
            return NotImplemented
        return (
            self.id == other.id
            and self.name == other.name
            and self.address == other.address
            and self.active == other.active
            and self.reward_points == other.reward_points
        )

    __hash__ = None
