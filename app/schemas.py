"""Pydantic schemas for HTTP API requests and responses."""

from typing import Optional

from pydantic import BaseModel, Field


class OrderItemRequest(BaseModel):
    """Item line in an order request."""
    id: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1)
    price: float = Field(..., ge=0)
    product_id: str = Field(..., min_length=1)
    quantity: int


class CreateOrderRequest(BaseModel):
    """Request body for creating an order.

    Quantities are not range-checked here; the Order aggregate owns that rule.
    """
    order_id: str = Field(..., min_length=1)
    customer_id: str = Field(..., min_length=1)
    items: list[OrderItemRequest] = Field(..., min_length=1)


class ChangeItemQuantityRequest(BaseModel):
    """Non-positive quantities are accepted and leave the item unchanged."""
    quantity: int


class OrderItemResponse(BaseModel):
    id: str
    name: str
    price: float
    product_id: str
    quantity: int
    total_price: float


class OrderResponse(BaseModel):
    """Response for order endpoints."""
    id: str
    customer_id: str
    total: float
    items: list[OrderItemResponse]


class AddressSchema(BaseModel):
    street: str = Field(..., min_length=1)
    number: int
    zipcode: str = Field(..., min_length=1)
    city: str = Field(..., min_length=1)


class RegisterCustomerRequest(BaseModel):
    customer_id: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1)
    address: Optional[AddressSchema] = None
    activate: bool = False


class CustomerResponse(BaseModel):
    id: str
    name: str
    address: Optional[AddressSchema] = None
    active: bool
    reward_points: int


class CreateProductRequest(BaseModel):
    product_id: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1)
    price: float = Field(..., ge=0)


class ProductResponse(BaseModel):
    id: str
    name: str
    price: float
