from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Protocol

from domain.customer import Address, Customer
from domain.order import Order, OrderItem
from domain.product import Product
from infrastructure.logging import get_logger
from infrastructure.metrics import metrics

logger = get_logger()


class OrderRepository(Protocol):
    async def create(self, order: Order) -> None: ...
    async def update(self, order: Order) -> None: ...
    async def find(self, order_id: str) -> Order | None: ...
    async def find_all(self) -> List[Order]: ...


class CustomerRepository(Protocol):
    async def create(self, customer: Customer) -> None: ...
    async def find(self, customer_id: str) -> Customer | None: ...


class ProductRepository(Protocol):
    async def create(self, product: Product) -> None: ...
    async def find(self, product_id: str) -> Product | None: ...


class UnitOfWork(Protocol):
    async def __aenter__(self) -> "UnitOfWork": ...
    async def __aexit__(self, exc_type, exc, tb) -> None: ...
    async def commit(self) -> None: ...
    @property
    def orders(self) -> OrderRepository: ...
    @property
    def customers(self) -> CustomerRepository: ...
    @property
    def products(self) -> ProductRepository: ...


@dataclass
class CreateOrderCommand:
    order_id: str
    customer_id: str
    items: List[OrderItem]


class CreateOrderUseCase:
    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    async def execute(self, cmd: CreateOrderCommand) -> Order:
        async with self.uow:
            existing = await self.uow.orders.find(cmd.order_id)
            if existing:
                return existing

            order = Order(id=cmd.order_id, customer_id=cmd.customer_id, items=cmd.items)
            await self.uow.orders.create(order)
            await self.uow.commit()
            metrics.increment("orders_created_total")
            logger.info("Order created", order_id=order.id, total=order.total())
            return order


@dataclass
class ChangeItemQuantityCommand:
    order_id: str
    item_id: str
    quantity: int


class ChangeItemQuantityUseCase:
    """Apply a quantity change to one item and persist the whole order.

    Returns None when the order does not exist. Domain errors (unknown item,
    invalid resulting state) propagate and nothing is committed.
    """

    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    async def execute(self, cmd: ChangeItemQuantityCommand) -> Order | None:
        async with self.uow:
            order = await self.uow.orders.find(cmd.order_id)
            if not order:
                return None

            item = order.find_item(cmd.item_id)
            order.change_item_quantity(item, cmd.quantity)
            await self.uow.orders.update(order)
            await self.uow.commit()
            metrics.increment("order_items_changed_total")
            logger.info(
                "Order item quantity changed",
                order_id=order.id,
                item_id=cmd.item_id,
                quantity=order.find_item(cmd.item_id).quantity,
            )
            return order


@dataclass
class RegisterCustomerCommand:
    customer_id: str
    name: str
    address: Optional[Address] = None
    activate: bool = False


class RegisterCustomerUseCase:
    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    async def execute(self, cmd: RegisterCustomerCommand) -> Customer:
        customer = Customer(id=cmd.customer_id, name=cmd.name, address=cmd.address)
        if cmd.activate:
            customer.activate()
        async with self.uow:
            await self.uow.customers.create(customer)
            await self.uow.commit()
        metrics.increment("customers_registered_total")
        logger.info("Customer registered", customer_id=customer.id)
        return customer


@dataclass
class CreateProductCommand:
    product_id: str
    name: str
    price: float


class CreateProductUseCase:
    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    async def execute(self, cmd: CreateProductCommand) -> Product:
        product = Product(id=cmd.product_id, name=cmd.name, price=cmd.price)
        async with self.uow:
            await self.uow.products.create(product)
            await self.uow.commit()
        metrics.increment("products_created_total")
        logger.info("Product created", product_id=product.id)
        return product
