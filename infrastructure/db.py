from __future__ import annotations

from collections import defaultdict
from typing import Dict, List, Optional

from sqlalchemy import (
    Boolean,
    Column,
    Float,
    ForeignKey,
    Integer,
    MetaData,
    String,
    Table,
    delete,
    false,
    insert,
    select,
    update,
)
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from domain.customer import Address, Customer
from domain.order import Order, OrderItem
from domain.product import Product
from infrastructure.config import get_settings

metadata = MetaData()

customers = Table(
    "customers",
    metadata,
    Column("id", String, primary_key=True),
    Column("name", String, nullable=False),
    Column("street", String, nullable=True),
    Column("number", Integer, nullable=True),
    Column("zipcode", String, nullable=True),
    Column("city", String, nullable=True),
    Column("active", Boolean, nullable=False, server_default=false()),
    Column("reward_points", Integer, nullable=False, server_default="0"),
)

products = Table(
    "products",
    metadata,
    Column("id", String, primary_key=True),
    Column("name", String, nullable=False),
    Column("price", Float, nullable=False),
)

orders = Table(
    "orders",
    metadata,
    Column("id", String, primary_key=True),
    Column("customer_id", String, ForeignKey("customers.id"), nullable=False),
    Column("total", Float, nullable=False),
)

order_items = Table(
    "order_items",
    metadata,
    Column("id", String, primary_key=True),
    Column("name", String, nullable=False),
    Column("price", Float, nullable=False),
    Column("quantity", Integer, nullable=False),
    Column("order_id", String, ForeignKey("orders.id"), nullable=False),
    Column("product_id", String, ForeignKey("products.id"), nullable=False),
)


class RecordNotFound(LookupError):
    """Raised when an update targets a row that does not exist."""


def get_engine(dsn: Optional[str] = None) -> AsyncEngine:
    url = dsn or get_settings().db_dsn
    if not url:
        raise RuntimeError("APP__DB_DSN not set")
    return create_async_engine(url, future=True)


def _item_rows(order: Order) -> List[dict]:
    return [
        {
            "id": item.id,
            "name": item.name,
            "price": item.price,
            "quantity": item.quantity,
            "order_id": order.id,
            "product_id": item.product_id,
        }
        for item in order.items
    ]


def _to_item(row) -> OrderItem:
    return OrderItem(
        id=row["id"],
        name=row["name"],
        price=row["price"],
        product_id=row["product_id"],
        quantity=row["quantity"],
    )


class OrderRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, order: Order) -> None:
        await self.session.execute(
            insert(orders).values(id=order.id, customer_id=order.customer_id, total=order.total())
        )
        await self.session.execute(insert(order_items), _item_rows(order))

    async def update(self, order: Order) -> None:
        result = await self.session.execute(
            update(orders)
            .where(orders.c.id == order.id)
            .values(customer_id=order.customer_id, total=order.total())
        )
        if result.rowcount == 0:
            raise RecordNotFound(f"Order {order.id} not found")
        # Item rows are replaced wholesale so they always mirror the aggregate
        await self.session.execute(delete(order_items).where(order_items.c.order_id == order.id))
        await self.session.execute(insert(order_items), _item_rows(order))

    async def find(self, order_id: str) -> Order | None:
        result = await self.session.execute(select(orders).where(orders.c.id == order_id))
        row = result.first()
        if not row:
            return None
        items = await self.session.execute(
            select(order_items).where(order_items.c.order_id == order_id).order_by(order_items.c.id)
        )
        data = row._mapping
        return Order(
            id=data["id"],
            customer_id=data["customer_id"],
            items=[_to_item(item._mapping) for item in items],
        )

    async def find_all(self) -> List[Order]:
        order_rows = (await self.session.execute(select(orders).order_by(orders.c.id))).fetchall()
        if not order_rows:
            return []

        items_by_order: Dict[str, List[OrderItem]] = defaultdict(list)
        item_rows = await self.session.execute(
            select(order_items)
            .where(order_items.c.order_id.in_([r._mapping["id"] for r in order_rows]))
            .order_by(order_items.c.id)
        )
        for item in item_rows:
            items_by_order[item._mapping["order_id"]].append(_to_item(item._mapping))

        return [
            Order(
                id=r._mapping["id"],
                customer_id=r._mapping["customer_id"],
                items=items_by_order[r._mapping["id"]],
            )
            for r in order_rows
        ]


def _customer_values(customer: Customer) -> dict:
    address = customer.address
    return {
        "name": customer.name,
        "street": address.street if address else None,
        "number": address.number if address else None,
        "zipcode": address.zipcode if address else None,
        "city": address.city if address else None,
        "active": customer.active,
        "reward_points": customer.reward_points,
    }


def _to_customer(data) -> Customer:
    address = None
    if data["street"] is not None:
        address = Address(
            street=data["street"],
            number=data["number"],
            zipcode=data["zipcode"],
            city=data["city"],
        )
    return Customer(
        id=data["id"],
        name=data["name"],
        address=address,
        active=data["active"],
        reward_points=data["reward_points"],
    )


class CustomerRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, customer: Customer) -> None:
        await self.session.execute(insert(customers).values(id=customer.id, **_customer_values(customer)))

    async def update(self, customer: Customer) -> None:
        result = await self.session.execute(
            update(customers).where(customers.c.id == customer.id).values(**_customer_values(customer))
        )
        if result.rowcount == 0:
            raise RecordNotFound(f"Customer {customer.id} not found")

    async def find(self, customer_id: str) -> Customer | None:
        result = await self.session.execute(select(customers).where(customers.c.id == customer_id))
        row = result.first()
        return _to_customer(row._mapping) if row else None

    async def find_all(self) -> List[Customer]:
        result = await self.session.execute(select(customers).order_by(customers.c.id))
        return [_to_customer(row._mapping) for row in result]


class ProductRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, product: Product) -> None:
        await self.session.execute(
            insert(products).values(id=product.id, name=product.name, price=product.price)
        )

    async def update(self, product: Product) -> None:
        result = await self.session.execute(
            update(products)
            .where(products.c.id == product.id)
            .values(name=product.name, price=product.price)
        )
        if result.rowcount == 0:
            raise RecordNotFound(f"Product {product.id} not found")

    async def find(self, product_id: str) -> Product | None:
        result = await self.session.execute(select(products).where(products.c.id == product_id))
        row = result.first()
        if not row:
            return None
        data = row._mapping
        return Product(id=data["id"], name=data["name"], price=data["price"])

    async def find_all(self) -> List[Product]:
        result = await self.session.execute(select(products).order_by(products.c.id))
        return [Product(id=r.id, name=r.name, price=r.price) for r in result]


class SqlAlchemyUnitOfWork:
    def __init__(self, engine: AsyncEngine):
        self.engine = engine
        self.session_factory = async_sessionmaker(bind=self.engine, expire_on_commit=False)
        self.session: AsyncSession | None = None
        self._orders: OrderRepository | None = None
        self._customers: CustomerRepository | None = None
        self._products: ProductRepository | None = None

    async def __aenter__(self):
        self.session = self.session_factory()
        await self.session.__aenter__()
        return self

    async def __aexit__(self, exc_type, exc, tb):
        if self.session:
            if exc_type is not None:
                await self.session.rollback()
            await self.session.__aexit__(exc_type, exc, tb)
        self.session = None
        self._orders = None
        self._customers = None
        self._products = None

    async def commit(self) -> None:
        if self.session:
            await self.session.commit()

    def _require_session(self) -> AsyncSession:
        if not self.session:
            raise RuntimeError("Session not initialized")
        return self.session

    @property
    def orders(self) -> OrderRepository:
        if not self._orders:
            self._orders = OrderRepository(self._require_session())
        return self._orders

    @property
    def customers(self) -> CustomerRepository:
        if not self._customers:
            self._customers = CustomerRepository(self._require_session())
        return self._customers

    @property
    def products(self) -> ProductRepository:
        if not self._products:
            self._products = ProductRepository(self._require_session())
        return self._products
