from unittest.mock import MagicMock

import pytest
from sqlalchemy import select

from domain.customer import Address, Customer
from domain.order import Order, OrderItem
from domain.product import Product
from infrastructure import db


async def seed_customer_and_product(uow, customer_id="123", product_id="123"):
    customer = Customer(customer_id, "Customer 1", Address("Street 1", 1, "Zipcode 1", "City 1"))
    product = Product(product_id, "Product 1", 10.0)
    async with uow:
        await uow.customers.create(customer)
        await uow.products.create(product)
        await uow.commit()
    return customer, product


def item_for(product, item_id, quantity):
    return OrderItem(id=item_id, name=product.name, price=product.price, product_id=product.id, quantity=quantity)


@pytest.mark.asyncio
async def test_create_persists_order_and_item_rows(db_engine):
    uow = db.SqlAlchemyUnitOfWork(db_engine)
    _, product = await seed_customer_and_product(uow)
    item = item_for(product, "1", 2)
    order = Order("123", "123", [item])

    async with uow:
        await uow.orders.create(order)
        await uow.commit()

    async with db_engine.begin() as conn:
        order_row = (await conn.execute(select(db.orders))).one()._mapping
        item_rows = [r._mapping for r in (await conn.execute(select(db.order_items))).fetchall()]

    assert dict(order_row) == {"id": "123", "customer_id": "123", "total": order.total()}
    assert [dict(r) for r in item_rows] == [
        {
            "id": "1",
            "name": "Product 1",
            "price": 10.0,
            "quantity": 2,
            "order_id": "123",
            "product_id": "123",
        }
    ]


@pytest.mark.asyncio
async def test_update_rewrites_items_and_total(db_engine):
    uow = db.SqlAlchemyUnitOfWork(db_engine)
    _, product = await seed_customer_and_product(uow, "1234", "1234")
    item = item_for(product, "2", 2)

    async with uow:
        await uow.orders.create(Order("1234", "1234", [item]))
        await uow.commit()

    async with uow:
        order = await uow.orders.find("1234")
        order.change_item_quantity(item, 7)
        await uow.orders.update(order)
        await uow.commit()

    async with db_engine.begin() as conn:
        total = (await conn.execute(select(db.orders.c.total))).scalar_one()
        quantities = (await conn.execute(select(db.order_items.c.quantity))).scalars().all()

    assert total == 70.0
    assert quantities == [7]


@pytest.mark.asyncio
async def test_update_missing_order_raises(db_engine):
    uow = db.SqlAlchemyUnitOfWork(db_engine)

    async with uow:
        with pytest.raises(db.RecordNotFound):
            await uow.orders.update(Order("nope", "c1", [OrderItem("1", "x", 1.0, "p", 1)]))


@pytest.mark.asyncio
async def test_find_round_trips_aggregate(db_engine):
    uow = db.SqlAlchemyUnitOfWork(db_engine)
    _, product = await seed_customer_and_product(uow, "12345", "12345")
    order = Order("12345", "12345", [item_for(product, "3", 2), item_for(product, "4", 5)])

    async with uow:
        await uow.orders.create(order)
        await uow.commit()

    async with uow:
        fetched = await uow.orders.find("12345")
        missing = await uow.orders.find("other")

    assert fetched == order
    assert fetched.total() == 70.0
    assert missing is None


@pytest.mark.asyncio
async def test_find_round_trips_items_whose_ids_do_not_sort_in_insertion_order(db_engine):
    uow = db.SqlAlchemyUnitOfWork(db_engine)
    _, product = await seed_customer_and_product(uow, "c1", "p1")
    order = Order("o1", "c1", [item_for(product, "9", 1), item_for(product, "10", 3)])

    async with uow:
        await uow.orders.create(order)
        await uow.commit()

    async with uow:
        fetched = await uow.orders.find("o1")

    assert fetched == order
    assert {i.id: i.quantity for i in fetched.items} == {"9": 1, "10": 3}
    assert fetched.total() == order.total()


@pytest.mark.asyncio
async def test_find_all_returns_every_order(db_engine):
    uow = db.SqlAlchemyUnitOfWork(db_engine)
    _, product = await seed_customer_and_product(uow, "12345", "12345")
    order = Order("12345", "12345", [item_for(product, "3", 2)])
    order2 = Order("123456", "12345", [item_for(product, "4", 1)])

    async with uow:
        await uow.orders.create(order)
        await uow.orders.create(order2)
        await uow.commit()

    async with uow:
        all_orders = await uow.orders.find_all()

    assert len(all_orders) == 2
    assert all_orders == [order, order2]


@pytest.mark.asyncio
async def test_find_all_on_empty_store(db_engine):
    uow = db.SqlAlchemyUnitOfWork(db_engine)

    async with uow:
        assert await uow.orders.find_all() == []


@pytest.mark.asyncio
async def test_uncommitted_work_is_discarded(db_engine):
    uow = db.SqlAlchemyUnitOfWork(db_engine)
    await seed_customer_and_product(uow, "c1", "p1")

    with pytest.raises(RuntimeError):
        async with uow:
            await uow.orders.create(Order("o1", "c1", [OrderItem("1", "x", 1.0, "p1", 1)]))
            raise RuntimeError("boom")

    async with uow:
        assert await uow.orders.find("o1") is None


def test_repositories_require_open_session():
    uow = db.SqlAlchemyUnitOfWork(MagicMock())

    with pytest.raises(RuntimeError, match="Session not initialized"):
        uow.orders
