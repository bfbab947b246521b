from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import PlainTextResponse
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncEngine

from app.errors import (
    ErrorResponse,
    generic_error_handler,
    integrity_error_handler,
    not_found_handler,
    request_validation_error_handler,
    validation_error_handler,
)
from app.schemas import (
    AddressSchema,
    ChangeItemQuantityRequest,
    CreateOrderRequest,
    CreateProductRequest,
    CustomerResponse,
    OrderItemResponse,
    OrderResponse,
    ProductResponse,
    RegisterCustomerRequest,
)
from application.use_cases import (
    ChangeItemQuantityCommand,
    ChangeItemQuantityUseCase,
    CreateOrderCommand,
    CreateOrderUseCase,
    CreateProductCommand,
    CreateProductUseCase,
    RegisterCustomerCommand,
    RegisterCustomerUseCase,
)
from domain.customer import Address, Customer
from domain.errors import ItemNotFound, ValidationError
from domain.order import Order, OrderItem
from domain.product import Product
from infrastructure import db
from infrastructure.config import get_settings
from infrastructure.db import RecordNotFound
from infrastructure.logging import get_logger
from infrastructure.metrics import metrics


def get_service_name() -> str:
    return get_settings().service_name


logger = get_logger()

# Global engine (initialized at startup)
engine: AsyncEngine | None = None


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Create the engine and, unless disabled, the schema; dispose on shutdown."""
    global engine

    settings = get_settings()
    engine = db.get_engine(settings.db_dsn)

    if settings.create_schema:
        async with engine.begin() as conn:
            await conn.run_sync(db.metadata.create_all)

    logger.info("Order service started", create_schema=settings.create_schema)

    yield

    if engine:
        await engine.dispose()
        engine = None


app = FastAPI(title="Order Service", version="0.1.0", lifespan=lifespan)

ERROR_RESPONSES = {
    status.HTTP_400_BAD_REQUEST: {"model": ErrorResponse},
    status.HTTP_404_NOT_FOUND: {"model": ErrorResponse},
    status.HTTP_409_CONFLICT: {"model": ErrorResponse},
}

# Register error handlers
app.add_exception_handler(ItemNotFound, not_found_handler)
app.add_exception_handler(RecordNotFound, not_found_handler)
app.add_exception_handler(ValidationError, validation_error_handler)
app.add_exception_handler(IntegrityError, integrity_error_handler)
app.add_exception_handler(RequestValidationError, request_validation_error_handler)
app.add_exception_handler(Exception, generic_error_handler)


def _require_engine() -> AsyncEngine:
    if not engine:
        raise HTTPException(status_code=500, detail="Database not initialized")
    return engine


def to_order_response(order: Order) -> OrderResponse:
    return OrderResponse(
        id=order.id,
        customer_id=order.customer_id,
        total=order.total(),
        items=[
            OrderItemResponse(
                id=item.id,
                name=item.name,
                price=item.price,
                product_id=item.product_id,
                quantity=item.quantity,
                total_price=item.total_price(),
            )
            for item in order.items
        ],
    )


def to_customer_response(customer: Customer) -> CustomerResponse:
    address = None
    if customer.address:
        address = AddressSchema(
            street=customer.address.street,
            number=customer.address.number,
            zipcode=customer.address.zipcode,
            city=customer.address.city,
        )
    return CustomerResponse(
        id=customer.id,
        name=customer.name,
        address=address,
        active=customer.active,
        reward_points=customer.reward_points,
    )


def to_product_response(product: Product) -> ProductResponse:
    return ProductResponse(id=product.id, name=product.name, price=product.price)


@app.get("/health")
async def health() -> dict:
    return {"service": get_service_name(), "status": "ok"}


@app.get("/metrics", response_class=PlainTextResponse)
async def get_metrics() -> str:
    return metrics.get_prometheus_text()


@app.post("/customers", response_model=CustomerResponse, status_code=status.HTTP_201_CREATED, responses=ERROR_RESPONSES)
async def register_customer(request: RegisterCustomerRequest) -> CustomerResponse:
    address = Address(**request.address.model_dump()) if request.address else None
    command = RegisterCustomerCommand(
        customer_id=request.customer_id,
        name=request.name,
        address=address,
        activate=request.activate,
    )
    customer = await RegisterCustomerUseCase(db.SqlAlchemyUnitOfWork(_require_engine())).execute(command)
    return to_customer_response(customer)


@app.get("/customers/{customer_id}", response_model=CustomerResponse, responses=ERROR_RESPONSES)
async def get_customer(customer_id: str) -> CustomerResponse:
    uow = db.SqlAlchemyUnitOfWork(_require_engine())
    async with uow:
        customer = await uow.customers.find(customer_id)

    if not customer:
        raise HTTPException(status_code=404, detail=f"Customer {customer_id} not found")
    return to_customer_response(customer)


@app.post("/products", response_model=ProductResponse, status_code=status.HTTP_201_CREATED, responses=ERROR_RESPONSES)
async def create_product(request: CreateProductRequest) -> ProductResponse:
    command = CreateProductCommand(product_id=request.product_id, name=request.name, price=request.price)
    product = await CreateProductUseCase(db.SqlAlchemyUnitOfWork(_require_engine())).execute(command)
    return to_product_response(product)


@app.get("/products/{product_id}", response_model=ProductResponse, responses=ERROR_RESPONSES)
async def get_product(product_id: str) -> ProductResponse:
    uow = db.SqlAlchemyUnitOfWork(_require_engine())
    async with uow:
        product = await uow.products.find(product_id)

    if not product:
        raise HTTPException(status_code=404, detail=f"Product {product_id} not found")
    return to_product_response(product)


@app.post("/orders", response_model=OrderResponse, status_code=status.HTTP_201_CREATED, responses=ERROR_RESPONSES)
async def create_order(request: CreateOrderRequest) -> OrderResponse:
    """Create a new order (idempotent - returns existing if already created)."""
    items = [
        OrderItem(
            id=item.id,
            name=item.name,
            price=item.price,
            product_id=item.product_id,
            quantity=item.quantity,
        )
        for item in request.items
    ]
    command = CreateOrderCommand(order_id=request.order_id, customer_id=request.customer_id, items=items)

    # Domain errors bubble up to the registered handlers
    uow = db.SqlAlchemyUnitOfWork(_require_engine())
    order = await CreateOrderUseCase(uow).execute(command)
    return to_order_response(order)


@app.get("/orders", response_model=list[OrderResponse], responses=ERROR_RESPONSES)
async def list_orders() -> list[OrderResponse]:
    uow = db.SqlAlchemyUnitOfWork(_require_engine())
    async with uow:
        orders = await uow.orders.find_all()
    return [to_order_response(order) for order in orders]


@app.get("/orders/{order_id}", response_model=OrderResponse, responses=ERROR_RESPONSES)
async def get_order(order_id: str) -> OrderResponse:
    uow = db.SqlAlchemyUnitOfWork(_require_engine())
    async with uow:
        order = await uow.orders.find(order_id)

    if not order:
        raise HTTPException(status_code=404, detail=f"Order {order_id} not found")
    return to_order_response(order)


@app.patch("/orders/{order_id}/items/{item_id}", response_model=OrderResponse, responses=ERROR_RESPONSES)
async def change_item_quantity(order_id: str, item_id: str, request: ChangeItemQuantityRequest) -> OrderResponse:
    command = ChangeItemQuantityCommand(order_id=order_id, item_id=item_id, quantity=request.quantity)
    uow = db.SqlAlchemyUnitOfWork(_require_engine())
    order = await ChangeItemQuantityUseCase(uow).execute(command)

    if not order:
        raise HTTPException(status_code=404, detail=f"Order {order_id} not found")
    return to_order_response(order)
