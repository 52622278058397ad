import os

# Must be set before any project module reads its configuration
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("JWT_SECRET_KEY", "test-jwt-secret")
os.environ.setdefault("INTERNAL_API_KEY", "test-internal-key")
os.environ.setdefault("PAYMENT_SIMULATION_DELAY", "0")
os.environ.setdefault("CHECKOUT_RATE_LIMIT", "1000/minute")

from decimal import Decimal

import fakeredis
import httpx
import pytest
from fakeredis import aioredis as fake_aioredis
from fastapi import FastAPI
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine

from services.cart_service.repository import CartRepository
from services.cart_service.router import router as cart_router
from services.cart_service.service import CartService, get_cart_service
from services.inventory_service import models as inventory_models  # noqa: F401
from services.inventory_service.router import admin_router as inventory_admin_router
from services.inventory_service.router import router as inventory_router
from services.orchestrator.router import router as checkout_router
from services.order_service import models as order_models  # noqa: F401
from services.order_service.router import router as order_router
from services.order_service.schemas import CheckoutRequest, PaymentDetails, ShippingAddress
from services.product_service.models import Product
from services.product_service.router import admin_router as product_admin_router
from services.product_service.router import router as product_router
from shared.cache import CacheAside
from shared.config.cache import get_cache
from shared.config.database import Base, get_db
from shared.errors import register_exception_handlers
from shared.security import create_access_token, limiter

INTERNAL_HEADERS = {"X-Internal-API-Key": "test-internal-key"}


@pytest.fixture
async def engine(tmp_path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, expire_on_commit=False)


@pytest.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
def redis():
    return fake_aioredis.FakeRedis(server=fakeredis.FakeServer(), decode_responses=True)


@pytest.fixture
def cache(redis):
    return CacheAside(redis)


@pytest.fixture
def carts():
    return CartService(CartRepository())


@pytest.fixture
def make_product(session_factory):
    """Insert a product through its own session and hand back the detached row."""
    async def _make(name="Widget", price="19.99", stock=10, category_id=1, brand_id=1):
        async with session_factory() as session:
            product = Product(
                name=name,
                description=f"{name} description",
                price=Decimal(price),
                stock=stock,
                category_id=category_id,
                brand_id=brand_id,
            )
            session.add(product)
            await session.commit()
            return product
    return _make


@pytest.fixture
def auth_headers():
    def _headers(user_id="user-1"):
        return {"Authorization": f"Bearer {create_access_token({'sub': user_id})}"}
    return _headers


@pytest.fixture
def app(session_factory, cache, carts):
    app = FastAPI()
    register_exception_handlers(app)
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

    app.include_router(product_router, prefix="/products")
    app.include_router(product_admin_router, prefix="/products")
    app.include_router(inventory_router, prefix="/inventory")
    app.include_router(inventory_admin_router, prefix="/inventory")
    app.include_router(cart_router, prefix="/cart")
    app.include_router(order_router, prefix="/orders")
    app.include_router(checkout_router, prefix="/checkout")

    async def override_get_db():
        async with session_factory() as session:
            yield session

    async def override_get_cache():
        return cache

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_cache] = override_get_cache
    app.dependency_overrides[get_cart_service] = lambda: carts
    return app


@pytest.fixture
async def client(app):
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest.fixture
def checkout_request():
    def _request(simulate_success=True):
        return CheckoutRequest(
            shipping_address=ShippingAddress(
                name="Ada Lovelace",
                street="12 Analytical Row",
                city="London",
                state="LDN",
                zip_code="N1 9GU",
                country="UK",
            ),
            payment_details=PaymentDetails(method="card", simulate_success=simulate_success),
        )
    return _request
