from fastapi import Depends, FastAPI
from sqlalchemy.ext.asyncio import AsyncSession
from shared.cache import CacheAside
from shared.config.cache import close_cache, get_cache
from shared.config.database import engine, Base, check_db_connection, get_db

# IMPORTANT: import models so they register with Base
from services.product_service import models as product_models
from services.inventory_service import models as inventory_models
from services.order_service import models as order_models

from services.product_service.main import product_app
from services.inventory_service.main import inventory_app
from services.cart_service.main import cart_app
from services.order_service.main import order_app
from services.orchestrator.main import checkout_app

app = FastAPI(title="Inventory & Order Core")

@app.on_event("startup")
async def startup_event():
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

@app.on_event("shutdown")
async def shutdown_event():
    await close_cache()
    await engine.dispose()

@app.get("/health")
async def health_check(db: AsyncSession = Depends(get_db), cache: CacheAside = Depends(get_cache)):
    database_ok = await check_db_connection(db)
    cache_ok = await cache.ping()
    # A cache outage degrades reads but the service keeps answering
    return {
        "status": "ok" if database_ok else "degraded",
        "database": "up" if database_ok else "down",
        "cache": "up" if cache_ok else "down",
    }

app.mount("/products", product_app)
app.mount("/inventory", inventory_app)
app.mount("/cart", cart_app)
app.mount("/orders", order_app)
app.mount("/checkout", checkout_app)
