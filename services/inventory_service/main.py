from fastapi import FastAPI
from shared.errors import register_exception_handlers
from shared.observability import setup_observability
from .router import router, admin_router

inventory_app = FastAPI(title="Inventory Service", version="1.0.0")

# --- OBSERVABILITY BOOTSTRAP ---
setup_observability(inventory_app, "inventory_service")
register_exception_handlers(inventory_app)

inventory_app.include_router(router)
inventory_app.include_router(admin_router)
