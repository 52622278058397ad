from fastapi import FastAPI
from shared.errors import register_exception_handlers
from shared.observability import setup_observability
from .router import router

cart_app = FastAPI(title="Cart Service", version="1.0.0")

# --- OBSERVABILITY BOOTSTRAP ---
setup_observability(cart_app, "cart_service")
register_exception_handlers(cart_app)

cart_app.include_router(router)
