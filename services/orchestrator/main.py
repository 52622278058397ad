from fastapi import FastAPI
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from shared.errors import register_exception_handlers
from shared.security import limiter
from shared.observability import setup_observability
from .router import router

checkout_app = FastAPI(
    title="Checkout Service",
    version="1.0.0"
)

# --- OBSERVABILITY BOOTSTRAP ---
setup_observability(checkout_app, "checkout_service")
register_exception_handlers(checkout_app)

# --- SECURITY SETUP ---
checkout_app.state.limiter = limiter
checkout_app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

checkout_app.include_router(router)
