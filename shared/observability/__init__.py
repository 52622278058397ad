from .setup import setup_observability, configure_logging
from .metrics import (
    ecomm_checkout_total,
    ecomm_checkout_duration_seconds,
    ecomm_saga_compensation_total,
    ecomm_inventory_adjustments_total,
    ecomm_cache_requests_total,
    ecomm_active_carts
)
