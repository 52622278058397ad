from prometheus_client import Counter, Histogram, Gauge

# Business Metrics
ecomm_checkout_total = Counter(
    "ecomm_checkout_total", 
    "Total checkouts processed", 
    ["status"] # Labels: 'success', 'failed'
)

ecomm_checkout_duration_seconds = Histogram(
    "ecomm_checkout_duration_seconds", 
    "Checkout duration in seconds"
)

ecomm_saga_compensation_total = Counter(
    "ecomm_saga_compensation_total", 
    "Total saga compensations triggered", 
    ["step_name"] # Labels: 'PaymentSimulated', 'OrderPersisted', etc.
)

ecomm_inventory_adjustments_total = Counter(
    "ecomm_inventory_adjustments_total",
    "Stock ledger lines applied",
    ["direction"] # Labels: 'increment', 'decrement'
)

ecomm_cache_requests_total = Counter(
    "ecomm_cache_requests_total",
    "Cache-aside lookups",
    ["result"] # Labels: 'hit', 'miss', 'error'
)

ecomm_active_carts = Gauge(
    "ecomm_active_carts", 
    "Number of currently active carts"
)
