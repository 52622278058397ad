import os
from decimal import Decimal
from dotenv import load_dotenv

load_dotenv()

# Pricing
TAX_RATE = Decimal(os.getenv("TAX_RATE", "0.08"))
SHIPPING_FLAT_FEE = Decimal(os.getenv("SHIPPING_FLAT_FEE", "10.00"))
FREE_SHIPPING_THRESHOLD = Decimal(os.getenv("FREE_SHIPPING_THRESHOLD", "100.00"))

# Inventory
LOW_STOCK_THRESHOLD = int(os.getenv("LOW_STOCK_THRESHOLD", "5"))

# Cache
CACHE_TTL_SECONDS = int(os.getenv("CACHE_TTL_SECONDS", "3600"))

# Checkout
PAYMENT_SIMULATION_DELAY = float(os.getenv("PAYMENT_SIMULATION_DELAY", "0.1"))
CHECKOUT_RATE_LIMIT = os.getenv("CHECKOUT_RATE_LIMIT", "10/minute")
