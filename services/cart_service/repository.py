"""
Process-local cart storage.

Carts live in a dict for the lifetime of the process; an emptied cart is
dropped rather than stored. A read-modify-write of one cart must run inside
`lock(cart_id)`, so two requests mutating the same cart cannot overwrite each
other's changes. A key's lock exists only while someone holds or waits on it.
"""
import asyncio
from collections import Counter
from contextlib import asynccontextmanager

from shared.observability import ecomm_active_carts
from .schemas import Cart


class CartRepository:
    def __init__(self):
        self._carts: dict[str, Cart] = {}
        self._locks: dict[str, asyncio.Lock] = {}
        self._lock_users: Counter[str] = Counter()

    @asynccontextmanager
    async def lock(self, cart_id: str):
        lock = self._locks.get(cart_id)
        if lock is None:
            lock = self._locks[cart_id] = asyncio.Lock()
        self._lock_users[cart_id] += 1
        try:
            async with lock:
                yield
        finally:
            self._lock_users[cart_id] -= 1
            if not self._lock_users[cart_id]:
                del self._lock_users[cart_id]
                del self._locks[cart_id]

    def get(self, cart_id: str) -> Cart | None:
        cart = self._carts.get(cart_id)
        # Callers mutate what they get back; only save() publishes changes
        return cart.model_copy(deep=True) if cart else None

    def save(self, cart: Cart) -> Cart:
        if cart.items:
            self._carts[cart.id] = cart.model_copy(deep=True)
        else:
            self._carts.pop(cart.id, None)
        ecomm_active_carts.set(len(self._carts))
        return cart
