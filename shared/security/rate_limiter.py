import os
from slowapi import Limiter
from slowapi.util import get_remote_address
from fastapi import Request
from .jwt_handler import verify_access_token

# "memory://" keeps counters per process; point at Redis to share them across workers
RATE_LIMIT_STORAGE_URI = os.getenv("RATE_LIMIT_STORAGE_URI", "memory://")

def user_id_or_ip(request: Request) -> str:
    """
    Key function for SlowAPI.
    Uses the authenticated user when a valid bearer token is present,
    otherwise the client address.
    """
    user_id = getattr(request.state, "user_id", None)
    if user_id:
        return f"user:{user_id}"

    auth_header = request.headers.get("Authorization")
    if auth_header and auth_header.startswith("Bearer "):
        payload = verify_access_token(auth_header.split(" ", 1)[1])
        if payload and "sub" in payload:
            return f"user:{payload['sub']}"

    return f"ip:{get_remote_address(request)}"

limiter = Limiter(key_func=user_id_or_ip, storage_uri=RATE_LIMIT_STORAGE_URI)
