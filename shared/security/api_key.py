"""
Internal API key for catalog and inventory write endpoints.

A missing INTERNAL_API_KEY falls back to a known default with a warning.
"""
import os
import secrets
import warnings

from shared.config import settings  # noqa: F401  loads .env before the lookup below

_INTERNAL_API_KEY: str = os.getenv("INTERNAL_API_KEY", "")

if not _INTERNAL_API_KEY:
    warnings.warn(
        "INTERNAL_API_KEY is not set. Using an insecure default. "
        "Set this env var in production!",
        stacklevel=2,
    )
    _INTERNAL_API_KEY = "insecure-default-change-me"

INTERNAL_API_KEY: str = _INTERNAL_API_KEY


def verify_api_key(provided_key: str) -> bool:
    """Verify an API key using constant-time comparison to prevent timing attacks."""
    if not provided_key:
        return False
    return secrets.compare_digest(str(provided_key), str(INTERNAL_API_KEY))
