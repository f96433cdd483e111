"""Rate limiting configuration."""

from slowapi import Limiter
from slowapi.util import get_remote_address

# Create limiter instance
limiter = Limiter(key_func=get_remote_address)

# Rate limit configurations
RATE_LIMITS = {
    "default": "100/minute",  # Health reads
    "trigger": "5/minute",  # Manual pipeline runs (each one calls paid APIs)
    "summary": "10/minute",  # Health summary messages
}
