import os

from slowapi import Limiter
from slowapi.util import get_remote_address

# memory:// keeps counters per process; point at Redis in multi-worker deployments.
limiter = Limiter(
    key_func=get_remote_address,
    storage_uri=os.getenv("RATE_LIMIT_STORAGE_URI", "memory://"),
)
