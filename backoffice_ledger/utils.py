"""Small helpers shared by the store and the services."""

import time
import uuid


def now_ms() -> int:
    """Current instant in milliseconds since the epoch."""
    return int(time.time() * 1000)


def new_id(prefix: str = "") -> str:
    return f"{prefix}{uuid.uuid4().hex}"
