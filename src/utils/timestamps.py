import time


def now_ms() -> int:
    """Current wall clock time as milliseconds since the Unix epoch."""
    return int(time.time() * 1000)
