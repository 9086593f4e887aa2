"""Clock helpers."""

import time


def unix_now() -> int:
    """Return whole seconds since the epoch, the unit the ledger uses for timestamps."""
    return int(time.time())
