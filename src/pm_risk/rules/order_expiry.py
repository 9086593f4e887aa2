from src.pm_common.errors import OrderExpiredError


def is_expired(expiry: int, now: int) -> bool:
    return now >= expiry


def check_not_expired(expiry: int, now: int) -> None:
    """Raise OrderExpiredError(7003) unless expiry is strictly in the future."""
    if is_expired(expiry, now):
        raise OrderExpiredError(expiry, now)
