"""Reveal gate: has the mandatory commit→reveal delay elapsed?

Advisory on the client: the ledger enforces the same delay, but a reveal sent
early is a transaction guaranteed to revert, so callers must not send one.
"""
from dataclasses import dataclass

from config.settings import settings


@dataclass(frozen=True)
class RevealWindow:
    allowed: bool
    remaining_seconds: int
    reveal_at: int  # unix seconds at which reveal opens


def can_reveal(commit_timestamp: int, now: int, delay: int | None = None) -> RevealWindow:
    """allowed iff now >= commit_timestamp + delay."""
    delay = settings.REVEAL_DELAY_SECONDS if delay is None else delay
    if delay < 0:
        raise ValueError(f"reveal delay must be non-negative, got {delay}")
    reveal_at = commit_timestamp + delay
    remaining = max(0, reveal_at - now)
    return RevealWindow(allowed=now >= reveal_at, remaining_seconds=remaining, reveal_at=reveal_at)
