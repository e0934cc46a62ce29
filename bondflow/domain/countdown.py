from __future__ import annotations

"""Remaining-time labels for the coupon claim window."""

from dataclasses import dataclass

SECONDS_PER_DAY = 86400
SECONDS_PER_HOUR = 3600
SECONDS_PER_MINUTE = 60


@dataclass(frozen=True)
class Countdown:
    """Display label plus whether the claim window is open."""

    label: str
    available: bool


NOT_INITIALIZED = Countdown(label="Not initialized", available=False)
AVAILABLE_NOW = Countdown(label="Available now!", available=True)


def describe_remaining(next_claim_ts: int, now_ts: int) -> Countdown:
    """Map the next claim timestamp to a countdown label.

    ``0`` means the schedule was never initialized. Whole days, hours and
    minutes are taken with integer division; seconds are dropped.
    """
    next_ts = int(next_claim_ts)
    if next_ts == 0:
        return NOT_INITIALIZED
    remaining = next_ts - int(now_ts)
    if remaining <= 0:
        return AVAILABLE_NOW

    days = remaining // SECONDS_PER_DAY
    hours = (remaining % SECONDS_PER_DAY) // SECONDS_PER_HOUR
    minutes = (remaining % SECONDS_PER_HOUR) // SECONDS_PER_MINUTE
    return Countdown(label=f"{days}d {hours}h {minutes}m remaining", available=False)


__all__ = ["AVAILABLE_NOW", "Countdown", "NOT_INITIALIZED", "describe_remaining"]
