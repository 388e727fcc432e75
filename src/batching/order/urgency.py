"""Dispatch urgency: priority buckets for active orders.

Buckets are evaluated in order and the first match wins:

    newly_accepted  status is accepted and the order is at most an hour old
    late            the delivery deadline has passed
    urgent          the deadline is at most ten minutes away
    okay            everything else

Classification reads the clock on every call; nothing is scheduled.
"""

from datetime import UTC, datetime, timedelta
from enum import Enum

from batching import config
from batching.order.status import OrderStatus


class Urgency(Enum):
    NEWLY_ACCEPTED = "newly_accepted"
    LATE = "late"
    URGENT = "urgent"
    OKAY = "okay"


_PRIORITY = {
    Urgency.LATE: 0,
    Urgency.URGENT: 1,
    Urgency.NEWLY_ACCEPTED: 2,
    Urgency.OKAY: 3,
}

# (suffix, minutes), largest first
_UNITS = (
    ("y", 365 * 24 * 60),
    ("mo", 30 * 24 * 60),
    ("w", 7 * 24 * 60),
    ("d", 24 * 60),
    ("h", 60),
    ("m", 1),
)


def _aware(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


def classify_urgency(order, now: datetime | None = None) -> Urgency:
    now = _aware(now or datetime.now(UTC))

    if OrderStatus(order.status) == OrderStatus.ACCEPTED and order.created_at is not None:
        if now - _aware(order.created_at) <= timedelta(minutes=config.newly_accepted_minutes()):
            return Urgency.NEWLY_ACCEPTED

    if order.delivery_deadline is not None:
        remaining = _aware(order.delivery_deadline) - now
        if remaining <= timedelta(0):
            return Urgency.LATE
        if remaining <= timedelta(minutes=config.urgent_minutes()):
            return Urgency.URGENT

    return Urgency.OKAY


def prioritize(orders, now: datetime | None = None) -> list:
    """Orders sorted most pressing first, then by earliest deadline."""
    now = _aware(now or datetime.now(UTC))
    far_future = datetime.max.replace(tzinfo=UTC)

    def _key(order):
        deadline = _aware(order.delivery_deadline) if order.delivery_deadline else far_future
        return (_PRIORITY[classify_urgency(order, now)], deadline)

    return sorted(orders, key=_key)


def format_overdue(overdue: timedelta) -> str:
    """Render an overdue span with its two largest units, e.g. ``"2h 5m overdue"``."""
    remaining = int(abs(overdue).total_seconds() // 60)
    parts = []
    for suffix, size in _UNITS:
        count, remaining = divmod(remaining, size)
        parts.append((count, suffix))

    first = next((index for index, (count, _) in enumerate(parts) if count), len(parts) - 1)
    shown = parts[first : first + 2]
    return " ".join(f"{count}{suffix}" for count, suffix in shown) + " overdue"
