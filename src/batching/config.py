"""Business-policy settings for the batching domain.

Values are read from the environment on every call so tests and operators
can adjust them without reloading modules.
"""

import os

DEFAULT_VAT_RATE = 0.18
DEFAULT_NEWLY_ACCEPTED_MINUTES = 60
DEFAULT_URGENT_MINUTES = 10


def vat_rate() -> float:
    """Tax rate already included in displayed prices."""
    return float(os.environ.get("BATCHING_VAT_RATE", DEFAULT_VAT_RATE))


def newly_accepted_minutes() -> int:
    return int(os.environ.get("BATCHING_NEWLY_ACCEPTED_MINUTES", DEFAULT_NEWLY_ACCEPTED_MINUTES))


def urgent_minutes() -> int:
    return int(os.environ.get("BATCHING_URGENT_MINUTES", DEFAULT_URGENT_MINUTES))
