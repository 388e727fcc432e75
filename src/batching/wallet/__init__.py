"""Wallet adapter abstraction: pluggable shopper wallet integration."""

import os

_wallet_instance = None


def get_wallet():
    """Return the configured wallet adapter (singleton).

    Uses FakeWallet by default. In production, configure via the
    WALLET_ADAPTER environment variable.
    """
    global _wallet_instance
    if _wallet_instance is None:
        adapter = os.environ.get("WALLET_ADAPTER", "fake")
        if adapter == "fake":
            from batching.wallet.fake_adapter import FakeWallet

            _wallet_instance = FakeWallet()
        else:
            raise ValueError(f"Unknown wallet adapter: {adapter}")
    return _wallet_instance


def reset_wallet():
    """Reset the wallet singleton (useful for testing)."""
    global _wallet_instance
    _wallet_instance = None
