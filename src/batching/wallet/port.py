"""Wallet port: abstract interface for the shopper wallet/ledger service.

The engine programs against the port; adapters are swapped via
configuration. Crediting is fire-and-forget from the engine's point of view:
adapters report failures in the returned dict and the external service owns
retries.
"""

from abc import ABC, abstractmethod


class WalletPort(ABC):
    """Abstract interface for wallet adapters."""

    @abstractmethod
    def credit(self, order_id: str, shopper_id: str | None, amount: float, kind: str) -> dict:
        """Credit a fee to the shopper's wallet.

        Returns:
            dict with keys: credited (bool), transaction_id, error
        """
        ...
