"""Fake wallet adapter: deterministic wallet for testing and development.

Records every credit it accepts. Configurable success/failure behavior for
exercising the engine's warning path.
"""

from uuid import uuid4

from batching.wallet.port import WalletPort


class FakeWallet(WalletPort):
    """Fake wallet that always succeeds by default."""

    def __init__(self):
        self.should_succeed = True
        self.failure_reason = "Wallet unavailable"
        self.credits: list[dict] = []

    def configure(self, should_succeed: bool = True, failure_reason: str = "Wallet unavailable"):
        """Configure the fake wallet behavior for testing."""
        self.should_succeed = should_succeed
        self.failure_reason = failure_reason

    def credit(self, order_id: str, shopper_id: str | None, amount: float, kind: str) -> dict:
        if not self.should_succeed:
            return {"credited": False, "transaction_id": None, "error": self.failure_reason}

        transaction_id = f"wtx-{uuid4().hex[:10]}"
        self.credits.append(
            {
                "transaction_id": transaction_id,
                "order_id": order_id,
                "shopper_id": shopper_id,
                "amount": amount,
                "kind": kind,
            }
        )
        return {"credited": True, "transaction_id": transaction_id, "error": None}
