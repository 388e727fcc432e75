"""Typed failures reported by the batch fulfillment engine.

Every error is a Protean ``ValidationError`` so the aggregate can raise it
from its methods exactly like a field violation, while the engine catches the
``BatchError`` family and hands it back to callers inside a ``Result``.
"""

from protean.exceptions import ValidationError


class BatchError(ValidationError):
    """Base class for engine failures callers are expected to render."""

    field = "order"

    def __init__(self, message: str, **context):
        super().__init__({self.field: [message]})
        self.message = message
        self.context = context

    def __str__(self) -> str:
        return self.message


class TransitionError(BatchError):
    """The requested status is not reachable from the current one."""

    field = "status"


class TerminalStateError(TransitionError):
    """The order is delivered; no further transition is possible."""


class IncompleteShoppingError(TransitionError):
    """Shopping cannot finish before any item has been resolved."""


class MissingProofError(TransitionError):
    """Delivery requires a proof-of-delivery reference."""

    field = "proof_of_delivery"


class GroupNotReadyError(BatchError):
    """A customer group is not ready to be delivered as a whole."""

    field = "group"


class LedgerError(BatchError):
    """Item found-state was changed outside the shopping phase."""

    field = "item"


class InvalidQuantityError(LedgerError):
    """The found quantity is outside the requested bounds."""

    field = "found_quantity"


class BatchCompositionError(BatchError):
    """Orders cannot be combined into the requested batch."""

    field = "batch"
