"""Per-order locks: at most one in-flight mutation per order.

Transitions and item updates on the same order are serialised here so two
concurrent "leave shopping" requests cannot both pass the guard and credit
fees twice. Multi-order operations take every lock in sorted id order and
release all of them on exit, whatever the outcome.

Delivered orders are terminal, so their locks are discarded once the
delivery is committed and the registry only holds live orders.
"""

import threading
from contextlib import ExitStack, contextmanager


class OrderLocks:
    """Registry of one lock per order id, created on first use."""

    def __init__(self):
        self._guard = threading.Lock()
        self._locks: dict[str, threading.RLock] = {}

    def _lock_for(self, order_id: str) -> threading.RLock:
        with self._guard:
            lock = self._locks.get(order_id)
            if lock is None:
                lock = threading.RLock()
                self._locks[order_id] = lock
            return lock

    @contextmanager
    def hold(self, order_id):
        lock = self._lock_for(str(order_id))
        with lock:
            yield

    @contextmanager
    def hold_all(self, order_ids):
        with ExitStack() as stack:
            for order_id in sorted({str(order_id) for order_id in order_ids}):
                stack.enter_context(self.hold(order_id))
            yield

    def discard(self, order_id) -> None:
        """Forget the lock of an order that will not be mutated again."""
        with self._guard:
            self._locks.pop(str(order_id), None)

    def discard_all(self, order_ids) -> None:
        with self._guard:
            for order_id in order_ids:
                self._locks.pop(str(order_id), None)

    def reset(self) -> None:
        with self._guard:
            self._locks.clear()


order_locks = OrderLocks()
