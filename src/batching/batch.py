"""Batch: a shopper's primary order and the orders combined into its trip."""

from dataclasses import dataclass, field


@dataclass
class Batch:
    primary: object
    combined: list = field(default_factory=list)

    @property
    def id(self) -> str:
        return str(self.primary.id)

    @property
    def shopper_id(self):
        return self.primary.shopper_id

    @property
    def orders(self) -> list:
        return [self.primary, *self.combined]

    @property
    def same_shop_orders(self) -> list:
        """The primary order and combined orders picked at the same shop."""
        return [self.primary, *(o for o in self.combined if o.shop_id == self.primary.shop_id)]

    @property
    def has_same_shop_combined(self) -> bool:
        return len(self.same_shop_orders) > 1

    def get_order(self, order_id):
        return next((o for o in self.orders if str(o.id) == str(order_id)), None)
