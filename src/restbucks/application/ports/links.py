from __future__ import annotations

from typing import Protocol

from restbucks.domain.common.ids import DrinkId, OrderId


class LinkBuilder(Protocol):
    def root(self) -> str: ...

    def docs(self) -> str: ...

    def orders(self) -> str: ...

    def order(self, order_id: OrderId) -> str: ...

    def payment(self, order_id: OrderId) -> str: ...

    def receipt(self, order_id: OrderId) -> str: ...

    def drinks(self) -> str: ...

    def drink_options(self) -> str: ...

    def drink(self, drink_id: DrinkId) -> str: ...
