from __future__ import annotations

from typing import NewType

DrinkId = NewType("DrinkId", str)
OrderId = NewType("OrderId", str)
LineItemId = NewType("LineItemId", str)
PaymentId = NewType("PaymentId", str)
