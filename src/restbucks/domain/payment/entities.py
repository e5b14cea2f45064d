from __future__ import annotations

import calendar
import re
from dataclasses import dataclass
from datetime import date, datetime

from restbucks.domain.common.ids import OrderId, PaymentId
from restbucks.domain.common.money import Money

_CARD_NUMBER = re.compile(r"^[0-9]{16}$")


def is_valid_card_number(number: str) -> bool:
    return bool(_CARD_NUMBER.match(number))


@dataclass(frozen=True)
class CreditCard:
    number: str
    card_holder_name: str
    expiry_month: int
    expiry_year: int

    def __post_init__(self) -> None:
        if not is_valid_card_number(self.number):
            raise ValueError("credit card number must consist of 16 digits")
        if not 1 <= self.expiry_month <= 12:
            raise ValueError("expiry_month must be between 1 and 12")

    @property
    def expiry_date(self) -> date:
        last_day = calendar.monthrange(self.expiry_year, self.expiry_month)[1]
        return date(self.expiry_year, self.expiry_month, last_day)

    def is_valid(self, on: date) -> bool:
        return on <= self.expiry_date

    @property
    def masked_number(self) -> str:
        return f"{'*' * 12}{self.number[-4:]}"


@dataclass(frozen=True)
class Payment:
    payment_id: PaymentId
    order_id: OrderId
    credit_card_number: str
    amount: Money
    paid_at: datetime

    @property
    def masked_card_number(self) -> str:
        return f"{'*' * 12}{self.credit_card_number[-4:]}"


@dataclass(frozen=True)
class Receipt:
    order_id: OrderId
    amount: Money
    paid_at: datetime


def receipt_for(payment: Payment) -> Receipt:
    return Receipt(order_id=payment.order_id, amount=payment.amount, paid_at=payment.paid_at)
