from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from restbucks.domain.common.ids import DrinkId
from restbucks.domain.common.money import Money


class Milk(str, Enum):
    WHOLE = "Whole"
    SEMI = "Semi"
    SKIM = "Skim"


class Size(str, Enum):
    SMALL = "Small"
    MEDIUM = "Medium"
    LARGE = "Large"


@dataclass(frozen=True)
class Drink:
    drink_id: DrinkId
    name: str
    milk: Milk
    size: Size
    price: Money

    def __post_init__(self) -> None:
        if not self.name.strip():
            raise ValueError("name must be non-empty")

    @property
    def label(self) -> str:
        return f"{self.name} ({self.size.value}, {self.milk.value} milk) - {self.price.format()}"
