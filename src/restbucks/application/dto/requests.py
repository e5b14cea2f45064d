from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from restbucks.domain.order.entities import Location


def _to_camel(value: str) -> str:
    parts = value.split("_")
    return parts[0] + "".join(part.capitalize() for part in parts[1:])


class CamelBaseModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=_to_camel,
        populate_by_name=True,
    )


class PlaceOrderRequest(CamelBaseModel):
    drinks: list[str] = Field(min_length=1)
    location: Location


class PaymentRequest(CamelBaseModel):
    number: str = Field(pattern=r"^[0-9]{16}$")
