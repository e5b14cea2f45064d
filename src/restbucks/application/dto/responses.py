from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class LinkResponse(BaseModel):
    href: str
    templated: bool | None = None
    name: str | None = None
    title: str | None = None


class HalModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    links: dict[str, LinkResponse | list[LinkResponse]] = Field(
        default_factory=dict,
        alias="_links",
    )

    def to_hal(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class MoneyResponse(BaseModel):
    amountCents: int
    currency: str
    formatted: str


class DrinkResponse(HalModel):
    drinkId: str
    name: str
    milk: str
    size: str
    price: MoneyResponse


class DrinksResponse(HalModel):
    embedded: dict[str, list[DrinkResponse]] = Field(default_factory=dict, alias="_embedded")


class DrinkOptionResponse(BaseModel):
    value: str
    prompt: str


class LineItemResponse(BaseModel):
    drinkId: str
    name: str
    milk: str
    size: str
    price: MoneyResponse


class OrderResponse(HalModel):
    orderId: str
    location: str
    status: str
    lineItems: list[LineItemResponse] = Field(default_factory=list)
    total: MoneyResponse
    orderedAt: datetime


class PageMetadataResponse(BaseModel):
    size: int
    totalElements: int
    totalPages: int
    number: int


class OrdersResponse(HalModel):
    embedded: dict[str, list[OrderResponse]] = Field(default_factory=dict, alias="_embedded")
    page: PageMetadataResponse


class PaymentResponse(HalModel):
    paymentId: str
    amount: MoneyResponse
    creditCard: str
    paidAt: datetime


class ReceiptResponse(HalModel):
    orderId: str
    amount: MoneyResponse
    paymentDate: datetime


class PropertyOptionsResponse(BaseModel):
    link: LinkResponse | None = None
    inline: list[str] | None = None
    promptField: str | None = None
    valueField: str | None = None
    minItems: int | None = None
    maxItems: int | None = None


class TemplatePropertyResponse(BaseModel):
    name: str
    prompt: str | None = None
    required: bool | None = None
    options: PropertyOptionsResponse | None = None


class TemplateResponse(BaseModel):
    method: str
    target: str | None = None
    contentType: str | None = None
    properties: list[TemplatePropertyResponse] = Field(default_factory=list)


class RootResponse(HalModel):
    templates: dict[str, TemplateResponse] = Field(default_factory=dict, alias="_templates")


class RelationDocsResponse(BaseModel):
    rel: str
    description: str
