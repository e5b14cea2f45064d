from __future__ import annotations

from restbucks.application.dto.responses import (
    LinkResponse,
    PropertyOptionsResponse,
    RootResponse,
    TemplatePropertyResponse,
    TemplateResponse,
)
from restbucks.application.mappers.relations import DRINKS_REL, ORDERS_REL, SELF_REL, curies
from restbucks.application.ports.links import LinkBuilder
from restbucks.domain.order.entities import Location


def to_root_response(links: LinkBuilder) -> RootResponse:
    # Property order is part of the contract: drinks first, location second.
    order_template = TemplateResponse(
        method="post",
        target=links.orders(),
        contentType="application/json",
        properties=[
            TemplatePropertyResponse(
                name="drinks",
                prompt="Drinks",
                required=True,
                options=PropertyOptionsResponse(
                    link=LinkResponse(href=links.drink_options()),
                    promptField="prompt",
                    valueField="value",
                    minItems=1,
                ),
            ),
            TemplatePropertyResponse(
                name="location",
                prompt="Location",
                required=True,
                options=PropertyOptionsResponse(
                    inline=[location.value for location in Location],
                    minItems=1,
                    maxItems=1,
                ),
            ),
        ],
    )
    return RootResponse(
        links={
            SELF_REL: LinkResponse(href=links.root()),
            ORDERS_REL: LinkResponse(href=links.orders()),
            DRINKS_REL: LinkResponse(href=links.drinks()),
            "curies": curies(links.docs()),
        },
        templates={"default": order_template},
    )
