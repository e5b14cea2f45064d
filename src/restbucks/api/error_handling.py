from __future__ import annotations

from typing import Any, cast

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from restbucks.api.middleware.request_id import get_request_id
from restbucks.api.routes.orders import InvalidDrinkUriError
from restbucks.application.use_cases.cancel_order import OrderConflictError as CancelConflictError
from restbucks.application.use_cases.cancel_order import (
    OrderNotFoundError as CancelOrderNotFoundError,
)
from restbucks.application.use_cases.get_drinks import DrinkNotFoundError as GetDrinkNotFoundError
from restbucks.application.use_cases.get_order import InvalidPageError
from restbucks.application.use_cases.get_order import OrderNotFoundError as GetOrderNotFoundError
from restbucks.application.use_cases.pay_order import (
    CreditCardExpiredError,
    CreditCardNotFoundError,
    OrderAlreadyPaidError,
    PaymentNotFoundError,
)
from restbucks.application.use_cases.pay_order import OrderConflictError as PayConflictError
from restbucks.application.use_cases.pay_order import OrderNotFoundError as PayOrderNotFoundError
from restbucks.application.use_cases.place_order import (
    DrinkNotFoundError as PlaceOrderDrinkNotFoundError,
)
from restbucks.application.use_cases.place_order import MixedCurrencyError
from restbucks.application.use_cases.receipt import OrderConflictError as ReceiptConflictError
from restbucks.application.use_cases.receipt import (
    OrderNotFoundError as ReceiptOrderNotFoundError,
)
from restbucks.application.use_cases.receipt import ReceiptNotFoundError
from restbucks.application.use_cases.update_order import OrderConflictError as UpdateConflictError
from restbucks.application.use_cases.update_order import (
    OrderNotFoundError as UpdateOrderNotFoundError,
)
from restbucks.domain.order.entities import OrderNotModifiableError, OrderTransitionError

_HTTP_ERROR_CODES = {
    400: "BAD_REQUEST",
    404: "NOT_FOUND",
    405: "METHOD_NOT_ALLOWED",
    409: "CONFLICT",
}


def _error_response(
    *,
    status_code: int,
    code: str,
    message: str,
    details: dict[str, Any] | None = None,
    headers: dict[str, str] | None = None,
) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={
            "error": {
                "code": code,
                "message": message,
                "details": details or {},
            },
            "requestId": get_request_id(),
        },
        headers=headers,
    )


def _exception_handler(status_code: int, code: str, headers: dict[str, str] | None = None):
    async def handler(_: Request, exc: Exception) -> JSONResponse:
        details = getattr(exc, "details", None)
        return _error_response(
            status_code=status_code,
            code=code,
            message=str(exc),
            details=details if isinstance(details, dict) else None,
            headers=headers,
        )

    return handler


async def _http_exception_handler(_: Request, exc: Exception) -> JSONResponse:
    http_exc = cast(StarletteHTTPException, exc)
    message = str(http_exc.detail) if http_exc.detail else "request failed"
    return _error_response(
        status_code=http_exc.status_code,
        code=_HTTP_ERROR_CODES.get(http_exc.status_code, "HTTP_ERROR"),
        message=message,
        headers=getattr(http_exc, "headers", None),
    )


async def _validation_exception_handler(_: Request, exc: Exception) -> JSONResponse:
    validation_exc = cast(RequestValidationError, exc)
    return _error_response(
        status_code=400,
        code="INVALID_REQUEST",
        message="request validation failed",
        details={"errors": validation_exc.errors()},
    )


def register_exception_handlers(app: FastAPI) -> None:
    mappings: list[tuple[type[Exception], int, str]] = [
        (GetOrderNotFoundError, 404, "ORDER_NOT_FOUND"),
        (UpdateOrderNotFoundError, 404, "ORDER_NOT_FOUND"),
        (CancelOrderNotFoundError, 404, "ORDER_NOT_FOUND"),
        (PayOrderNotFoundError, 404, "ORDER_NOT_FOUND"),
        (ReceiptOrderNotFoundError, 404, "ORDER_NOT_FOUND"),
        (GetDrinkNotFoundError, 404, "DRINK_NOT_FOUND"),
        (PaymentNotFoundError, 404, "PAYMENT_NOT_FOUND"),
        (ReceiptNotFoundError, 404, "RECEIPT_NOT_FOUND"),
        (PlaceOrderDrinkNotFoundError, 400, "DRINK_NOT_FOUND"),
        (InvalidDrinkUriError, 400, "INVALID_DRINK_URI"),
        (MixedCurrencyError, 400, "INVALID_REQUEST"),
        (InvalidPageError, 400, "INVALID_PAGE"),
        (CreditCardNotFoundError, 400, "CREDIT_CARD_NOT_FOUND"),
        (CreditCardExpiredError, 400, "CREDIT_CARD_EXPIRED"),
        (OrderAlreadyPaidError, 409, "ORDER_ALREADY_PAID"),
        (OrderTransitionError, 409, "INVALID_ORDER_TRANSITION"),
        (UpdateConflictError, 409, "CONFLICT"),
        (CancelConflictError, 409, "CONFLICT"),
        (PayConflictError, 409, "CONFLICT"),
        (ReceiptConflictError, 409, "CONFLICT"),
    ]

    for exc_cls, status_code, code in mappings:
        app.add_exception_handler(exc_cls, _exception_handler(status_code, code))

    # Once paid, an order only supports reads.
    app.add_exception_handler(
        OrderNotModifiableError,
        _exception_handler(405, "METHOD_NOT_ALLOWED", headers={"Allow": "GET"}),
    )
    app.add_exception_handler(StarletteHTTPException, _http_exception_handler)
    app.add_exception_handler(RequestValidationError, _validation_exception_handler)
