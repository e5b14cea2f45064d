from __future__ import annotations

from fastapi import APIRouter, HTTPException, Request, status

from restbucks.api.hal import HalJSONResponse, RequestLinkBuilder
from restbucks.api.middleware.request_id import get_request_id
from restbucks.application.dto.requests import PaymentRequest
from restbucks.application.mappers.payment_mapper import to_payment_response, to_receipt_response
from restbucks.application.use_cases.context import TraceContext
from restbucks.application.use_cases.pay_order import GetPayment, PaymentNotFoundError, PayOrder
from restbucks.application.use_cases.receipt import GetReceipt, ReceiptNotFoundError, TakeReceipt
from restbucks.domain.common.ids import OrderId
from restbucks.infrastructure.db.repositories.order_repo import SqlAlchemyOrderRepository
from restbucks.infrastructure.db.repositories.payment_repo import (
    SqlAlchemyCreditCardRepository,
    SqlAlchemyPaymentRepository,
)
from restbucks.infrastructure.messaging.redis_publisher import RedisEventPublisher
from restbucks.infrastructure.observability.otel import current_trace_id

router = APIRouter()


def _pay_order_use_case() -> PayOrder:
    return PayOrder(
        order_repository=SqlAlchemyOrderRepository(),
        credit_card_repository=SqlAlchemyCreditCardRepository(),
        payment_repository=SqlAlchemyPaymentRepository(),
        publisher=RedisEventPublisher(),
    )


def _take_receipt_use_case() -> TakeReceipt:
    return TakeReceipt(
        order_repository=SqlAlchemyOrderRepository(),
        payment_repository=SqlAlchemyPaymentRepository(),
        publisher=RedisEventPublisher(),
    )


@router.put(
    "/orders/{order_id}/payment",
    response_class=HalJSONResponse,
    status_code=status.HTTP_201_CREATED,
)
def pay_order(order_id: str, request_dto: PaymentRequest, request: Request) -> HalJSONResponse:
    payment = _pay_order_use_case().execute(
        order_id=OrderId(order_id),
        card_number=request_dto.number,
        trace_ctx=TraceContext(trace_id=current_trace_id(), request_id=get_request_id()),
    )
    links = RequestLinkBuilder(request)
    return HalJSONResponse(
        status_code=status.HTTP_201_CREATED,
        content=to_payment_response(payment, links).to_hal(),
        headers={"Location": links.payment(payment.order_id)},
    )


@router.get("/orders/{order_id}/payment", response_class=HalJSONResponse)
def get_payment(order_id: str, request: Request) -> HalJSONResponse:
    try:
        payment = GetPayment(payment_repository=SqlAlchemyPaymentRepository()).execute(
            OrderId(order_id)
        )
    except PaymentNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    return HalJSONResponse(content=to_payment_response(payment, RequestLinkBuilder(request)).to_hal())


@router.get("/orders/{order_id}/receipt", response_class=HalJSONResponse)
def get_receipt(order_id: str, request: Request) -> HalJSONResponse:
    receipt = GetReceipt(
        order_repository=SqlAlchemyOrderRepository(),
        payment_repository=SqlAlchemyPaymentRepository(),
    ).execute(OrderId(order_id))
    return HalJSONResponse(content=to_receipt_response(receipt, RequestLinkBuilder(request)).to_hal())


@router.delete("/orders/{order_id}/receipt", response_class=HalJSONResponse)
def take_receipt(order_id: str, request: Request) -> HalJSONResponse:
    try:
        receipt = _take_receipt_use_case().execute(
            order_id=OrderId(order_id),
            trace_ctx=TraceContext(trace_id=current_trace_id(), request_id=get_request_id()),
        )
    except ReceiptNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    return HalJSONResponse(content=to_receipt_response(receipt, RequestLinkBuilder(request)).to_hal())
