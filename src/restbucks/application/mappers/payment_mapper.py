from __future__ import annotations

from restbucks.application.dto.responses import LinkResponse, PaymentResponse, ReceiptResponse
from restbucks.application.mappers.drink_mapper import to_money_response
from restbucks.application.mappers.relations import ORDER_REL, SELF_REL, curies
from restbucks.application.ports.links import LinkBuilder
from restbucks.domain.payment.entities import Payment, Receipt


def to_payment_response(payment: Payment, links: LinkBuilder) -> PaymentResponse:
    return PaymentResponse(
        paymentId=str(payment.payment_id),
        amount=to_money_response(payment.amount),
        creditCard=payment.masked_card_number,
        paidAt=payment.paid_at,
        links={
            SELF_REL: LinkResponse(href=links.payment(payment.order_id)),
            ORDER_REL: LinkResponse(href=links.order(payment.order_id)),
            "curies": curies(links.docs()),
        },
    )


def to_receipt_response(receipt: Receipt, links: LinkBuilder) -> ReceiptResponse:
    return ReceiptResponse(
        orderId=str(receipt.order_id),
        amount=to_money_response(receipt.amount),
        paymentDate=receipt.paid_at,
        links={
            SELF_REL: LinkResponse(href=links.receipt(receipt.order_id)),
            ORDER_REL: LinkResponse(href=links.order(receipt.order_id)),
            "curies": curies(links.docs()),
        },
    )
