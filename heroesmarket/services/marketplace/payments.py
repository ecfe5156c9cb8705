"""Checkout and payment-intent endpoints."""

from __future__ import annotations

from heroesmarket.services.dto import (
    CheckoutRequest,
    CheckoutResponse,
    PaymentConfirmation,
    PaymentConfirmRequest,
    PaymentIntent,
    PaymentIntentRequest,
)

from .base import ResourceClient


class PaymentsClient(ResourceClient):
    async def checkout(
        self, listing_id: int, shipping_address_id: int | None = None
    ) -> CheckoutResponse:
        return await self._gateway.execute(
            "POST",
            f"/marketplace/checkout/{listing_id}/",
            body=CheckoutRequest(shipping_address_id=shipping_address_id),
            response_model=CheckoutResponse,
        )

    async def create_payment_intent(
        self, order_id: int, payment_method_id: str | None = None
    ) -> PaymentIntent:
        return await self._gateway.execute(
            "POST",
            "/marketplace/payment/intent/",
            body=PaymentIntentRequest(order_id=order_id, payment_method_id=payment_method_id),
            response_model=PaymentIntent,
        )

    async def confirm_payment(self, payment_intent_id: str) -> PaymentConfirmation:
        return await self._gateway.execute(
            "POST",
            "/marketplace/payment/confirm/",
            body=PaymentConfirmRequest(payment_intent_id=payment_intent_id),
            response_model=PaymentConfirmation,
        )
