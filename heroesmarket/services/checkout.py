"""Checkout and payment saga.

Buying a listing takes three marketplace calls: ``checkout`` reserves the
listing and creates an order, ``create_payment_intent`` asks the backend for a
payment-processor intent against that order, and ``confirm_payment`` reports
the processor's confirmation back. Between steps two and three the external
payment processor confirms the intent on the client side.

There is no rollback. Once an order exists, every retry resumes against that
same order; the checkout call is never repeated by this module.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Awaitable, Callable

from heroesmarket.infrastructure.http import GatewayError, MarketplaceGateway
from heroesmarket.infrastructure.observability import (
    log_context,
    log_exception,
    record_checkout_step,
)
from heroesmarket.services.base import BaseService
from heroesmarket.services.dto import CheckoutResponse, PaymentConfirmation, PaymentIntent
from heroesmarket.services.marketplace import PaymentsClient

PaymentConfirmer = Callable[[PaymentIntent], Awaitable[None]]


class CheckoutStage(str, Enum):
    """Where a checkout currently stands."""

    NOT_STARTED = "not_started"
    ORDER_CREATED = "order_created"
    INTENT_CREATED = "intent_created"
    PROCESSOR_CONFIRMED = "processor_confirmed"
    PAID = "paid"
    PAYMENT_DECLINED = "payment_declined"


@dataclass
class CheckoutProgress:
    """Completed saga steps, held by the caller between attempts."""

    listing_id: int
    shipping_address_id: int | None = None
    payment_method_id: str | None = None
    order: CheckoutResponse | None = None
    intent: PaymentIntent | None = None
    processor_confirmed: bool = False
    confirmation: PaymentConfirmation | None = None

    @property
    def order_id(self) -> int | None:
        return self.order.order_id if self.order is not None else None

    @property
    def stage(self) -> CheckoutStage:
        if self.confirmation is not None:
            if self.confirmation.success:
                return CheckoutStage.PAID
            return CheckoutStage.PAYMENT_DECLINED
        if self.processor_confirmed:
            return CheckoutStage.PROCESSOR_CONFIRMED
        if self.intent is not None:
            return CheckoutStage.INTENT_CREATED
        if self.order is not None:
            return CheckoutStage.ORDER_CREATED
        return CheckoutStage.NOT_STARTED

    @property
    def is_complete(self) -> bool:
        return self.stage is CheckoutStage.PAID

    def discard_intent(self) -> None:
        """Forget the current payment attempt while keeping the order."""
        self.intent = None
        self.processor_confirmed = False
        self.confirmation = None


class CheckoutOrchestrator(BaseService):
    """Sequence checkout, payment intent and confirmation strictly in order.

    Each step only starts once the previous one has succeeded. Gateway errors
    propagate unchanged; the progress object keeps whatever already succeeded
    so :meth:`advance` can pick up from the first missing step.
    """

    def __init__(self, payments: PaymentsClient) -> None:
        super().__init__()
        self.payments = payments

    @classmethod
    def from_gateway(cls, gateway: MarketplaceGateway) -> "CheckoutOrchestrator":
        return cls(PaymentsClient(gateway))

    async def _step(self, step: str, call: Callable[[], Awaitable]):
        try:
            result = await call()
        except GatewayError as exc:
            self._logger.warning("Checkout step %s failed: %s", step, exc)
            record_checkout_step(step, "failed")
            raise
        record_checkout_step(step, "ok")
        return result

    async def checkout(
        self, listing_id: int, shipping_address_id: int | None = None
    ) -> CheckoutResponse:
        with log_context(listing_id=listing_id):
            order = await self._step(
                "checkout", lambda: self.payments.checkout(listing_id, shipping_address_id)
            )
            self._logger.info("Order %d created (total %s)", order.order_id, order.total)
            return order

    async def create_payment_intent(
        self, order_id: int, payment_method_id: str | None = None
    ) -> PaymentIntent:
        with log_context(order_id=order_id):
            intent = await self._step(
                "payment_intent",
                lambda: self.payments.create_payment_intent(order_id, payment_method_id),
            )
            self._logger.info("Payment intent created for order %d", order_id)
            return intent

    async def confirm_payment(self, payment_intent_id: str) -> PaymentConfirmation:
        confirmation = await self._step(
            "confirm", lambda: self.payments.confirm_payment(payment_intent_id)
        )
        with log_context(order_id=confirmation.order_id):
            self._logger.info(
                "Payment confirmation: success=%s status=%s",
                confirmation.success,
                confirmation.status,
            )
        return confirmation

    async def advance(
        self, progress: CheckoutProgress, confirmer: PaymentConfirmer
    ) -> CheckoutProgress:
        """Run the remaining steps of ``progress`` in place and return it.

        ``confirmer`` is the payment-processor capability; it receives the
        intent and raises if the processor did not confirm it. A processor
        failure or a declined confirmation discards the intent so the next
        call creates a fresh one against the same order.
        """
        if progress.is_complete:
            return progress
        if progress.stage is CheckoutStage.PAYMENT_DECLINED:
            progress.discard_intent()

        if progress.order is None:
            progress.order = await self.checkout(
                progress.listing_id, progress.shipping_address_id
            )
        order_id = progress.order.order_id

        if progress.intent is None:
            progress.intent = await self.create_payment_intent(
                order_id, progress.payment_method_id
            )

        if not progress.processor_confirmed:
            with log_context(order_id=order_id):
                try:
                    await confirmer(progress.intent)
                except Exception as exc:
                    log_exception(self._logger, "Payment processor did not confirm the intent", exc)
                    record_checkout_step("processor", "failed")
                    progress.discard_intent()
                    raise
            record_checkout_step("processor", "ok")
            progress.processor_confirmed = True

        progress.confirmation = await self.confirm_payment(progress.intent.payment_intent_id)
        return progress


__all__ = [
    "CheckoutOrchestrator",
    "CheckoutProgress",
    "CheckoutStage",
    "PaymentConfirmer",
]
