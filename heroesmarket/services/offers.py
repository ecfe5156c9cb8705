"""Offer negotiation guarded by the offer transition table."""

from __future__ import annotations

from datetime import datetime, timezone
from decimal import Decimal
from typing import Callable

from heroesmarket.domain.models import (
    OfferAction,
    OfferStatus,
    OfferTransitionError,
    next_status,
)
from heroesmarket.infrastructure.http import GatewayError, MarketplaceGateway
from heroesmarket.infrastructure.observability import log_context, record_offer_action
from heroesmarket.services.base import BaseService
from heroesmarket.services.dto import Offer, Page, format_amount
from heroesmarket.services.marketplace import OffersClient

Clock = Callable[[], datetime]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class OfferNegotiator(BaseService):
    """Drive offers and counter-offers through their allowed transitions.

    Every action is checked against the offer's effective status first, so an
    offer that is accepted, declined or has an expired counter never reaches
    the network. Successful actions return a new ``Offer`` carrying the
    server-confirmed status; failed ones raise and leave the caller's offer
    untouched, to be reconciled by re-fetching.
    """

    def __init__(self, offers: OffersClient, *, clock: Clock = _utcnow) -> None:
        super().__init__()
        self.offers = offers
        self._clock = clock

    @classmethod
    def from_gateway(cls, gateway: MarketplaceGateway) -> "OfferNegotiator":
        return cls(OffersClient(gateway))

    def available_actions(self, offer: Offer) -> tuple[OfferAction, ...]:
        return offer.available_actions(self._clock())

    def _guard(self, offer: Offer, action: OfferAction) -> OfferStatus:
        status = offer.effective_status(self._clock())
        try:
            return next_status(status, action)
        except OfferTransitionError:
            self._logger.info("Blocked %s on offer %d (%s)", action.value, offer.id, status.value)
            record_offer_action(action.value, "blocked")
            raise

    async def _apply(self, offer: Offer, action: OfferAction, call) -> Offer:
        target = self._guard(offer, action)
        with log_context(offer_id=offer.id, listing_id=offer.listing.id):
            try:
                result = await call()
            except GatewayError as exc:
                self._logger.warning("Offer %s failed: %s", action.value, exc)
                record_offer_action(action.value, "failed")
                raise
            record_offer_action(action.value, "ok")
            self._logger.info("Offer %s -> %s", action.value, target.value)
        if isinstance(result, Offer):
            return result
        return offer.model_copy(update={"status": target.value})

    # -------------------- buyer: opening --------------------
    async def make_offer(
        self, listing_id: int, amount: Decimal | str, message: str | None = None
    ) -> Offer:
        normalized = format_amount(amount)
        with log_context(listing_id=listing_id):
            offer = await self.offers.make_offer(listing_id, normalized, message)
            self._logger.info("Offer %d made for %s", offer.id, normalized)
            return offer

    async def list_offers(self, page: int = 1) -> Page[Offer]:
        return await self.offers.get_offers(page)

    # -------------------- seller: pending offers --------------------
    async def accept(self, offer: Offer) -> Offer:
        return await self._apply(
            offer, OfferAction.ACCEPT, lambda: self.offers.accept_offer(offer.id)
        )

    async def decline(self, offer: Offer) -> Offer:
        return await self._apply(
            offer, OfferAction.DECLINE, lambda: self.offers.decline_offer(offer.id)
        )

    async def counter(
        self, offer: Offer, amount: Decimal | str, message: str | None = None
    ) -> Offer:
        # A terminal offer is refused before the amount is looked at.
        self._guard(offer, OfferAction.COUNTER)
        normalized = format_amount(amount)
        return await self._apply(
            offer,
            OfferAction.COUNTER,
            lambda: self.offers.counter_offer(offer.id, normalized, message),
        )

    # -------------------- buyer: countered offers --------------------
    async def accept_counter(self, offer: Offer) -> Offer:
        return await self._apply(
            offer,
            OfferAction.ACCEPT_COUNTER,
            lambda: self.offers.accept_counter_offer(offer.id),
        )

    async def decline_counter(self, offer: Offer) -> Offer:
        return await self._apply(
            offer,
            OfferAction.DECLINE_COUNTER,
            lambda: self.offers.decline_counter_offer(offer.id),
        )

    async def perform(self, offer: Offer, action: OfferAction, **kwargs) -> Offer:
        """Dispatch ``action`` by name; ``counter`` needs ``amount``."""
        handlers = {
            OfferAction.ACCEPT: self.accept,
            OfferAction.DECLINE: self.decline,
            OfferAction.ACCEPT_COUNTER: self.accept_counter,
            OfferAction.DECLINE_COUNTER: self.decline_counter,
        }
        if action is OfferAction.COUNTER:
            return await self.counter(offer, kwargs["amount"], kwargs.get("message"))
        return await handlers[action](offer)


__all__ = ["OfferNegotiator"]
