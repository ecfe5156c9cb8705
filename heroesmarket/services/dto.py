"""
Centralized wire models for the marketplace API.

Every request and response shape used by the resource clients lives here.
Response models ignore unknown fields and fill documented defaults (counts
read as 0, optional flags as ``False``) so that one tolerant validation step
per payload replaces per-call decoding logic. Money travels as decimal
strings; ``*_decimal`` accessors convert on demand.
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal, InvalidOperation
from typing import Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field

from heroesmarket.domain.models import (
    ListingType,
    OfferAction,
    OfferStatus,
    OrderStatus,
    Perspective,
    available_actions,
    effective_status,
    is_hot_listing,
)
from heroesmarket.infrastructure.credentials import SessionTokens
from heroesmarket.infrastructure.http import InvalidRequestError
from heroesmarket.infrastructure.http.decoding import Count, Flag, Timestamp, parse_amount

T = TypeVar("T")

_CENT = Decimal("0.01")


def format_amount(value: Decimal | str | int | float) -> str:
    """Render a money amount the way the API expects it ("150.00").

    Raises:
        InvalidRequestError: if the value is not a positive decimal amount
            with at most two decimal places.
    """
    try:
        amount = Decimal(str(value).strip())
    except InvalidOperation:
        raise InvalidRequestError(f"Invalid amount: {value!r}") from None
    if not amount.is_finite() or amount <= 0:
        raise InvalidRequestError(f"Amount must be positive: {value!r}")
    try:
        cents = amount.quantize(_CENT)
    except InvalidOperation:
        raise InvalidRequestError(f"Amount is too large: {value!r}") from None
    if cents != amount:
        raise InvalidRequestError(f"Amount has more than two decimals: {value!r}")
    return str(cents)


class WireModel(BaseModel):
    """Base for response payloads."""

    model_config = ConfigDict(extra="ignore", frozen=True)


class RequestModel(BaseModel):
    """Base for request bodies; ``None`` fields are omitted when sent."""

    model_config = ConfigDict(extra="forbid")


# --- Pagination ---
class Page(WireModel, Generic[T]):
    count: Count = 0
    next: str | None = None
    previous: str | None = None
    results: list[T] = Field(default_factory=list)

    @property
    def has_next(self) -> bool:
        return bool(self.next)


# --- Accounts ---
AuthTokens = SessionTokens


class LoginRequest(RequestModel):
    username: str
    password: str


class RegisterRequest(RequestModel):
    username: str
    email: str
    password: str
    password_confirm: str


class SocialLoginRequest(RequestModel):
    id_token: str
    first_name: str | None = None
    last_name: str | None = None


class Profile(WireModel):
    id: int
    username: str
    email: str
    avatar: str | None = None
    avatar_url: str | None = None
    bio: str | None = None
    location: str | None = None
    website: str | None = None
    is_seller_verified: Flag = False
    is_trusted_seller: Flag = False
    is_founding_member: Flag = False
    stripe_account_complete: Flag = False
    seller_tier: str | None = None
    rating: float | None = None
    rating_count: Count = 0
    total_sales_count: Count = 0
    is_public: Flag = False
    email_notifications: Flag = False
    created: Timestamp = None


class ProfileUpdateRequest(RequestModel):
    bio: str | None = None
    location: str | None = None
    website: str | None = None


class PasswordChangeRequest(RequestModel):
    old_password: str
    new_password: str
    new_password_confirm: str


class PasswordResetRequest(RequestModel):
    email: str


class PasswordResetConfirmRequest(RequestModel):
    uid: str
    token: str
    new_password: str
    new_password_confirm: str


class NotificationSettings(WireModel):
    email_notifications: Flag = False
    push_new_bid: Flag = False
    push_outbid: Flag = False
    push_offer: Flag = False
    push_order_shipped: Flag = False
    push_message: Flag = False
    push_price_alert: Flag = False


class NotificationSettingsUpdate(RequestModel):
    email_notifications: bool | None = None
    push_new_bid: bool | None = None
    push_outbid: bool | None = None
    push_offer: bool | None = None
    push_order_shipped: bool | None = None
    push_message: bool | None = None
    push_price_alert: bool | None = None


# --- Listings ---
class ListingSeller(WireModel):
    username: str
    avatar_url: str | None = None
    rating: float | None = None
    rating_count: Count = 0
    is_verified: Flag = False


class ListingCategory(WireModel):
    id: int
    name: str
    slug: str


class ListingItem(WireModel):
    id: int
    name: str
    year: int | None = None


class ListingImage(WireModel):
    id: int
    url: str
    thumbnail: str | None = None
    is_primary: Flag = False


class Bid(WireModel):
    id: int
    amount: str
    bidder: str
    created: Timestamp = None
    is_winning: Flag = False

    @property
    def amount_decimal(self) -> Decimal | None:
        return parse_amount(self.amount)


class _ListingFields(WireModel):
    id: int
    title: str
    description: str | None = None
    price: str
    current_bid: str | None = None
    buy_now_price: str | None = None
    condition: str | None = None
    condition_display: str | None = None
    listing_type: str = ListingType.FIXED.value
    status: str = "active"
    seller: ListingSeller
    category: ListingCategory | None = None
    item: ListingItem | None = None
    bid_count: Count = 0
    watch_count: Count = 0
    view_count: Count = 0
    is_watched: Flag = False
    end_date: Timestamp = None
    created: Timestamp = None
    shipping_price: str | None = None
    accepts_offers: Flag = False
    quantity: int = 1
    quantity_available: int | None = None
    is_hot_lot: bool | None = None

    @property
    def kind(self) -> ListingType:
        return ListingType.from_string(self.listing_type)

    @property
    def is_auction(self) -> bool:
        return self.kind is ListingType.AUCTION

    @property
    def price_decimal(self) -> Decimal:
        return parse_amount(self.price) or Decimal("0")

    @property
    def current_bid_decimal(self) -> Decimal | None:
        return parse_amount(self.current_bid)

    @property
    def buy_now_decimal(self) -> Decimal | None:
        return parse_amount(self.buy_now_price)

    def hot(self, now: datetime | None = None) -> bool:
        if self.is_hot_lot is not None:
            return self.is_hot_lot
        return is_hot_listing(
            bid_count=self.bid_count,
            watch_count=self.watch_count,
            view_count=self.view_count,
            created=self.created,
            now=now,
        )

    @property
    def is_hot(self) -> bool:
        return self.hot()


class Listing(_ListingFields):
    image_1: str | None = None
    image_2: str | None = None
    image_3: str | None = None
    image_4: str | None = None

    @property
    def all_image_urls(self) -> list[str]:
        return [url for url in (self.image_1, self.image_2, self.image_3, self.image_4) if url]

    @property
    def primary_image_url(self) -> str | None:
        return self.image_1


class ListingDetail(_ListingFields):
    images: list[ListingImage] = Field(default_factory=list)
    is_mine: Flag = False
    bids: list[Bid] | None = None
    related_listings: list[Listing] | None = None

    @property
    def all_image_urls(self) -> list[str]:
        return [image.url for image in self.images]

    @property
    def primary_image_url(self) -> str | None:
        for image in self.images:
            if image.is_primary:
                return image.url
        return self.images[0].url if self.images else None


class ListingCreateRequest(RequestModel):
    title: str
    description: str
    price: str
    category_id: int
    listing_type: str = ListingType.FIXED.value
    condition: str | None = None
    grading_company: str | None = None
    grade: str | None = None
    cert_number: str | None = None
    starting_bid: str | None = None
    reserve_price: str | None = None
    end_date: str | None = None


class ListingUpdateRequest(RequestModel):
    title: str | None = None
    description: str | None = None
    price: str | None = None


class AuctionEvent(WireModel):
    id: int
    title: str
    description: str | None = None
    image_url: str | None = None
    start_date: Timestamp = None
    end_date: Timestamp = None
    status: str
    listing_count: Count = 0


# --- Bids ---
class BidRequest(RequestModel):
    amount: str


class AutoBidRequest(RequestModel):
    max_amount: str


class AutoBidListing(WireModel):
    id: int
    title: str
    current_bid: str | None = None
    image_url: str | None = None


class AutoBid(WireModel):
    id: int
    listing: AutoBidListing
    max_amount: str
    is_active: Flag = False
    created: Timestamp = None

    @property
    def max_amount_decimal(self) -> Decimal | None:
        return parse_amount(self.max_amount)


# --- Offers ---
class OfferRequest(RequestModel):
    amount: str
    message: str | None = None


class OfferListing(WireModel):
    id: int
    title: str
    price: str
    image_url: str | None = None


class Offer(WireModel):
    id: int
    listing: OfferListing
    amount: str
    message: str | None = None
    status: str
    is_from_buyer: Flag = False
    counter_amount: str | None = None
    counter_message: str | None = None
    expires_at: Timestamp = None
    time_remaining: str | None = None
    created: Timestamp = None

    @property
    def status_value(self) -> OfferStatus:
        """Last server-confirmed status."""
        return OfferStatus.from_string(self.status)

    @property
    def perspective(self) -> Perspective:
        return Perspective.for_offer(self.is_from_buyer)

    def effective_status(self, now: datetime | None = None) -> OfferStatus:
        return effective_status(self.status_value, self.expires_at, now)

    def is_terminal(self, now: datetime | None = None) -> bool:
        return self.effective_status(now).is_terminal

    def available_actions(self, now: datetime | None = None) -> tuple[OfferAction, ...]:
        return available_actions(self.effective_status(now), self.perspective)


# --- Orders ---
class OrderListing(WireModel):
    id: int
    title: str
    price: str
    image_url: str | None = None


class OrderUser(WireModel):
    username: str
    avatar_url: str | None = None


class ShippingAddress(WireModel):
    name: str
    street1: str
    street2: str | None = None
    city: str
    state: str
    zip: str
    country: str


class Order(WireModel):
    id: int
    order_number: str = ""
    listing: OrderListing
    buyer: OrderUser
    seller: OrderUser
    total: str
    status: str
    status_display: str = ""
    shipping_address: ShippingAddress | None = None
    tracking_number: str | None = None
    tracking_carrier: str | None = None
    created: Timestamp = None
    paid_at: Timestamp = None
    shipped_at: Timestamp = None
    delivered_at: Timestamp = None

    @property
    def status_value(self) -> OrderStatus:
        return OrderStatus.from_string(self.status)

    @property
    def total_decimal(self) -> Decimal | None:
        return parse_amount(self.total)


class ShipRequest(RequestModel):
    tracking_number: str | None = None
    tracking_carrier: str | None = None


class ReviewRequest(RequestModel):
    rating: int
    comment: str | None = None


class Review(WireModel):
    id: int
    rating: int
    comment: str | None = None
    reviewer: str
    created: Timestamp = None


# --- Collection transfer ---
class ImportResult(WireModel):
    collection_id: int
    collection_name: str
    items_imported: Count = 0
    items_total: Count = 0


# --- Checkout & payment ---
class CheckoutRequest(RequestModel):
    shipping_address_id: int | None = None


class CheckoutResponse(WireModel):
    order_id: int
    total: str
    subtotal: str
    shipping: str
    fee: str
    status: str


class PaymentIntentRequest(RequestModel):
    order_id: int
    payment_method_id: str | None = None


class PaymentIntent(WireModel):
    client_secret: str
    payment_intent_id: str
    amount: int
    currency: str


class PaymentConfirmRequest(RequestModel):
    payment_intent_id: str


class PaymentConfirmation(WireModel):
    success: bool
    order_id: int | None = None
    status: str
    message: str | None = None


__all__ = [
    "AuctionEvent",
    "AuthTokens",
    "AutoBid",
    "AutoBidListing",
    "AutoBidRequest",
    "Bid",
    "BidRequest",
    "CheckoutRequest",
    "CheckoutResponse",
    "ImportResult",
    "Listing",
    "ListingCategory",
    "ListingCreateRequest",
    "ListingDetail",
    "ListingImage",
    "ListingItem",
    "ListingSeller",
    "ListingUpdateRequest",
    "LoginRequest",
    "NotificationSettings",
    "NotificationSettingsUpdate",
    "Offer",
    "OfferListing",
    "OfferRequest",
    "Order",
    "OrderListing",
    "OrderUser",
    "Page",
    "PasswordChangeRequest",
    "PasswordResetConfirmRequest",
    "PasswordResetRequest",
    "PaymentConfirmRequest",
    "PaymentConfirmation",
    "PaymentIntent",
    "PaymentIntentRequest",
    "Profile",
    "ProfileUpdateRequest",
    "RegisterRequest",
    "Review",
    "ReviewRequest",
    "ShipRequest",
    "ShippingAddress",
    "SocialLoginRequest",
    "format_amount",
]
