"""Authentication and account endpoints."""

from __future__ import annotations

from heroesmarket.infrastructure.http import InvalidRequestError
from heroesmarket.services.dto import (
    AuthTokens,
    Listing,
    LoginRequest,
    NotificationSettings,
    NotificationSettingsUpdate,
    Page,
    PasswordChangeRequest,
    PasswordResetConfirmRequest,
    PasswordResetRequest,
    Profile,
    ProfileUpdateRequest,
    RegisterRequest,
    SocialLoginRequest,
)

from .base import ResourceClient, page_query


class AccountsClient(ResourceClient):
    """Raw account calls; session bookkeeping lives in ``SessionService``."""

    # Token endpoints never trigger renewal: a 401 there means bad credentials.
    async def obtain_tokens(self, username: str, password: str) -> AuthTokens:
        return await self._gateway.execute(
            "POST",
            "/auth/token/",
            body=LoginRequest(username=username, password=password),
            response_model=AuthTokens,
            renew_on_unauthorized=False,
        )

    async def register(
        self, username: str, email: str, password: str, password_confirm: str
    ) -> AuthTokens:
        body = RegisterRequest(
            username=username, email=email, password=password, password_confirm=password_confirm
        )
        return await self._gateway.execute(
            "POST",
            "/accounts/register/",
            body=body,
            response_model=AuthTokens,
            renew_on_unauthorized=False,
        )

    async def social_login(
        self,
        provider: str,
        id_token: str,
        *,
        first_name: str | None = None,
        last_name: str | None = None,
    ) -> AuthTokens:
        if provider not in ("google", "apple"):
            raise InvalidRequestError(f"Unsupported login provider: {provider}")
        body = SocialLoginRequest(id_token=id_token, first_name=first_name, last_name=last_name)
        return await self._gateway.execute(
            "POST",
            f"/auth/{provider}/",
            body=body,
            response_model=AuthTokens,
            renew_on_unauthorized=False,
        )

    async def get_me(self) -> Profile:
        return await self._gateway.execute("GET", "/accounts/me/", response_model=Profile)

    async def update_profile(self, update: ProfileUpdateRequest) -> Profile:
        return await self._gateway.execute(
            "PATCH", "/accounts/me/", body=update, response_model=Profile
        )

    async def change_password(self, request: PasswordChangeRequest) -> None:
        await self._gateway.execute_void("POST", "/accounts/me/password/", body=request)

    async def request_password_reset(self, email: str) -> None:
        await self._gateway.execute_void(
            "POST",
            "/auth/password/reset/",
            body=PasswordResetRequest(email=email),
            renew_on_unauthorized=False,
        )

    async def confirm_password_reset(self, request: PasswordResetConfirmRequest) -> None:
        await self._gateway.execute_void(
            "POST", "/auth/password/reset/confirm/", body=request, renew_on_unauthorized=False
        )

    async def get_notification_settings(self) -> NotificationSettings:
        return await self._gateway.execute(
            "GET", "/accounts/me/notifications/", response_model=NotificationSettings
        )

    async def update_notification_settings(
        self, update: NotificationSettingsUpdate
    ) -> NotificationSettings:
        return await self._gateway.execute(
            "PATCH", "/accounts/me/notifications/", body=update, response_model=NotificationSettings
        )

    async def upload_avatar(self, image: bytes) -> Profile:
        return await self._gateway.upload(
            "/accounts/me/avatar/",
            content=image,
            filename="avatar.jpg",
            field_name="image",
            response_model=Profile,
        )

    async def get_recently_viewed(self, page: int = 1) -> Page[Listing]:
        return await self._gateway.execute(
            "GET",
            "/accounts/me/recently-viewed/",
            query=page_query(page),
            response_model=Page[Listing],
        )

    async def clear_recently_viewed(self) -> None:
        await self._gateway.execute_void("DELETE", "/accounts/me/recently-viewed/clear/")
