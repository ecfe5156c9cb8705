"""Session lifecycle: login, registration, logout and account operations."""

from __future__ import annotations

from heroesmarket.app.config import USER_ID_KEY
from heroesmarket.infrastructure.credentials import (
    CredentialStore,
    SessionCredentials,
    clear_session,
    save_session,
)
from heroesmarket.infrastructure.http import MarketplaceGateway, UnauthorizedError
from heroesmarket.infrastructure.observability import log_context
from heroesmarket.services.base import BaseService
from heroesmarket.services.dto import (
    AuthTokens,
    Listing,
    NotificationSettings,
    NotificationSettingsUpdate,
    Page,
    PasswordChangeRequest,
    PasswordResetConfirmRequest,
    Profile,
    ProfileUpdateRequest,
)
from heroesmarket.services.marketplace import AccountsClient


class SessionService(BaseService):
    """Owns the stored session pair on behalf of the user.

    The gateway only ever writes credentials during renewal; every other
    session mutation (login, registration, logout, teardown after an
    unrecoverable 401) goes through this service.
    """

    def __init__(self, gateway: MarketplaceGateway, accounts: AccountsClient | None = None) -> None:
        super().__init__()
        self._store: CredentialStore = gateway.credential_store
        self.accounts = accounts or AccountsClient(gateway)

    @property
    def is_authenticated(self) -> bool:
        return SessionCredentials.load(self._store).is_present

    def _establish(self, tokens: AuthTokens) -> None:
        # A login replaces the whole pair; never keep a renewal credential
        # that belonged to a previous session.
        clear_session(self._store)
        save_session(self._store, tokens.access, tokens.refresh)

    async def login(self, username: str, password: str) -> Profile:
        with log_context(username=username):
            tokens = await self.accounts.obtain_tokens(username, password)
            self._establish(tokens)
            self._logger.info("Logged in")
            return await self.get_current_user()

    async def register(
        self, username: str, email: str, password: str, password_confirm: str
    ) -> Profile:
        with log_context(username=username):
            tokens = await self.accounts.register(username, email, password, password_confirm)
            self._establish(tokens)
            self._logger.info("Registered new account")
            return await self.get_current_user()

    async def login_with_google(self, id_token: str) -> Profile:
        tokens = await self.accounts.social_login("google", id_token)
        self._establish(tokens)
        return await self.get_current_user()

    async def login_with_apple(
        self,
        identity_token: str,
        first_name: str | None = None,
        last_name: str | None = None,
    ) -> Profile:
        tokens = await self.accounts.social_login(
            "apple", identity_token, first_name=first_name, last_name=last_name
        )
        self._establish(tokens)
        return await self.get_current_user()

    def logout(self) -> None:
        clear_session(self._store)
        self._logger.info("Session cleared")

    async def get_current_user(self) -> Profile:
        """Fetch the signed-in profile; an ended session is torn down."""
        try:
            profile = await self.accounts.get_me()
        except UnauthorizedError:
            self._logger.warning("Session ended; clearing stored credentials")
            self.logout()
            raise
        self._store.set(USER_ID_KEY, str(profile.id))
        return profile

    # -------------------- account --------------------
    async def update_profile(
        self,
        *,
        bio: str | None = None,
        location: str | None = None,
        website: str | None = None,
    ) -> Profile:
        return await self.accounts.update_profile(
            ProfileUpdateRequest(bio=bio, location=location, website=website)
        )

    async def change_password(
        self, old_password: str, new_password: str, new_password_confirm: str
    ) -> None:
        await self.accounts.change_password(
            PasswordChangeRequest(
                old_password=old_password,
                new_password=new_password,
                new_password_confirm=new_password_confirm,
            )
        )

    async def request_password_reset(self, email: str) -> None:
        await self.accounts.request_password_reset(email)

    async def confirm_password_reset(
        self, uid: str, token: str, new_password: str, new_password_confirm: str
    ) -> None:
        await self.accounts.confirm_password_reset(
            PasswordResetConfirmRequest(
                uid=uid,
                token=token,
                new_password=new_password,
                new_password_confirm=new_password_confirm,
            )
        )

    async def get_notification_settings(self) -> NotificationSettings:
        return await self.accounts.get_notification_settings()

    async def update_notification_settings(self, **changes: bool | None) -> NotificationSettings:
        return await self.accounts.update_notification_settings(
            NotificationSettingsUpdate(**changes)
        )

    async def upload_avatar(self, image: bytes) -> Profile:
        return await self.accounts.upload_avatar(image)

    async def get_recently_viewed(self, page: int = 1) -> Page[Listing]:
        return await self.accounts.get_recently_viewed(page)

    async def clear_recently_viewed(self) -> None:
        await self.accounts.clear_recently_viewed()


__all__ = ["SessionService"]
