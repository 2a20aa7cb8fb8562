"""
Authentication methods for ZN-Vault SDK.
"""

import logging
from typing import Awaitable, Callable, List, Optional, TypeVar

from tenacity import AsyncRetrying, retry_if_exception_type, stop_after_attempt

from .exceptions import AuthenticationError, NotAuthenticatedError, TokenExpiredError
from .http import HttpClient
from .models import (
    ApiKey,
    ChangePasswordRequest,
    CreateApiKeyRequest,
    CreateApiKeyResponse,
    LoginRequest,
    LoginResponse,
    PasswordResetRequest,
    RefreshTokenRequest,
    RegisterUserRequest,
    ResetPasswordRequest,
    SuccessResponse,
    TokenVerifyResponse,
    TotpCodeRequest,
    TotpEnableResponse,
    TotpSetupResponse,
    TotpStatusResponse,
    TotpVerifyRequest,
    User,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")


class AuthClient:
    """Login, token refresh and API key management."""

    def __init__(self, http: HttpClient):
        self._http = http

    def _store_tokens(self, response: LoginResponse) -> None:
        # A pending 2FA login carries no usable tokens.
        if response.requires_2fa or not response.access_token:
            return
        self._http.tokens.set_tokens(response.access_token, response.refresh_token or None)

    async def login(
        self,
        username: str,
        password: str,
        totp_code: Optional[str] = None,
    ) -> LoginResponse:
        """
        Log in with username and password.

        On success the returned tokens become the client's credentials. When
        the account has 2FA enabled and no code was given, the response has
        ``requires_2fa`` set and a ``temp_token`` for complete_totp_login().

        Args:
            username: Username
            password: Password
            totp_code: Optional TOTP code

        Returns:
            Login response with tokens
        """
        request = LoginRequest(username=username, password=password, totp_code=totp_code)
        response = await self._http.post(
            "/auth/login",
            request,
            response_type=LoginResponse,
            allow_expired_token=True,
        )
        self._store_tokens(response)
        if response.requires_2fa:
            logger.info(f"Login for {username} requires 2FA")
        else:
            logger.info(f"Logged in as {username}")
        return response

    async def complete_totp_login(self, temp_token: str, totp_code: str) -> LoginResponse:
        """Complete a login that required 2FA."""
        response = await self._http.post(
            "/auth/2fa/verify",
            TotpVerifyRequest(temp_token=temp_token, totp_code=totp_code),
            response_type=LoginResponse,
            allow_expired_token=True,
        )
        self._store_tokens(response)
        return response

    async def refresh_token(self) -> LoginResponse:
        """
        Exchange the stored refresh token for a new token pair.

        Raises:
            NotAuthenticatedError: if no refresh token is stored.
        """
        refresh = self._http.tokens.get().refresh_token
        if not refresh:
            raise NotAuthenticatedError()

        response = await self._http.post(
            "/auth/refresh",
            RefreshTokenRequest(refresh_token=refresh),
            response_type=LoginResponse,
            allow_expired_token=True,
        )
        self._store_tokens(response)
        logger.info("Access token refreshed")
        return response

    async def logout(self) -> None:
        """Log out and clear the stored tokens."""
        await self._http.post("/auth/logout", {}, allow_expired_token=True)
        self._http.tokens.clear_tokens()
        logger.info("Logged out")

    async def register(
        self,
        username: str,
        password: str,
        email: Optional[str] = None,
    ) -> User:
        """Register a new user."""
        return await self._http.post(
            "/auth/register",
            RegisterUserRequest(username=username, password=password, email=email),
            response_type=User,
        )

    async def change_password(self, current_password: str, new_password: str) -> None:
        await self._http.post(
            "/auth/change-password",
            ChangePasswordRequest(current_password=current_password, new_password=new_password),
            response_type=SuccessResponse,
        )

    async def request_password_reset(self, email: str) -> None:
        """Ask the server to email a password reset token."""
        await self._http.post(
            "/auth/forgot-password",
            PasswordResetRequest(email=email),
            allow_expired_token=True,
        )

    async def reset_password(self, token: str, new_password: str) -> None:
        """Set a new password using the token from the reset email."""
        await self._http.post(
            "/auth/reset-password",
            ResetPasswordRequest(token=token, new_password=new_password),
            allow_expired_token=True,
        )

    # Two-factor authentication

    async def setup_2fa(self) -> TotpSetupResponse:
        """
        Start TOTP enrollment.

        Returns the shared secret and QR code; 2FA is active only after
        enable_2fa() confirms a code generated from it.
        """
        return await self._http.post("/auth/2fa/setup", response_type=TotpSetupResponse)

    async def enable_2fa(self, totp_code: str) -> TotpEnableResponse:
        response = await self._http.post(
            "/auth/2fa/enable",
            TotpCodeRequest(totp_code=totp_code),
            response_type=TotpEnableResponse,
        )
        logger.info("Two-factor authentication enabled")
        return response

    async def disable_2fa(self, totp_code: str) -> None:
        await self._http.post(
            "/auth/2fa/disable",
            TotpCodeRequest(totp_code=totp_code),
        )
        logger.info("Two-factor authentication disabled")

    async def get_2fa_status(self) -> TotpStatusResponse:
        return await self._http.get("/auth/2fa/status", response_type=TotpStatusResponse)

    async def me(self) -> User:
        """Get the currently authenticated user."""
        return await self._http.get("/auth/me", response_type=User)

    async def verify_token(self) -> TokenVerifyResponse:
        return await self._http.get("/auth/verify", response_type=TokenVerifyResponse)

    # API keys

    async def create_api_key(
        self,
        name: str,
        expires_in_days: Optional[int] = None,
        permissions: Optional[List[str]] = None,
        description: Optional[str] = None,
        ip_allowlist: Optional[List[str]] = None,
    ) -> CreateApiKeyResponse:
        """
        Create an API key.

        The key itself is only returned by this call; store it immediately.
        """
        request = CreateApiKeyRequest(
            name=name,
            expires_in_days=expires_in_days,
            permissions=permissions,
            description=description,
            ip_allowlist=ip_allowlist,
        )
        return await self._http.post(
            "/auth/api-keys", request, response_type=CreateApiKeyResponse
        )

    async def list_api_keys(self) -> List[ApiKey]:
        return await self._http.get("/auth/api-keys", response_type=List[ApiKey])

    async def revoke_api_key(self, key_id: str) -> None:
        await self._http.delete(f"/auth/api-keys/{key_id}")

    def set_api_key(self, api_key: Optional[str]) -> None:
        """Use an API key for subsequent requests."""
        self._http.tokens.set_api_key(api_key)

    def set_access_token(self, token: Optional[str]) -> None:
        """Use an externally obtained access token for subsequent requests."""
        self._http.tokens.set_access_token(token)

    @property
    def is_authenticated(self) -> bool:
        credentials = self._http.tokens.get()
        return bool(credentials.access_token or credentials.api_key)

    async def with_refresh(self, operation: Callable[[], Awaitable[T]]) -> T:
        """
        Run an operation, refreshing the token once if it is rejected.

        The client never refreshes on its own; wrap calls in this helper to
        opt in. A second authentication failure is raised to the caller.

        Args:
            operation: Zero-argument coroutine function to run

        Returns:
            The operation's result
        """
        async for attempt in AsyncRetrying(
            retry=retry_if_exception_type((AuthenticationError, TokenExpiredError)),
            stop=stop_after_attempt(2),
            reraise=True,
        ):
            with attempt:
                if attempt.retry_state.attempt_number > 1:
                    await self.refresh_token()
                return await operation()
