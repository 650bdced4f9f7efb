"""HTTP identity backend adapter."""

import logging
from typing import Any, Dict, Optional
from urllib.parse import quote

import httpx

from ...core.exceptions import NetworkError
from ...core.value_objects import (
    AccountResult,
    ProfileUpdateResult,
    RevalidationResult,
    VerificationResult,
)

logger = logging.getLogger(__name__)


class HttpAuthBackend:
    """JSON-over-HTTP implementation of the identity collaborators.

    Implements CredentialVerifier, SessionRevalidator, AccountService and
    RemoteSessionTerminator against a backend exposing:

    - ``POST   {base}/auth/login``              ``{email, password}``
    - ``POST   {base}/auth/register``           ``{email, password, full_name, hotel_name, role}``
    - ``GET    {base}/auth/users/{id}``
    - ``PATCH  {base}/auth/users/{id}``         profile changes
    - ``POST   {base}/auth/users/{id}/password`` ``{email, current_password, new_password}``
    - ``POST   {base}/auth/password-reset``     ``{email}``
    - ``POST   {base}/auth/logout``             ``{user_id}``

    Successful responses carry the identity under ``user``. Failure bodies
    may carry ``{"success": false, "reason": ...}``; otherwise the reason is
    derived from the status code. Transport errors and 5xx answers raise
    NetworkError, except for ``verify`` which reports them as the
    ``unreachable`` reason.
    """

    def __init__(
        self,
        base_url: str,
        *,
        timeout_seconds: float = 10.0,
        client: Optional[httpx.AsyncClient] = None,
        headers: Optional[Dict[str, str]] = None,
    ):
        """Initialize the HTTP backend.

        Args:
            base_url: Backend root URL
            timeout_seconds: Request timeout when the adapter creates its client
            client: Pre-built client (owned by the caller)
            headers: Extra headers sent with every request
        """
        if not base_url.startswith(("http://", "https://")):
            raise ValueError(f"Invalid base_url format: {base_url}")

        self.base_url = base_url.rstrip("/")
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(
            base_url=self.base_url,
            timeout=timeout_seconds,
            headers={
                "Content-Type": "application/json",
                "User-Agent": "neo-auth-session/1.0",
                **(headers or {}),
            },
        )

    async def close(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    # CredentialVerifier

    async def verify(self, identifier: str, secret: str) -> VerificationResult:
        try:
            response = await self._request(
                "POST", "/auth/login", json={"email": identifier, "password": secret}
            )
        except NetworkError:
            return VerificationResult.rejected("unreachable")

        body = self._json(response)
        if response.status_code == 200 and body.get("success", True) and body.get("user"):
            return VerificationResult.verified(body["user"])

        return VerificationResult.rejected(self._reason(response, body))

    # SessionRevalidator

    async def revalidate(self, user_id: str) -> RevalidationResult:
        response = await self._request("GET", f"/auth/users/{_segment(user_id)}")
        if response.status_code in (401, 403, 404, 410):
            return RevalidationResult.revoked()

        body = self._json(response)
        user = body.get("user")
        if response.status_code != 200 or not user:
            raise NetworkError(
                "Unexpected revalidation response",
                details={"status_code": response.status_code},
            )
        return RevalidationResult.confirmed(user)

    # AccountService

    async def register(
        self,
        email: str,
        password: str,
        full_name: str,
        hotel_name: Optional[str],
        role: str,
    ) -> AccountResult:
        response = await self._request(
            "POST",
            "/auth/register",
            json={
                "email": email,
                "password": password,
                "full_name": full_name,
                "hotel_name": hotel_name,
                "role": role,
            },
        )
        return self._account_result(response)

    async def update_profile(self, user_id: str, changes: Dict[str, Any]) -> ProfileUpdateResult:
        response = await self._request("PATCH", f"/auth/users/{_segment(user_id)}", json=changes)
        body = self._json(response)
        if response.status_code == 200 and body.get("success", True):
            return ProfileUpdateResult(success=True, accepted=body.get("user"))
        return ProfileUpdateResult(success=False, reason=self._reason(response, body))

    async def change_password(
        self,
        user_id: str,
        email: str,
        current_password: str,
        new_password: str,
    ) -> AccountResult:
        response = await self._request(
            "POST",
            f"/auth/users/{_segment(user_id)}/password",
            json={
                "email": email,
                "current_password": current_password,
                "new_password": new_password,
            },
        )
        return self._account_result(response)

    async def request_password_reset(self, email: str) -> AccountResult:
        response = await self._request("POST", "/auth/password-reset", json={"email": email})
        return self._account_result(response)

    # RemoteSessionTerminator

    async def end_session(self, user_id: str) -> None:
        await self._request("POST", "/auth/logout", json={"user_id": user_id})

    # Helpers

    async def _request(self, method: str, path: str, **kwargs) -> httpx.Response:
        try:
            response = await self._client.request(method, path, **kwargs)
        except httpx.HTTPError as e:
            logger.warning(f"Auth backend {method} {path} failed: {type(e).__name__}")
            raise NetworkError(
                "Auth backend unreachable",
                details={"method": method, "path": path, "error": str(e)},
            ) from e

        if response.status_code >= 500:
            raise NetworkError(
                "Auth backend error",
                details={"method": method, "path": path, "status_code": response.status_code},
            )
        return response

    def _account_result(self, response: httpx.Response) -> AccountResult:
        body = self._json(response)
        if response.status_code in (200, 201, 202, 204) and body.get("success", True):
            return AccountResult.done()
        return AccountResult.refused(self._reason(response, body))

    @staticmethod
    def _json(response: httpx.Response) -> Dict[str, Any]:
        if not response.content:
            return {}
        try:
            body = response.json()
        except ValueError:
            return {}
        return body if isinstance(body, dict) else {}

    @staticmethod
    def _reason(response: httpx.Response, body: Dict[str, Any]) -> str:
        reason = body.get("reason")
        if isinstance(reason, str) and reason:
            return reason
        if response.status_code == 403:
            return "inactive_account"
        if response.status_code == 409:
            return "email_in_use"
        if response.status_code in (400, 401, 404):
            return "invalid_credentials"
        return "unreachable"


def _segment(value: str) -> str:
    """Percent-encode ``value`` for use as a single path segment."""
    return quote(value, safe="")
