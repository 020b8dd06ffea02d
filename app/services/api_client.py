"""
Learning Platform API Client Module.

This module provides the low-level HTTP client the console core uses to talk
to the learning platform backend. It attaches the admin bearer credential,
executes the request, and maps every failure onto the console's error
taxonomy so that callers deal with a single display message per operation.

Technological Context:
- Leverages HTTPX for asynchronous, non-blocking network calls.
- Never retries: every retry is a manual re-trigger by the user.
- Cancellation (``asyncio.CancelledError``) is never caught here; an aborted
  request is not an error and must reach the awaiting task untouched.
"""

import logging
from typing import Any

import httpx

from app.core.config import Settings, get_settings
from app.core.session import AdminSession
from app.exceptions import RequestRejectedError, TransportError, UnauthorizedError

logger = logging.getLogger(__name__)


def extract_server_message(response: httpx.Response) -> str | None:
    """
    Return the `message` field of a JSON error body, if the server supplied one.

    Args:
        response (httpx.Response): The failed response.

    Returns:
        Optional[str]: The non-empty server message, or None for bodies that are
            empty, not JSON, or carry no usable message.
    """
    try:
        body = response.json()
    except ValueError:
        return None
    if isinstance(body, dict):
        message = body.get("message")
        if isinstance(message, str) and message.strip():
            return message
    return None


class ConsoleApiClient:
    """
    Authenticated client for the learning platform API.

    Attributes:
        session (AdminSession): Owner of the bearer credential forwarded on every call.
        settings (Settings): Base URL and transport timeout.
    """

    def __init__(
        self,
        session: AdminSession,
        settings: Settings | None = None,
        http_client: httpx.AsyncClient | None = None,
    ):
        """
        Initializes the client.

        Args:
            session (AdminSession): The admin session whose credential is forwarded.
            settings (Optional[Settings]): Overrides the cached application settings.
            http_client (Optional[httpx.AsyncClient]): A preconfigured client, e.g.
                one bound to a mock transport; when omitted one is created from settings.
        """
        self.session = session
        self.settings = settings or get_settings()
        if http_client is None:
            client_kwargs: dict[str, Any] = {"base_url": self.settings.API_BASE_URL}
            if self.settings.API_TIMEOUT_SECONDS is not None:
                client_kwargs["timeout"] = self.settings.API_TIMEOUT_SECONDS
            http_client = httpx.AsyncClient(**client_kwargs)
        self._http = http_client

    async def request(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, Any] | None = None,
        json: Any = None,
        expect_json: bool = True,
    ) -> Any:
        """
        Executes one request against the API and returns the decoded body.

        Args:
            method (str): HTTP verb.
            path (str): Path relative to the configured base URL.
            params (Optional[dict]): Query parameters; None values are dropped.
            json (Any): JSON body, if any.
            expect_json (bool): Decode the body as JSON; when False the body is ignored.

        Returns:
            Any: The decoded JSON body (None when `expect_json` is False).

        Raises:
            NotAuthenticatedError: If the session holds no credential; no request is sent.
            UnauthorizedError: If the API answers 401; re-authentication is signalled.
            RequestRejectedError: For any other non-success status or an undecodable body.
            TransportError: If no response was received.
        """
        headers = self.session.authorization_header()
        if params:
            params = {k: v for k, v in params.items() if v is not None}

        try:
            response = await self._http.request(
                method, path, params=params or None, json=json, headers=headers
            )
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            status_code = e.response.status_code
            server_message = extract_server_message(e.response)
            logger.error(f"API returned error {status_code} for {method} {path}")
            if status_code == 401:
                error = UnauthorizedError(server_message)
                await self.session.signal_reauthentication(error.message)
                raise error from e
            raise RequestRejectedError(
                server_message or f"Request failed with status code {status_code}",
                status_code=status_code,
                server_message=server_message,
            ) from e
        except httpx.TransportError as e:
            logger.error(f"Transport error during {method} {path}: {e!r}")
            raise TransportError(str(e)) from e

        if not expect_json:
            return None
        try:
            return response.json()
        except ValueError as e:
            raise RequestRejectedError(
                "Unexpected response from server", status_code=response.status_code
            ) from e

    async def get(self, path: str, params: dict[str, Any] | None = None) -> Any:
        return await self.request("GET", path, params=params)

    async def post(self, path: str, json: Any = None) -> None:
        await self.request("POST", path, json=json, expect_json=False)

    async def aclose(self) -> None:
        await self._http.aclose()

    async def __aenter__(self) -> "ConsoleApiClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()
