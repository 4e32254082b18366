"""Shared HTTP plumbing for the upstream data providers."""

from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

import httpx

from yalla_traffic.core import UpstreamConfigurationError, UpstreamError, UpstreamTimeoutError, get_logger

logger = get_logger(__name__)

DEFAULT_TIMEOUT = 10.0


class HttpCollaborator(ABC):
    """
    Base class for an upstream JSON API reached over ``httpx``.

    Subclasses set ``service``, ``api_key_env`` and ``auth_failure_message`` and
    attach their credentials in :meth:`_authorize`. Every transport failure is
    re-raised as an :class:`UpstreamError` with a short message that is safe to
    show to the model; upstream details are only logged.
    """

    service = "upstream"
    api_key_env = "API_KEY"
    auth_failure_message = "API authentication failed"

    def __init__(
        self,
        api_key: Optional[str],
        *,
        base_url: str,
        timeout: float = DEFAULT_TIMEOUT,
        http_client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        """
        Args:
            api_key: Provider API key. Calls fail with a configuration error when empty.
            base_url: Root URL of the provider's API.
            timeout: Per-request timeout in seconds.
            http_client: Optional pre-built client (e.g. with a mock transport).
        """
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self._owns_client = http_client is None
        self._http = http_client or httpx.AsyncClient(timeout=timeout)

    async def aclose(self) -> None:
        if self._owns_client:
            await self._http.aclose()

    async def __aenter__(self) -> "HttpCollaborator":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    @abstractmethod
    def _authorize(self, api_key: str, params: Dict[str, Any], headers: Dict[str, str]) -> None:
        pass

    async def _request(
        self,
        method: str,
        path: str,
        *,
        params: Optional[Dict[str, Any]] = None,
        json: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> Any:
        if not self.api_key:
            raise UpstreamConfigurationError(f"{self.api_key_env} not configured", service=self.service)

        params = dict(params or {})
        headers = dict(headers or {})
        self._authorize(self.api_key, params, headers)

        try:
            url = f"{self.base_url}{path}"
            response = await self._http.request(method, url, params=params, json=json, headers=headers)
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            raise self._status_error(exc) from exc
        except httpx.TimeoutException as exc:
            logger.error(f"{self.service} API timeout: {method} {path}")
            raise UpstreamTimeoutError(f"{self.service} request timed out", service=self.service) from exc
        except httpx.HTTPError as exc:
            logger.error(f"{self.service} API transport error: {method} {path}: {exc}")
            raise UpstreamError(f"{self.service} request failed", service=self.service) from exc

        try:
            return response.json()
        except ValueError as exc:
            logger.error(f"{self.service} API returned invalid JSON for {method} {path}")
            raise UpstreamError(f"Malformed response from {self.service}", service=self.service) from exc

    def _status_error(self, exc: httpx.HTTPStatusError) -> UpstreamError:
        status = exc.response.status_code
        logger.error(
            f"{self.service} API error: status={status} url={exc.request.url.path} "
            f"message={self._error_description(exc.response)}"
        )

        # Don't expose internal API details to the model
        if status in (401, 403):
            message = self.auth_failure_message
        elif status == 429:
            message = "Rate limit exceeded"
        elif status >= 500:
            message = "External service unavailable"
        else:
            message = f"{self.service} request failed with status {status}"
        return UpstreamError(message, service=self.service, status_code=status)

    @staticmethod
    def _error_description(response: httpx.Response) -> str:
        try:
            body = response.json()
        except ValueError:
            return response.text[:200]
        error = body.get("error") if isinstance(body, dict) else None
        if isinstance(error, dict):
            return str(error.get("description") or error.get("message") or error)
        return str(body)[:200]
