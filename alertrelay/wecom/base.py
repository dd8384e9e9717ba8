"""Shared HTTP plumbing for the WeCom token and message endpoints."""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from types import TracebackType
from typing import Any, Self

import httpx

from alertrelay.core.config import WeComConfig
from alertrelay.wecom.exceptions import WeComConnectionError

# Same signature as asyncio.sleep.
SleepFn = Callable[[float], Awaitable[None]]


class WeComAPI:
    """Owns (or borrows) an ``httpx.AsyncClient`` and decodes JSON replies.

    A client passed in by the caller is never closed here; one created
    lazily by :meth:`_get_http` is closed by :meth:`close`.
    """

    def __init__(
        self,
        config: WeComConfig,
        http: httpx.AsyncClient | None = None,
        sleep: SleepFn = asyncio.sleep,
    ) -> None:
        self._config = config
        self._api_base = config.api_base.rstrip("/")
        self._backoff_secs = config.retry_backoff_secs
        self._http = http
        self._owns_http = http is None
        self._sleep = sleep

    def _get_http(self) -> httpx.AsyncClient:
        if self._http is None or self._http.is_closed:
            self._http = httpx.AsyncClient(
                timeout=httpx.Timeout(self._config.http_timeout_secs),
            )
            self._owns_http = True
        return self._http

    async def _request_json(
        self,
        method: str,
        path: str,
        **kwargs: Any,
    ) -> dict[str, Any]:
        """Issue one request and return the decoded JSON object.

        Raises:
            WeComConnectionError: Transport failure, non-2xx status, or a
                body that is not a JSON object.
        """
        url = f"{self._api_base}/{path.lstrip('/')}"
        try:
            response = await self._get_http().request(method, url, **kwargs)
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            raise WeComConnectionError(
                f"WeCom {path} returned {exc.response.status_code}"
            ) from exc
        except httpx.HTTPError as exc:
            raise WeComConnectionError(f"WeCom {path} request failed: {exc}") from exc

        try:
            body = response.json()
        except ValueError as exc:
            raise WeComConnectionError(f"WeCom {path} returned invalid JSON") from exc

        if not isinstance(body, dict):
            raise WeComConnectionError(f"WeCom {path} returned non-object")
        return body

    async def close(self) -> None:
        """Close the HTTP client if this instance created it."""
        if self._http is not None and self._owns_http:
            await self._http.aclose()
        self._http = None

    async def __aenter__(self) -> Self:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        await self.close()
