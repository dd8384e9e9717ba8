"""Access-token cache with lazy expiry checks and never-give-up renewal."""

from __future__ import annotations

import asyncio
import time
from collections.abc import Callable

import httpx
import structlog

from alertrelay.core.config import WeComConfig
from alertrelay.core.fields import get_int, get_str
from alertrelay.core.types import Credential
from alertrelay.wecom.base import SleepFn, WeComAPI
from alertrelay.wecom.exceptions import WeComAPIError, WeComConnectionError

logger = structlog.stdlib.get_logger()


def _mask(token: str) -> str:
    return f"{token[:6]}..." if len(token) > 6 else "***"


class CredentialManager(WeComAPI):
    """Holds the current WeCom access token and renews it on demand.

    Two states: empty (``credential is None``) and holding a
    :class:`Credential`. Staleness is only evaluated inside
    :meth:`ensure_valid`, never by a timer.

    Not safe for concurrent callers: the dispatch loop is its only user,
    so at most one refresh can be in flight.

    Usage::

        async with CredentialManager(settings.wecom) as creds:
            token = await creds.ensure_valid()
    """

    def __init__(
        self,
        config: WeComConfig,
        http: httpx.AsyncClient | None = None,
        sleep: SleepFn = asyncio.sleep,
        clock: Callable[[], float] = time.time,
    ) -> None:
        super().__init__(config, http=http, sleep=sleep)
        self._corp_id = config.corp_id
        self._corp_secret = config.corp_secret.get_secret_value()
        self._ttl_secs = config.token_ttl_secs
        self._clock = clock
        self._credential: Credential | None = None
        self._refresh_count = 0

    @property
    def credential(self) -> Credential | None:
        return self._credential

    @property
    def refresh_count(self) -> int:
        """Successful refreshes since construction."""
        return self._refresh_count

    async def ensure_valid(self) -> str:
        """Return a fresh access token, refreshing first if empty or stale."""
        cred = self._credential
        now = self._clock()
        if cred is None:
            logger.info("wecom_token_missing")
        elif cred.is_stale(now):
            logger.info(
                "wecom_token_expired",
                expired_secs_ago=round(now - cred.expires_at, 1),
            )
        else:
            return cred.access_token

        cred = await self.refresh()
        return cred.access_token

    async def refresh(self) -> Credential:
        """Fetch a new token, retrying with a fixed backoff until it succeeds."""
        attempt = 0
        while True:
            attempt += 1
            try:
                cred = await self._fetch()
            except (WeComConnectionError, WeComAPIError) as exc:
                logger.warning(
                    "wecom_token_fetch_failed",
                    attempt=attempt,
                    error=str(exc),
                    retry_in_secs=self._backoff_secs,
                )
                await self._sleep(self._backoff_secs)
                continue

            self._credential = cred
            self._refresh_count += 1
            logger.info(
                "wecom_token_refreshed",
                attempt=attempt,
                token=_mask(cred.access_token),
                expires_in_secs=self._ttl_secs,
            )
            return cred

    async def _fetch(self) -> Credential:
        body = await self._request_json(
            "GET",
            "gettoken",
            params={"corpid": self._corp_id, "corpsecret": self._corp_secret},
        )
        errcode = get_int(body, "errcode")
        if errcode != 0:
            raise WeComAPIError(errcode, get_str(body, "errmsg"))
        return Credential(
            access_token=get_str(body, "access_token"),
            issued_at=self._clock(),
            ttl_secs=self._ttl_secs,
        )

    def invalidate(self) -> None:
        """Drop the held token so the next :meth:`ensure_valid` refreshes."""
        self._credential = None
