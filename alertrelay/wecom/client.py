"""WeCom message/send client — retries transport failures, never rejections."""

from __future__ import annotations

from typing import Any

import structlog

from alertrelay.core.fields import get_int, get_str
from alertrelay.core.types import DeliveryOutcome
from alertrelay.wecom.base import WeComAPI
from alertrelay.wecom.exceptions import WeComConnectionError

logger = structlog.stdlib.get_logger()


def parse_send_response(body: dict[str, Any]) -> DeliveryOutcome:
    """Convert a message/send reply into a DeliveryOutcome."""
    errcode = get_int(body, "errcode")
    return DeliveryOutcome(
        success=errcode == 0,
        errcode=errcode,
        errmsg=get_str(body, "errmsg"),
        invalid_user=get_str(body, "invaliduser"),
        raw=body,
    )


class DeliveryClient(WeComAPI):
    """Posts application messages to WeCom.

    A transport failure is retried forever with the same token after a
    fixed backoff. A reply carrying a non-zero errcode is final: it is
    logged and returned, not retried.
    """

    async def send(self, token: str, message: dict[str, Any]) -> DeliveryOutcome:
        attempt = 0
        while True:
            attempt += 1
            try:
                body = await self._request_json(
                    "POST",
                    "message/send",
                    params={"access_token": token},
                    json=message,
                )
                break
            except WeComConnectionError as exc:
                logger.warning(
                    "wecom_send_failed",
                    attempt=attempt,
                    error=str(exc),
                    retry_in_secs=self._backoff_secs,
                )
                await self._sleep(self._backoff_secs)

        outcome = parse_send_response(body)
        touser = message.get("touser", "")
        if outcome.success:
            logger.info("wecom_send_ok", touser=touser, attempt=attempt)
        else:
            logger.error(
                "wecom_send_rejected",
                touser=touser,
                errcode=outcome.errcode,
                errmsg=outcome.errmsg,
            )
        if outcome.invalid_user:
            logger.warning(
                "wecom_send_invalid_user",
                invalid_user=outcome.invalid_user,
                errcode=outcome.errcode,
            )
        return outcome
