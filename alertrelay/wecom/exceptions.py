"""Exception hierarchy for the WeCom API clients."""

from __future__ import annotations


class WeComError(Exception):
    """Base exception for all WeCom client errors."""


class WeComConnectionError(WeComError):
    """Request never produced a usable response (network, HTTP status, body)."""


class WeComAPIError(WeComError):
    """WeCom answered with a non-zero errcode."""

    def __init__(self, errcode: int, errmsg: str = "") -> None:
        super().__init__(f"errcode={errcode} errmsg={errmsg}")
        self.errcode = errcode
        self.errmsg = errmsg
