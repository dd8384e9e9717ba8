"""WeCom (WeChat Work) API clients — access tokens and message delivery."""

from alertrelay.wecom.base import SleepFn, WeComAPI
from alertrelay.wecom.client import DeliveryClient, parse_send_response
from alertrelay.wecom.exceptions import WeComAPIError, WeComConnectionError, WeComError
from alertrelay.wecom.token import CredentialManager

__all__ = [
    "CredentialManager",
    "DeliveryClient",
    "SleepFn",
    "WeComAPI",
    "WeComAPIError",
    "WeComConnectionError",
    "WeComError",
    "parse_send_response",
]
