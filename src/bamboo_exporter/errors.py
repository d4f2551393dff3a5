"""Errors raised while talking to the Bamboo REST API."""

from enum import Enum


class ErrorKind(str, Enum):
    TRANSPORT = "transport"
    UNEXPECTED_STATUS = "unexpected_status"
    DECODE = "decode"
    CREDENTIALS = "credentials"


class BambooError(Exception):
    """Base error for a failed fetch or decode.

    ``context`` names what was being fetched or decoded (an endpoint path,
    or one of "agents", "queue", "results").
    """

    kind: ErrorKind

    def __init__(self, context: str, message: str):
        super().__init__(f"{context}: {message}")
        self.context = context
        self.message = message


class TransportError(BambooError):
    """Request never produced a usable response.

    ``retryable`` is False for failures a second attempt cannot fix, such
    as a malformed URL or a body that fails content decoding.
    """

    kind = ErrorKind.TRANSPORT

    def __init__(self, context: str, message: str, retryable: bool = True):
        super().__init__(context, message)
        self.retryable = retryable


class UnexpectedStatus(BambooError):
    kind = ErrorKind.UNEXPECTED_STATUS

    def __init__(self, context: str, status_code: int, reason: str):
        super().__init__(context, f"unexpected status code: {status_code} {reason}")
        self.status_code = status_code
        self.reason = reason


class DecodeError(BambooError):
    kind = ErrorKind.DECODE


class CredentialError(BambooError):
    kind = ErrorKind.CREDENTIALS
