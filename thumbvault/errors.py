"""Exception types raised by ThumbVault."""

from __future__ import annotations


class ThumbVaultError(Exception):
    """Base class for all ThumbVault errors."""


class InvalidInput(ThumbVaultError, ValueError):
    """Malformed base64, an empty required string or non-positive dimensions."""


# Derivative validation failures share the input error type.
InvalidArgument = InvalidInput


class UpstreamProtocolError(ThumbVaultError):
    """The renderer answered with something that holds no usable image."""

    MAX_RAW_LENGTH = 1000

    def __init__(self, message: str, raw: str = "") -> None:
        self.raw = (raw or "")[: self.MAX_RAW_LENGTH]
        super().__init__(f"{message}. Raw: {self.raw}")


class UpstreamUnavailable(ThumbVaultError):
    """Transport or HTTP status failure while talking to the renderer."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        self.status_code = status_code
        super().__init__(message)


class OperationCancelled(ThumbVaultError):
    """A write was cancelled before it was committed."""
