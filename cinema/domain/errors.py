"""Domain error codes for the cinema client core."""

from dataclasses import dataclass
from enum import Enum


class ErrorCode(Enum):
    """Domain error codes."""

    GATEWAY_FAILURE = "GATEWAY_FAILURE"
    AUTHENTICATION_FAILED = "AUTHENTICATION_FAILED"
    MISSING_TOKEN = "MISSING_TOKEN"
    IMAGE_DECODE_FAILED = "IMAGE_DECODE_FAILED"
    LEDGER_FORMAT = "LEDGER_FORMAT"


@dataclass(frozen=True)
class DomainError(Exception):
    """Base domain error with code and user-safe message."""

    code: ErrorCode
    message: str

    def __str__(self) -> str:
        return f"{self.code.value}: {self.message}"


class GatewayError(DomainError):
    """Raised by a gateway when a request fails or its response cannot be decoded."""

    def __init__(self, operation: str, status_code: int | None = None) -> None:
        super().__init__(
            code=ErrorCode.GATEWAY_FAILURE,
            message=f"Request failed: {operation}",
        )
        self.operation = operation
        self.status_code = status_code


class AuthenticationError(DomainError):
    """Raised when the remote service rejects credentials."""

    def __init__(self, reason: str | None = None) -> None:
        super().__init__(
            code=ErrorCode.AUTHENTICATION_FAILED,
            message=reason or "Authentication failed",
        )


class MissingTokenError(DomainError):
    """Raised when an authenticated call is made without a bearer token."""

    def __init__(self) -> None:
        super().__init__(
            code=ErrorCode.MISSING_TOKEN,
            message="Authentication required",
        )


class ImageDecodeError(DomainError):
    """Raised when fetched bytes are not a readable image."""

    def __init__(self, image_id: str) -> None:
        super().__init__(
            code=ErrorCode.IMAGE_DECODE_FAILED,
            message="Image could not be decoded",
        )
        self.image_id = image_id


class LedgerFormatError(DomainError):
    """Raised when the stored ticket ledger cannot be read."""

    def __init__(self, detail: str) -> None:
        super().__init__(
            code=ErrorCode.LEDGER_FORMAT,
            message=f"Unreadable ticket ledger: {detail}",
        )
