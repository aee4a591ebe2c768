"""
Exception hierarchy for the Serum API client.

Every error raised by this package derives from ``SerumClientError`` and
carries a machine-readable ``error_code`` so callers can branch on the kind of
failure instead of parsing message text. Transport failures, remote
rejections and decode problems are separate classes, so a caller can
tell "the server said no" apart from "the reply was garbage".
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional


class SerumClientError(RuntimeError):
    """Base error for Serum API client failures.

    Supports attaching arbitrary keyword fields as attributes.
    """

    error_code = "CLIENT_ERROR"

    def __init__(
        self,
        message: str,
        *,
        operation_name: Optional[str] = None,
        details: Any = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.operation_name = operation_name
        self.details = details
        for key, value in kwargs.items():
            setattr(self, key, value)

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for logging and monitoring"""
        return {
            "error_type": self.__class__.__name__,
            "error_code": self.error_code,
            "message": self.message,
            "operation_name": self.operation_name,
            "details": self.details,
        }


class SerumConnectionError(SerumClientError, ConnectionError):
    """Raised when a transport connection cannot be established or maintained."""

    error_code = "CONNECTION"


class StreamClosedError(SerumConnectionError):
    """Raised when a server stream ends or its connection goes away."""

    error_code = "STREAM_CLOSED"


class SerumTimeoutError(SerumClientError, TimeoutError):
    """Raised when a unary call exceeds its deadline."""

    error_code = "TIMEOUT"


class DecodeError(SerumClientError):
    """Raised when a payload does not match the expected shape."""

    error_code = "DECODE"

    def __init__(
        self,
        message: str,
        *,
        shape: Optional[type] = None,
        payload: Any = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(message, **kwargs)
        self.shape = shape
        self.payload = payload


class RemoteError(SerumClientError):
    """Structured error returned by the remote service.

    ``code``, ``message`` and ``details`` are passed through verbatim so that
    business rejections (payer mismatch, quantity too low) can be told apart
    from infrastructure failures.
    """

    error_code = "REMOTE"

    def __init__(
        self,
        code: Any,
        message: str,
        details: Any = None,
        *,
        http_status: Optional[int] = None,
        operation_name: Optional[str] = None,
    ) -> None:
        super().__init__(message, operation_name=operation_name, details=details)
        self.code = code
        self.http_status = http_status

    def to_dict(self) -> Dict[str, Any]:
        payload = super().to_dict()
        payload["code"] = self.code
        payload["http_status"] = self.http_status
        return payload


class PrivateKeyNotFoundError(SerumClientError):
    """A signing key is required but none is configured."""

    error_code = "PRIVATE_KEY_NOT_FOUND"

    def __init__(self, operation_name: Optional[str] = None) -> None:
        super().__init__(
            "private key not found: set PRIVATE_KEY or pass one in ClientOptions",
            operation_name=operation_name,
        )


class SigningError(SerumClientError):
    """Signing an unsigned transaction failed (malformed key or transaction)."""

    error_code = "SIGNING"


class StreamingNotSupportedError(SerumClientError):
    """The transport has no server-push streaming."""

    error_code = "STREAMING_NOT_SUPPORTED"


class PartialBatchFailure(SerumClientError):
    """A bulk submission stopped at its first failure.

    ``completed`` holds the signatures that went through, in submission
    order; they are already final on the ledger and are not rolled back.
    """

    error_code = "PARTIAL_BATCH_FAILURE"

    def __init__(
        self,
        completed: List[str],
        first_error: BaseException,
        *,
        operation_name: Optional[str] = None,
    ) -> None:
        super().__init__(
            f"batch stopped after {len(completed)} completed submission(s): {first_error}",
            operation_name=operation_name,
            details={"completed": list(completed)},
        )
        self.completed = list(completed)
        self.first_error = first_error
        self.__cause__ = first_error

    def to_dict(self) -> Dict[str, Any]:
        payload = super().to_dict()
        payload["completed"] = list(self.completed)
        if isinstance(self.first_error, SerumClientError):
            payload["first_error"] = self.first_error.to_dict()
        else:
            payload["first_error"] = {"error_type": type(self.first_error).__name__, "message": str(self.first_error)}
        return payload


__all__ = [
    "DecodeError",
    "PartialBatchFailure",
    "PrivateKeyNotFoundError",
    "RemoteError",
    "SerumClientError",
    "SerumConnectionError",
    "SerumTimeoutError",
    "SigningError",
    "StreamClosedError",
    "StreamingNotSupportedError",
]
