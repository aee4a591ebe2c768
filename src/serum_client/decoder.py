"""
Typed response decoding shared by every transport.

Each function produces exactly one of: a populated model instance, or a typed
error. ``DecodeError`` means the payload could not be read as the expected
shape; ``RemoteError`` means the service answered with a structured error.
The two are never conflated.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional, Protocol, Type, TypeVar, Union

import orjson

from .errors import DecodeError, RemoteError
from .models.transactions import ErrorResult

logger = logging.getLogger(__name__)

HTTP_OK = 200
JSONRPC_VERSION = "2.0"

_DECODE_FAILURES = (ValueError, TypeError, KeyError)


class Decodable(Protocol):
    """A response shape that can be built from, and dumped back to, a JSON object."""

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> Any: ...

    def to_dict(self) -> Dict[str, Any]: ...


T = TypeVar("T", bound=Decodable)


def _shape_name(shape: Optional[type]) -> str:
    return shape.__name__ if shape is not None else "payload"


def parse_json(raw: Union[bytes, bytearray, memoryview, str], *, shape: Optional[type] = None) -> Any:
    """Parse raw JSON text, raising ``DecodeError`` on malformed input."""
    try:
        return orjson.loads(raw)
    except orjson.JSONDecodeError as exc:
        raise DecodeError(
            f"response for {_shape_name(shape)} is not valid JSON: {exc}",
            shape=shape,
            payload=raw,
        ) from exc


def decode_payload(payload: Any, shape: Type[T]) -> T:
    """Build ``shape`` from an already-parsed JSON value."""
    if not isinstance(payload, Mapping):
        raise DecodeError(
            f"expected a JSON object for {shape.__name__}, got {type(payload).__name__}",
            shape=shape,
            payload=payload,
        )
    try:
        return shape.from_dict(payload)
    except _DECODE_FAILURES as exc:
        raise DecodeError(f"payload does not match {shape.__name__}: {exc}", shape=shape, payload=payload) from exc


def decode_json(raw: Union[bytes, bytearray, memoryview, str], shape: Type[T]) -> T:
    """Parse ``raw`` JSON and build ``shape`` from it."""
    return decode_payload(parse_json(raw, shape=shape), shape)


def remote_error_from_payload(
    payload: Any,
    *,
    http_status: Optional[int] = None,
    operation_name: Optional[str] = None,
) -> RemoteError:
    """Turn an error body ``{code, message, details}`` into ``RemoteError``."""
    result = decode_payload(payload, ErrorResult)
    message = result.message
    if not message:
        message = f"remote error (code {result.code})" if http_status is None else f"remote error (HTTP {http_status})"
    return RemoteError(
        result.code,
        message,
        result.details,
        http_status=http_status,
        operation_name=operation_name,
    )


def decode_http_response(
    status: int,
    body: Union[bytes, str],
    shape: Type[T],
    *,
    operation_name: Optional[str] = None,
) -> T:
    """Decode an HTTP reply.

    A 200 body is read only as ``shape``; any other status is read only as an
    error result and raised as ``RemoteError``. An unreadable body on either
    path raises ``DecodeError``.
    """
    if status != HTTP_OK:
        try:
            payload = parse_json(body, shape=ErrorResult)
            error = remote_error_from_payload(payload, http_status=status, operation_name=operation_name)
        except DecodeError as exc:
            exc.http_status = status
            exc.operation_name = operation_name
            raise
        raise error

    try:
        return decode_json(body, shape)
    except DecodeError as exc:
        exc.http_status = status
        exc.operation_name = operation_name
        raise


@dataclass(frozen=True)
class RpcEnvelope:
    """Generic JSON-RPC reply: correlation id plus result-or-error."""

    id: Any
    result: Any = None
    error: Optional[Mapping[str, Any]] = None

    @property
    def is_error(self) -> bool:
        return self.error is not None


def decode_rpc_envelope(frame: Union[bytes, str]) -> RpcEnvelope:
    """First decode stage for socket frames: unwrap the correlation envelope."""
    payload = parse_json(frame, shape=RpcEnvelope)
    if not isinstance(payload, Mapping):
        raise DecodeError("JSON-RPC frame is not an object", shape=RpcEnvelope, payload=payload)
    request_id = payload.get("id")
    if request_id is not None and (isinstance(request_id, bool) or not isinstance(request_id, (int, str))):
        raise DecodeError("JSON-RPC id must be an integer, a string or null", shape=RpcEnvelope, payload=payload)
    has_result = "result" in payload
    error = payload.get("error")
    if error is not None and not isinstance(error, Mapping):
        raise DecodeError("JSON-RPC error member is not an object", shape=RpcEnvelope, payload=payload)
    if not has_result and error is None:
        raise DecodeError("JSON-RPC frame has neither result nor error", shape=RpcEnvelope, payload=payload)
    return RpcEnvelope(id=request_id, result=payload.get("result"), error=error)


def decode_rpc_result(envelope: RpcEnvelope, shape: Type[T], *, operation_name: Optional[str] = None) -> T:
    """Second decode stage: re-serialise ``result`` and decode it as ``shape``."""
    if envelope.error is not None:
        raise remote_error_from_payload(envelope.error, operation_name=operation_name)
    try:
        result_bytes = orjson.dumps(envelope.result)
    except TypeError as exc:
        raise DecodeError(
            f"result for {shape.__name__} cannot be re-serialised: {exc}",
            shape=shape,
            payload=envelope.result,
            operation_name=operation_name,
        ) from exc
    return decode_json(result_bytes, shape)


def encode_rpc_request(request_id: int, method: str, params: Mapping[str, Any]) -> str:
    """Build the JSON-RPC request text sent over the socket transport."""
    message = {"jsonrpc": JSONRPC_VERSION, "id": request_id, "method": method, "params": dict(params)}
    return orjson.dumps(message).decode("utf-8")


__all__ = [
    "Decodable",
    "HTTP_OK",
    "RpcEnvelope",
    "decode_http_response",
    "decode_json",
    "decode_payload",
    "decode_rpc_envelope",
    "decode_rpc_result",
    "encode_rpc_request",
    "parse_json",
    "remote_error_from_payload",
]
