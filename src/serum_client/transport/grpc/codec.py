"""Message codecs for the gRPC transport."""

from __future__ import annotations

from typing import Any, Mapping, Protocol, Type, TypeVar

import orjson

from ...decoder import decode_json

T = TypeVar("T")


class MessageCodec(Protocol):
    """Serialises request params and decodes reply bytes for one content type."""

    content_type: str

    def encode(self, params: Mapping[str, Any]) -> bytes: ...

    def decode(self, data: bytes, shape: Type[T]) -> T: ...


class JsonCodec:
    """Protobuf-JSON field names carried as UTF-8 JSON.

    Useful against JSON-transcoding gateways and in tests; the live service
    needs a protobuf codec.
    """

    content_type = "json"

    def encode(self, params: Mapping[str, Any]) -> bytes:
        return orjson.dumps(dict(params))

    def decode(self, data: bytes, shape: Type[T]) -> T:
        return decode_json(data, shape)


__all__ = ["JsonCodec", "MessageCodec"]
