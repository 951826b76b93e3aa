"""Body codecs, selected by payload type and content type."""

from typing import Any

from pydantic import ValidationError

from rapid_api.errors import DecodeError
from rapid_api.introspect.descriptor import (
    PrimitiveType,
    adapter_for,
    describe,
    strip_optional,
)
from rapid_api.schema.base import DEFAULT_CONTENT_TYPE

RAW_CONTENT_TYPE = "application/octet-stream"


class Codec:
    """Encodes and decodes bodies of one media type."""

    media_type: str
    delimiter: bytes = b""  # appended to each chunk of a streaming response

    def decode(self, tp: Any, body: bytes) -> Any:
        raise NotImplementedError

    def encode(self, tp: Any, value: Any) -> bytes:
        raise NotImplementedError


class JSONCodec(Codec):
    media_type = DEFAULT_CONTENT_TYPE
    delimiter = b"\n"

    def decode(self, tp: Any, body: bytes) -> Any:
        try:
            return adapter_for(tp).validate_json(body)
        except ValidationError as e:
            raise DecodeError(f"invalid request body: {_first_error(e)}") from e

    def encode(self, tp: Any, value: Any) -> bytes:
        return adapter_for(tp).dump_json(value, by_alias=True)


class RawCodec(Codec):
    """Passes bytes through untouched."""

    media_type = RAW_CONTENT_TYPE

    def decode(self, tp: Any, body: bytes) -> Any:
        return strip_optional(tp)(body)

    def encode(self, tp: Any, value: Any) -> bytes:
        return bytes(value)


class CodecRegistry:
    """Media type -> codec. RawData payloads always use the raw codec."""

    def __init__(self, codecs: list[Codec] | None = None):
        self._codecs: dict[str, Codec] = {}
        for codec in codecs or [JSONCodec(), RawCodec()]:
            self.register(codec)

    def register(self, codec: Codec) -> None:
        self._codecs[codec.media_type] = codec

    def for_type(self, tp: Any, content_type: str | None = None) -> Codec:
        desc = describe(strip_optional(tp))
        if isinstance(desc, PrimitiveType) and desc.is_raw:
            return self._codecs.get(RAW_CONTENT_TYPE) or RawCodec()
        media_type = (content_type or DEFAULT_CONTENT_TYPE).split(";")[0].strip().lower()
        codec = self._codecs.get(media_type)
        if codec is None or isinstance(codec, RawCodec):
            return self._codecs[DEFAULT_CONTENT_TYPE]
        return codec


def _first_error(e: ValidationError) -> str:
    error = e.errors()[0]
    location = ".".join(str(part) for part in error["loc"])
    if location:
        return f"{location}: {error['msg']}"
    return error["msg"]
