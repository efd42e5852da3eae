"""
Serialization of the objects to/from the wire format (JSON only).

The codec is keyed by the resource types: when encoding, the resource type
of a typed object is taken from the scheme and injected into the payload;
when decoding, the target class is taken from the payload's resource type,
unless explicitly requested.
"""
import collections.abc
import json
from typing import Any, Mapping, Optional, Type, Union

from crkit._cogs.structs import bodies, objects
from crkit._core.schemes import converting, registries

Encodable = Union[objects.TypedObject, Mapping[str, Any]]


class JSONCodec:
    content_type = 'application/json'

    def __init__(
            self,
            scheme: registries.Scheme,
            *,
            converter: Optional[converting.Converter] = None,
    ) -> None:
        super().__init__()
        self.scheme = scheme
        self.converter = converter if converter is not None else converting.Converter(scheme)

    def encode(self, obj: Encodable) -> bytes:
        if isinstance(obj, objects.TypedObject):
            raw: Mapping[str, Any] = self.converter.to_untyped(obj).raw
        elif isinstance(obj, bodies.Document):
            raw = obj.raw
        elif isinstance(obj, collections.abc.Mapping):
            raw = obj
        else:
            raise converting.ConversionError(f"Cannot encode an object of type {type(obj)!r}.")
        return json.dumps(raw).encode('utf-8')

    def decode_document(self, data: Union[bytes, str]) -> bodies.Document:
        try:
            raw = json.loads(data)
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise converting.ConversionError(f"Malformed JSON payload: {e}") from e
        if not isinstance(raw, dict):
            raise converting.ConversionError(f"Expected a JSON object, got {type(raw).__name__}.")
        return bodies.Document(raw)

    def decode(
            self,
            data: Union[bytes, str],
            into: Optional[Type[objects.TypedObject]] = None,
    ) -> objects.TypedObject:
        document = self.decode_document(data)
        if into is not None:
            return self.converter.into(document, into)
        return self.converter.to_typed(document)
