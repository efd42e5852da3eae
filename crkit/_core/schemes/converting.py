"""
Conversion between the untyped documents and the typed objects.

The conversion is driven by the dataclasses' fields and their type hints,
nothing is coerced implicitly: a value of an incompatible type is an error,
not a silently converted or dropped value. The supported type hints are:
``str``, ``int``, ``float``, ``bool``, ``Any``, ``datetime.datetime``,
enums, nested dataclasses, ``Optional``/``Union`` of those,
lists/sequences, tuples, sets and dicts/mappings of those.

Both directions are inverse to each other: for every typed object of
a registered class, ``to_typed(to_untyped(obj)) == obj``.
"""
import collections.abc
import dataclasses
import datetime
import enum
import types
import typing
from typing import Any, Dict, List, Mapping, Optional, Tuple, Type, TypeVar, Union

import iso8601

from crkit._cogs.structs import bodies, objects
from crkit._core.schemes import registries

_ObjectT = TypeVar('_ObjectT', bound=objects.TypedObject)

# Both the typing and the pep-604 unions (``Optional[str]`` & ``str | None``).
_UNION_TYPES: Tuple[Any, ...] = (Union, getattr(types, 'UnionType', Union))
_SEQUENCE_TYPES = (list, collections.abc.Sequence, collections.abc.MutableSequence)
_MAPPING_TYPES = (dict, collections.abc.Mapping, collections.abc.MutableMapping)
_SET_TYPES = (set, frozenset, collections.abc.Set, collections.abc.MutableSet)


class ConversionError(ValueError):
    """ Raised when a document does not match the typed shape, or vice versa. """

    def __init__(self, message: str, *, path: Optional[str] = None) -> None:
        super().__init__(message)
        self.path = path


class Converter:

    def __init__(self, scheme: registries.Scheme) -> None:
        super().__init__()
        self.scheme = scheme

    def to_untyped(self, obj: objects.TypedObject) -> bodies.Document:
        """
        Flatten a typed object into a document, with the resource type attached.
        """
        try:
            gvk = self.scheme.kind_of(obj)
        except registries.UnknownKindError as e:
            raise ConversionError(str(e)) from e
        document = bodies.Document(encode_dataclass(obj, path=''))
        document.gvk = gvk
        return document

    def to_typed(self, document: Mapping[str, Any]) -> objects.TypedObject:
        """
        Restore a typed object from a document, using its declared resource type.
        """
        document = document if isinstance(document, bodies.Document) else bodies.Document(document)
        try:
            gvk = document.gvk
        except ValueError as e:
            raise ConversionError(f"The document's resource type is malformed: {e}") from e
        if gvk is None:
            raise ConversionError("The document declares no apiVersion & kind.")
        try:
            shape = self.scheme.resolve(gvk)
        except registries.UnknownKindError as e:
            raise ConversionError(str(e)) from e
        return decode_dataclass(shape, document.raw, path='')

    def into(self, document: Mapping[str, Any], shape: Type[_ObjectT]) -> _ObjectT:
        """
        Restore a typed object of a known class, regardless of the declared type.
        """
        raw = document.raw if isinstance(document, bodies.Document) else document
        return decode_dataclass(shape, raw, path='')


def _subpath(path: str, key: str) -> str:
    return f'{path}.{key}' if path else key


def _is_omittable(field: 'dataclasses.Field[Any]', value: Any) -> bool:
    # Only the empty defaults are omitted, so that the decoding restores them exactly.
    if field.default is not dataclasses.MISSING:
        default = field.default
    elif field.default_factory is not dataclasses.MISSING:
        default = field.default_factory()
    else:
        return False
    return (value is None or value == {} or value == []) and value == default


def encode_dataclass(obj: Any, *, path: str) -> Dict[str, Any]:
    result: Dict[str, Any] = {}
    for field in dataclasses.fields(obj):
        value = getattr(obj, field.name)
        if not _is_omittable(field, value):
            key = objects.wire_name(field)
            result[key] = encode_value(value, path=_subpath(path, key))
    return result


def encode_value(value: Any, *, path: str) -> Any:
    if value is None or isinstance(value, (str, bool, int, float)) and not isinstance(value, enum.Enum):
        return value
    elif isinstance(value, enum.Enum):
        return value.value
    elif isinstance(value, datetime.datetime):
        # Naive timestamps go without an offset and are read back as naive.
        if value.tzinfo is None:
            return value.isoformat()
        return value.astimezone(datetime.timezone.utc).isoformat().replace('+00:00', 'Z')
    elif dataclasses.is_dataclass(value) and not isinstance(value, type):
        return encode_dataclass(value, path=path)
    elif isinstance(value, collections.abc.Mapping):
        return {str(key): encode_value(val, path=_subpath(path, str(key))) for key, val in value.items()}
    elif isinstance(value, (list, tuple, set, frozenset)):
        return [encode_value(item, path=f'{path}[{idx}]') for idx, item in enumerate(value)]
    else:
        raise ConversionError(f"Unsupported value at {path or 'root'}: {value!r}", path=path)


def decode_dataclass(shape: Type[_ObjectT], value: Any, *, path: str) -> _ObjectT:
    if not isinstance(value, collections.abc.Mapping):
        raise ConversionError(f"Expected a mapping at {path or 'root'}, got {value!r}", path=path)

    hints = typing.get_type_hints(shape)
    kwargs: Dict[str, Any] = {}
    for field in dataclasses.fields(shape):
        if not field.init:
            continue
        key = objects.wire_name(field)
        subpath = _subpath(path, key)
        has_default = (field.default is not dataclasses.MISSING or
                       field.default_factory is not dataclasses.MISSING)
        if key in value and (value[key] is not None or not has_default or _accepts_none(hints[field.name])):
            kwargs[field.name] = decode_value(value[key], hints[field.name], path=subpath)
        elif not has_default:
            raise ConversionError(f"Required field is missing: {subpath}", path=subpath)
    return shape(**kwargs)


def _accepts_none(hint: Any) -> bool:
    return hint is Any or (typing.get_origin(hint) in _UNION_TYPES and type(None) in typing.get_args(hint))


def decode_value(value: Any, hint: Any, *, path: str) -> Any:
    origin = typing.get_origin(hint)
    args = typing.get_args(hint)

    if hint is Any:
        return value

    elif origin in _UNION_TYPES:
        if value is None and type(None) in args:
            return None
        errors: List[ConversionError] = []
        for arg in args:
            if arg is type(None):
                continue
            try:
                return decode_value(value, arg, path=path)
            except ConversionError as e:
                errors.append(e)
        raise errors[0] if len(errors) == 1 else ConversionError(
            f"No type of {hint} matches the value at {path}: {value!r}", path=path)

    elif origin is tuple or hint is tuple:
        if not isinstance(value, list):
            raise ConversionError(f"Expected a list at {path}, got {value!r}", path=path)
        if not args or (len(args) == 2 and args[1] is Ellipsis):
            item_hints = [args[0] if args else Any] * len(value)
        elif len(args) == len(value):
            item_hints = list(args)
        else:
            raise ConversionError(f"Expected {len(args)} items at {path}, got {value!r}", path=path)
        return tuple(decode_value(item, item_hint, path=f'{path}[{idx}]')
                     for idx, (item, item_hint) in enumerate(zip(value, item_hints)))

    elif origin in _SET_TYPES or hint in _SET_TYPES:
        if not isinstance(value, list):
            raise ConversionError(f"Expected a list at {path}, got {value!r}", path=path)
        item_hint = args[0] if args else Any
        items = [decode_value(item, item_hint, path=f'{path}[{idx}]') for idx, item in enumerate(value)]
        return frozenset(items) if frozenset in (origin, hint) else set(items)

    elif origin in _SEQUENCE_TYPES or hint in _SEQUENCE_TYPES:
        if not isinstance(value, list):
            raise ConversionError(f"Expected a list at {path}, got {value!r}", path=path)
        item_hint = args[0] if args else Any
        return [decode_value(item, item_hint, path=f'{path}[{idx}]') for idx, item in enumerate(value)]

    elif origin in _MAPPING_TYPES or hint in _MAPPING_TYPES:
        if not isinstance(value, collections.abc.Mapping):
            raise ConversionError(f"Expected a mapping at {path}, got {value!r}", path=path)
        val_hint = args[1] if len(args) == 2 else Any
        return {key: decode_value(val, val_hint, path=_subpath(path, key)) for key, val in value.items()}

    elif isinstance(hint, type) and dataclasses.is_dataclass(hint):
        return decode_dataclass(hint, value, path=path)

    elif isinstance(hint, type) and issubclass(hint, enum.Enum):
        try:
            return hint(value)
        except ValueError as e:
            raise ConversionError(f"Unexpected value at {path}: {value!r}", path=path) from e

    elif hint is datetime.datetime:
        if not isinstance(value, str):
            raise ConversionError(f"Expected a timestamp at {path}, got {value!r}", path=path)
        try:
            return iso8601.parse_date(value, default_timezone=None)
        except iso8601.ParseError as e:
            raise ConversionError(f"Malformed timestamp at {path}: {value!r}", path=path) from e

    elif hint is bool:
        if not isinstance(value, bool):
            raise ConversionError(f"Expected a boolean at {path}, got {value!r}", path=path)
        return value

    elif hint is int:
        if not isinstance(value, int) or isinstance(value, bool):
            raise ConversionError(f"Expected an integer at {path}, got {value!r}", path=path)
        return value

    elif hint is float:
        if not isinstance(value, (int, float)) or isinstance(value, bool):
            raise ConversionError(f"Expected a number at {path}, got {value!r}", path=path)
        return float(value)

    elif hint is str:
        if not isinstance(value, str):
            raise ConversionError(f"Expected a string at {path}, got {value!r}", path=path)
        return value

    else:
        raise ConversionError(f"Unsupported type hint at {path}: {hint!r}", path=path)
