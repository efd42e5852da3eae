"""
All the structures coming from/to the API in their untyped form.

Everything marked "raw" is a plain unwrapped unprocessed data as JSON-decoded
from the API, or as prepared for JSON-encoding to the API. The type
definitions are detailed to the per-field level only for the fields used by
the library itself. Arbitrary other fields are allowed at runtime.

:class:`Document` is the untyped ("dynamic", "unstructured") representation
of a resource object: a string-keyed tree of scalars, sequences, mappings,
which carries its own resource type in the ``apiVersion`` & ``kind`` fields.
It is validated by nothing but the API server.
"""
import collections.abc
import copy
from typing import Any, Dict, Iterator, List, Mapping, MutableMapping, \
                   Optional, Tuple, Union

from typing_extensions import TypedDict

from crkit._cogs.structs import references

FieldPath = Tuple[str, ...]
FieldSpec = Union[str, FieldPath, List[str]]

Labels = Mapping[str, str]
Annotations = Mapping[str, str]


class RawMeta(TypedDict, total=False):
    uid: str
    name: str
    namespace: str
    labels: Labels
    annotations: Annotations
    resourceVersion: str
    generation: int
    creationTimestamp: str


class RawBody(TypedDict, total=False):
    apiVersion: str
    kind: str
    metadata: RawMeta
    spec: Mapping[str, Any]
    status: Mapping[str, Any]


_UNSET = object()


def parse_field(field: FieldSpec) -> FieldPath:
    """ Split ``"spec.image"`` or take ``("spec", "image")`` as a path of keys. """
    if isinstance(field, str):
        return tuple(field.split('.'))
    if isinstance(field, (list, tuple)):
        return tuple(field)
    raise ValueError(f"A field is either a dotted str or a list/tuple of keys; got {field!r}")


class Document(MutableMapping[str, Any]):
    """
    An untyped resource object, as sent to or received from the API.

    The document owns a plain dict tree; the dict is not copied on construction,
    so the document can be used as a live view of it. Use :meth:`to_dict`
    to get a detached copy.
    """

    def __init__(self, __src: Optional[Mapping[str, Any]] = None, **kwargs: Any) -> None:
        super().__init__()
        self._data: Dict[str, Any] = __src if isinstance(__src, dict) else dict(__src or {})
        self._data.update(kwargs)

    def __repr__(self) -> str:
        return f'{self.__class__.__name__}({self._data!r})'

    def __getitem__(self, key: str) -> Any:
        return self._data[key]

    def __setitem__(self, key: str, value: Any) -> None:
        self._data[key] = value

    def __delitem__(self, key: str) -> None:
        del self._data[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._data)

    def __len__(self) -> int:
        return len(self._data)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Document):
            return self._data == other._data
        elif isinstance(other, collections.abc.Mapping):
            return self._data == dict(other)
        else:
            return NotImplemented

    @property
    def raw(self) -> RawBody:
        """ The underlying dict tree, not copied. """
        return self._data  # type: ignore

    def to_dict(self) -> Dict[str, Any]:
        return copy.deepcopy(self._data)

    def resolve(self, field: FieldSpec, default: Any = _UNSET) -> Any:
        """
        Get a value by a nested path, e.g. ``"spec.image"``.

        If any of the path's levels is absent, the default is returned,
        or `KeyError` is raised if no default is provided.
        """
        path = parse_field(field)
        result: Any = self._data
        try:
            for key in path:
                if not isinstance(result, collections.abc.Mapping):
                    raise KeyError(key)
                result = result[key]
        except KeyError:
            if default is not _UNSET:
                return default
            raise
        return result

    def ensure(self, field: FieldSpec, value: Any) -> None:
        """
        Set a value by a nested path, creating the intermediate levels.
        """
        path = parse_field(field)
        if not path:
            raise ValueError("Cannot set the root of a document.")
        parent: MutableMapping[str, Any] = self._data
        for key in path[:-1]:
            child = parent.setdefault(key, {})
            if not isinstance(child, collections.abc.MutableMapping):
                raise TypeError(f"The field {key!r} is not a mapping: {child!r}")
            parent = child
        parent[path[-1]] = value

    @property
    def api_version(self) -> Optional[str]:
        return self._data.get('apiVersion')

    @property
    def kind(self) -> Optional[str]:
        return self._data.get('kind')

    @property
    def gvk(self) -> Optional[references.GroupVersionKind]:
        """
        The resource type of the document, or ``None`` if it is not declared.

        A malformed ``apiVersion`` raises `ValueError`.
        """
        api_version, kind = self.api_version, self.kind
        if not api_version or not kind:
            return None
        return references.GroupVersionKind.from_api_version(api_version, kind)

    @gvk.setter
    def gvk(self, gvk: references.GroupVersionKind) -> None:
        self._data['apiVersion'] = gvk.api_version
        self._data['kind'] = gvk.kind

    @property
    def name(self) -> Optional[str]:
        return self.resolve('metadata.name', None)

    @property
    def namespace(self) -> Optional[str]:
        return self.resolve('metadata.namespace', None)

    @property
    def key(self) -> references.ObjectKey:
        if self.name is None:
            raise ValueError("The document has no name.")
        return references.ObjectKey(namespace=self.namespace, name=self.name)
