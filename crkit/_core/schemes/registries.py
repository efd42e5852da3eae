"""
A registry of the typed resource shapes: the scheme.

The scheme maps the resource types (group, version, kind) to the classes
of the typed objects, and back. It also remembers how the resource types
are addressed in the API URLs (the plural names, the scope).

There is no global or default scheme. A scheme is built once, usually
at startup, and is passed explicitly to everything that needs it.
The scheme is not protected against concurrent modifications: all types
should be registered before the scheme is used by converters and clients.

Registering the same type under the same kind again is a no-op.
Registering a different type under an already known kind replaces the
previous type (the last registration wins); a warning is logged then.
"""
import dataclasses
import logging
from typing import Callable, Dict, Iterator, List, Mapping, Optional, Type, Union

from crkit._cogs.helpers import typedefs
from crkit._cogs.structs import objects, references

logger = logging.getLogger('crkit.schemes')

Shape = Type[objects.TypedObject]


class UnknownKindError(LookupError):
    """ Raised when a resource type or a typed class is not registered. """


@dataclasses.dataclass(frozen=True)
class SchemeEntry:
    shape: Shape
    resource: references.Resource


class Scheme:

    def __init__(self, *, logger: typedefs.Logger = logger) -> None:
        super().__init__()
        self._logger = logger
        self._entries: Dict[references.GroupVersionKind, SchemeEntry] = {}
        self._kinds: Dict[Shape, List[references.GroupVersionKind]] = {}

    def __repr__(self) -> str:
        return f'<{self.__class__.__name__}: {", ".join(str(gvk) for gvk in self._entries)}>'

    def __contains__(self, gvk: object) -> bool:
        return gvk in self._entries

    def __iter__(self) -> Iterator[references.GroupVersionKind]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def add_known_type(
            self,
            gvk: references.GroupVersionKind,
            shape: Shape,
            *,
            plural: Optional[str] = None,
            namespaced: bool = True,
    ) -> None:
        if not isinstance(shape, type) or not dataclasses.is_dataclass(shape):
            raise TypeError(f"Only dataclasses can be registered as typed shapes; got {shape!r}.")
        if not issubclass(shape, objects.TypedObject):
            raise TypeError(f"Typed shapes must inherit from TypedObject; got {shape!r}.")

        resource = references.Resource(
            group=gvk.group,
            version=gvk.version,
            plural=plural or references.guess_plural(gvk.kind),
            kind=gvk.kind,
            namespaced=namespaced,
        )
        entry = SchemeEntry(shape=shape, resource=resource)

        old_entry = self._entries.get(gvk)
        if old_entry == entry:
            return
        elif old_entry is not None and old_entry.shape is not shape:
            self._logger.warning(f"The kind {gvk} is re-registered: "
                                 f"{old_entry.shape.__qualname__} -> {shape.__qualname__}.")
            self._forget_kind(old_entry.shape, gvk)

        self._entries[gvk] = entry
        kinds = self._kinds.setdefault(shape, [])
        if gvk not in kinds:
            kinds.append(gvk)

    def add_known_types(
            self,
            group_version: references.GroupVersion,
            *shapes: Shape,
    ) -> None:
        """
        Register the types under their class names as the kinds.
        """
        for shape in shapes:
            self.add_known_type(group_version.with_kind(shape.__name__), shape)

    def _forget_kind(self, shape: Shape, gvk: references.GroupVersionKind) -> None:
        kinds = self._kinds.get(shape, [])
        if gvk in kinds:
            kinds.remove(gvk)
        if not kinds:
            self._kinds.pop(shape, None)

    def recognizes(self, gvk: references.GroupVersionKind) -> bool:
        return gvk in self._entries

    def resolve(self, gvk: references.GroupVersionKind) -> Shape:
        try:
            return self._entries[gvk].shape
        except KeyError:
            raise UnknownKindError(f"The kind {gvk} is not registered in the scheme.") from None

    def resource_for(self, gvk: references.GroupVersionKind) -> references.Resource:
        try:
            return self._entries[gvk].resource
        except KeyError:
            raise UnknownKindError(f"The kind {gvk} is not registered in the scheme.") from None

    def kind_of(self, obj: Union[objects.TypedObject, Shape]) -> references.GroupVersionKind:
        """
        The resource type of a typed object or class; the first one if many.
        """
        shape = obj if isinstance(obj, type) else type(obj)
        try:
            return self._kinds[shape][0]
        except (KeyError, IndexError):
            raise UnknownKindError(f"The type {shape.__qualname__} is not registered "
                                   f"in the scheme.") from None

    def known_kinds(self, group_version: references.GroupVersion) -> Mapping[str, Shape]:
        return {
            gvk.kind: entry.shape
            for gvk, entry in self._entries.items()
            if gvk.group_version == group_version
        }


class SchemeBuilder:
    """
    A collection of the registration functions, applied to any scheme later.

    Usage::

        def add_known_types(scheme: crkit.Scheme) -> None:
            scheme.add_known_types(GROUP_VERSION, CatalogSource)

        builder = crkit.SchemeBuilder(add_known_types)
        builder.add_to_scheme(scheme)
    """

    def __init__(self, *funcs: Callable[[Scheme], None]) -> None:
        super().__init__()
        self._funcs = list(funcs)

    def register(self, *funcs: Callable[[Scheme], None]) -> None:
        self._funcs.extend(funcs)

    def add_to_scheme(self, scheme: Scheme) -> None:
        for func in self._funcs:
            func(scheme)
