"""
Identifiers of resource types and of individual resources.

A resource *type* is identified by its group, version and kind (GVK) when
it is encoded/decoded, and by its group, version and plural name when it is
addressed in the API URLs. A resource *object* is identified by its namespace
and name within its type.
"""
import dataclasses
import re
import urllib.parse
from typing import Iterator, Mapping, Optional


@dataclasses.dataclass(frozen=True)
class GroupVersion:
    """
    An API group and its version; e.g. ``operators.coreos.com/v1alpha1``.
    For Core v1 API resources, the group is an empty string: ``""``.
    """
    group: str
    version: str

    def __str__(self) -> str:
        return self.api_version

    @property
    def api_version(self) -> str:
        return f'{self.group}/{self.version}' if self.group else self.version

    @classmethod
    def parse(cls, api_version: str) -> 'GroupVersion':
        if not isinstance(api_version, str):
            raise ValueError(f"The API version is not a string: {api_version!r}")
        if not api_version:
            raise ValueError("The API version is empty.")
        group, slash, version = api_version.rpartition('/')
        if slash and (not group or not version):
            raise ValueError(f"Unexpected API version: {api_version!r}")
        return cls(group=group, version=version)

    def with_kind(self, kind: str) -> 'GroupVersionKind':
        return GroupVersionKind(group=self.group, version=self.version, kind=kind)


@dataclasses.dataclass(frozen=True)
class GroupVersionKind:
    """
    A resource type as used in the object bodies (``apiVersion`` & ``kind``).
    """
    group: str
    version: str
    kind: str

    def __str__(self) -> str:
        return f'{self.kind}.{self.version}.{self.group}'.rstrip('.')

    # Mostly for tests and logs: `group, version, kind = gvk`.
    def __iter__(self) -> Iterator[str]:
        return iter((self.group, self.version, self.kind))

    @property
    def api_version(self) -> str:
        return self.group_version.api_version

    @property
    def group_version(self) -> GroupVersion:
        return GroupVersion(group=self.group, version=self.version)

    @classmethod
    def from_api_version(cls, api_version: str, kind: str) -> 'GroupVersionKind':
        if not isinstance(kind, str):
            raise ValueError(f"The kind is not a string: {kind!r}")
        if not kind:
            raise ValueError("The kind is empty.")
        return GroupVersion.parse(api_version).with_kind(kind)


@dataclasses.dataclass(frozen=True)
class ObjectKey:
    """
    A specific object's identity within its resource type.
    """
    namespace: Optional[str]
    name: str

    def __str__(self) -> str:
        return f'{self.namespace}/{self.name}' if self.namespace else self.name


# Irregular plurals are not guessed: they should be declared when registering the kinds.
_VOWEL_Y = re.compile(r'[aeiou]y$')


def guess_plural(kind: str) -> str:
    """
    Guess the resource's plural name from its kind, as ``kubectl`` does it.

    E.g.: ``CatalogSource`` -> ``catalogsources``, ``Policy`` -> ``policies``,
    ``Ingress`` -> ``ingresses``, ``Gateway`` -> ``gateways``.
    """
    singular = kind.lower()
    if not singular:
        raise ValueError("Cannot guess a plural name of an empty kind.")
    elif singular.endswith('s'):
        return f'{singular}es'
    elif singular.endswith('y') and not _VOWEL_Y.search(singular):
        return f'{singular[:-1]}ies'
    else:
        return f'{singular}s'


@dataclasses.dataclass(frozen=True)
class Resource:
    """
    The REST coordinates of one resource type: built-in or custom.

    The URLs are derived from the group, the version and the plural name.
    The kind is kept for stamping the bodies and for the log messages.
    """

    group: str
    """ E.g. ``"operators.coreos.com"`` or ``"apps"``; ``""`` for the core API. """

    version: str
    """ E.g. ``"v1"`` or ``"v1alpha1"``. """

    plural: str
    """ The URL segment of the collection, e.g. ``"catalogsources"``. """

    kind: Optional[str] = None
    """ The ``kind:`` field as seen in manifests, e.g. ``"CatalogSource"``. """

    namespaced: bool = True
    """ ``False`` for cluster-scoped resource types. """

    def __repr__(self) -> str:
        return f'{self.plural}.{self.version}.{self.group}'.strip('.')

    @property
    def api_version(self) -> str:
        return GroupVersion(group=self.group, version=self.version).api_version

    @property
    def gvk(self) -> GroupVersionKind:
        if self.kind is None:
            raise ValueError(f"The kind of {self!r} is unknown.")
        return GroupVersionKind(group=self.group, version=self.version, kind=self.kind)

    def get_url(
            self,
            *,
            server: Optional[str] = None,
            api_path: Optional[str] = None,
            namespace: Optional[str] = None,
            name: Optional[str] = None,
            params: Optional[Mapping[str, str]] = None,
    ) -> str:
        """
        Compose the collection URL (no name) or the object URL (with a name).

        Without a namespace, the URL is cluster-wide. Cluster-scoped resources
        reject any namespace; named namespaced objects require one.
        The prefix defaults to ``/api`` for core v1 and to ``/apis`` otherwise.
        """
        if not self.namespaced and namespace is not None:
            raise ValueError(f"{self!r} is cluster-scoped, but a namespace was given.")
        if self.namespaced and namespace is None and name is not None:
            raise ValueError(f"{self!r} is namespaced, but no namespace was given for {name!r}.")

        if api_path is None:
            api_path = '/api' if self.group == '' and self.version == 'v1' else '/apis'

        segments = [api_path.rstrip('/'), self.group, self.version]
        if namespace is not None:
            segments += ['namespaces', namespace]
        segments += [self.plural, name or '']

        path = '/'.join(segment for segment in segments if segment)
        if params:
            path += '?' + urllib.parse.urlencode(params, encoding='utf-8')
        return path if server is None else f"{server.rstrip('/')}/{path.lstrip('/')}"
