"""
The raw REST client: manually built requests of one API group version.

The requests are built step by step, the same way as the URLs are built::

    result = await client.post().namespace('default').resource('catalogsources').body(obj).do()
    created = result.into(CatalogSource)

The bodies are serialized directly by the codec (keyed by the resource types
in the scheme), and the responses are deserialized by the same codec.
The client is bound to the API group version of its transport.
"""
import logging
from typing import Optional, Type, TypeVar, Union

from crkit._cogs.aiokits import aiotime
from crkit._cogs.clients import transports
from crkit._cogs.helpers import typedefs
from crkit._cogs.structs import bodies, credentials, objects, references
from crkit._core.clients import identities
from crkit._core.schemes import codecs

logger = logging.getLogger('crkit.clients')

_ObjectT = TypeVar('_ObjectT', bound=objects.TypedObject)


class Result:
    """ A successful response, not yet deserialized. """

    def __init__(self, data: bytes, *, codec: codecs.JSONCodec) -> None:
        super().__init__()
        self._data = data
        self._codec = codec

    def raw(self) -> bytes:
        return self._data

    def document(self) -> bodies.Document:
        return self._codec.decode_document(self._data)

    def into(self, shape: Type[_ObjectT]) -> _ObjectT:
        return self._codec.converter.into(self.document(), shape)

    def object(self) -> objects.TypedObject:
        return self._codec.decode(self._data)


class Request:
    """ A request being built. Every step returns the same request. """

    def __init__(self, client: 'RESTClient', verb: str) -> None:
        super().__init__()
        self._client = client
        self._verb = verb
        self._namespace: Optional[str] = None
        self._resource: Optional[str] = None
        self._name: Optional[str] = None
        self._body: Optional[bytes] = None

    def namespace(self, namespace: str) -> 'Request':
        self._namespace = namespace
        return self

    def resource(self, plural: str) -> 'Request':
        self._resource = plural
        return self

    def name(self, name: str) -> 'Request':
        self._name = name
        return self

    def body(self, obj: codecs.Encodable) -> 'Request':
        self._body = self._client.codec.encode(obj)
        return self

    def url(self) -> str:
        if not self._resource:
            raise ValueError("The resource of the request is not specified.")
        group_version = self._client.group_version
        resource = references.Resource(
            group=group_version.group,
            version=group_version.version,
            plural=self._resource,
            namespaced=self._namespace is not None,
        )
        return resource.get_url(
            api_path=self._client.transport.api_path,
            namespace=self._namespace,
            name=self._name,
        )

    async def do(self, *, deadline: Optional[aiotime.Deadline] = None) -> Result:
        data = await self._client.transport.request(
            self._verb,
            self.url(),
            body=self._body,
            decode=False,
            deadline=deadline,
            logger=self._client.logger,
        )
        return Result(data, codec=self._client.codec)


class RESTClient:

    def __init__(
            self,
            transport: transports.Transport,
            codec: codecs.JSONCodec,
            *,
            logger: typedefs.Logger = logger,
    ) -> None:
        super().__init__()
        if transport.group_version is None:
            raise credentials.ConfigError("The REST client needs the transport's API group version.")
        self.group_version: references.GroupVersion = transport.group_version
        self.transport = transport
        self.codec = codec
        self.logger = logger

    def new_request(self, verb: str) -> Request:
        return Request(self, verb)

    def post(self) -> Request:
        return self.new_request('post')

    def _resource_for(self, gvk: references.GroupVersionKind) -> references.Resource:
        if gvk.group_version != self.group_version:
            raise ValueError(f"The kind {gvk} is not served by this client of {self.group_version}.")
        return self.codec.scheme.resource_for(gvk)

    async def create(
            self,
            key: references.ObjectKey,
            obj: _ObjectT,
            *,
            deadline: Optional[aiotime.Deadline] = None,
    ) -> _ObjectT:
        resource = self._resource_for(self.codec.scheme.kind_of(obj))
        namespace = identities.get_namespace(key, resource, self.transport)
        obj = identities.identify_object(obj, name=key.name, namespace=namespace)

        self.logger.debug(f"Creating {resource!r} {key}.")
        request = self.post().resource(resource.plural).body(obj)
        if namespace is not None:
            request = request.namespace(namespace)
        result = await request.do(deadline=deadline)
        return result.into(type(obj))

    async def get(
            self,
            key: references.ObjectKey,
            kind: Union[Type[_ObjectT], references.GroupVersionKind],
            *,
            deadline: Optional[aiotime.Deadline] = None,
    ) -> objects.TypedObject:
        gvk = kind if isinstance(kind, references.GroupVersionKind) else self.codec.scheme.kind_of(kind)
        resource = self._resource_for(gvk)
        namespace = identities.get_namespace(key, resource, self.transport)

        self.logger.debug(f"Fetching {resource!r} {key}.")
        request = self.new_request('get').resource(resource.plural).name(key.name)
        if namespace is not None:
            request = request.namespace(namespace)
        result = await request.do(deadline=deadline)
        return result.into(self.codec.scheme.resolve(gvk))
