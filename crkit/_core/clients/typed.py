"""
The typed (scheme-aware) client: typed objects in, typed objects out.

Only the objects of the types registered in the scheme are accepted;
the unknown types fail before any request is made. The responses are
converted back to the typed objects by the resource types they declare.
"""
import logging
from typing import Optional, Type, TypeVar, Union

from crkit._cogs.aiokits import aiotime
from crkit._cogs.clients import transports
from crkit._cogs.helpers import typedefs
from crkit._cogs.structs import objects, references
from crkit._core.clients import identities
from crkit._core.schemes import converting, registries

logger = logging.getLogger('crkit.clients')

_ObjectT = TypeVar('_ObjectT', bound=objects.TypedObject)


class TypedClient:

    def __init__(
            self,
            transport: transports.Transport,
            scheme: registries.Scheme,
            *,
            converter: Optional[converting.Converter] = None,
            logger: typedefs.Logger = logger,
    ) -> None:
        super().__init__()
        self.transport = transport
        self.scheme = scheme
        self.converter = converter if converter is not None else converting.Converter(scheme)
        self.logger = logger

    async def create(
            self,
            key: references.ObjectKey,
            obj: _ObjectT,
            *,
            deadline: Optional[aiotime.Deadline] = None,
    ) -> _ObjectT:
        gvk = self.scheme.kind_of(obj)
        resource = self.scheme.resource_for(gvk)
        namespace = identities.get_namespace(key, resource, self.transport)
        obj = identities.identify_object(obj, name=key.name, namespace=namespace)
        document = self.converter.to_untyped(obj)

        self.logger.debug(f"Creating {resource!r} {key}.")
        url = resource.get_url(api_path=self.transport.api_path, namespace=namespace)
        raw = await self.transport.post(url, document.raw, deadline=deadline, logger=self.logger)
        return self._restore(raw, type(obj))

    async def get(
            self,
            key: references.ObjectKey,
            kind: Union[Type[_ObjectT], references.GroupVersionKind],
            *,
            deadline: Optional[aiotime.Deadline] = None,
    ) -> objects.TypedObject:
        gvk = kind if isinstance(kind, references.GroupVersionKind) else self.scheme.kind_of(kind)
        shape = self.scheme.resolve(gvk)
        resource = self.scheme.resource_for(gvk)
        namespace = identities.get_namespace(key, resource, self.transport)

        self.logger.debug(f"Fetching {resource!r} {key}.")
        url = resource.get_url(api_path=self.transport.api_path, namespace=namespace, name=key.name)
        raw = await self.transport.get(url, deadline=deadline, logger=self.logger)
        return self._restore(raw, shape)

    def _restore(self, raw: object, shape: Type[_ObjectT]) -> _ObjectT:
        if not isinstance(raw, dict):
            raise converting.ConversionError(f"The API returned a non-object: {raw!r}")
        obj = self.converter.to_typed(raw)
        if not isinstance(obj, shape):
            raise converting.ConversionError(f"The API returned {type(obj).__qualname__} "
                                             f"instead of {shape.__qualname__}.")
        return obj
