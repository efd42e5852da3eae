"""
The dynamic client: untyped documents in, untyped documents out.

The client consults no scheme and validates nothing in the documents except
their resource types (needed for routing): the API server is solely
responsible for validating the documents' shape.
"""
import collections.abc
import logging
from typing import Any, Mapping, Optional

from crkit._cogs.aiokits import aiotime
from crkit._cogs.clients import errors, mapping, transports
from crkit._cogs.helpers import typedefs
from crkit._cogs.structs import bodies, references
from crkit._core.clients import identities

logger = logging.getLogger('crkit.clients')


class DynamicClient:

    def __init__(
            self,
            transport: transports.Transport,
            *,
            mapper: Optional[mapping.RESTMapper] = None,
            logger: typedefs.Logger = logger,
    ) -> None:
        super().__init__()
        self.transport = transport
        self.mapper = mapper if mapper is not None else mapping.GuessingMapper()
        self.logger = logger

    async def create(
            self,
            key: references.ObjectKey,
            payload: Mapping[str, Any],
            *,
            deadline: Optional[aiotime.Deadline] = None,
    ) -> bodies.Document:
        document = payload if isinstance(payload, bodies.Document) else bodies.Document(dict(payload))
        gvk = document.gvk
        if gvk is None:
            raise ValueError("The document declares no apiVersion & kind.")

        resource = await self.mapper.resource_for(gvk, deadline=deadline)
        namespace = identities.get_namespace(key, resource, self.transport)
        document = identities.identify_document(document, name=key.name, namespace=namespace)

        self.logger.debug(f"Creating {resource!r} {key}.")
        url = resource.get_url(api_path=self.transport.api_path, namespace=namespace)
        raw = await self.transport.post(url, document.raw, deadline=deadline, logger=self.logger)
        return _as_document(raw)

    async def get(
            self,
            key: references.ObjectKey,
            kind: references.GroupVersionKind,
            *,
            deadline: Optional[aiotime.Deadline] = None,
    ) -> bodies.Document:
        if not isinstance(kind, references.GroupVersionKind):
            raise TypeError(f"The dynamic client needs a GroupVersionKind; got {kind!r}.")

        resource = await self.mapper.resource_for(kind, deadline=deadline)
        namespace = identities.get_namespace(key, resource, self.transport)

        self.logger.debug(f"Fetching {resource!r} {key}.")
        url = resource.get_url(api_path=self.transport.api_path, namespace=namespace, name=key.name)
        raw = await self.transport.get(url, deadline=deadline, logger=self.logger)
        return _as_document(raw)


def _as_document(raw: Any) -> bodies.Document:
    if not isinstance(raw, collections.abc.Mapping):
        raise errors.APITransportError(message=f"The API returned a non-object: {raw!r}")
    return bodies.Document(dict(raw))
