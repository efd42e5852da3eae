"""
The common capability of all client variants, and the selection of them.

All the variants create and fetch the objects by their keys (namespace & name).
They differ only in how the objects are represented: untyped documents
for the dynamic client, typed objects for the REST & typed clients.
"""
import enum
from typing import Any, Optional, Union

from typing_extensions import Protocol

from crkit._cogs.aiokits import aiotime
from crkit._cogs.clients import mapping, transports
from crkit._cogs.structs import references
from crkit._core.clients import dynamic, rest, typed
from crkit._core.schemes import codecs, registries


class ResourceClient(Protocol):

    async def create(
            self,
            key: references.ObjectKey,
            payload: Any,
            *,
            deadline: Optional[aiotime.Deadline] = None,
    ) -> Any:
        ...

    async def get(
            self,
            key: references.ObjectKey,
            kind: Any,
            *,
            deadline: Optional[aiotime.Deadline] = None,
    ) -> Any:
        ...


class Variant(str, enum.Enum):
    DYNAMIC = 'dynamic'
    REST = 'rest'
    TYPED = 'typed'


def new_client(
        variant: Union[str, Variant],
        transport: transports.Transport,
        *,
        scheme: Optional[registries.Scheme] = None,
        mapper: Optional[mapping.RESTMapper] = None,
) -> ResourceClient:
    variant = Variant(variant)
    if variant is Variant.DYNAMIC:
        return dynamic.DynamicClient(transport, mapper=mapper)
    elif scheme is None:
        raise ValueError(f"The {variant.value} client needs a scheme.")
    elif variant is Variant.REST:
        return rest.RESTClient(transport, codecs.JSONCodec(scheme))
    else:
        return typed.TypedClient(transport, scheme)
