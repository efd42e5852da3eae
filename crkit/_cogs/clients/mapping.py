"""
Mapping of resource kinds (as in the bodies) to resources (as in the URLs).

The API addresses the resources by their plural names, while the objects
declare only their kinds. The mapping between them is either guessed
from the kind's name (fast, no requests, but wrong for irregular plurals),
or discovered from the API server itself (one request per API group version).
"""
import asyncio
import logging
from typing import Any, Dict, Mapping, Optional

from typing_extensions import Protocol

from crkit._cogs.aiokits import aiotime
from crkit._cogs.clients import errors, transports
from crkit._cogs.helpers import typedefs
from crkit._cogs.structs import references

logger = logging.getLogger('crkit.clients')


class RESTMapper(Protocol):
    async def resource_for(
            self,
            gvk: references.GroupVersionKind,
            *,
            deadline: Optional[aiotime.Deadline] = None,
    ) -> references.Resource:
        ...


class GuessingMapper:
    """
    Guess the plural names from the kinds, assume everything is namespaced.

    The explicitly declared resources take precedence over the guesses.
    """

    def __init__(self, *resources: references.Resource) -> None:
        super().__init__()
        self._known = {resource.gvk: resource for resource in resources}

    async def resource_for(
            self,
            gvk: references.GroupVersionKind,
            *,
            deadline: Optional[aiotime.Deadline] = None,
    ) -> references.Resource:
        try:
            return self._known[gvk]
        except KeyError:
            return references.Resource(
                group=gvk.group,
                version=gvk.version,
                plural=references.guess_plural(gvk.kind),
                kind=gvk.kind,
            )


class DiscoveryMapper:
    """
    Discover the resources of an API group version from the API server.

    The discovered resources are remembered per mapper (not per transport),
    so a new mapper must be created to re-discover them.
    """

    def __init__(
            self,
            transport: transports.Transport,
            *,
            logger: typedefs.Logger = logger,
    ) -> None:
        super().__init__()
        self._transport = transport
        self._logger = logger
        self._discovered: Dict[references.GroupVersion, Mapping[str, references.Resource]] = {}
        self._lock = asyncio.Lock()

    async def resource_for(
            self,
            gvk: references.GroupVersionKind,
            *,
            deadline: Optional[aiotime.Deadline] = None,
    ) -> references.Resource:
        group_version = gvk.group_version
        if group_version not in self._discovered:
            async with self._lock:
                if group_version not in self._discovered:
                    self._discovered[group_version] = await self._discover(group_version, deadline)

        try:
            return self._discovered[group_version][gvk.kind]
        except KeyError:
            raise errors.APINotFoundError(
                status=404, message=f"No resource is served for the kind {gvk}.") from None

    async def _discover(
            self,
            group_version: references.GroupVersion,
            deadline: Optional[aiotime.Deadline],
    ) -> Mapping[str, references.Resource]:
        path = '/api/v1' if group_version.api_version == 'v1' else f'/apis/{group_version.api_version}'
        rsp: Mapping[str, Any] = await self._transport.get(path, deadline=deadline, logger=self._logger)

        resources: Dict[str, references.Resource] = {}
        for info in rsp.get('resources', []):
            if '/' in info['name']:  # subresources, e.g. "catalogsources/status"
                continue
            resource = references.Resource(
                group=group_version.group,
                version=group_version.version,
                plural=info['name'],
                kind=info['kind'],
                namespaced=info.get('namespaced', True),
            )
            resources.setdefault(resource.kind, resource)
        self._logger.debug(f"Discovered {len(resources)} resources in {group_version}.")
        return resources
