"""
The network transport to the API server.

A transport is a capability object: it knows where the server is, how to
authenticate there, and how to negotiate the content. It performs individual
requests with JSON-encoded bodies and returns the JSON-decoded responses.

It does not retry and does not cache: every call is exactly one round trip,
and every failure is escalated to the caller as one of the `errors.APIError`
classes. Deadlines are enforced per request: see `aiotime.Deadline`.

The transport is reusable across calls and coroutines within the same event
loop (the aiohttp connection pool is reentrant there). It must be closed
when not needed anymore: either explicitly, or via ``async with``.
"""
import asyncio
import json
import logging
import ssl
from types import TracebackType
from typing import Any, Dict, Mapping, Optional, Type, Union

import aiohttp

from crkit._cogs.aiokits import aiotime
from crkit._cogs.clients import auth, errors
from crkit._cogs.configs import configuration
from crkit._cogs.helpers import typedefs
from crkit._cogs.structs import credentials, references

Body = Union[bytes, Mapping[str, Any]]

logger = logging.getLogger('crkit.clients')

# aiohttp treats zero timeouts as no timeouts; an almost expired deadline must not become infinite.
MIN_TIMEOUT = 0.001


class Transport:

    # Contextual information for URL building.
    server: str
    api_path: Optional[str]
    group_version: Optional[references.GroupVersion]
    default_namespace: Optional[str]

    def __init__(
            self,
            info: credentials.ConnectionInfo,
            *,
            settings: configuration.ClientSettings,
            context: Optional[ssl.SSLContext] = None,
            api_path: Optional[str] = None,
            group_version: Optional[references.GroupVersion] = None,
    ) -> None:
        super().__init__()
        self.info = info
        self.settings = settings
        self.context = context if context is not None else auth.make_ssl_context(info)
        self.server = info.server
        self.api_path = api_path
        self.group_version = group_version
        self.default_namespace = info.default_namespace
        self._session: Optional[aiohttp.ClientSession] = None

    def __repr__(self) -> str:
        return f'<{self.__class__.__name__}: {self.server!r}>'

    async def __aenter__(self) -> 'Transport':
        return self

    async def __aexit__(
            self,
            exc_type: Optional[Type[BaseException]],
            exc_val: Optional[BaseException],
            exc_tb: Optional[TracebackType],
    ) -> None:
        await self.close()

    @property
    def content_type(self) -> str:
        return self.settings.content.content_type

    @property
    def session(self) -> aiohttp.ClientSession:
        # The session is created lazily, as it must be created inside of the event loop.
        if self._session is None or self._session.closed:
            self._session = auth.make_session(self.info, context=self.context, settings=self.settings)
        return self._session

    async def close(self) -> None:
        if self._session is not None:
            await self._session.close()
            self._session = None

    def url(self, path: str) -> str:
        if '://' in path:
            return path
        return self.server.rstrip('/') + '/' + path.lstrip('/')

    async def request(
            self,
            method: str,
            path: str,  # relative to the server root.
            *,
            body: Optional[Body] = None,
            decode: bool = True,
            deadline: Optional[aiotime.Deadline] = None,
            logger: typedefs.Logger = logger,
    ) -> Any:
        """
        Perform one request, return the JSON-decoded response (or raw bytes).
        """
        url = self.url(path)
        what = f"{method.upper()} {url}"

        # An expired deadline should not cause any traffic: nothing is sent.
        if deadline is not None and deadline.expired:
            raise errors.APITimeoutError(message=f"The deadline is reached before {what}")

        if deadline is not None:
            remaining = deadline.remaining
            timeout = aiohttp.ClientTimeout(
                total=max(remaining, MIN_TIMEOUT) if remaining is not None else None,
                sock_connect=self.settings.networking.connect_timeout,
            )
        else:
            timeout = aiohttp.ClientTimeout(
                total=self.settings.networking.request_timeout,
                sock_connect=self.settings.networking.connect_timeout,
            )

        data: Optional[bytes]
        headers: Dict[str, str] = {}
        if body is None:
            data = None
        elif isinstance(body, bytes):
            data = body
            headers['Content-Type'] = self.content_type
        else:
            data = json.dumps(body).encode('utf-8')
            headers['Content-Type'] = self.content_type

        logger.debug(f"Requesting: {what}")
        try:
            response = await self.session.request(
                method=method,
                url=url,
                data=data,
                headers=headers,
                timeout=timeout,
            )
            # The response is always released, even if not read, so that the connection is reused.
            async with response:
                if decode:
                    result = await errors.parse_response(response)
                else:
                    await errors.check_response(response)
                    result = await response.read()

        except asyncio.TimeoutError as e:
            logger.debug(f"Request timed out: {what}")
            raise errors.APITimeoutError(message=f"Timed out during {what}") from e
        except aiohttp.ClientError as e:
            logger.debug(f"Request failed: {what} -> {e!r}")
            raise errors.APITransportError(message=f"{what} failed: {e}") from e
        except errors.APIError as e:
            logger.debug(f"Request failed: {what} -> {e.status} {e!r}")
            raise
        else:
            logger.debug(f"Request succeeded: {what} -> {response.status}")
            return result

    async def get(
            self,
            path: str,
            *,
            deadline: Optional[aiotime.Deadline] = None,
            logger: typedefs.Logger = logger,
    ) -> Any:
        return await self.request('get', path, deadline=deadline, logger=logger)

    async def post(
            self,
            path: str,
            body: Body,
            *,
            deadline: Optional[aiotime.Deadline] = None,
            logger: typedefs.Logger = logger,
    ) -> Any:
        return await self.request('post', path, body=body, deadline=deadline, logger=logger)
