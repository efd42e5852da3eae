import asyncio
import json
from typing import Any, Callable, Dict, List, Optional, Tuple

import aiohttp.test_utils
import aiohttp.web
import pytest

from crkit._cogs.configs.configuration import ClientSettings
from crkit._cogs.structs.credentials import ConnectionInfo
from crkit._core.intents.building import build_transport
from crkit._core.schemes.registries import Scheme
from crkit._kits import operators

StoreKey = Tuple[str, str, Optional[str], str, str]  # group, version, namespace, plural, name


def _status(code: int, reason: str, message: str) -> aiohttp.web.Response:
    return aiohttp.web.json_response({
        'apiVersion': 'v1',
        'kind': 'Status',
        'status': 'Failure',
        'code': code,
        'reason': reason,
        'message': message,
    }, status=code)


class FakeAPI:
    """
    An in-memory imitation of the API server: it only creates & reads the objects.

    All requests are remembered as (method, path, headers, body) for assertions.
    The handler can be slowed down (``delay``) or fully replaced (``override``).
    """

    def __init__(self) -> None:
        super().__init__()
        self.objects: Dict[StoreKey, Dict[str, Any]] = {}
        self.discovery: Dict[str, Dict[str, Any]] = {}
        self.requests: List[Tuple[str, str, Dict[str, str], Any]] = []
        self.delay: float = 0
        self.override: Optional[Callable[[aiohttp.web.Request], aiohttp.web.StreamResponse]] = None

    def posted(self) -> List[Any]:
        return [body for method, _, _, body in self.requests if method == 'POST']

    async def handle(self, request: aiohttp.web.Request) -> aiohttp.web.StreamResponse:
        text = await request.text()
        body = json.loads(text) if text else None
        self.requests.append((request.method, request.path, dict(request.headers), body))

        if self.delay:
            await asyncio.sleep(self.delay)
        if self.override is not None:
            return self.override(request)

        parts = request.path.strip('/').split('/')
        if parts[0] == 'api':
            group, rest = '', parts[1:]
        elif parts[0] == 'apis' and len(parts) >= 3:
            group, rest = parts[1], parts[2:]
        else:
            return _status(404, 'NotFound', f"No route for {request.path}")

        version, rest = rest[0], rest[1:]
        if not rest:
            api_version = f'{group}/{version}' if group else version
            if request.method == 'GET' and api_version in self.discovery:
                return aiohttp.web.json_response(self.discovery[api_version])
            return _status(404, 'NotFound', f"No API group version {api_version}")

        namespace: Optional[str] = None
        if rest[0] == 'namespaces' and len(rest) >= 3:
            namespace, rest = rest[1], rest[2:]
        plural = rest[0]
        name = rest[1] if len(rest) > 1 else None

        if request.method == 'POST' and name is None:
            name = body.get('metadata', {}).get('name')
            key = (group, version, namespace, plural, name)
            if key in self.objects:
                return _status(409, 'AlreadyExists', f'{plural} "{name}" already exists')
            stored = json.loads(text)
            stored['metadata'].update({
                'uid': f'uid-{len(self.objects) + 1}',
                'resourceVersion': '1',
                'creationTimestamp': '2020-12-31T23:59:59Z',
            })
            self.objects[key] = stored
            return aiohttp.web.json_response(stored, status=201)

        if request.method == 'GET' and name is not None:
            key = (group, version, namespace, plural, name)
            if key not in self.objects:
                return _status(404, 'NotFound', f'{plural} "{name}" not found')
            return aiohttp.web.json_response(self.objects[key])

        return _status(405, 'MethodNotAllowed', f"{request.method} is not supported")


@pytest.fixture()
def fake_api():
    return FakeAPI()


@pytest.fixture()
async def fake_server(fake_api):
    app = aiohttp.web.Application()
    app.router.add_route('*', '/{tail:.*}', fake_api.handle)
    server = aiohttp.test_utils.TestServer(app)
    await server.start_server()
    try:
        yield server
    finally:
        await server.close()


@pytest.fixture()
def server_url(fake_server):
    return f'http://{fake_server.host}:{fake_server.port}'


@pytest.fixture()
def connection_info(server_url):
    return ConnectionInfo(server=server_url, token='tkn', default_namespace='default')


@pytest.fixture()
def settings():
    return ClientSettings()


@pytest.fixture()
async def transport(connection_info, settings):
    async with build_transport(connection_info, settings=settings,
                               group_version=operators.GROUP_VERSION) as transport:
        yield transport


@pytest.fixture()
def scheme():
    scheme = Scheme()
    operators.add_to_scheme(scheme)
    return scheme


@pytest.fixture()
def catalog_source():
    return operators.CatalogSource(
        spec=operators.CatalogSourceSpec(
            source_type=operators.SourceType.GRPC,
            image='quay.io/example/index:v0.0.1',
            display_name='CS - Typed Client',
        ),
    )
