import dataclasses

import aiohttp.web
import pytest

from crkit._cogs.aiokits.aiotime import Deadline
from crkit._cogs.clients.errors import APIConflictError, APINotFoundError, APITimeoutError
from crkit._cogs.structs.objects import ObjectMeta, TypedObject
from crkit._cogs.structs.references import GroupVersionKind, ObjectKey
from crkit._core.clients.typed import TypedClient
from crkit._core.schemes.converting import ConversionError
from crkit._core.schemes.registries import UnknownKindError
from crkit._kits import operators

URL = '/apis/operators.coreos.com/v1alpha1/namespaces/default/catalogsources'


@pytest.fixture()
def client(transport, scheme):
    return TypedClient(transport, scheme)


async def test_creation(fake_api, client, catalog_source):
    created = await client.create(ObjectKey('default', 'cs-typed-client'), catalog_source)
    assert isinstance(created, operators.CatalogSource)
    assert created.metadata.name == 'cs-typed-client'
    assert created.metadata.namespace == 'default'
    assert created.metadata.uid == 'uid-1'
    assert created.metadata.creation_timestamp is not None
    assert created.spec == catalog_source.spec
    assert catalog_source.metadata.name is None  # not modified

    method, path, _, body = fake_api.requests[0]
    assert (method, path) == ('POST', URL)
    assert body == {
        'apiVersion': 'operators.coreos.com/v1alpha1',
        'kind': 'CatalogSource',
        'metadata': {'name': 'cs-typed-client', 'namespace': 'default'},
        'spec': {
            'sourceType': 'grpc',
            'image': 'quay.io/example/index:v0.0.1',
            'displayName': 'CS - Typed Client',
        },
    }


async def test_fetching(fake_api, client, catalog_source):
    created = await client.create(ObjectKey('default', 'cs1'), catalog_source)
    fetched = await client.get(ObjectKey('default', 'cs1'), operators.CatalogSource)
    assert fetched == created
    assert fake_api.requests[-1][:2] == ('GET', URL + '/cs1')


async def test_fetching_by_gvk(client, catalog_source):
    gvk = GroupVersionKind('operators.coreos.com', 'v1alpha1', 'CatalogSource')
    await client.create(ObjectKey('default', 'cs1'), catalog_source)
    fetched = await client.get(ObjectKey('default', 'cs1'), gvk)
    assert isinstance(fetched, operators.CatalogSource)


async def test_fetching_of_absent_objects(client):
    with pytest.raises(APINotFoundError):
        await client.get(ObjectKey('default', 'absent'), operators.CatalogSource)


async def test_duplicate_creation_conflicts(client, catalog_source):
    await client.create(ObjectKey('default', 'cs1'), catalog_source)
    with pytest.raises(APIConflictError):
        await client.create(ObjectKey('default', 'cs1'), catalog_source)


async def test_unregistered_types_fail_before_requests(fake_api, client):

    @dataclasses.dataclass
    class Unregistered(TypedObject):
        pass

    with pytest.raises(UnknownKindError):
        await client.create(ObjectKey('default', 'x1'), Unregistered())
    with pytest.raises(UnknownKindError):
        await client.get(ObjectKey('default', 'x1'), Unregistered)
    with pytest.raises(UnknownKindError):
        await client.get(ObjectKey('default', 'x1'), GroupVersionKind('example.com', 'v1', 'X'))
    assert fake_api.requests == []


async def test_mismatching_identity_fails_before_requests(fake_api, client, catalog_source):
    obj = dataclasses.replace(catalog_source, metadata=ObjectMeta(name='other'))
    with pytest.raises(ValueError):
        await client.create(ObjectKey('default', 'cs1'), obj)
    assert fake_api.requests == []


async def test_responses_of_unexpected_types_fail(fake_api, client):
    fake_api.override = lambda request: aiohttp.web.json_response({
        'apiVersion': 'v1', 'kind': 'Status', 'status': 'Success',
    })
    with pytest.raises(ConversionError):
        await client.get(ObjectKey('default', 'cs1'), operators.CatalogSource)


async def test_responses_of_mismatching_shapes_fail(fake_api, client):
    fake_api.override = lambda request: aiohttp.web.json_response({
        'apiVersion': 'operators.coreos.com/v1alpha1', 'kind': 'CatalogSource', 'spec': {},
    })
    with pytest.raises(ConversionError):
        await client.get(ObjectKey('default', 'cs1'), operators.CatalogSource)


async def test_deadline_during_the_request(fake_api, client):
    fake_api.delay = 0.5
    with pytest.raises(APITimeoutError):
        await client.get(ObjectKey('default', 'cs1'), operators.CatalogSource,
                         deadline=Deadline.after(0.05))


async def test_expired_deadline(fake_api, client, catalog_source):
    with pytest.raises(APITimeoutError):
        await client.create(ObjectKey('default', 'cs1'), catalog_source, deadline=Deadline.after(0))
    assert fake_api.requests == []
    assert fake_api.objects == {}
