import aiohttp.web
import pytest

from crkit._cogs.aiokits.aiotime import Deadline
from crkit._cogs.clients.errors import APIConflictError, APINotFoundError, APITimeoutError, \
                                       APITransportError
from crkit._cogs.clients.mapping import GuessingMapper
from crkit._cogs.structs.bodies import Document
from crkit._cogs.structs.references import GroupVersionKind, ObjectKey, Resource
from crkit._core.clients.dynamic import DynamicClient

GVK = GroupVersionKind('operators.coreos.com', 'v1alpha1', 'CatalogSource')
URL = '/apis/operators.coreos.com/v1alpha1/namespaces/default/catalogsources'


def make_payload():
    return {
        'apiVersion': 'operators.coreos.com/v1alpha1',
        'kind': 'CatalogSource',
        'spec': {
            'sourceType': 'grpc',
            'image': 'quay.io/example/index:v0.0.1',
            'displayName': 'CS - Dynamic Client',
        },
    }


async def test_creation(fake_api, transport):
    client = DynamicClient(transport)
    payload = make_payload()
    created = await client.create(ObjectKey('default', 'cs1'), payload)

    assert isinstance(created, Document)
    assert created.name == 'cs1'
    assert created.namespace == 'default'
    assert created.resolve('metadata.uid') == 'uid-1'
    assert created['spec'] == payload['spec']
    assert payload.get('metadata') is None  # not modified

    method, path, _, body = fake_api.requests[0]
    assert method == 'POST'
    assert path == URL
    assert body == dict(make_payload(), metadata={'name': 'cs1', 'namespace': 'default'})


async def test_creation_in_the_default_namespace(fake_api, transport):
    client = DynamicClient(transport)
    created = await client.create(ObjectKey(None, 'cs1'), Document(make_payload()))
    assert created.namespace == 'default'
    assert fake_api.requests[0][1] == URL


async def test_fetching(fake_api, transport):
    client = DynamicClient(transport)
    await client.create(ObjectKey('default', 'cs1'), make_payload())
    fetched = await client.get(ObjectKey('default', 'cs1'), GVK)
    assert isinstance(fetched, Document)
    assert fetched.gvk == GVK
    assert fetched.name == 'cs1'
    assert fetched['spec']['displayName'] == 'CS - Dynamic Client'
    assert fake_api.requests[-1][:2] == ('GET', URL + '/cs1')


async def test_fetching_of_absent_objects(fake_api, transport):
    client = DynamicClient(transport)
    with pytest.raises(APINotFoundError) as err:
        await client.get(ObjectKey('default', 'absent'), GVK)
    assert err.value.status == 404
    assert err.value.reason == 'NotFound'


async def test_duplicate_creation_conflicts(fake_api, transport):
    client = DynamicClient(transport)
    await client.create(ObjectKey('default', 'cs1'), make_payload())
    with pytest.raises(APIConflictError) as err:
        await client.create(ObjectKey('default', 'cs1'), make_payload())
    assert err.value.status == 409
    assert err.value.reason == 'AlreadyExists'


async def test_payload_without_resource_type_fails(fake_api, transport):
    client = DynamicClient(transport)
    with pytest.raises(ValueError):
        await client.create(ObjectKey('default', 'cs1'), {'spec': {}})
    assert fake_api.requests == []


async def test_mismatching_identity_fails(fake_api, transport):
    client = DynamicClient(transport)
    payload = dict(make_payload(), metadata={'name': 'other'})
    with pytest.raises(ValueError):
        await client.create(ObjectKey('default', 'cs1'), payload)
    assert fake_api.requests == []


async def test_kind_must_be_a_gvk(transport):
    client = DynamicClient(transport)
    with pytest.raises(TypeError):
        await client.get(ObjectKey('default', 'cs1'), 'CatalogSource')


async def test_non_object_responses_fail(fake_api, transport):
    fake_api.override = lambda request: aiohttp.web.json_response(['not', 'an', 'object'])
    client = DynamicClient(transport)
    with pytest.raises(APITransportError):
        await client.get(ObjectKey('default', 'cs1'), GVK)


async def test_declared_resources_of_the_mapper(fake_api, transport):
    resource = Resource('operators.coreos.com', 'v1alpha1', 'catsrc', kind='CatalogSource')
    client = DynamicClient(transport, mapper=GuessingMapper(resource))
    await client.create(ObjectKey('default', 'cs1'), make_payload())
    assert fake_api.requests[0][1] == URL.replace('catalogsources', 'catsrc')


async def test_expired_deadline(fake_api, transport):
    client = DynamicClient(transport)
    with pytest.raises(APITimeoutError):
        await client.create(ObjectKey('default', 'cs1'), make_payload(), deadline=Deadline.after(0))
    assert fake_api.requests == []
    assert fake_api.objects == {}
