import pytest
import yaml

from crkit._cogs.clients.errors import APINotFoundError
from crkit._cogs.structs.bodies import Document
from crkit._cogs.structs.credentials import LoginError
from crkit._cogs.structs.objects import ObjectMeta
from crkit._cogs.structs.references import GroupVersionKind, ObjectKey
from crkit._core.schemes.converting import ConversionError
from crkit._core.schemes.registries import UnknownKindError
from crkit._kits import operators
from crkit.cli import main

GVK = GroupVersionKind('operators.coreos.com', 'v1alpha1', 'CatalogSource')


def make_catalog_source(name='cs1'):
    return operators.CatalogSource(
        metadata=ObjectMeta(name=name, namespace='default', uid='uid-1'),
        spec=operators.CatalogSourceSpec(
            source_type=operators.SourceType.GRPC,
            image='quay.io/example/index:v0.0.1',
        ),
    )


def test_help(runner):
    result = runner.invoke(main, ['--help'])
    assert result.exit_code == 0
    assert 'create' in result.output
    assert 'get' in result.output


def test_create_with_the_typed_client(runner, client, build_transport, no_logging_setup):
    client.create.return_value = make_catalog_source()
    result = runner.invoke(main, ['create', '--name', 'cs1', '--image', 'quay.io/example/index:v0.0.1',
                                  '--display-name', 'CS - Typed Client', '--timeout', '10'])
    assert result.exit_code == 0, result.output
    assert no_logging_setup.called
    assert build_transport.call_args.kwargs['group_version'] == operators.GROUP_VERSION

    key, payload = client.create.call_args.args
    assert key == ObjectKey(namespace='default', name='cs1')
    assert isinstance(payload, operators.CatalogSource)
    assert payload.spec.source_type is operators.SourceType.GRPC
    assert payload.spec.image == 'quay.io/example/index:v0.0.1'
    assert payload.spec.display_name == 'CS - Typed Client'
    assert client.create.call_args.kwargs['deadline'] is not None

    output = yaml.safe_load(result.output)
    assert output['apiVersion'] == 'operators.coreos.com/v1alpha1'
    assert output['kind'] == 'CatalogSource'
    assert output['metadata'] == {'name': 'cs1', 'namespace': 'default', 'uid': 'uid-1'}
    assert output['spec'] == {'sourceType': 'grpc', 'image': 'quay.io/example/index:v0.0.1'}


def test_create_with_the_dynamic_client(runner, client):
    client.create.return_value = Document({'kind': 'CatalogSource', 'metadata': {'name': 'cs1'}})
    result = runner.invoke(main, ['create', '--variant', 'dynamic', '-n', 'ns1', '--name', 'cs1',
                                  '--image', 'img', '--source-type', 'configmap'])
    assert result.exit_code == 0, result.output

    key, payload = client.create.call_args.args
    assert key == ObjectKey(namespace='ns1', name='cs1')
    assert isinstance(payload, Document)
    assert payload.gvk == GVK
    assert payload['spec'] == {'sourceType': 'configmap', 'image': 'img'}
    assert client.create.call_args.kwargs['deadline'] is None
    assert yaml.safe_load(result.output) == {'kind': 'CatalogSource', 'metadata': {'name': 'cs1'}}


def test_get_with_the_rest_client(runner, client):
    client.get.return_value = make_catalog_source()
    result = runner.invoke(main, ['get', '--variant', 'rest', '--name', 'cs1'])
    assert result.exit_code == 0, result.output
    assert client.get.call_args.args == (ObjectKey('default', 'cs1'), operators.CatalogSource)
    assert yaml.safe_load(result.output)['metadata']['name'] == 'cs1'


def test_get_with_the_dynamic_client(runner, client):
    client.get.return_value = Document({'kind': 'CatalogSource'})
    result = runner.invoke(main, ['get', '--variant', 'dynamic', '--name', 'cs1'])
    assert result.exit_code == 0, result.output
    assert client.get.call_args.args == (ObjectKey('default', 'cs1'), GVK)


def test_name_is_required(runner, client):
    result = runner.invoke(main, ['get'])
    assert result.exit_code == 2
    assert not client.get.called


def test_unknown_variant(runner, client):
    result = runner.invoke(main, ['get', '--variant', 'grpc', '--name', 'cs1'])
    assert result.exit_code == 2
    assert not client.get.called


def test_api_errors(runner, client):
    client.get.side_effect = APINotFoundError(status=404, message='catalogsources "cs1" not found')
    result = runner.invoke(main, ['get', '--name', 'cs1'])
    assert result.exit_code == 1
    assert 'API error: catalogsources "cs1" not found' in result.output


def test_conversion_errors(runner, client):
    client.get.side_effect = ConversionError("Required field is missing: spec")
    result = runner.invoke(main, ['get', '--name', 'cs1'])
    assert result.exit_code == 1
    assert 'Conversion error: Required field is missing: spec' in result.output


def test_configuration_errors(runner, build_transport):
    build_transport.side_effect = LoginError("No credentials are found")
    result = runner.invoke(main, ['get', '--name', 'cs1'])
    assert result.exit_code == 1
    assert 'Configuration error: No credentials are found' in result.output


@pytest.mark.parametrize('error, message', [
    (ValueError("The name in the object does not match the key"),
     'Invalid request: The name in the object does not match the key'),
    (UnknownKindError("The kind CatalogSource is not registered in the scheme."),
     'Invalid request: The kind CatalogSource is not registered in the scheme.'),
])
def test_invalid_requests(runner, client, error, message):
    client.get.side_effect = error
    result = runner.invoke(main, ['get', '--name', 'cs1'])
    assert result.exit_code == 1
    assert message in result.output
