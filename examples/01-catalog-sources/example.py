import asyncio

import yaml

import crkit
from crkit._kits import operators

IMAGE = 'quay.io/example/index:v0.0.1'


async def main() -> None:
    crkit.configure_logging(verbose=True)

    scheme = crkit.Scheme()
    operators.add_to_scheme(scheme)
    converter = crkit.Converter(scheme)
    deadline = crkit.Deadline.after(30)

    async with crkit.build_transport(group_version=operators.GROUP_VERSION) as transport:

        # The dynamic client: untyped documents, no scheme at all.
        dynamic = crkit.DynamicClient(transport)
        key = crkit.ObjectKey(namespace='default', name='cs-dynamic')
        await dynamic.create(key, {
            'apiVersion': 'operators.coreos.com/v1alpha1',
            'kind': 'CatalogSource',
            'spec': {'sourceType': 'grpc', 'image': IMAGE, 'displayName': 'CS - Dynamic Client'},
        }, deadline=deadline)
        document = await dynamic.get(key, scheme.kind_of(operators.CatalogSource), deadline=deadline)
        print(yaml.safe_dump(document.to_dict()))

        # The raw REST client: requests are built manually.
        rest = crkit.RESTClient(transport, crkit.JSONCodec(scheme))
        obj = operators.CatalogSource(
            metadata=crkit.ObjectMeta(name='cs-rest-client'),
            spec=operators.CatalogSourceSpec(
                source_type=operators.SourceType.GRPC,
                image=IMAGE,
                display_name='CS - Rest Client',
            ),
        )
        result = await rest.post().namespace('default').resource('catalogsources').body(obj).do(deadline=deadline)
        print(result.into(operators.CatalogSource))

        # The typed client: any type registered in the scheme.
        typed = crkit.TypedClient(transport, scheme)
        key = crkit.ObjectKey(namespace='default', name='cs-typed-client')
        obj = operators.CatalogSource(
            spec=operators.CatalogSourceSpec(
                source_type=operators.SourceType.GRPC,
                image=IMAGE,
                display_name='CS - Typed Client',
            ),
        )
        await typed.create(key, obj, deadline=deadline)
        fetched = await typed.get(key, operators.CatalogSource, deadline=deadline)
        print(yaml.safe_dump(converter.to_untyped(fetched).to_dict()))


if __name__ == '__main__':
    asyncio.run(main())
