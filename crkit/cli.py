import asyncio
import functools
from typing import Any, Callable, Optional

import click
import yaml

from crkit._cogs.aiokits import aiotime
from crkit._cogs.clients import errors
from crkit._cogs.helpers import loggers
from crkit._cogs.structs import bodies, credentials, objects, references
from crkit._core.clients import selecting
from crkit._core.intents import building
from crkit._core.schemes import converting, registries
from crkit._kits import operators


class LogFormatParamType(click.Choice):

    def __init__(self) -> None:
        super().__init__(choices=[v.name.lower() for v in loggers.LogFormat])

    def convert(self, value: Any, param: Any, ctx: Any) -> loggers.LogFormat:
        if isinstance(value, loggers.LogFormat):
            return value
        name: str = super().convert(value, param, ctx)
        return loggers.LogFormat[name.upper()]


def logging_options(fn: Callable[..., Any]) -> Callable[..., Any]:
    """ The shared logging flags of all commands. """
    @click.option('-v', '--verbose', is_flag=True)
    @click.option('-d', '--debug', is_flag=True)
    @click.option('-q', '--quiet', is_flag=True)
    @click.option('--log-format', type=LogFormatParamType(), default='full')
    @functools.wraps(fn)  # to preserve other opts/args
    def wrapper(verbose: bool, quiet: bool, debug: bool,
                log_format: loggers.LogFormat = loggers.LogFormat.FULL,
                *args: Any, **kwargs: Any) -> Any:
        loggers.configure(debug=debug, verbose=verbose, quiet=quiet, log_format=log_format)
        return fn(*args, **kwargs)

    return wrapper


def client_options(fn: Callable[..., Any]) -> Callable[..., Any]:
    """ A decorator for the options of the object addressing and the client selection. """
    @click.option('--variant', type=click.Choice([v.value for v in selecting.Variant]),
                  default=selecting.Variant.TYPED.value, show_default=True)
    @click.option('-n', '--namespace', type=str, default='default', show_default=True)
    @click.option('--name', type=str, required=True)
    @click.option('--timeout', type=float, default=None)
    @functools.wraps(fn)  # to preserve other opts/args
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        return fn(*args, **kwargs)

    return wrapper


@click.version_option(prog_name='crkit')
@click.group(name='crkit', context_settings=dict(
    auto_envvar_prefix='CRKIT',
))
def main() -> None:
    pass


@main.command()
@logging_options
@client_options
@click.option('--image', type=str, required=True)
@click.option('--display-name', type=str)
@click.option('--source-type', type=click.Choice([v.value for v in operators.SourceType]),
              default=operators.SourceType.GRPC.value, show_default=True)
def create(
        variant: str,
        namespace: str,
        name: str,
        timeout: Optional[float],
        image: str,
        display_name: Optional[str],
        source_type: str,
) -> None:
    """ Create a catalog source. """
    obj = operators.CatalogSource(
        spec=operators.CatalogSourceSpec(
            source_type=operators.SourceType(source_type),
            image=image,
            display_name=display_name,
        ),
    )
    key = references.ObjectKey(namespace=namespace, name=name)
    result = _run(_create(variant=variant, key=key, obj=obj, timeout=timeout))
    click.echo(yaml.safe_dump(result, sort_keys=False), nl=False)


@main.command()
@logging_options
@client_options
def get(
        variant: str,
        namespace: str,
        name: str,
        timeout: Optional[float],
) -> None:
    """ Fetch a catalog source. """
    key = references.ObjectKey(namespace=namespace, name=name)
    result = _run(_get(variant=variant, key=key, timeout=timeout))
    click.echo(yaml.safe_dump(result, sort_keys=False), nl=False)


def _make_scheme() -> registries.Scheme:
    scheme = registries.Scheme()
    operators.add_to_scheme(scheme)
    return scheme


def _run(coro: Any) -> Any:
    try:
        return asyncio.run(coro)
    except credentials.ConfigError as e:
        raise click.ClickException(f"Configuration error: {e}")
    except converting.ConversionError as e:
        raise click.ClickException(f"Conversion error: {e}")
    except errors.APIError as e:
        raise click.ClickException(f"API error: {e}")
    except (registries.UnknownKindError, ValueError) as e:
        raise click.ClickException(f"Invalid request: {e}")


async def _create(
        *,
        variant: str,
        key: references.ObjectKey,
        obj: objects.TypedObject,
        timeout: Optional[float],
) -> Any:
    scheme = _make_scheme()
    converter = converting.Converter(scheme)
    deadline = aiotime.Deadline.after(timeout) if timeout is not None else None
    async with building.build_transport(group_version=operators.GROUP_VERSION) as transport:
        client = selecting.new_client(variant, transport, scheme=scheme)
        payload = converter.to_untyped(obj) if variant == selecting.Variant.DYNAMIC else obj
        stored = await client.create(key, payload, deadline=deadline)
    return _to_plain(stored, converter)


async def _get(
        *,
        variant: str,
        key: references.ObjectKey,
        timeout: Optional[float],
) -> Any:
    scheme = _make_scheme()
    converter = converting.Converter(scheme)
    deadline = aiotime.Deadline.after(timeout) if timeout is not None else None
    gvk = scheme.kind_of(operators.CatalogSource)
    async with building.build_transport(group_version=operators.GROUP_VERSION) as transport:
        client = selecting.new_client(variant, transport, scheme=scheme)
        kind = gvk if variant == selecting.Variant.DYNAMIC else operators.CatalogSource
        stored = await client.get(key, kind, deadline=deadline)
    return _to_plain(stored, converter)


def _to_plain(stored: Any, converter: converting.Converter) -> Any:
    document = stored if isinstance(stored, bodies.Document) else converter.to_untyped(stored)
    return document.to_dict()
