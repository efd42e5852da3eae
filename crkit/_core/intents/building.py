"""
The transport builder: from the connection parameters to a usable transport.
"""
import dataclasses
import logging
import ssl
from typing import Optional, Union

from crkit._cogs.clients import auth, transports
from crkit._cogs.configs import configuration
from crkit._cogs.helpers import typedefs
from crkit._cogs.structs import credentials, references
from crkit._core.intents import piggybacking

logger = logging.getLogger('crkit.clients')


def build_transport(
        info: Optional[credentials.ConnectionInfo] = None,
        *,
        settings: Optional[configuration.ClientSettings] = None,
        api_path: Optional[str] = None,
        group_version: Union[None, str, references.GroupVersion] = None,
        content_type: Optional[str] = None,
        logger: typedefs.Logger = logger,
) -> transports.Transport:
    """
    Build a transport for the connection info, or for the discovered one.

    If no connection info is given, it is taken from the kubeconfig files
    or from the service account of the current pod.

    The API path prefix (e.g. ``/apis``) and the API group & version are
    the routing defaults for the raw requests; the content type overrides
    the one in the settings.

    Raises `ConfigError` if the connection info is absent or malformed.
    """
    settings = settings if settings is not None else configuration.ClientSettings()
    if content_type is not None:
        content = dataclasses.replace(settings.content, content_type=content_type)
        settings = dataclasses.replace(settings, content=content)

    if info is None:
        info = piggybacking.login(logger=logger)
    if not info.server:
        raise credentials.ConfigError("The connection info has no server.")
    if '://' not in info.server:
        raise credentials.ConfigError(f"The server is not a URL: {info.server!r}")

    if isinstance(group_version, str):
        try:
            group_version = references.GroupVersion.parse(group_version)
        except ValueError as e:
            raise credentials.ConfigError(str(e)) from e

    try:
        context = auth.make_ssl_context(info)
    except (OSError, ssl.SSLError, ValueError) as e:
        raise credentials.ConfigError(f"Cannot prepare the TLS context: {e}") from e

    return transports.Transport(
        info,
        settings=settings,
        context=context,
        api_path=api_path,
        group_version=group_version,
    )
