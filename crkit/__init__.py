"""
The main crkit module for all the exported functions & classes.
"""
# isort: skip_file

# Unlike all other places, where we import other modules and refer
# the functions via the modules, this is the library's top-level interface,
# as it is seen by the users. So, we export the individual functions.

from crkit._cogs.aiokits.aiotime import (
    Deadline,
)
from crkit._cogs.clients.errors import (
    APIError,
    APIClientError,
    APIServerError,
    APIUnauthorizedError,
    APIForbiddenError,
    APINotFoundError,
    APIConflictError,
    APITransportError,
    APITimeoutError,
)
from crkit._cogs.clients.mapping import (
    RESTMapper,
    GuessingMapper,
    DiscoveryMapper,
)
from crkit._cogs.clients.transports import (
    Transport,
)
from crkit._cogs.configs.configuration import (
    ClientSettings,
    NetworkingSettings,
    ContentSettings,
    IdentitySettings,
)
from crkit._cogs.helpers.loggers import (
    LogFormat,
    configure as configure_logging,
)
from crkit._cogs.helpers.typedefs import (
    Logger,
)
from crkit._cogs.helpers.versions import (
    version as __version__,
)
from crkit._cogs.structs.bodies import (
    RawBody,
    RawMeta,
    Document,
)
from crkit._cogs.structs.credentials import (
    ConfigError,
    LoginError,
    ConnectionInfo,
)
from crkit._cogs.structs.objects import (
    ObjectMeta,
    TypedObject,
)
from crkit._cogs.structs.references import (
    GroupVersion,
    GroupVersionKind,
    ObjectKey,
    Resource,
    guess_plural,
)
from crkit._core.clients.dynamic import (
    DynamicClient,
)
from crkit._core.clients.rest import (
    RESTClient,
    Request,
    Result,
)
from crkit._core.clients.selecting import (
    ResourceClient,
    Variant,
    new_client,
)
from crkit._core.clients.typed import (
    TypedClient,
)
from crkit._core.intents.building import (
    build_transport,
)
from crkit._core.intents.piggybacking import (
    login,
    login_with_kubeconfig,
    login_with_service_account,
)
from crkit._core.schemes.codecs import (
    JSONCodec,
)
from crkit._core.schemes.converting import (
    ConversionError,
    Converter,
)
from crkit._core.schemes.registries import (
    Scheme,
    SchemeBuilder,
    UnknownKindError,
)

# The short names of the most common errors.
NotFoundError = APINotFoundError
ConflictError = APIConflictError
TimeoutError = APITimeoutError
TransportError = APITransportError

__all__ = [
    'Deadline',
    'APIError', 'APIClientError', 'APIServerError',
    'APIUnauthorizedError', 'APIForbiddenError', 'APINotFoundError', 'APIConflictError',
    'APITransportError', 'APITimeoutError',
    'NotFoundError', 'ConflictError', 'TimeoutError', 'TransportError',
    'RESTMapper', 'GuessingMapper', 'DiscoveryMapper',
    'Transport', 'build_transport',
    'ClientSettings', 'NetworkingSettings', 'ContentSettings', 'IdentitySettings',
    'LogFormat', 'configure_logging',
    'Logger',
    'RawBody', 'RawMeta', 'Document',
    'ConfigError', 'LoginError', 'ConnectionInfo',
    'login', 'login_with_kubeconfig', 'login_with_service_account',
    'ObjectMeta', 'TypedObject',
    'GroupVersion', 'GroupVersionKind', 'ObjectKey', 'Resource', 'guess_plural',
    'ResourceClient', 'Variant', 'new_client',
    'DynamicClient', 'RESTClient', 'Request', 'Result', 'TypedClient',
    'JSONCodec', 'ConversionError', 'Converter',
    'Scheme', 'SchemeBuilder', 'UnknownKindError',
]
