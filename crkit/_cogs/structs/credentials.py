"""
The connection parameters of the API server, and their failures.

Only what a generic HTTP client can use is supported: the server's URL,
the TLS verification (a CA, or none at all), the TLS client certificates,
the ``Authorization`` header (a bearer token, another scheme, or a basic
username & password), and the namespace implied when none is requested.

.. seealso::
    :mod:`piggybacking` (where they come from) and :mod:`auth` (how they are used).
"""
import dataclasses
from typing import Optional, Union


class ConfigError(Exception):
    """ Raised when the connection parameters are absent or malformed. """


class LoginError(ConfigError):
    """ Raised when the credentials source cannot be interpreted. """


@dataclasses.dataclass(frozen=True)
class ConnectionInfo:
    server: str  # a URL, e.g. "https://127.0.0.1:6443"
    ca_path: Optional[str] = None
    ca_data: Optional[Union[str, bytes]] = None
    insecure: Optional[bool] = None
    username: Optional[str] = None
    password: Optional[str] = None
    scheme: Optional[str] = None  # of the Authorization header; "Bearer" if only a token is set.
    token: Optional[str] = None
    certificate_path: Optional[str] = None
    certificate_data: Optional[Union[str, bytes]] = None
    private_key_path: Optional[str] = None
    private_key_data: Optional[Union[str, bytes]] = None
    default_namespace: Optional[str] = None
    priority: int = 0  # the highest one wins if several sources are found.
