"""
All configuration flags, options, settings to fine-tune the clients.

All settings are grouped semantically just for convenience
(instead of a flat mega-object with all the values in it).

Some of the settings are flags, some are scalars, some are optional,
some are not (but all of them have reasonable defaults).
"""
import dataclasses
from typing import Optional


@dataclasses.dataclass
class NetworkingSettings:

    request_timeout: Optional[float] = 5 * 60  # == aiohttp.client.DEFAULT_TIMEOUT
    """
    A timeout for the whole request, including the response's body reading.

    It is applied only when no explicit deadline is given to the operation.
    Measured in seconds. Set to `None` to disable (on your own risk).
    """

    connect_timeout: Optional[float] = None
    """
    A timeout for establishing the connection to the API server.
    If not set, only the whole request's timeout is used.
    """


@dataclasses.dataclass
class ContentSettings:

    content_type: str = 'application/json'
    """
    The content type of the request bodies sent to the API server.
    Only JSON-based content types are supported.
    """

    accept: str = 'application/json'
    """
    The content type(s) acceptable in the responses, as the ``Accept`` header.
    """


@dataclasses.dataclass
class IdentitySettings:

    user_agent: Optional[str] = None
    """
    How the clients introduce themselves to the API server.
    If not set, ``crkit/{version}`` is used.
    """


@dataclasses.dataclass
class ClientSettings:
    networking: NetworkingSettings = dataclasses.field(default_factory=NetworkingSettings)
    content: ContentSettings = dataclasses.field(default_factory=ContentSettings)
    identity: IdentitySettings = dataclasses.field(default_factory=IdentitySettings)
