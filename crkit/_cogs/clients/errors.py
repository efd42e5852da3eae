"""
The errors of the API operations.

The callers never see the exceptions of the HTTP library (``aiohttp``):
everything that goes wrong in an API call is one of :class:`APIError`'s
descendants, with the library's own exception chained as the cause.
This includes the failures that never reached the API: the refused
connections, the timeouts, the unreadable responses.

The most actionable HTTP statuses have their own classes (401, 403, 404, 409);
all others are raised as the generic client-side (4xx) or server-side (5xx)
errors, and can be told apart only by the fields of the exception.

If the API explains the failure with a ``Status`` object in the response body,
its reason, message & details are exposed via the error's fields.
"""
import builtins
import collections.abc
import json
from typing import Any, Collection, Dict, Optional, Type

import aiohttp
from typing_extensions import Literal, TypedDict


class RawStatusCause(TypedDict, total=False):
    field: str
    reason: str
    message: str


class RawStatusDetails(TypedDict, total=False):
    name: str
    group: str
    kind: str
    uid: str
    causes: Collection[RawStatusCause]
    retryAfterSeconds: int


# https://kubernetes.io/docs/reference/kubernetes-api/common-definitions/status/
class RawStatus(TypedDict, total=False):
    apiVersion: str
    kind: Literal["Status"]
    status: Literal["Success", "Failure"]
    code: int
    reason: str
    message: str
    details: RawStatusDetails


class APIError(Exception):

    def __init__(
            self,
            payload: Optional[RawStatus] = None,
            *,
            status: Optional[int] = None,
            message: Optional[str] = None,
    ) -> None:
        if payload and payload.get('message'):
            message = payload['message']
        super().__init__(message, payload)
        self._payload = payload
        self._status = status
        self._message = message

    def __str__(self) -> str:
        if self._message:
            return self._message
        return f"HTTP {self._status}" if self._status else super().__str__()

    @property
    def status(self) -> Optional[int]:
        """ The HTTP status of the response, if there was a response at all. """
        return self._status

    @property
    def payload(self) -> Optional[RawStatus]:
        return self._payload

    @property
    def message(self) -> Optional[str]:
        return self._message

    @property
    def code(self) -> Optional[int]:
        return None if self._payload is None else self._payload.get('code')

    @property
    def reason(self) -> Optional[str]:
        return None if self._payload is None else self._payload.get('reason')

    @property
    def details(self) -> Optional[RawStatusDetails]:
        return None if self._payload is None else self._payload.get('details')


class APIClientError(APIError):
    pass


class APIServerError(APIError):
    pass


class APIUnauthorizedError(APIClientError):
    pass


class APIForbiddenError(APIClientError):
    pass


class APINotFoundError(APIClientError):
    pass


class APIConflictError(APIClientError):
    pass


class APITransportError(APIError):
    """ The request did not reach the server, or the response is unreadable. """


class APITimeoutError(APIError, builtins.TimeoutError):
    """ The operation's deadline is reached before or while it was executed. """


_SPECIFIC_ERRORS: Dict[int, Type[APIError]] = {
    401: APIUnauthorizedError,
    403: APIForbiddenError,
    404: APINotFoundError,
    409: APIConflictError,
}


def classify(status: int) -> Type[APIError]:
    if status in _SPECIFIC_ERRORS:
        return _SPECIFIC_ERRORS[status]
    elif 400 <= status < 500:
        return APIClientError
    elif 500 <= status < 600:
        return APIServerError
    else:
        return APIError


async def _read_status(response: aiohttp.ClientResponse) -> Optional[RawStatus]:
    try:
        payload = await response.json(content_type=None)
    except (json.JSONDecodeError, UnicodeDecodeError,
            aiohttp.ContentTypeError, aiohttp.ClientConnectionError):
        return None

    # Other kinds of objects can contain anything, including secrets; they are not exposed.
    if isinstance(payload, collections.abc.Mapping) and payload.get('kind') == 'Status':
        return payload  # type: ignore
    return None


async def check_response(response: aiohttp.ClientResponse) -> None:
    """
    Raise a specialised error if the response is an HTTP error; do nothing otherwise.
    """
    if response.status < 400:
        return

    # The body must be read first: raise_for_status() releases the response.
    payload = await _read_status(response)
    cls = classify(response.status)
    try:
        response.raise_for_status()
    except aiohttp.ClientResponseError as e:
        raise cls(payload, status=response.status, message=e.message or None) from e


async def parse_response(response: aiohttp.ClientResponse) -> Any:
    """
    Raise a specialised error for HTTP errors, or return the JSON-decoded body.
    """
    await check_response(response)
    try:
        return await response.json(content_type=None)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise APITransportError(status=response.status, message="Malformed response.") from e
