"""
TLS & HTTP authentication for the aiohttp sessions.

The TLS context is prepared eagerly when the transport is built, so that
the absent or malformed certificates are reported as early as possible.
The aiohttp session itself is created lazily inside the event loop.
"""
import base64
import contextlib
import os
import ssl
import tempfile
from typing import Dict, Optional, Union

import aiohttp

from crkit._cogs.configs import configuration
from crkit._cogs.helpers import versions
from crkit._cogs.structs import credentials

PathLike = Union[str, 'os.PathLike[str]']
PemData = Union[str, bytes]


def decode_to_pem(data: PemData) -> str:
    """ Accept both PEM texts and their base64 encodings (as in kubeconfigs). """
    text = data.decode('ascii') if isinstance(data, bytes) else data
    if text.startswith('-----BEGIN '):
        return text
    return base64.b64decode(text).decode('ascii')


def _materialize(
        stack: contextlib.ExitStack,
        path: Optional[str],
        data: Optional[PemData],
) -> Optional[PathLike]:
    # The ssl module loads the client certificates & keys only from files. A temp file
    # is created only when really needed, since the filesystem can be read-only.
    if path:
        return path
    if not data:
        return None
    tmp = stack.enter_context(tempfile.NamedTemporaryFile(buffering=0))
    tmp.write(decode_to_pem(data).encode('ascii'))
    return tmp.name


def make_ssl_context(info: credentials.ConnectionInfo) -> ssl.SSLContext:
    context = ssl.create_default_context(
        purpose=ssl.Purpose.SERVER_AUTH,
        cafile=info.ca_path,
        cadata=None if info.ca_data is None else decode_to_pem(info.ca_data),
    )

    with contextlib.ExitStack() as stack:
        cert_path = _materialize(stack, info.certificate_path, info.certificate_data)
        pkey_path = _materialize(stack, info.private_key_path, info.private_key_data)
        if cert_path and pkey_path:
            context.load_cert_chain(certfile=cert_path, keyfile=pkey_path)

    if info.insecure:
        context.check_hostname = False
        context.verify_mode = ssl.CERT_NONE
    return context


def _authorization(info: credentials.ConnectionInfo) -> Optional[str]:
    if info.scheme:
        return f'{info.scheme} {info.token}' if info.token else info.scheme
    return f'Bearer {info.token}' if info.token else None


def make_headers(
        info: credentials.ConnectionInfo,
        *,
        settings: configuration.ClientSettings,
) -> Dict[str, str]:
    headers = {
        'Accept': settings.content.accept,
        'User-Agent': settings.identity.user_agent or f'crkit/{versions.version or "unknown"}',
    }
    authorization = _authorization(info)
    if authorization is not None:
        headers['Authorization'] = authorization
    return headers


def make_session(
        info: credentials.ConnectionInfo,
        *,
        context: ssl.SSLContext,
        settings: configuration.ClientSettings,
) -> aiohttp.ClientSession:
    basic_auth = (aiohttp.BasicAuth(info.username, info.password)
                  if info.username and info.password else None)
    return aiohttp.ClientSession(
        connector=aiohttp.TCPConnector(limit=0, ssl=context),
        headers=make_headers(info, settings=settings),
        auth=basic_auth,
    )
