#  Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
#  SPDX-License-Identifier: Apache-2.0
import asyncio
import logging
from collections.abc import Iterable
from typing import Final

import aiohttp
from smithy_core import URI
from smithy_http import Field, Fields
from smithy_http.aio import HTTPRequest
from smithy_http.aio.interfaces import HTTPClient

from . import __version__
from .exceptions import CredentialsDecodeError, CredentialsSourceError

logger: Final = logging.getLogger(__name__)

DEFAULT_TIMEOUT: Final = 5.0
"""Seconds allowed for any single metadata request, including reading the body."""

USER_AGENT_FIELD: Final = Field(
    name="User-Agent",
    values=[f"dynamightea-credentials-client/{__version__}"],
)


def validate_timeout(timeout: float) -> float:
    if timeout <= 0:
        raise ValueError(f"Timeout must be a positive number of seconds, got {timeout}")
    return timeout


def build_request(
    *,
    method: str,
    endpoint: URI,
    path: str,
    query: str | None = None,
    headers: Iterable[tuple[str, str]] = (),
) -> HTTPRequest:
    """Build the request for a single metadata call.

    This only describes the request. Nothing is sent until it is handed to an
    :py:class:`HTTPClient`.
    """
    fields = Fields([USER_AGENT_FIELD])
    for name, value in headers:
        fields.set_field(Field(name=name, values=[value]))
    return HTTPRequest(
        method=method,
        destination=URI(
            scheme=endpoint.scheme,
            host=endpoint.host,
            port=endpoint.port,
            path=path,
            query=query,
        ),
        fields=fields,
    )


async def send_request(
    http_client: HTTPClient,
    request: HTTPRequest,
    *,
    source: str,
    timeout: float = DEFAULT_TIMEOUT,
) -> bytes:
    """Send a metadata request and return the body of a successful response.

    The whole exchange, sending the request and reading the body, is bounded by
    ``timeout``.

    :raises CredentialsSourceError: If the request times out, the transport
        fails or the response status is not 2xx.
    """
    target = f"{request.method} {request.destination.path or '/'}"
    try:
        async with asyncio.timeout(timeout):
            response = await http_client.send(request=request)
            body = await response.consume_body_async()
    except TimeoutError as e:
        raise CredentialsSourceError(
            f"{target} timed out after {timeout} seconds.", source=source
        ) from e
    except Exception as e:
        raise CredentialsSourceError(
            f"{target} failed: {e!r}", source=source
        ) from e

    if not 200 <= response.status < 300:
        raise CredentialsSourceError(
            f"{target} returned {response.status}: "
            f"{body.decode('utf-8', errors='replace')}",
            source=source,
            status=response.status,
        )
    logger.debug("%s %s returned %s", source, target, response.status)
    return body



def decode_text(body: bytes, *, source: str) -> str:
    """Decode a plain text metadata response.

    :raises CredentialsDecodeError: If the body is not valid utf-8.
    """
    try:
        return body.decode("utf-8")
    except UnicodeDecodeError as e:
        raise CredentialsDecodeError(
            f"Metadata response is not valid utf-8: {e}", source=source
        ) from e


def metadata_session(timeout: float = DEFAULT_TIMEOUT) -> aiohttp.ClientSession:
    """Create the aiohttp session backing metadata requests.

    Every request made through the session is bounded by ``timeout``. The caller
    owns the session and must close it.
    """
    return aiohttp.ClientSession(
        timeout=aiohttp.ClientTimeout(total=validate_timeout(timeout))
    )
