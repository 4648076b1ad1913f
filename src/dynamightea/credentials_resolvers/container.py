#  Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
#  SPDX-License-Identifier: Apache-2.0
import logging
from dataclasses import dataclass, field
from typing import Final

from smithy_core import URI
from smithy_core.aio.interfaces.identity import IdentityResolver
from smithy_http.aio import HTTPRequest
from smithy_http.aio.interfaces import HTTPClient

from ..config import ResolverConfig
from ..exceptions import CredentialsSourceError
from ..http import DEFAULT_TIMEOUT, build_request, send_request, validate_timeout
from ..identity import Credentials, CredentialsProperties, parse_credentials_document

logger: Final = logging.getLogger(__name__)

SOURCE_NAME = "container"

_CONTAINER_METADATA_IP = "169.254.170.2"


def _default_endpoint() -> URI:
    return URI(scheme="http", host=_CONTAINER_METADATA_IP)


@dataclass(kw_only=True)
class ContainerCredentialsConfig:
    """Configuration for container credential retrieval operations."""

    timeout: float = DEFAULT_TIMEOUT
    endpoint_uri: URI = field(default_factory=_default_endpoint)

    def __post_init__(self) -> None:
        validate_timeout(self.timeout)


def build_credentials_request(endpoint: URI, relative_uri: str) -> HTTPRequest:
    """Build the request for the container credentials endpoint.

    The relative URI is used verbatim as the path and query of the request.
    """
    path, _, query = relative_uri.partition("?")
    return build_request(
        method="GET",
        endpoint=endpoint,
        path=path,
        query=query or None,
        headers=[("Accept", "application/json")],
    )


class ContainerCredentialsResolver(
    IdentityResolver[Credentials, CredentialsProperties]
):
    """Resolves AWS Credentials from the ECS container credentials endpoint."""

    ENV_VAR = "AWS_CONTAINER_CREDENTIALS_RELATIVE_URI"

    def __init__(
        self,
        http_client: HTTPClient,
        relative_uri: str,
        config: ContainerCredentialsConfig | None = None,
    ):
        self._http_client = http_client
        self._relative_uri = relative_uri
        self._config = config or ContainerCredentialsConfig()

    async def get_identity(self, *, properties: CredentialsProperties) -> Credentials:
        request = build_credentials_request(
            self._config.endpoint_uri, self._relative_uri
        )
        body = await send_request(
            self._http_client,
            request,
            source=SOURCE_NAME,
            timeout=self._config.timeout,
        )
        return parse_credentials_document(body, source=SOURCE_NAME)


class ContainerCredentialsSource:
    """Credentials from the container metadata endpoint.

    Only applicable when ``AWS_CONTAINER_CREDENTIALS_RELATIVE_URI`` is set.
    """

    name = SOURCE_NAME

    def __init__(self, config: ContainerCredentialsConfig | None = None):
        self._config = config

    def is_available(self, config: ResolverConfig) -> bool:
        return config.use_ecs_metadata

    def build_resolver(
        self, config: ResolverConfig, http_client: HTTPClient
    ) -> ContainerCredentialsResolver:
        relative_uri = config.container_credentials_relative_uri
        if relative_uri is None:
            raise CredentialsSourceError(
                f"{ContainerCredentialsResolver.ENV_VAR} is not set.",
                source=SOURCE_NAME,
            )
        logger.debug("Using container credentials path %s", relative_uri)
        return ContainerCredentialsResolver(
            http_client, relative_uri, config=self._config
        )
