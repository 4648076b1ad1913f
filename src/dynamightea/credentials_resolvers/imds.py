#  Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
#  SPDX-License-Identifier: Apache-2.0
import logging
from dataclasses import dataclass
from typing import Final

from smithy_core import URI
from smithy_core.aio.interfaces.identity import IdentityResolver
from smithy_core.exceptions import SmithyIdentityError
from smithy_http.aio import HTTPRequest
from smithy_http.aio.interfaces import HTTPClient

from ..config import ResolverConfig
from ..exceptions import CredentialsSourceError
from ..http import (
    DEFAULT_TIMEOUT,
    build_request,
    decode_text,
    send_request,
    validate_timeout,
)
from ..identity import Credentials, CredentialsProperties, parse_credentials_document

logger: Final = logging.getLogger(__name__)

SOURCE_NAME = "imds"
SOURCE_NAME_V1 = "imds-v1"
SOURCE_NAME_V2 = "imds-v2"

TOKEN_PATH: Final = "/latest/api/token"  # noqa: S105
METADATA_PATH_BASE: Final = "/latest/meta-data/iam/security-credentials/"
TOKEN_TTL_HEADER: Final = "x-aws-ec2-metadata-token-ttl-seconds"  # noqa: S105
TOKEN_HEADER: Final = "x-aws-ec2-metadata-token"  # noqa: S105


@dataclass(init=False)
class IMDSConfig:
    """Configuration for the EC2 instance metadata service."""

    _HOST = "169.254.169.254"
    _MIN_TTL = 5
    _MAX_TTL = 21600

    endpoint_uri: URI
    token_ttl: int
    timeout: float

    def __init__(
        self,
        *,
        endpoint_uri: URI | None = None,
        token_ttl: int = _MAX_TTL,
        timeout: float = DEFAULT_TIMEOUT,
    ):
        self.endpoint_uri = endpoint_uri or URI(scheme="http", host=self._HOST)
        self.token_ttl = self._validate_token_ttl(token_ttl)
        self.timeout = validate_timeout(timeout)

    def _validate_token_ttl(self, ttl: int) -> int:
        if not self._MIN_TTL <= ttl <= self._MAX_TTL:
            raise ValueError(
                f"Token TTL must be between {self._MIN_TTL} and {self._MAX_TTL} seconds."
            )
        return ttl


def build_token_request(config: IMDSConfig) -> HTTPRequest:
    return build_request(
        method="PUT",
        endpoint=config.endpoint_uri,
        path=TOKEN_PATH,
        headers=[(TOKEN_TTL_HEADER, str(config.token_ttl))],
    )


def build_metadata_request(
    config: IMDSConfig, *, path: str, token: str | None = None
) -> HTTPRequest:
    """Build a GET for a metadata path, attaching the session token if given."""
    headers = [(TOKEN_HEADER, token)] if token is not None else []
    return build_request(
        method="GET", endpoint=config.endpoint_uri, path=path, headers=headers
    )


class EC2Metadata:
    """A minimal instance metadata client.

    Every call issues a fresh request; tokens are not cached between calls.
    """

    def __init__(
        self, http_client: HTTPClient, config: IMDSConfig | None = None
    ) -> None:
        self._http_client = http_client
        self._config = config or IMDSConfig()

    async def get_token(self, *, source: str = SOURCE_NAME_V2) -> str:
        body = await send_request(
            self._http_client,
            build_token_request(self._config),
            source=source,
            timeout=self._config.timeout,
        )
        token = decode_text(body, source=source)
        if not token:
            raise CredentialsSourceError(
                "IMDS returned an empty session token.", source=source
            )
        return token

    async def get(self, *, path: str, source: str, token: str | None = None) -> str:
        body = await send_request(
            self._http_client,
            build_metadata_request(self._config, path=path, token=token),
            source=source,
            timeout=self._config.timeout,
        )
        return decode_text(body, source=source)


class _InstanceProfileCredentialsResolver(
    IdentityResolver[Credentials, CredentialsProperties]
):
    _source: str

    def __init__(self, http_client: HTTPClient, config: IMDSConfig | None = None):
        self._ec2_metadata_client = EC2Metadata(http_client, config)

    async def _get_credentials(self, token: str | None) -> Credentials:
        role_listing = await self._ec2_metadata_client.get(
            path=METADATA_PATH_BASE, source=self._source, token=token
        )
        role_name = role_listing.strip()
        if not role_name:
            raise CredentialsSourceError(
                "No IAM role is attached to this instance.", source=self._source
            )
        logger.debug("Resolved instance profile role %s", role_name)

        creds_str = await self._ec2_metadata_client.get(
            path=f"{METADATA_PATH_BASE}{role_name}", source=self._source, token=token
        )
        return parse_credentials_document(creds_str, source=self._source)


class IMDSv2CredentialsResolver(_InstanceProfileCredentialsResolver):
    """Resolves AWS Credentials with the token-secured IMDS protocol.

    A session token is requested with a PUT, then attached to the role lookup and
    the credentials lookup. A failure at any step fails the whole resolution.
    """

    _source = SOURCE_NAME_V2

    async def get_identity(self, *, properties: CredentialsProperties) -> Credentials:
        token = await self._ec2_metadata_client.get_token(source=self._source)
        return await self._get_credentials(token)


class IMDSv1CredentialsResolver(_InstanceProfileCredentialsResolver):
    """Resolves AWS Credentials with the legacy, unauthenticated IMDS protocol."""

    _source = SOURCE_NAME_V1

    async def get_identity(self, *, properties: CredentialsProperties) -> Credentials:
        return await self._get_credentials(None)


class IMDSCredentialsResolver(IdentityResolver[Credentials, CredentialsProperties]):
    """Resolves AWS Credentials from the EC2 Instance Metadata Service (IMDS).

    ``version="v1"`` only uses the legacy protocol and ``version="v2"`` only uses
    the secured protocol. Any other value tries the secured protocol first and
    falls back to the legacy protocol if any part of it fails.
    """

    def __init__(
        self,
        http_client: HTTPClient,
        *,
        version: str | None = None,
        config: IMDSConfig | None = None,
    ):
        self._version = version
        self._v2 = IMDSv2CredentialsResolver(http_client, config)
        self._v1 = IMDSv1CredentialsResolver(http_client, config)

    async def get_identity(self, *, properties: CredentialsProperties) -> Credentials:
        if self._version == "v1":
            return await self._v1.get_identity(properties=properties)
        if self._version == "v2":
            return await self._v2.get_identity(properties=properties)

        try:
            return await self._v2.get_identity(properties=properties)
        except SmithyIdentityError as v2_error:
            logger.debug("IMDSv2 failed, falling back to IMDSv1: %s", v2_error)
            try:
                return await self._v1.get_identity(properties=properties)
            except SmithyIdentityError as v1_error:
                raise CredentialsSourceError(
                    f"IMDSv2 failed: {v2_error}; IMDSv1 failed: {v1_error}",
                    source=SOURCE_NAME,
                ) from v1_error


class IMDSCredentialsSource:
    """Credentials from the instance metadata service.

    Applicable unless IMDS has been disabled with ``AWS_USE_IMDS=false``.
    """

    name = SOURCE_NAME

    def __init__(self, config: IMDSConfig | None = None):
        self._config = config

    def is_available(self, config: ResolverConfig) -> bool:
        return config.use_imds

    def build_resolver(
        self, config: ResolverConfig, http_client: HTTPClient
    ) -> IMDSCredentialsResolver:
        return IMDSCredentialsResolver(
            http_client, version=config.imds_version, config=self._config
        )
