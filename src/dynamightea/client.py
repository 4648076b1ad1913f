#  Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
#  SPDX-License-Identifier: Apache-2.0
import logging
from dataclasses import dataclass
from typing import Final

from smithy_aws_core.identity import AWSCredentialsIdentity, AWSIdentityProperties
from smithy_core.aio.interfaces.identity import IdentityResolver
from smithy_http.aio.interfaces import HTTPClient

from .config import ResolverConfig
from .credentials_resolvers import resolve_credentials
from .exceptions import NoCredentialsFoundError
from .identity import Credentials

logger: Final = logging.getLogger(__name__)


class StaticCredentialsResolver(
    IdentityResolver[AWSCredentialsIdentity, AWSIdentityProperties]
):
    """Resolve a fixed set of previously resolved AWS Credentials."""

    def __init__(self, *, credentials: Credentials) -> None:
        self._credentials = credentials

    async def get_identity(
        self, *, properties: AWSIdentityProperties
    ) -> AWSCredentialsIdentity:
        return AWSCredentialsIdentity(
            access_key_id=self._credentials.access_key_id,
            secret_access_key=self._credentials.secret_access_key,
            session_token=self._credentials.session_token or None,
            expiration=self._credentials.expiration,
        )


@dataclass(frozen=True, kw_only=True)
class ClientSettings:
    """Everything a DynamoDB client needs from this package."""

    region: str
    profile: str
    endpoint_url: str | None = None
    credentials_resolver: StaticCredentialsResolver | None = None
    """Explicitly resolved credentials.

    None when resolution failed, in which case the SDK's default credential
    discovery should be used.
    """


async def build_client_settings(
    config: ResolverConfig | None = None,
    *,
    http_client: HTTPClient | None = None,
) -> ClientSettings:
    """Resolve credentials once and collect the settings for a data-plane client.

    Failing to find credentials is not an error here: it is logged and the
    returned settings leave credential discovery to the SDK.
    """
    if config is None:
        config = ResolverConfig.from_environment()

    credentials_resolver = None
    try:
        credentials = await resolve_credentials(config, http_client=http_client)
    except NoCredentialsFoundError as e:
        logger.warning(
            "Falling back to default credential discovery: %s (%s)",
            e,
            "; ".join(e.failures) or "no sources configured",
        )
    else:
        logger.info("Using AWS credentials from %s.", credentials.source)
        credentials_resolver = StaticCredentialsResolver(credentials=credentials)

    return ClientSettings(
        region=config.region,
        profile=config.profile,
        endpoint_url=config.endpoint,
        credentials_resolver=credentials_resolver,
    )
