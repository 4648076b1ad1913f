#  Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
#  SPDX-License-Identifier: Apache-2.0
import asyncio
import logging
from collections.abc import Sequence
from typing import Final

from smithy_core.aio.interfaces.identity import IdentityResolver
from smithy_core.exceptions import SmithyIdentityError
from smithy_http.aio.aiohttp import AIOHTTPClient
from smithy_http.aio.interfaces import HTTPClient

from ..config import ResolverConfig
from ..exceptions import NoCredentialsFoundError
from ..http import DEFAULT_TIMEOUT, metadata_session, validate_timeout
from ..identity import Credentials, CredentialsProperties
from .container import ContainerCredentialsSource
from .environment import EnvironmentCredentialsSource
from .imds import IMDSCredentialsSource
from .interfaces import CredentialsSource

logger: Final = logging.getLogger(__name__)

DEFAULT_SOURCES: Sequence[CredentialsSource] = (
    EnvironmentCredentialsSource(),
    ContainerCredentialsSource(),
    IMDSCredentialsSource(),
)


class CredentialsResolverChain(IdentityResolver[Credentials, CredentialsProperties]):
    """Resolves AWS Credentials from the first source that can provide them.

    Sources are checked strictly in order. A source that isn't selected by the
    configuration is skipped, and a source that fails with a
    :py:class:`SmithyIdentityError` is logged and the next one is attempted. Nothing
    is cached: every call starts again from the first source.
    """

    def __init__(
        self,
        *,
        config: ResolverConfig,
        sources: Sequence[CredentialsSource] = DEFAULT_SOURCES,
        http_client: HTTPClient | None = None,
        timeout: float = DEFAULT_TIMEOUT,
    ):
        """
        :param config: The resolved configuration.
        :param sources: The sources to check, in order of precedence.
        :param http_client: The client used for metadata requests. When not given,
            an aiohttp session is opened for each call and closed when it returns.
        :param timeout: The per-request timeout of the session opened for each call.
        """
        self._config = config
        self._sources = sources
        self._http_client = http_client
        self._timeout = validate_timeout(timeout)

    async def get_identity(self, *, properties: CredentialsProperties) -> Credentials:
        if self._http_client is not None:
            return await self._resolve(self._http_client, properties)

        session = metadata_session(self._timeout)
        try:
            return await self._resolve(AIOHTTPClient(_session=session), properties)
        finally:
            await session.close()

    async def _resolve(
        self, http_client: HTTPClient, properties: CredentialsProperties
    ) -> Credentials:
        failures: list[str] = []
        for source in self._sources:
            if not source.is_available(self._config):
                logger.debug(
                    "Skipping credentials source %s: not configured.", source.name
                )
                continue

            logger.debug("Attempting to resolve credentials from %s.", source.name)
            try:
                resolver = source.build_resolver(self._config, http_client)
                credentials = await resolver.get_identity(properties=properties)
            except SmithyIdentityError as e:
                logger.debug(
                    "Failed to resolve credentials from %s: %s", source.name, e
                )
                failures.append(f"{source.name}: {e}")
                continue

            logger.debug("Resolved credentials from %s.", credentials.source)
            return credentials

        raise NoCredentialsFoundError(
            "Unable to locate AWS credentials.", failures=failures
        )


async def resolve_credentials(
    config: ResolverConfig | None = None,
    *,
    http_client: HTTPClient | None = None,
) -> Credentials:
    """Resolve credentials using the default sources.

    :param config: The configuration to use. Read from the environment when not
        given.
    :param http_client: An optional client for metadata requests.
    :raises NoCredentialsFoundError: If no source could provide credentials.
    """
    if config is None:
        config = ResolverConfig.from_environment()
    chain = CredentialsResolverChain(config=config, http_client=http_client)
    return await chain.get_identity(properties={})


def get_credentials(config: ResolverConfig | None = None) -> Credentials:
    """Blocking variant of :py:func:`resolve_credentials`.

    Must not be called from a running event loop.
    """
    return asyncio.run(resolve_credentials(config))
