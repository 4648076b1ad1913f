#  Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
#  SPDX-License-Identifier: Apache-2.0
import os
from collections.abc import Mapping

from smithy_core.aio.interfaces.identity import IdentityResolver
from smithy_http.aio.interfaces import HTTPClient

from ..config import ResolverConfig
from ..exceptions import CredentialsSourceError
from ..identity import Credentials, CredentialsProperties

SOURCE_NAME = "environment"


class EnvironmentCredentialsResolver(
    IdentityResolver[Credentials, CredentialsProperties]
):
    """Resolves AWS Credentials from system environment variables.

    The environment is read on every call.
    """

    def __init__(self, environ: Mapping[str, str] | None = None):
        self._environ = environ

    async def get_identity(self, *, properties: CredentialsProperties) -> Credentials:
        environ = os.environ if self._environ is None else self._environ
        access_key_id = environ.get("AWS_ACCESS_KEY_ID", "")
        secret_access_key = environ.get("AWS_SECRET_ACCESS_KEY", "")
        session_token = environ.get("AWS_SESSION_TOKEN", "")

        # A key without a secret, or a secret without a key, counts as absent.
        if not access_key_id or not secret_access_key:
            raise CredentialsSourceError(
                "AWS_ACCESS_KEY_ID and AWS_SECRET_ACCESS_KEY are required",
                source=SOURCE_NAME,
            )

        return Credentials(
            access_key_id=access_key_id,
            secret_access_key=secret_access_key,
            session_token=session_token,
            source=SOURCE_NAME,
        )


class EnvironmentCredentialsSource:
    """Explicit credentials from environment variables. Always applicable."""

    name = SOURCE_NAME

    def __init__(self, environ: Mapping[str, str] | None = None):
        self._environ = environ

    def is_available(self, config: ResolverConfig) -> bool:
        return True

    def build_resolver(
        self, config: ResolverConfig, http_client: HTTPClient
    ) -> EnvironmentCredentialsResolver:
        return EnvironmentCredentialsResolver(environ=self._environ)
