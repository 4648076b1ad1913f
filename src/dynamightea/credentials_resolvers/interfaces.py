#  Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
#  SPDX-License-Identifier: Apache-2.0
from typing import Protocol

from smithy_core.aio.interfaces.identity import IdentityResolver
from smithy_http.aio.interfaces import HTTPClient

from ..config import ResolverConfig
from ..identity import Credentials, CredentialsProperties

type CredentialsResolver = IdentityResolver[Credentials, CredentialsProperties]


class CredentialsSource(Protocol):
    name: str
    """A short name for the source, used in logs and errors."""

    def is_available(self, config: ResolverConfig) -> bool:
        """Returns True if the configuration selects this source."""
        ...

    def build_resolver(
        self, config: ResolverConfig, http_client: HTTPClient
    ) -> CredentialsResolver:
        """Builds a credentials resolver for the given configuration."""
        ...
