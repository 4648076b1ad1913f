#  Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
#  SPDX-License-Identifier: Apache-2.0
from .chain import CredentialsResolverChain, get_credentials, resolve_credentials
from .container import ContainerCredentialsResolver, ContainerCredentialsSource
from .environment import EnvironmentCredentialsResolver, EnvironmentCredentialsSource
from .imds import (
    IMDSCredentialsResolver,
    IMDSCredentialsSource,
    IMDSv1CredentialsResolver,
    IMDSv2CredentialsResolver,
)
from .interfaces import CredentialsResolver, CredentialsSource

__all__ = (
    "ContainerCredentialsResolver",
    "ContainerCredentialsSource",
    "CredentialsResolver",
    "CredentialsResolverChain",
    "CredentialsSource",
    "EnvironmentCredentialsResolver",
    "EnvironmentCredentialsSource",
    "IMDSCredentialsResolver",
    "IMDSCredentialsSource",
    "IMDSv1CredentialsResolver",
    "IMDSv2CredentialsResolver",
    "get_credentials",
    "resolve_credentials",
)
