#  Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
#  SPDX-License-Identifier: Apache-2.0
import importlib.metadata

__version__: str = importlib.metadata.version("dynamightea")


from .config import ResolverConfig  # noqa: E402
from .credentials_resolvers import (  # noqa: E402
    CredentialsResolverChain,
    get_credentials,
    resolve_credentials,
)
from .exceptions import (  # noqa: E402
    CredentialsDecodeError,
    CredentialsSourceError,
    NoCredentialsFoundError,
)
from .identity import Credentials  # noqa: E402

__all__ = (
    "Credentials",
    "CredentialsDecodeError",
    "CredentialsResolverChain",
    "CredentialsSourceError",
    "NoCredentialsFoundError",
    "ResolverConfig",
    "get_credentials",
    "resolve_credentials",
)
