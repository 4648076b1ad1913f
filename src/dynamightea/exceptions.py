#  Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
#  SPDX-License-Identifier: Apache-2.0
from collections.abc import Sequence

from smithy_core.exceptions import SmithyIdentityError


class CredentialsSourceError(SmithyIdentityError):
    """A credentials source was attempted and failed.

    Raised for transport errors, timeouts and non-2xx responses. The resolver
    chain treats this as non-fatal and moves on to the next source.
    """

    def __init__(self, message: str, *, source: str, status: int | None = None):
        super().__init__(message)
        self.source = source
        """The name of the source that failed, for example ``imds-v2``."""

        self.status = status
        """The HTTP status code that caused the failure, if there was one."""


class CredentialsDecodeError(CredentialsSourceError):
    """A credentials source returned a document that could not be decoded."""


class NoCredentialsFoundError(SmithyIdentityError):
    """Every applicable credentials source was tried and none succeeded."""

    def __init__(self, message: str, *, failures: Sequence[str] = ()):
        super().__init__(message)
        self.failures: tuple[str, ...] = tuple(failures)
        """One message per source that was attempted and failed, in order."""
