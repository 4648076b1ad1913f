#  Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
#  SPDX-License-Identifier: Apache-2.0
import json
import re
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta
from typing import Any, Final, TypedDict

from .exceptions import CredentialsDecodeError

DEFAULT_EXPIRATION_WINDOW: Final = timedelta(hours=1)

_RFC3339_TIMESTAMP: Final = re.compile(
    r"(\d{4}-\d{2}-\d{2})[Tt](\d{2}:\d{2}:\d{2})(?:\.(\d+))?([Zz]|[+-]\d{2}:\d{2})"
)


def default_expiration() -> datetime:
    """The expiration assigned to credentials that don't declare a usable one."""
    return datetime.now(UTC) + DEFAULT_EXPIRATION_WINDOW


def _ensure_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


@dataclass(kw_only=True, frozen=True)
class Credentials:
    """AWS credentials resolved from one of the supported sources.

    Instances are immutable. Each resolution produces a new value.
    """

    access_key_id: str
    """A unique identifier for an AWS user or role."""

    secret_access_key: str = field(repr=False)
    """A secret key used in conjunction with the access key ID to authenticate
    programmatic access to AWS services."""

    session_token: str = field(default="", repr=False)
    """A temporary token for the current session.

    Empty for long-lived access keys.
    """

    expiration: datetime = field(default_factory=default_expiration)
    """When the credentials expire, always in UTC.

    Naive values are treated as UTC, aware values are converted to UTC. When a
    source doesn't provide an expiration this is one hour from creation.
    """

    source: str = "unknown"
    """The name of the source the credentials were resolved from."""

    def __post_init__(self) -> None:
        object.__setattr__(self, "expiration", _ensure_utc(self.expiration))

    @property
    def is_expired(self) -> bool:
        """Whether the credentials are expired."""
        return datetime.now(UTC) >= self.expiration

    @property
    def is_usable(self) -> bool:
        """Whether both the access key id and the secret are non-empty."""
        return bool(self.access_key_id) and bool(self.secret_access_key)


class CredentialsProperties(TypedDict, total=False):
    """Properties passed to credentials resolvers.

    None of the bundled resolvers read any, but the mapping is part of the
    identity resolver interface.
    """


def parse_expiration(value: Any) -> datetime:
    """Parse an RFC 3339 expiration timestamp.

    Only full timestamps with a time and an offset are accepted. Missing, empty,
    partial or malformed values never raise. They fall back to one hour from now.
    """
    if not isinstance(value, str):
        return default_expiration()
    match = _RFC3339_TIMESTAMP.fullmatch(value)
    if match is None:
        return default_expiration()

    date, time, fraction, offset = match.groups()
    # fromisoformat takes at most microsecond precision.
    microseconds = (fraction or "")[:6].ljust(6, "0")
    if offset in ("Z", "z"):
        offset = "+00:00"
    try:
        return _ensure_utc(
            datetime.fromisoformat(f"{date}T{time}.{microseconds}{offset}")
        )
    except ValueError:
        return default_expiration()


def parse_credentials_document(body: bytes | str, *, source: str) -> Credentials:
    """Decode the JSON credentials document shared by the metadata services.

    :param body: The raw response body.
    :param source: The name of the source the body came from, used in errors and
        recorded on the returned credentials.
    :raises CredentialsDecodeError: If the body isn't a JSON object or lacks an
        access key id or secret.
    """
    if isinstance(body, bytes):
        try:
            body = body.decode("utf-8")
        except UnicodeDecodeError as e:
            raise CredentialsDecodeError(
                "Credentials document is not valid utf-8.", source=source
            ) from e

    try:
        document = json.loads(body)
    except json.JSONDecodeError as e:
        raise CredentialsDecodeError(
            f"Unable to parse JSON credentials document: {e}", source=source
        ) from e

    if not isinstance(document, dict):
        raise CredentialsDecodeError(
            "Credentials document must be a JSON object, got "
            f"{type(document).__name__}.",
            source=source,
        )

    access_key_id = document.get("AccessKeyId")
    secret_access_key = document.get("SecretAccessKey")
    if not access_key_id or not secret_access_key:
        raise CredentialsDecodeError(
            "AccessKeyId and SecretAccessKey are required", source=source
        )

    return Credentials(
        access_key_id=str(access_key_id),
        secret_access_key=str(secret_access_key),
        session_token=str(document.get("Token") or ""),
        expiration=parse_expiration(document.get("Expiration")),
        source=source,
    )
