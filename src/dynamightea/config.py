#  Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
#  SPDX-License-Identifier: Apache-2.0
import os
from collections.abc import Mapping
from pathlib import Path
from types import MappingProxyType
from typing import Any, ClassVar, Literal

SOURCE_CONSTRUCTOR = "constructor"
SOURCE_ENVIRONMENT = "environment"
SOURCE_DEFAULT = "default"

SourceType = Literal["constructor", "environment", "default"]

IMDSVersion = Literal["v1", "v2"]

DEFAULT_REGION = "us-east-1"
DEFAULT_PROFILE = "default"


class ConfigValue:
    """Configuration value with metadata about its source"""

    __slots__ = ("source", "value")

    def __init__(self, value: Any, source: SourceType):
        self.value = value
        self.source = source

    def __repr__(self) -> str:
        return f"ConfigValue({self.value!r}, {self.source!r})"


def _default_config_file() -> Path:
    return Path.home() / ".aws" / "config"


def _default_credentials_file() -> Path:
    return Path.home() / ".aws" / "credentials"


class ResolverConfig:
    """
    Process-scoped configuration for credential resolution.

    Values are resolved once, at construction, with the following precedence:
    explicit constructor arguments, then environment variables, then defaults.
    The constructor uses the sentinel value (...) to distinguish "not provided"
    from "explicitly set to None". The resolved configuration is read-only.

    Most callers want :py:meth:`from_environment`, which reads ``os.environ``.

    Each entry in CONFIG_FIELDS supports:
        "default": the value used when no other source provides one (required)
        "default_factory": callable producing the default, takes precedence
        "env_vars": environment variable names, checked in order
        "allow_empty": treat an empty environment value as set
        "converter": name of a method that converts a raw environment value
        "validator": name of a method that validates the resolved value
    """

    CONFIG_FIELDS: ClassVar[dict[str, dict[str, Any]]] = {
        "region": {
            "env_vars": ("AWS_REGION", "AWS_DEFAULT_REGION"),
            "default": DEFAULT_REGION,
            "validator": "_validate_string",
        },
        "profile": {
            "env_vars": ("AWS_PROFILE",),
            "default": DEFAULT_PROFILE,
            "validator": "_validate_string",
        },
        "endpoint": {
            "env_vars": ("AWS_DYNAMODB_ENDPOINT",),
            "default": None,
            "validator": "_validate_optional_string",
        },
        "use_imds": {
            "env_vars": ("AWS_USE_IMDS",),
            "default": True,
            "converter": "_convert_use_imds",
            "validator": "_validate_bool",
        },
        "imds_version": {
            "env_vars": ("AWS_IMDS_VERSION",),
            "default": None,
            "validator": "_validate_optional_string",
        },
        "container_credentials_relative_uri": {
            "env_vars": ("AWS_CONTAINER_CREDENTIALS_RELATIVE_URI",),
            "default": None,
            "allow_empty": True,
            "validator": "_validate_optional_string",
        },
        "config_file": {
            "default": None,
            "default_factory": _default_config_file,
            "validator": "_validate_path",
        },
        "credentials_file": {
            "default": None,
            "default_factory": _default_credentials_file,
            "validator": "_validate_path",
        },
    }

    def __init__(
        self,
        *,
        region: str = ...,  # type: ignore[assignment]
        profile: str = ...,  # type: ignore[assignment]
        endpoint: str | None = ...,  # type: ignore[assignment]
        use_imds: bool = ...,  # type: ignore[assignment]
        imds_version: str | None = ...,  # type: ignore[assignment]
        container_credentials_relative_uri: str | None = ...,  # type: ignore[assignment]
        config_file: Path = ...,  # type: ignore[assignment]
        credentials_file: Path = ...,  # type: ignore[assignment]
        environ: Mapping[str, str] | None = None,
    ):
        """
        :param environ: Environment variables to read. When None, only constructor
            arguments and defaults are used.
        """
        constructor_values = {
            k: v
            for k, v in locals().items()
            if k not in ("self", "environ") and v is not ...
        }
        env_values: Mapping[str, str] = environ if environ is not None else {}

        values: dict[str, ConfigValue] = {}
        for field_name, field_info in self.CONFIG_FIELDS.items():
            resolved = self._resolve_field(
                field_name, field_info, constructor_values, env_values
            )
            validator = field_info.get("validator")
            if validator:
                getattr(self, validator)(resolved.value, field_name)
            values[field_name] = resolved

        self._values: Mapping[str, ConfigValue] = MappingProxyType(values)

    @classmethod
    def from_environment(
        cls, environ: Mapping[str, str] | None = None, **overrides: Any
    ) -> "ResolverConfig":
        """Build the configuration from environment variables.

        :param environ: The environment to read. Defaults to ``os.environ``.
        :param overrides: Explicit values, which take precedence over the
            environment.
        """
        return cls(environ=os.environ if environ is None else environ, **overrides)

    def _resolve_field(
        self,
        field_name: str,
        field_info: dict[str, Any],
        constructor_values: dict[str, Any],
        env_values: Mapping[str, str],
    ) -> ConfigValue:
        if field_name in constructor_values:
            return ConfigValue(constructor_values[field_name], SOURCE_CONSTRUCTOR)

        for env_var in field_info.get("env_vars", ()):
            if env_var not in env_values:
                continue
            raw = env_values[env_var]
            if raw == "" and not field_info.get("allow_empty", False):
                continue
            converter = field_info.get("converter")
            value = getattr(self, converter)(raw) if converter else raw
            return ConfigValue(value, SOURCE_ENVIRONMENT)

        default_factory = field_info.get("default_factory")
        if default_factory is not None:
            return ConfigValue(default_factory(), SOURCE_DEFAULT)
        return ConfigValue(field_info["default"], SOURCE_DEFAULT)

    def _convert_use_imds(self, raw: str) -> bool:
        # Only the literal "false" disables IMDS.
        return raw != "false"

    def _validate_string(self, value: Any, field_name: str) -> None:
        if not isinstance(value, str):
            raise TypeError(f"{field_name} must be str, got {type(value).__name__}")

    def _validate_optional_string(self, value: Any, field_name: str) -> None:
        if value is not None:
            self._validate_string(value, field_name)

    def _validate_bool(self, value: Any, field_name: str) -> None:
        if not isinstance(value, bool):
            raise TypeError(f"{field_name} must be bool, got {type(value).__name__}")

    def _validate_path(self, value: Any, field_name: str) -> None:
        if not isinstance(value, Path):
            raise TypeError(f"{field_name} must be Path, got {type(value).__name__}")

    def get_config_value_object(self, field_name: str) -> ConfigValue:
        """Get the raw ConfigValue object for a field"""
        return self._values[field_name]

    def source_of(self, field_name: str) -> SourceType:
        """Where the value of a field came from."""
        return self._values[field_name].source

    @property
    def region(self) -> str:
        return self._values["region"].value

    @property
    def profile(self) -> str:
        return self._values["profile"].value

    @property
    def endpoint(self) -> str | None:
        """A custom DynamoDB endpoint, for example DynamoDB Local."""
        return self._values["endpoint"].value

    @property
    def use_imds(self) -> bool:
        return self._values["use_imds"].value

    @property
    def imds_version(self) -> str | None:
        """The requested IMDS protocol version.

        ``"v1"`` and ``"v2"`` force a protocol. Any other value, including None,
        tries v2 first and falls back to v1.
        """
        return self._values["imds_version"].value

    @property
    def container_credentials_relative_uri(self) -> str | None:
        return self._values["container_credentials_relative_uri"].value

    @property
    def use_ecs_metadata(self) -> bool:
        """Whether the container credentials endpoint is configured."""
        return self.container_credentials_relative_uri is not None

    @property
    def config_file(self) -> Path:
        return self._values["config_file"].value

    @property
    def credentials_file(self) -> Path:
        return self._values["credentials_file"].value

    def __repr__(self) -> str:
        fields = ", ".join(
            f"{name}={config_value.value!r}"
            for name, config_value in self._values.items()
        )
        return f"ResolverConfig({fields})"
