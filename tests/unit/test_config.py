#  Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
#  SPDX-License-Identifier: Apache-2.0
from pathlib import Path

import pytest
from dynamightea.config import ResolverConfig


def test_defaults():
    config = ResolverConfig.from_environment({})
    assert config.region == "us-east-1"
    assert config.profile == "default"
    assert config.endpoint is None
    assert config.use_imds is True
    assert config.imds_version is None
    assert config.use_ecs_metadata is False
    assert config.config_file == Path.home() / ".aws" / "config"
    assert config.credentials_file == Path.home() / ".aws" / "credentials"
    assert config.source_of("region") == "default"


def test_values_from_environment():
    config = ResolverConfig.from_environment(
        {
            "AWS_REGION": "us-west-2",
            "AWS_PROFILE": "testprofile",
            "AWS_DYNAMODB_ENDPOINT": "http://localhost:8000",
            "AWS_IMDS_VERSION": "v1",
            "AWS_CONTAINER_CREDENTIALS_RELATIVE_URI": "/v2/credentials/abc",
        }
    )
    assert config.region == "us-west-2"
    assert config.profile == "testprofile"
    assert config.endpoint == "http://localhost:8000"
    assert config.imds_version == "v1"
    assert config.use_ecs_metadata is True
    assert config.container_credentials_relative_uri == "/v2/credentials/abc"
    assert config.source_of("region") == "environment"
    assert config.source_of("profile") == "environment"


def test_reads_process_environment_by_default(clean_environment: pytest.MonkeyPatch):
    clean_environment.setenv("AWS_REGION", "eu-west-1")
    assert ResolverConfig.from_environment().region == "eu-west-1"


@pytest.mark.parametrize(
    "environ, expected",
    [
        ({"AWS_REGION": "us-west-2", "AWS_DEFAULT_REGION": "eu-west-1"}, "us-west-2"),
        ({"AWS_DEFAULT_REGION": "eu-west-1"}, "eu-west-1"),
        ({"AWS_REGION": "", "AWS_DEFAULT_REGION": "eu-west-1"}, "eu-west-1"),
        ({"AWS_REGION": ""}, "us-east-1"),
    ],
)
def test_region_precedence(environ: dict[str, str], expected: str):
    assert ResolverConfig.from_environment(environ).region == expected


@pytest.mark.parametrize(
    "value, expected",
    [
        ("false", False),
        ("true", True),
        ("False", True),
        ("0", True),
        ("", True),
        (None, True),
    ],
)
def test_use_imds(value: str | None, expected: bool):
    environ = {} if value is None else {"AWS_USE_IMDS": value}
    assert ResolverConfig.from_environment(environ).use_imds is expected


def test_ecs_metadata_is_gated_on_presence():
    config = ResolverConfig.from_environment(
        {"AWS_CONTAINER_CREDENTIALS_RELATIVE_URI": ""}
    )
    assert config.use_ecs_metadata is True
    assert config.container_credentials_relative_uri == ""


def test_empty_imds_version_is_unset():
    config = ResolverConfig.from_environment({"AWS_IMDS_VERSION": ""})
    assert config.imds_version is None


def test_constructor_values_take_precedence():
    config = ResolverConfig.from_environment(
        {"AWS_REGION": "us-west-2", "AWS_USE_IMDS": "false"},
        region="ap-south-1",
        use_imds=True,
    )
    assert config.region == "ap-south-1"
    assert config.use_imds is True
    assert config.source_of("region") == "constructor"
    assert config.get_config_value_object("use_imds").source == "constructor"


def test_constructor_ignores_environment_unless_given(
    clean_environment: pytest.MonkeyPatch,
):
    clean_environment.setenv("AWS_REGION", "eu-west-1")
    assert ResolverConfig().region == "us-east-1"


def test_explicit_none_is_kept():
    config = ResolverConfig.from_environment(
        {"AWS_DYNAMODB_ENDPOINT": "http://localhost:8000"}, endpoint=None
    )
    assert config.endpoint is None
    assert config.source_of("endpoint") == "constructor"


def test_config_is_read_only():
    config = ResolverConfig()
    with pytest.raises(AttributeError):
        config.region = "us-west-2"  # type: ignore[misc]


@pytest.mark.parametrize(
    "kwargs",
    [{"region": 1}, {"use_imds": "false"}, {"config_file": "~/.aws/config"}],
)
def test_invalid_constructor_values(kwargs: dict[str, object]):
    with pytest.raises(TypeError):
        ResolverConfig(**kwargs)  # type: ignore[arg-type]
