#  Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
#  SPDX-License-Identifier: Apache-2.0
import asyncio
from dataclasses import dataclass

import pytest
from smithy_core.aio.utils import async_list
from smithy_http import Fields
from smithy_http.aio import HTTPRequest, HTTPResponse
from smithy_http.interfaces import HTTPRequestConfiguration
from smithy_http.testing.mockhttp import MockHTTPClient


@dataclass
class _Route:
    status: int = 200
    body: bytes = b""
    error: Exception | None = None
    hang: bool = False


class FakeMetadataService(MockHTTPClient):
    """A :py:class:`MockHTTPClient` that answers from a table of routes.

    Responses are keyed by method and path instead of queued, so a resolver can
    make its requests in any order. Requests to unknown routes fail the way an
    unreachable host would.
    """

    def __init__(self) -> None:
        super().__init__()
        self._routes: dict[tuple[str, str], _Route] = {}

    def add(
        self,
        method: str,
        path: str,
        *,
        status: int = 200,
        body: bytes | str = b"",
        error: Exception | None = None,
        hang: bool = False,
    ) -> None:
        if isinstance(body, str):
            body = body.encode("utf-8")
        self._routes[(method, path)] = _Route(
            status=status, body=body, error=error, hang=hang
        )

    async def send(
        self,
        request: HTTPRequest,
        *,
        request_config: HTTPRequestConfiguration | None = None,
    ) -> HTTPResponse:
        self._captured_requests.append(request)
        route = self._routes.get((request.method, request.destination.path or "/"))
        if route is None:
            raise ConnectionRefusedError(
                f"No route to {request.method} {request.destination.path}"
            )
        if route.hang:
            await asyncio.Event().wait()
        if route.error is not None:
            raise route.error
        return HTTPResponse(
            status=route.status,
            fields=Fields(),
            body=async_list([route.body]),
        )

    @property
    def requests(self) -> list[HTTPRequest]:
        return self.captured_requests

    @property
    def calls(self) -> list[tuple[str, str | None]]:
        return [(r.method, r.destination.path) for r in self._captured_requests]


@pytest.fixture
def metadata_service() -> FakeMetadataService:
    return FakeMetadataService()


@pytest.fixture
def clean_environment(monkeypatch: pytest.MonkeyPatch) -> pytest.MonkeyPatch:
    """Remove every environment variable that affects credential resolution."""
    for name in (
        "AWS_REGION",
        "AWS_DEFAULT_REGION",
        "AWS_PROFILE",
        "AWS_DYNAMODB_ENDPOINT",
        "AWS_ACCESS_KEY_ID",
        "AWS_SECRET_ACCESS_KEY",
        "AWS_SESSION_TOKEN",
        "AWS_USE_IMDS",
        "AWS_IMDS_VERSION",
        "AWS_CONTAINER_CREDENTIALS_RELATIVE_URI",
    ):
        monkeypatch.delenv(name, raising=False)
    return monkeypatch
