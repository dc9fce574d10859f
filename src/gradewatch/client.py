# Copyright (c) Syntropy Systems
"""HTTP client for the gradewatch query protocol."""
from __future__ import annotations

from typing import TYPE_CHECKING, TypeVar

import httpx
from pydantic import BaseModel, ValidationError
from typing_extensions import Self

from gradewatch.models.api import (
    GET_STATS_MESSAGE,
    ErrorResponse,
    HealthResponse,
    StatsResponse,
)

if TYPE_CHECKING:
    from collections.abc import Mapping
    from types import TracebackType

ResponseModel = TypeVar("ResponseModel", bound=BaseModel)

DEFAULT_SERVER_URL = "http://127.0.0.1:8080"


class GradewatchClientError(Exception):
    """Error from gradewatch server communication."""


class GradewatchClient:
    """HTTP client for asking a gradewatch server for statistics."""

    server_url: str
    timeout: float

    def __init__(
        self,
        server_url: str = DEFAULT_SERVER_URL,
        timeout: float = 10.0,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        """Initialize the client.

        Args:
            server_url: Base URL of the gradewatch server (e.g., "http://localhost:8080")
            timeout: Request timeout in seconds
            transport: Optional httpx transport, mainly for tests

        """
        self.server_url = server_url.rstrip("/")
        self.timeout = timeout
        self._client = httpx.Client(timeout=timeout, transport=transport)

    def close(self) -> None:
        """Close the HTTP client."""
        self._client.close()

    def __enter__(self) -> Self:
        """Enter the client context and return self."""
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        """Exit the client context and close the HTTP client."""
        self.close()

    def _request(
        self,
        method: str,
        path: str,
        *,
        response_model: type[ResponseModel],
        json: Mapping[str, object] | None = None,
    ) -> ResponseModel:
        """Make an HTTP request to the server."""
        url = f"{self.server_url}{path}"
        try:
            response = self._client.request(method=method, url=url, json=json)
            _ = response.raise_for_status()
            return response_model.model_validate(response.json())
        except httpx.HTTPStatusError as e:
            # Try to get error detail from response
            try:
                detail = ErrorResponse.model_validate(e.response.json()).detail
            except (ValidationError, ValueError):
                detail = str(e)
            msg = f"Server error: {detail}"
            raise GradewatchClientError(msg) from e
        except httpx.RequestError as e:
            msg = f"Connection error: {e}"
            raise GradewatchClientError(msg) from e
        except (ValidationError, ValueError) as e:
            msg = f"Unexpected response from {url}: {e}"
            raise GradewatchClientError(msg) from e

    def get_stats(self) -> StatsResponse:
        """Ask the server for the latest snapshot.

        Returns:
            The snapshot (None until first computed) and whether a table is attached

        """
        return self._request(
            "POST",
            "/api/v1/messages",
            json={"type": GET_STATS_MESSAGE},
            response_model=StatsResponse,
        )

    def health(self) -> HealthResponse:
        """Check server health."""
        return self._request("GET", "/api/v1/health", response_model=HealthResponse)
