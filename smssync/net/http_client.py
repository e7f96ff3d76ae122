"""HTTP transport used to reach sync endpoints."""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any

import httpx

logger = logging.getLogger(__name__)

JSON_CONTENT_TYPE = "application/json; charset=utf-8"


@dataclass
class HttpResponse:
    """Status and body of a completed request."""

    status_code: int
    body: str | None = ""
    reason: str = ""

    @property
    def ok(self) -> bool:
        return self.status_code == 200


class HttpTransport(ABC):
    """Performs one blocking HTTP request.

    Implementations raise ``httpx.HTTPError`` (or a subclass) on transport
    failures; non-200 statuses are returned, not raised.
    """

    @abstractmethod
    def execute(self, method: str, url: str, body: str | None = None) -> HttpResponse:
        """Send a request.

        Args:
            method: HTTP method (GET, POST).
            url: Fully built URL including query string.
            body: Optional JSON text sent as the request body.

        Returns:
            HttpResponse with status code and body text.
        """
        pass

    def close(self) -> None:
        """Release any held connections."""


class HttpxTransport(HttpTransport):
    """HttpTransport backed by a shared ``httpx.Client``."""

    def __init__(
        self,
        timeout: float = 30.0,
        user_agent: str = "SMSSync-Python",
        client: httpx.Client | None = None,
    ):
        """Initialize the transport.

        Args:
            timeout: Request timeout in seconds.
            user_agent: Value of the User-Agent header.
            client: Pre-built client, mainly for tests.
        """
        self.timeout = timeout
        self.user_agent = user_agent
        self._client = client

    def _get_client(self) -> httpx.Client:
        """Get or create HTTP client."""
        if self._client is None:
            self._client = httpx.Client(
                timeout=self.timeout,
                headers={"User-Agent": self.user_agent},
            )
        return self._client

    def execute(self, method: str, url: str, body: str | None = None) -> HttpResponse:
        client = self._get_client()

        kwargs: dict[str, Any] = {}
        if body is not None:
            kwargs["content"] = body.encode("utf-8")
            kwargs["headers"] = {"Content-Type": JSON_CONTENT_TYPE}

        response = client.request(method.upper(), url, **kwargs)
        logger.debug(f"{method.upper()} {response.url} -> {response.status_code}")

        return HttpResponse(
            status_code=response.status_code,
            body=response.text,
            reason=response.reason_phrase,
        )

    def close(self) -> None:
        """Close the HTTP client."""
        if self._client:
            self._client.close()
            self._client = None

    def __enter__(self) -> "HttpxTransport":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()
