"""HTTP client for the intake REST API with retry logic and error mapping."""

import logging
import os
import random
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, TypeVar

import httpx
from pydantic import TypeAdapter, ValidationError

from student_intake.errors import (
    ApiConnectionError,
    ApiError,
    ApiResponseError,
    AuthenticationError,
    NotFoundError,
    PermissionDeniedError,
)
from student_intake.session.store import DEFAULT_SESSION_FILE, Session, SessionStore

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Default configuration
DEFAULT_BASE_URL = "http://localhost:8000"
DEFAULT_API_PREFIX = "/api/v1"
DEFAULT_TIMEOUT = 30.0
DEFAULT_MAX_RETRIES = 2
DEFAULT_BASE_DELAY = 0.5
DEFAULT_MAX_DELAY = 8.0

RETRYABLE_STATUS_CODES = (502, 503, 504)

NETWORK_ERROR_MESSAGE = "Network error. Please check your connection and try again."
UNAUTHORIZED_MESSAGE = "Authentication failed. Please log in again."
FORBIDDEN_MESSAGE = "You do not have permission to access this resource."


@dataclass
class ApiConfig:
    """Configuration for the API client."""

    base_url: str = DEFAULT_BASE_URL
    api_prefix: str = DEFAULT_API_PREFIX
    timeout: float = DEFAULT_TIMEOUT
    max_retries: int = DEFAULT_MAX_RETRIES
    base_delay: float = DEFAULT_BASE_DELAY
    max_delay: float = DEFAULT_MAX_DELAY
    session_file: Path = DEFAULT_SESSION_FILE

    @classmethod
    def from_env(cls) -> "ApiConfig":
        """Create config from environment variables.

        Optional environment variables:
            INTAKE_API_BASE_URL: Server root (default: http://localhost:8000)
            INTAKE_API_PREFIX: Path prefix of every endpoint (default: /api/v1)
            INTAKE_API_TIMEOUT: Request timeout in seconds (default: 30)
            INTAKE_API_MAX_RETRIES: Retries for idempotent reads (default: 2)
            INTAKE_SESSION_FILE: Where the login token is kept
                (default: ~/.student_intake/session.json)

        Raises:
            ValueError: If a numeric variable cannot be parsed.
        """
        return cls(
            base_url=os.getenv("INTAKE_API_BASE_URL", DEFAULT_BASE_URL).rstrip("/"),
            api_prefix=os.getenv("INTAKE_API_PREFIX", DEFAULT_API_PREFIX).rstrip("/"),
            timeout=float(os.getenv("INTAKE_API_TIMEOUT", str(DEFAULT_TIMEOUT))),
            max_retries=int(
                os.getenv("INTAKE_API_MAX_RETRIES", str(DEFAULT_MAX_RETRIES))
            ),
            session_file=Path(
                os.getenv("INTAKE_SESSION_FILE", str(DEFAULT_SESSION_FILE))
            ).expanduser(),
        )


def extract_detail(response: httpx.Response) -> str | None:
    """Pull the server's error message out of a response body.

    Handles both ``{"detail": "..."}`` and the request-validation form
    ``{"detail": [{"msg": "...", ...}]}``.
    """
    try:
        body = response.json()
    except ValueError:
        return None
    if not isinstance(body, dict):
        return None

    detail = body.get("detail")
    if isinstance(detail, str) and detail:
        return detail
    if isinstance(detail, list) and detail:
        first = detail[0]
        if isinstance(first, dict) and first.get("msg"):
            return str(first["msg"])
    return None


def decode(response: httpx.Response, type_: type[T] | Any, fallback: str) -> T:
    """Validate a JSON response body into ``type_``.

    Raises:
        ApiResponseError: If the body is not JSON or has the wrong shape.
    """
    try:
        return TypeAdapter(type_).validate_python(response.json())
    except (ValueError, ValidationError) as e:
        logger.error(
            "Unexpected response body from %s: %s", response.request.url.path, e
        )
        raise ApiResponseError(fallback, response.status_code) from e


@dataclass
class ApiClient:
    """Client for the intake REST API.

    Features:
    - Bearer token attached to authenticated calls only
    - Session cleared when the server rejects the token (401)
    - Automatic retry with exponential backoff for idempotent reads
    - Server errors normalized into ApiError subclasses
    """

    config: ApiConfig = field(default_factory=ApiConfig)
    session: Session = field(default_factory=Session)
    transport: httpx.BaseTransport | None = field(default=None, repr=False)
    _client: httpx.Client = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._client = httpx.Client(
            base_url=self.config.base_url,
            timeout=self.config.timeout,
            transport=self.transport,
            headers={"Accept": "application/json"},
        )

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> "ApiClient":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def _calculate_backoff(self, attempt: int) -> float:
        """Exponential backoff with up to 25% jitter."""
        delay = self.config.base_delay * (2**attempt)
        jitter = delay * 0.25 * random.random()
        return float(min(delay + jitter, self.config.max_delay))

    def _error_for(
        self,
        response: httpx.Response,
        authenticated: bool,
        fallback: str,
        not_found: str | None = None,
    ) -> ApiError:
        """Map an error response onto the exception hierarchy."""
        status = response.status_code
        detail = extract_detail(response)

        if status == 401:
            if authenticated and self.session.is_authenticated:
                logger.warning("Server rejected the session token; signing out")
                self.session.clear()
            return AuthenticationError(detail or UNAUTHORIZED_MESSAGE)
        if status == 403:
            return PermissionDeniedError(detail or FORBIDDEN_MESSAGE)
        if status == 404:
            return NotFoundError(detail or not_found or fallback)
        return ApiResponseError(detail or fallback, status)

    def request(
        self,
        method: str,
        path: str,
        *,
        authenticated: bool = False,
        fallback: str = "Request failed. Please try again.",
        not_found: str | None = None,
        params: Any = None,
        json: Any = None,
        files: Any = None,
    ) -> httpx.Response:
        """Send a request and return the successful response.

        Only GET requests are retried; writes are sent exactly once.

        Args:
            method: HTTP method.
            path: Path below the configured API prefix.
            authenticated: Attach the session's bearer token.
            fallback: Message used when the server gives no detail.
            not_found: Message for a 404 without detail (defaults to fallback).
            params: Query parameters.
            json: JSON body.
            files: Multipart parts.

        Returns:
            The 2xx response.

        Raises:
            ApiConnectionError: If no response was received.
            AuthenticationError: On 401.
            PermissionDeniedError: On 403.
            NotFoundError: On 404.
            ApiResponseError: On any other error status.
        """
        url = f"{self.config.api_prefix}{path}"
        headers = self.session.auth_header() if authenticated else {}
        retries = self.config.max_retries if method.upper() == "GET" else 0

        attempt = 0
        while True:
            try:
                response = self._client.request(
                    method,
                    url,
                    params=params,
                    json=json,
                    files=files,
                    headers=headers,
                )
            except httpx.TransportError as e:
                if attempt >= retries:
                    logger.error(
                        "%s %s failed after %d attempts: %s",
                        method,
                        url,
                        attempt + 1,
                        e,
                    )
                    raise ApiConnectionError(NETWORK_ERROR_MESSAGE) from e
                delay = self._calculate_backoff(attempt)
                logger.warning(
                    "%s %s failed (attempt %d/%d), retrying in %.1fs: %s",
                    method,
                    url,
                    attempt + 1,
                    retries + 1,
                    delay,
                    e,
                )
                time.sleep(delay)
                attempt += 1
                continue

            if response.status_code in RETRYABLE_STATUS_CODES and attempt < retries:
                delay = self._calculate_backoff(attempt)
                logger.warning(
                    "%s %s returned %d (attempt %d/%d), retrying in %.1fs",
                    method,
                    url,
                    response.status_code,
                    attempt + 1,
                    retries + 1,
                    delay,
                )
                time.sleep(delay)
                attempt += 1
                continue
            break

        logger.debug("%s %s -> %d", method, url, response.status_code)

        if response.is_success:
            return response
        raise self._error_for(response, authenticated, fallback, not_found)


def create_client(
    config: ApiConfig | None = None,
    transport: httpx.BaseTransport | None = None,
) -> ApiClient:
    """Create a client whose session is restored from the configured file.

    Args:
        config: Optional configuration. If not provided, loads from environment.
        transport: Optional httpx transport (used by tests).

    Returns:
        Configured ApiClient instance.
    """
    if config is None:
        config = ApiConfig.from_env()
    session = Session.load(SessionStore(config.session_file))
    return ApiClient(config=config, session=session, transport=transport)
