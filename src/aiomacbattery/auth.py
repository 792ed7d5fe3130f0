"""Module for AbstractAuth for the Graph API."""

import asyncio
import logging
from abc import ABC, abstractmethod
from collections.abc import Mapping
from http import HTTPStatus
from typing import Any

import orjson
from aiohttp import ClientError, ClientResponse, ClientResponseError, ClientSession

from .const import (
    AUTH_HEADER_FMT,
    GRAPH_API_BASE_URL,
    RATE_LIMIT_DEFAULT_DELAY,
    RATE_LIMIT_MAX_ATTEMPTS,
    RATE_LIMIT_MAX_DELAY,
    SERVICE_UNAVAILABLE_DELAYS,
)
from .exceptions import (
    ApiBadRequestError,
    ApiError,
    ApiForbiddenError,
    ApiNotFoundError,
    ApiRateLimitError,
    ApiServiceUnavailableError,
    ApiUnauthorizedError,
    AuthError,
)

ERROR = "error"
CODE = "code"
MESSAGE = "message"

_LOGGER = logging.getLogger(__name__)

_STATUS_ERRORS: dict[int, type[ApiError]] = {
    HTTPStatus.BAD_REQUEST: ApiBadRequestError,
    HTTPStatus.UNAUTHORIZED: ApiUnauthorizedError,
    HTTPStatus.FORBIDDEN: ApiForbiddenError,
    HTTPStatus.NOT_FOUND: ApiNotFoundError,
    HTTPStatus.TOO_MANY_REQUESTS: ApiRateLimitError,
    HTTPStatus.SERVICE_UNAVAILABLE: ApiServiceUnavailableError,
}


def retry_after_delay(header: str | None, retry: int) -> int:
    """Return the backoff before the next attempt after a 429.

    The server suggested delay (or the default) doubles with each retry and
    is capped at the maximum delay.
    """
    base = RATE_LIMIT_DEFAULT_DELAY
    if header is not None and header.strip().isdigit():
        base = int(header.strip())
    return min(base * 2**retry, RATE_LIMIT_MAX_DELAY)


class AbstractAuth(ABC):
    """Abstract class to make authenticated requests."""

    def __init__(self, websession: ClientSession, host: str | None = None) -> None:
        """Initialize the auth."""
        self._websession = websession
        self._host = host if host is not None else GRAPH_API_BASE_URL

    @abstractmethod
    async def async_get_access_token(self) -> str:
        """Return a valid access token."""

    async def request(
        self, method: str, url: str, **kwargs: Mapping[str, Any] | None
    ) -> ClientResponse:
        """Make a request."""
        headers = await self.headers()
        if not (url.startswith("http://") or url.startswith("https://")):
            url = f"{self._host}/{url}"
        _LOGGER.debug("request[%s]=%s %s", method, url, kwargs.get("params"))
        return await self._websession.request(method, url, **kwargs, headers=headers)

    async def get(self, url: str, **kwargs: Mapping[str, Any]) -> ClientResponse:
        """Make a get request, retrying while the API asks to back off."""
        rate_limited = 0
        unavailable = 0
        while True:
            try:
                resp = await self.request("get", url, **kwargs)
            except (ClientError, TimeoutError) as err:
                msg = f"Error connecting to API: {err!r}"
                raise ApiError(msg) from err
            if (
                resp.status == HTTPStatus.TOO_MANY_REQUESTS
                and rate_limited < RATE_LIMIT_MAX_ATTEMPTS - 1
            ):
                delay = retry_after_delay(resp.headers.get("Retry-After"), rate_limited)
                rate_limited += 1
            elif resp.status == HTTPStatus.SERVICE_UNAVAILABLE and unavailable < len(
                SERVICE_UNAVAILABLE_DELAYS
            ):
                delay = SERVICE_UNAVAILABLE_DELAYS[unavailable]
                unavailable += 1
            else:
                return await AbstractAuth._raise_for_status(resp)
            _LOGGER.warning(
                "API answered %s for %s, retrying in %s seconds",
                resp.status,
                url,
                delay,
            )
            resp.release()
            await asyncio.sleep(delay)

    async def get_json(self, url: str, **kwargs: Mapping[str, Any]) -> dict[str, Any]:
        """Make a get request and return json response."""
        resp = await self.get(url, **kwargs)
        try:
            result = await resp.json(encoding="UTF-8", loads=orjson.loads)
        except (ClientError, TimeoutError, orjson.JSONDecodeError) as err:
            msg = "Server returned malformed response"
            raise ApiError(msg, resp.status) from err
        if not isinstance(result, dict):
            msg = f"Server returned malformed response: {result}"
            raise ApiError(msg, resp.status)
        _LOGGER.debug("response=%s", result)
        return result

    async def _async_get_access_token(self) -> str:
        """Request a new access token."""
        try:
            return await self.async_get_access_token()
        except (ClientError, TimeoutError) as err:
            msg = f"Access token failure: {err}"
            raise AuthError(msg) from err

    async def headers(self) -> dict[str, str]:
        """Generate headers for ReST requests."""
        access_token = await self._async_get_access_token()
        return {
            "Authorization": AUTH_HEADER_FMT.format(access_token),
            "Accept": "application/json",
        }

    @staticmethod
    async def _raise_for_status(resp: ClientResponse) -> ClientResponse:
        """Raise exceptions on failure methods."""
        detail = await AbstractAuth._error_detail(resp)
        try:
            resp.raise_for_status()
        except ClientResponseError as err:
            error_class = _STATUS_ERRORS.get(err.status, ApiError)
            detail.append(str(err))
            raise error_class(": ".join(detail), err.status) from err
        return resp

    @staticmethod
    async def _error_detail(resp: ClientResponse) -> list[str]:
        """Return an error message string from the API response."""
        if resp.status < HTTPStatus.BAD_REQUEST:
            return []
        message = ["Error from API", f"{resp.status}"]
        try:
            result = await resp.json(loads=orjson.loads)
        except (ClientError, ValueError):
            return message
        error = result.get(ERROR, {}) if isinstance(result, dict) else {}
        if not isinstance(error, dict):
            return message
        if CODE in error:
            message.append(f"{error[CODE]}")
        if MESSAGE in error:
            message.append(f"{error[MESSAGE]}")
        return message


class StaticTokenAuth(AbstractAuth):
    """Authenticate with an access token obtained elsewhere."""

    def __init__(
        self, websession: ClientSession, access_token: str, host: str | None = None
    ) -> None:
        """Initialize the auth with a fixed token."""
        super().__init__(websession, host)
        self._access_token = access_token

    async def async_get_access_token(self) -> str:
        """Return the configured access token."""
        return self._access_token
