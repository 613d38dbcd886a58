"""Utility functions for making HTTP requests to the PocketBase API.

These functions provide a consistent interface for calling PocketBase, with
error payload decoding and status-based logging. Failures raise
StoreOperationError carrying PocketBase's own message and field errors.
"""

import typing
from typing import Optional

from httpx import URL, AsyncClient, HTTPError, Response
from httpx._types import QueryParamTypes
from loguru import logger

from pocketbase_mcp.errors import StoreOperationError


def get_error_message(
    status_code: int, url: URL | str, method: str, msg: Optional[str] = None
) -> str:
    """Get a friendly error message based on the HTTP status code.

    Args:
        status_code: The HTTP status code
        url: The URL that was requested
        method: The HTTP method used
        msg: Message reported by PocketBase, if any

    Returns:
        A user-friendly error message
    """
    # Extract path from URL for cleaner error messages
    path = str(url).rstrip("/").split("/")[-1] if url else "resource"
    suffix = f": {msg}" if msg else ""

    # Client errors (400-499)
    if status_code == 400:
        return f"Invalid request: The request to '{path}' was rejected{suffix}"
    elif status_code == 401:
        return f"Authentication required: You need superuser access for '{path}'{suffix}"
    elif status_code == 403:
        return f"Access denied: You don't have permission to access '{path}'{suffix}"
    elif status_code == 404:
        return f"Resource not found: '{path}' doesn't exist{suffix}"
    elif status_code == 429:  # pragma: no cover
        return "Too many requests: Please slow down and try again later"
    elif 400 <= status_code < 500:  # pragma: no cover
        return f"Client error ({status_code}): The request for '{path}' could not be completed{suffix}"

    # Server errors (500-599)
    elif 500 <= status_code < 600:
        return f"Server error ({status_code}): PocketBase failed handling '{path}'{suffix}"

    # Fallback for any other status code
    else:  # pragma: no cover
        return f"HTTP error {status_code}: {method} request to '{path}' failed{suffix}"


def _extract_response_data(response: Response) -> typing.Any:
    """Safely decode response payload for error reporting."""
    try:
        return response.json()
    except ValueError:
        return None


def _raise_for_response(response: Response, url: URL | str, method: str) -> None:
    """Log and raise StoreOperationError for a non-success response.

    PocketBase error bodies look like ``{"status": 400, "message": "...", "data": {...}}``
    where data holds per-field validation errors.
    """
    status_code = response.status_code
    response_data = _extract_response_data(response)

    message = None
    data = None
    if isinstance(response_data, dict):
        message = response_data.get("message") or None
        data = response_data.get("data") or None
    error_message = get_error_message(status_code, url, method, message)

    # Log at appropriate level based on status code
    if 400 <= status_code < 500:
        if status_code == 429:  # pragma: no cover
            logger.warning(f"Rate limit exceeded: {method} {url}: {error_message}")
        else:
            logger.info(f"Client error: {method} {url}: {error_message}")
    else:
        logger.error(f"Server error: {method} {url}: {error_message}")

    raise StoreOperationError(error_message, status_code=status_code, data=data)


async def _send(
    client: AsyncClient,
    method: str,
    url: URL | str,
    *,
    params: QueryParamTypes | None = None,
    json: typing.Any | None = None,
) -> Response:
    logger.debug(f"Calling {method} '{url}' params: '{params}'")
    try:
        response = await client.request(method, url, params=params, json=json)
    except HTTPError as e:
        logger.error(f"Transport error: {method} {url}: {e}")
        raise StoreOperationError(f"Could not reach PocketBase for {method} '{url}': {e}") from e

    if not response.is_success:
        _raise_for_response(response, url, method)
    return response


async def call_get(
    client: AsyncClient,
    url: URL | str,
    *,
    params: QueryParamTypes | None = None,
) -> Response:
    """Make a GET request and handle errors appropriately.

    Args:
        client: The HTTPX AsyncClient to use
        url: The URL to request
        params: Query parameters

    Returns:
        The HTTP response

    Raises:
        StoreOperationError: If the request fails
    """
    return await _send(client, "GET", url, params=params)


async def call_post(
    client: AsyncClient,
    url: URL | str,
    *,
    json: typing.Any | None = None,
    params: QueryParamTypes | None = None,
) -> Response:
    """Make a POST request and handle errors appropriately.

    Raises:
        StoreOperationError: If the request fails
    """
    return await _send(client, "POST", url, params=params, json=json)


async def call_patch(
    client: AsyncClient,
    url: URL | str,
    *,
    json: typing.Any | None = None,
    params: QueryParamTypes | None = None,
) -> Response:
    """Make a PATCH request and handle errors appropriately.

    Raises:
        StoreOperationError: If the request fails
    """
    return await _send(client, "PATCH", url, params=params, json=json)


async def call_delete(
    client: AsyncClient,
    url: URL | str,
    *,
    params: QueryParamTypes | None = None,
) -> Response:
    """Make a DELETE request and handle errors appropriately.

    Raises:
        StoreOperationError: If the request fails
    """
    return await _send(client, "DELETE", url, params=params)
