from typing import Any, Literal

import httpx
import structlog

from ..config import ClientConfig
from ..errors import TransportError
from ..state import get_or_create_config

logger = structlog.get_logger("datalake.api.utils")


def _error_body(response: httpx.Response) -> Any:
    try:
        return response.json()
    except Exception:
        return response.text or None


def _error_message(response: httpx.Response, body: Any) -> str:
    """The backend's own message when it sent one, a generic one otherwise."""
    if isinstance(body, dict):
        message = body.get("message")
        if isinstance(message, str) and message.strip():
            return message
    return f"Request failed with status {response.status_code} {response.reason_phrase}".rstrip()


async def _request(
    method: Literal["GET", "POST", "PUT", "DELETE"],
    path: str,
    config: ClientConfig | None = None,
    path_params: dict[str, Any] | None = None,
    params: dict[str, Any] | None = None,
    json: dict[str, Any] | None = None,
    data: dict[str, str] | None = None,
    files: dict[str, tuple[str, bytes, str]] | None = None,
) -> httpx.Response:
    """Utility function for making backend API calls.

    A single attempt is made. Failures are raised as TransportError; retrying is
    up to the caller.
    """
    config = config or get_or_create_config()
    url = config.url(path, **(path_params or {}))

    payload_kwargs = {}
    if json is not None:
        payload_kwargs["json"] = json
    if data is not None:
        payload_kwargs["data"] = data
    if files is not None:
        payload_kwargs["files"] = files

    try:
        async with httpx.AsyncClient(timeout=config.http_timeout(), transport=config.transport) as client:
            res = await client.request(method, url, params=params, **payload_kwargs)
            res.raise_for_status()
            return res
    except httpx.HTTPStatusError as exc:
        body = _error_body(exc.response)
        message = _error_message(exc.response, body)
        logger.warning(
            "request_failed",
            method=method,
            url=str(exc.request.url),
            status_code=exc.response.status_code,
            message=message,
        )
        raise TransportError(
            message,
            status_code=exc.response.status_code,
            url=str(exc.request.url),
            body=body,
        ) from exc
    except httpx.RequestError as exc:
        logger.warning("request_failed", method=method, url=url, error=str(exc))
        raise TransportError(f"Connection error: {exc}", url=url) from exc
