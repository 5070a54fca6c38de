from typing import Any

NOT_FOUND_MARKERS = ("No file found", "not found")

FILES_NOT_FOUND = (
    "No files found matching the applied filters. "
    "Try adjusting the filters or check that matching files exist."
)

FILE_NOT_FOUND = "File not found. Check that the file still exists in the data lake."


class DatalakeError(Exception):
    """Base class for all datalake errors."""


class InvalidInputError(DatalakeError):
    """Error raised when local validation fails before any request is sent."""


class TransportError(DatalakeError):
    """Error raised when a backend API call fails or returns a non-2xx status."""

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        url: str | None = None,
        body: Any = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.url = url
        self.body = body


def describe_error(exc: BaseException, action: str, not_found: str | None = None) -> str:
    """Turn an exception into the text shown to the operator.

    When `not_found` is given, "not found" variants returned by the read paths
    are replaced by it. Everything else is prefixed with the action that failed.
    """
    message = getattr(exc, "message", None) or str(exc) or type(exc).__name__
    if not_found and any(marker in message for marker in NOT_FOUND_MARKERS):
        return not_found
    return f"Failed to {action}: {message}"
