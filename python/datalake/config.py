import os

import httpx
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from .errors import InvalidInputError

DEFAULT_BACKEND_URL = "http://localhost:8087"


class Endpoints(BaseModel):
    """REST paths of the file-management backend, relative to `backend_url`.

    Paths containing `{id}` are formatted with the resource identifier.
    """

    upload: str = "/api/v1/files/upload"
    """Multipart upload of a single file."""
    filter_files: str = "/api/v1/file-properties/filter"
    """Paginated catalog filter."""
    download: str = "/api/v1/files/{id}/download"
    """Download a file by its catalog id."""
    download_by_filters: str = "/api/v1/files/download"
    """Download a file identified by level, customer, dataset key, version, name and period."""

    customers: str = "/api/v1/customers"
    customer: str = "/api/v1/customers/{id}"
    customers_search: str = "/api/v1/customers/search"

    dataset_keys: str = "/api/v1/dataset-keys"
    dataset_key: str = "/api/v1/dataset-keys/{id}"
    dataset_keys_search: str = "/api/v1/dataset-keys/search"
    dataset_keys_empty: str = "/api/v1/dataset-keys/empty"
    dataset_keys_with_files: str = "/api/v1/dataset-keys/with-files"


class ClientConfig(BaseModel):
    """Everything needed to reach the backend."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    backend_url: str = DEFAULT_BACKEND_URL
    """Base url of the backend, without trailing slash."""
    timeout: float = 10.0
    """Connect, write and pool timeout in seconds. Reads are unbounded so large uploads can finish."""
    endpoints: Endpoints = Field(default_factory=Endpoints)
    """REST paths."""
    transport: httpx.AsyncBaseTransport | None = Field(None, exclude=True)
    """Optional transport handed to httpx (e.g. httpx.MockTransport in tests)."""

    @model_validator(mode="before")
    @classmethod
    def handle_aliases(cls, values):
        # The front end configuration used to call this "backendUrl".
        if isinstance(values, dict) and "backendUrl" in values:
            values["backend_url"] = values.pop("backendUrl")
        return values

    @field_validator("backend_url")
    @classmethod
    def trim_trailing_slash(cls, value: str) -> str:
        return value.rstrip("/")

    @classmethod
    def from_env(cls) -> "ClientConfig":
        """Resolve the configuration from DATALAKE_BACKEND_URL and DATALAKE_TIMEOUT."""
        values = {}
        backend_url = os.getenv("DATALAKE_BACKEND_URL")
        if backend_url:
            values["backend_url"] = backend_url
        timeout = os.getenv("DATALAKE_TIMEOUT")
        if timeout:
            try:
                values["timeout"] = float(timeout)
            except ValueError as e:
                raise InvalidInputError(f"DATALAKE_TIMEOUT must be a number of seconds, got {timeout!r}") from e
        return cls(**values)

    def url(self, path: str, **path_params) -> str:
        """Build an absolute url from an endpoint path."""
        return f"{self.backend_url}{path.format(**path_params)}"

    def http_timeout(self) -> httpx.Timeout:
        return httpx.Timeout(self.timeout, read=None)
