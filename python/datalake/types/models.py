"""Pydantic models for the resources exposed by the file-management backend.

The backend speaks camelCase JSON. Models expose snake_case attributes and accept
either spelling on input; dumps for the wire use `by_alias=True`.
"""
from datetime import datetime
from enum import Enum
from typing import Any, Generic, Literal, TypeVar

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

T = TypeVar("T")


def _blank_to_none(value: Any) -> Any:
    if isinstance(value, str) and not value.strip():
        return None
    return value


class ApiModel(BaseModel):
    """Base for every model exchanged with the backend."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )

    def to_wire(self) -> dict[str, Any]:
        """JSON-compatible dict with camelCase keys and absent fields left out."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class DataLakeFileLevel(str, Enum):
    """Pipeline stage of a stored file."""

    RAW = "raw"
    CLEAN = "clean"
    STANDARDIZED = "standardized"

    @classmethod
    def parse(cls, value: "str | DataLakeFileLevel") -> "DataLakeFileLevel":
        """Case-insensitive lookup. Raises ValueError for unknown levels."""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            allowed = ", ".join(level.value for level in cls)
            raise ValueError(f"Unknown data lake level {value!r}. Expected one of: {allowed}") from None

    @property
    def wire_value(self) -> str:
        """Upper-case spelling expected by the backend."""
        return self.value.upper()


class Customer(ApiModel):
    id: int | None = None
    """Backend identifier. Absent until the customer is created."""
    name: str
    """Display name."""
    email: str | None = None
    """Contact email. Only present on newer backend revisions."""
    description: str | None = None
    path_name: str | None = None
    """Directory name used for this customer inside the lake."""
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @field_validator("email", "description", "path_name", mode="before")
    @classmethod
    def blank_to_none(cls, value: Any) -> Any:
        return _blank_to_none(value)


class DatasetKey(ApiModel):
    id: int | None = None
    """Backend identifier. Absent until the dataset key is created."""
    name: str
    """Display name."""
    description: str | None = None
    path_name: str | None = None
    """Directory name used for this dataset inside the lake."""
    customer_id: int | None = None
    """Owning customer, when the dataset key is customer-scoped."""
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @field_validator("description", "path_name", mode="before")
    @classmethod
    def blank_to_none(cls, value: Any) -> Any:
        return _blank_to_none(value)


class CustomerCreateRequest(ApiModel):
    name: str
    email: str | None = None
    description: str | None = None
    path_name: str | None = None

    @field_validator("email", "description", "path_name", mode="before")
    @classmethod
    def blank_to_none(cls, value: Any) -> Any:
        return _blank_to_none(value)


class CustomerUpdateRequest(ApiModel):
    """Partial update. Only the fields that are set are sent."""

    name: str | None = None
    email: str | None = None
    description: str | None = None
    path_name: str | None = None


class DatasetKeyCreateRequest(ApiModel):
    name: str
    description: str | None = None
    path_name: str | None = None
    customer_id: int | None = None

    @field_validator("description", "path_name", mode="before")
    @classmethod
    def blank_to_none(cls, value: Any) -> Any:
        return _blank_to_none(value)


class DatasetKeyUpdateRequest(ApiModel):
    """Partial update. Only the fields that are set are sent."""

    name: str | None = None
    description: str | None = None
    path_name: str | None = None
    customer_id: int | None = None


class Page(ApiModel, Generic[T]):
    """One page of a paginated listing."""

    content: list[T] = Field(default_factory=list)
    total_elements: int = 0
    total_pages: int = 0
    number: int = 0
    """Zero-based page index."""
    size: int = 0

    @property
    def is_last(self) -> bool:
        return self.number + 1 >= self.total_pages


class FileVersion(ApiModel):
    id: int | None = None
    """Set only when targeting an existing version; the backend generates it otherwise."""
    version_number: int = Field(1, ge=1)
    description: str | None = None

    @field_validator("description", mode="before")
    @classmethod
    def blank_to_none(cls, value: Any) -> Any:
        return _blank_to_none(value)


MetadataValue = str | int | float | bool


class FileProperties(ApiModel):
    """Everything the backend needs to know about a file being uploaded.

    Built fresh for every upload by `datalake.upload.build_file_properties` and
    discarded once serialized. Optional fields set to None are absent and are
    left out of the multipart body.
    """

    file_name: str
    original_file_name: str
    content_type: str
    file_extension: str
    """Substring from the last dot of the file name, dot included. Empty when the name has no dot."""
    size_in_bytes: int = Field(ge=0)
    customer: Customer
    dataset_key: DatasetKey
    file_version: FileVersion = Field(default_factory=FileVersion)
    data_lake_file_level: DataLakeFileLevel = DataLakeFileLevel.RAW
    metadata: dict[str, MetadataValue] = Field(default_factory=dict)
    uploaded_at: datetime | None = None
    file_created_at: datetime | None = None
    uploaded_month: str | None = None
    """Upper-case English month name of the upload, e.g. "MARCH"."""

    @field_validator("data_lake_file_level", mode="before")
    @classmethod
    def parse_level(cls, value: Any) -> Any:
        return DataLakeFileLevel.parse(value)


class FilePropertiesDto(ApiModel):
    """A catalog entry as returned by the filter endpoint."""

    model_config = ConfigDict(extra="allow")

    id: int
    file_name: str
    original_file_name: str | None = None
    content_type: str | None = None
    file_extension: str | None = None
    size_in_bytes: int = 0
    data_lake_file_level: str | None = None
    customer: Customer | None = None
    dataset_key: DatasetKey | None = None
    file_version: FileVersion | None = None
    uploaded_at: datetime | None = None
    file_created_at: datetime | None = None
    uploaded_month: str | None = None
    metadata: dict[str, Any] = Field(default_factory=dict)


SortField = Literal["id", "fileName", "uploadedAt", "sizeInBytes"]


class FileFilterParams(ApiModel):
    """Query of the file catalog. Unset filters are not sent."""

    file_name: str | None = None
    customer_id: int | None = None
    dataset_key_id: int | None = None
    data_lake_file_level: DataLakeFileLevel | None = None
    content_type: str | None = None
    file_extension: str | None = None
    page: int = Field(0, ge=0)
    size: int = Field(10, ge=1)
    sort_by: SortField = "id"
    sort_dir: Literal["asc", "desc"] = "desc"

    @field_validator("file_name", "customer_id", "dataset_key_id", "content_type", "file_extension", mode="before")
    @classmethod
    def blank_to_none(cls, value: Any) -> Any:
        return _blank_to_none(value)

    @field_validator("data_lake_file_level", mode="before")
    @classmethod
    def parse_level(cls, value: Any) -> Any:
        value = _blank_to_none(value)
        if value is None:
            return None
        return DataLakeFileLevel.parse(value)

    def to_query(self) -> dict[str, Any]:
        params = self.model_dump(by_alias=True, exclude_none=True)
        if self.data_lake_file_level is not None:
            params["dataLakeFileLevel"] = self.data_lake_file_level.wire_value
        return params


class UploadResult(ApiModel):
    """What the backend answers to a successful upload."""

    model_config = ConfigDict(extra="allow")

    id: int | str | None = None
    file_url: str | None = None
