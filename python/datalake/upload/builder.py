from collections.abc import Mapping
from datetime import datetime, timezone
from typing import Any

import structlog
from pydantic import BaseModel, ValidationError

from ..errors import InvalidInputError
from ..types import (
    DEFAULT_CONTENT_TYPE,
    Customer,
    DataLakeFileLevel,
    DatasetKey,
    FileProperties,
    FileVersion,
    LakeFile,
)

logger = structlog.get_logger("datalake.upload.builder")

# Month names as the backend expects them. Not taken from `calendar` because that one follows the locale.
MONTHS = (
    "JANUARY", "FEBRUARY", "MARCH", "APRIL", "MAY", "JUNE",
    "JULY", "AUGUST", "SEPTEMBER", "OCTOBER", "NOVEMBER", "DECEMBER",
)


def uploaded_month(instant: datetime) -> str:
    """Upper-case English month name of an instant. Aware instants are read in UTC."""
    if instant.tzinfo is not None:
        instant = instant.astimezone(timezone.utc)
    return MONTHS[instant.month - 1]


def coerce_version_number(value: Any) -> int:
    """Anything that is not a positive integer silently becomes 1."""
    if value is None or isinstance(value, bool):
        return 1
    try:
        number = int(value)
    except (TypeError, ValueError, OverflowError):
        return 1
    return number if number >= 1 else 1


def default_version_description(version_number: int, file_name: str) -> str:
    return f"Version {version_number} of {file_name}"


def _reference(value: Any, model: type[BaseModel], label: str) -> Any:
    """Validate a customer or dataset key selection."""
    if value is None:
        raise InvalidInputError(f"A {label} must be selected.")

    if not isinstance(value, model):
        if not isinstance(value, Mapping | BaseModel):
            raise InvalidInputError(f"Invalid {label}: expected a {model.__name__} or a mapping.")
        try:
            value = model.model_validate(value if isinstance(value, Mapping) else value.model_dump())
        except ValidationError as exc:
            raise InvalidInputError(f"Invalid {label}: {exc}") from exc

    if value.id is None or value.id <= 0:
        raise InvalidInputError(f"The {label} id must be a positive integer, got {value.id!r}.")
    if not value.name or not value.name.strip():
        raise InvalidInputError(f"The {label} name must not be empty.")
    return value


def build_file_properties(
    file: LakeFile | None,
    customer: Customer | Mapping[str, Any] | None,
    dataset_key: DatasetKey | Mapping[str, Any] | None,
    version_number: Any = 1,
    data_lake_file_level: str | DataLakeFileLevel = DataLakeFileLevel.RAW,
    metadata: Mapping[str, Any] | None = None,
    version_description: str | None = None,
    version_id: int | None = None,
    now: datetime | None = None,
) -> FileProperties:
    """
    Assemble the properties record describing one upload.

    Pure data transformation: no I/O happens here and nothing is cached. Call it
    again for every attempt.

    Args:
        file (LakeFile): The file being uploaded.
        customer (Customer | Mapping): The selected customer. Must carry a positive id and a name.
        dataset_key (DatasetKey | Mapping): The selected dataset key. Must carry a positive id and a name.
        version_number (Any): Version of the file. Non-numeric or non-positive values become 1.
        data_lake_file_level (str | DataLakeFileLevel): raw, clean or standardized, in any casing.
        metadata (Mapping[str, str | int | float | bool] | None): Free-form scalar metadata.
        version_description (str | None): Defaults to "Version {n} of {file name}".
        version_id (int | None): Existing version to target. The backend generates one when absent.
        now (datetime | None): Clock override. Defaults to the current UTC instant.

    Returns:
        FileProperties: The fully populated record, ready for `serialize`.

    Raises:
        InvalidInputError: Missing file, invalid customer or dataset key, unknown level
            or non-scalar metadata values.
    """
    if file is None:
        raise InvalidInputError("A file must be selected before uploading.")
    if not file.name:
        raise InvalidInputError("The file must have a name.")

    customer = _reference(customer, Customer, "customer")
    dataset_key = _reference(dataset_key, DatasetKey, "dataset key")

    try:
        level = DataLakeFileLevel.parse(data_lake_file_level)
    except ValueError as exc:
        raise InvalidInputError(str(exc)) from exc

    number = coerce_version_number(version_number)
    if not version_description or not version_description.strip():
        version_description = default_version_description(number, file.name)

    now = now or datetime.now(timezone.utc)

    try:
        properties = FileProperties(
            file_name=file.name,
            original_file_name=file.name,
            content_type=file.content_type or DEFAULT_CONTENT_TYPE,
            file_extension=file.extension,
            size_in_bytes=file.size,
            customer=customer,
            dataset_key=dataset_key,
            file_version=FileVersion(
                id=version_id,
                version_number=number,
                description=version_description,
            ),
            data_lake_file_level=level,
            metadata=dict(metadata or {}),
            uploaded_at=now,
            file_created_at=now,
            uploaded_month=uploaded_month(now),
        )
    except ValidationError as exc:
        raise InvalidInputError(f"Invalid file properties: {exc}") from exc

    logger.debug(
        "file_properties_built",
        file_name=properties.file_name,
        size_in_bytes=properties.size_in_bytes,
        customer_id=customer.id,
        dataset_key_id=dataset_key.id,
        version_number=number,
        level=level.value,
    )
    return properties
