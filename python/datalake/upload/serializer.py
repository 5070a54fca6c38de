from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

from ..types import Customer, DatasetKey, FileProperties, LakeFile

TIMESTAMP_FORMAT = "%Y-%m-%dT%H:%M:%S"


@dataclass
class MultipartFormBody:
    """A flat multipart/form-data body, in the shape httpx expects.

    `fields` become the `data=` argument and `files` the `files=` argument of
    an httpx request.
    """

    fields: dict[str, str] = field(default_factory=dict)
    files: dict[str, tuple[str, bytes, str]] = field(default_factory=dict)

    def __contains__(self, name: str) -> bool:
        return name in self.fields or name in self.files

    def __getitem__(self, name: str) -> str:
        return self.fields[name]


def format_timestamp(instant: datetime) -> str:
    """Seconds precision, no zone: `YYYY-MM-DDTHH:MM:SS`.

    The receiving field has no timezone component. Aware instants are converted
    to UTC before the offset is dropped; naive ones are formatted as they are.
    """
    if instant.tzinfo is not None:
        instant = instant.astimezone(timezone.utc).replace(tzinfo=None)
    return instant.strftime(TIMESTAMP_FORMAT)


def stringify(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _put_reference(fields: dict[str, str], prefix: str, reference: Customer | DatasetKey) -> None:
    fields[f"{prefix}.id"] = stringify(reference.id)
    fields[f"{prefix}.name"] = reference.name
    if reference.description is not None:
        fields[f"{prefix}.description"] = reference.description
    if reference.path_name is not None:
        fields[f"{prefix}.pathName"] = reference.path_name


def serialize(file: LakeFile, properties: FileProperties) -> MultipartFormBody:
    """Flatten a FileProperties record into multipart form fields.

    Nested records use dotted names (`customer.id`, `fileVersion.versionNumber`,
    `metadata.<key>`). Optional values that are absent are left out entirely
    instead of being sent as empty strings.
    """
    fields: dict[str, str] = {
        "fileName": properties.file_name,
        "originalFileName": properties.original_file_name,
        "contentType": properties.content_type,
        "fileExtension": properties.file_extension,
        "sizeInBytes": stringify(properties.size_in_bytes),
        "dataLakeFileLevel": properties.data_lake_file_level.wire_value,
    }

    _put_reference(fields, "customer", properties.customer)

    version = properties.file_version
    if version.id is not None:
        fields["fileVersion.id"] = stringify(version.id)
    fields["fileVersion.versionNumber"] = stringify(version.version_number)
    if version.description is not None:
        fields["fileVersion.description"] = version.description

    _put_reference(fields, "datasetKey", properties.dataset_key)

    for key, value in properties.metadata.items():
        fields[f"metadata.{key}"] = stringify(value)

    if properties.uploaded_at is not None:
        fields["uploadedAt"] = format_timestamp(properties.uploaded_at)
    if properties.file_created_at is not None:
        fields["fileCreatedAt"] = format_timestamp(properties.file_created_at)
    if properties.uploaded_month is not None:
        fields["uploadedMonth"] = properties.uploaded_month

    files = {"file": (file.name, file.content, properties.content_type)}
    return MultipartFormBody(fields=fields, files=files)
