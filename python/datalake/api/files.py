from collections.abc import AsyncGenerator, Mapping
from pathlib import PurePosixPath
from typing import Any

import httpx
import structlog

from ..config import ClientConfig
from ..errors import InvalidInputError
from ..state import get_or_create_config
from ..types import (
    DEFAULT_CONTENT_TYPE,
    Customer,
    DataLakeFileLevel,
    DatasetKey,
    FileFilterParams,
    FilePropertiesDto,
    LakeFile,
    Page,
    UploadResult,
)
from ..upload import build_file_properties, serialize
from .utils import _request

logger = structlog.get_logger("datalake.api.files")


def _filename_from_headers(res: httpx.Response) -> str | None:
    content_disposition = res.headers.get("Content-Disposition")
    if not content_disposition or "filename=" not in content_disposition:
        return None
    filename = content_disposition.split("filename=")[1].split(";")[0].strip().strip('"\'')
    # Keep only the final path component.
    filename = PurePosixPath(filename.replace("\\", "/")).name
    if filename in ("", ".", ".."):
        return None
    return filename


def _lake_file(res: httpx.Response, fallback_name: str) -> LakeFile:
    content_type = res.headers.get("Content-Type", DEFAULT_CONTENT_TYPE).split(";")[0].strip()
    return LakeFile(
        name=_filename_from_headers(res) or fallback_name,
        content=res.content,
        content_type=content_type,
    )


async def upload_file(
    file: LakeFile,
    customer: Customer | Mapping[str, Any],
    dataset_key: DatasetKey | Mapping[str, Any],
    version_number: Any = 1,
    data_lake_file_level: str | DataLakeFileLevel = DataLakeFileLevel.RAW,
    metadata: Mapping[str, Any] | None = None,
    version_description: str | None = None,
    version_id: int | None = None,
    config: ClientConfig | None = None,
) -> UploadResult:
    """
    Upload a file to the data lake using a multipart request.

    Builds the file properties, flattens them into form fields and posts them
    together with the file content. Each call is an independent request: nothing
    is deduplicated, queued or retried.

    Args:
        file (LakeFile): The file to upload.
        customer (Customer | Mapping): The owning customer.
        dataset_key (DatasetKey | Mapping): The dataset key the file belongs to.
        version_number (Any): Version of the file. Defaults to 1.
        data_lake_file_level (str | DataLakeFileLevel): raw, clean or standardized.
        metadata (Mapping | None): Extra scalar metadata, sent as metadata.<key> fields.
        version_description (str | None): Free text describing the version.
        version_id (int | None): Existing version to attach to.
        config (ClientConfig | None): Overrides the configuration of the current context.

    Returns:
        UploadResult: The identifier and/or url assigned by the backend.
    """
    config = config or get_or_create_config()

    properties = build_file_properties(
        file,
        customer,
        dataset_key,
        version_number=version_number,
        data_lake_file_level=data_lake_file_level,
        metadata=metadata,
        version_description=version_description,
        version_id=version_id,
    )
    body = serialize(file, properties)

    logger.info(
        "upload_started",
        file_name=properties.file_name,
        size_in_bytes=properties.size_in_bytes,
        level=properties.data_lake_file_level.value,
    )
    res = await _request("POST", config.endpoints.upload, config=config, data=body.fields, files=body.files)

    try:
        res_json = res.json()
    except ValueError:
        res_json = None
    if isinstance(res_json, dict):
        result = UploadResult.model_validate(res_json)
    else:
        # Older backends answer with the bare file url.
        result = UploadResult(file_url=res.text.strip() or None)

    logger.info("upload_finished", file_name=properties.file_name, file_id=result.id, file_url=result.file_url)
    return result


async def filter_files(
    filters: FileFilterParams | Mapping[str, Any] | None = None,
    config: ClientConfig | None = None,
) -> Page[FilePropertiesDto]:
    """Fetch one page of the file catalog matching the given filters."""
    config = config or get_or_create_config()
    if filters is None:
        filters = FileFilterParams()
    elif not isinstance(filters, FileFilterParams):
        filters = FileFilterParams.model_validate(filters)

    res = await _request("GET", config.endpoints.filter_files, config=config, params=filters.to_query())
    page = Page[FilePropertiesDto].model_validate(res.json())
    logger.debug("page_fetched", number=page.number, total_pages=page.total_pages, count=len(page.content))
    return page


async def iter_files(
    filters: FileFilterParams | Mapping[str, Any] | None = None,
    config: ClientConfig | None = None,
) -> AsyncGenerator[FilePropertiesDto, None]:
    """Walk every page of the catalog, starting at `filters.page`."""
    if filters is None:
        filters = FileFilterParams()
    elif not isinstance(filters, FileFilterParams):
        filters = FileFilterParams.model_validate(filters)

    while True:
        page = await filter_files(filters, config=config)
        for item in page.content:
            yield item
        if page.is_last or not page.content:
            return
        filters = filters.model_copy(update={"page": page.number + 1})


async def download_file(
    file_id: int,
    file_name: str | None = None,
    config: ClientConfig | None = None,
) -> LakeFile:
    """Download a file by its catalog id.

    The name comes from the Content-Disposition header, then `file_name`, then the id.
    """
    config = config or get_or_create_config()
    res = await _request("GET", config.endpoints.download, config=config, path_params={"id": file_id})
    file = _lake_file(res, fallback_name=file_name or str(file_id))
    logger.info("download_finished", file_id=file_id, file_name=file.name, size=file.size)
    return file


async def download_file_by_filters(
    data_lake_file_level: str | DataLakeFileLevel,
    customer_id: int,
    dataset_key_id: int,
    version_number: int,
    file_name: str,
    month: int,
    year: int,
    config: ClientConfig | None = None,
) -> LakeFile:
    """
    Download the file stored under a level, customer, dataset key, version, name and period.

    Args:
        data_lake_file_level (str | DataLakeFileLevel): raw, clean or standardized.
        customer_id (int): The owning customer.
        dataset_key_id (int): The dataset key.
        version_number (int): The file version.
        file_name (str): The stored file name.
        month (int): Upload month, 1-12.
        year (int): Upload year.
        config (ClientConfig | None): Overrides the configuration of the current context.

    Returns:
        LakeFile: The downloaded content.
    """
    if not customer_id or not dataset_key_id or not file_name:
        raise InvalidInputError("Customer, dataset key and file name are required.")
    if not 1 <= month <= 12:
        raise InvalidInputError(f"Month must be between 1 and 12, got {month}.")
    try:
        level = DataLakeFileLevel.parse(data_lake_file_level)
    except ValueError as exc:
        raise InvalidInputError(str(exc)) from exc

    config = config or get_or_create_config()
    params = {
        "dataLakeFileLevel": level.wire_value,
        "customerId": customer_id,
        "datasetKeyId": dataset_key_id,
        "versionNumber": version_number,
        "fileName": file_name,
        "month": month,
        "year": year,
    }
    res = await _request("GET", config.endpoints.download_by_filters, config=config, params=params)
    file = _lake_file(res, fallback_name=file_name)
    logger.info("download_finished", file_name=file.name, size=file.size, **params)
    return file
