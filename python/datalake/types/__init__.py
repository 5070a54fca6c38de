# ruff: noqa: F401
from .file import DEFAULT_CONTENT_TYPE, LakeFile
from .models import (
    Customer,
    CustomerCreateRequest,
    CustomerUpdateRequest,
    DataLakeFileLevel,
    DatasetKey,
    DatasetKeyCreateRequest,
    DatasetKeyUpdateRequest,
    FileFilterParams,
    FileProperties,
    FilePropertiesDto,
    FileVersion,
    Page,
    UploadResult,
)
