# ruff: noqa: F401
from importlib.metadata import PackageNotFoundError
from importlib.metadata import version as _dist_version

from .config import ClientConfig, Endpoints
from .errors import FILE_NOT_FOUND, FILES_NOT_FOUND, DatalakeError, InvalidInputError, TransportError, describe_error
from .state import get_config, get_or_create_config, set_config
from .types import Customer, DataLakeFileLevel, DatasetKey, FileProperties, LakeFile
from .upload import build_file_properties, serialize

try:
    __version__ = _dist_version("datalake-admin")
except PackageNotFoundError:
    __version__ = "0.0.0.dev0"
