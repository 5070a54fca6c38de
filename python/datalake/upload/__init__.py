# ruff: noqa: F401
from .builder import build_file_properties
from .serializer import MultipartFormBody, format_timestamp, serialize
