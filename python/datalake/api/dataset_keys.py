from collections.abc import Mapping
from typing import Any

import structlog

from ..config import ClientConfig
from ..errors import InvalidInputError
from ..state import get_or_create_config
from ..types import DataLakeFileLevel, DatasetKey, DatasetKeyCreateRequest, DatasetKeyUpdateRequest, Page
from .utils import _request

logger = structlog.get_logger("datalake.api.dataset_keys")


async def list_dataset_keys(
    page: int = 0,
    size: int = 20,
    config: ClientConfig | None = None,
) -> Page[DatasetKey]:
    """
    List dataset keys, one page at a time.

    Args:
        page (int): Zero-based page index.
        size (int): Page size.

    Returns:
        Page[DatasetKey]: The requested page.
    """
    config = config or get_or_create_config()
    params = {"page": page, "size": size}
    res = await _request("GET", config.endpoints.dataset_keys, config=config, params=params)
    return Page[DatasetKey].model_validate(res.json())


async def get_dataset_key(dataset_key_id: int, config: ClientConfig | None = None) -> DatasetKey:
    config = config or get_or_create_config()
    res = await _request("GET", config.endpoints.dataset_key, config=config, path_params={"id": dataset_key_id})
    return DatasetKey.model_validate(res.json())


async def create_dataset_key(
    dataset_key: DatasetKeyCreateRequest | Mapping[str, Any],
    config: ClientConfig | None = None,
) -> DatasetKey:
    """Create a dataset key and return it with its backend-assigned id."""
    config = config or get_or_create_config()
    if not isinstance(dataset_key, DatasetKeyCreateRequest):
        dataset_key = DatasetKeyCreateRequest.model_validate(dataset_key)

    res = await _request("POST", config.endpoints.dataset_keys, config=config, json=dataset_key.to_wire())
    created = DatasetKey.model_validate(res.json())
    logger.info("dataset_key_created", dataset_key_id=created.id, name=created.name)
    return created


async def update_dataset_key(
    dataset_key_id: int,
    dataset_key: DatasetKeyUpdateRequest | Mapping[str, Any],
    config: ClientConfig | None = None,
) -> DatasetKey:
    """Partially update a dataset key. Fields left unset are not sent."""
    config = config or get_or_create_config()
    if not isinstance(dataset_key, DatasetKeyUpdateRequest):
        dataset_key = DatasetKeyUpdateRequest.model_validate(dataset_key)

    res = await _request(
        "PUT",
        config.endpoints.dataset_key,
        config=config,
        path_params={"id": dataset_key_id},
        json=dataset_key.to_wire(),
    )
    updated = DatasetKey.model_validate(res.json())
    logger.info("dataset_key_updated", dataset_key_id=dataset_key_id)
    return updated


async def delete_dataset_key(dataset_key_id: int, config: ClientConfig | None = None) -> None:
    config = config or get_or_create_config()
    await _request("DELETE", config.endpoints.dataset_key, config=config, path_params={"id": dataset_key_id})
    logger.info("dataset_key_deleted", dataset_key_id=dataset_key_id)


async def search_dataset_keys(name: str, config: ClientConfig | None = None) -> list[DatasetKey]:
    """Dataset keys whose name matches `name`."""
    config = config or get_or_create_config()
    res = await _request("GET", config.endpoints.dataset_keys_search, config=config, params={"name": name})
    return [DatasetKey.model_validate(item) for item in res.json()]


def _period_params(
    customer_id: int,
    data_lake_file_level: str | DataLakeFileLevel,
    year: int,
    month: int,
) -> dict[str, Any]:
    if not customer_id:
        raise InvalidInputError("A customer must be selected.")
    if not 1 <= month <= 12:
        raise InvalidInputError(f"Month must be between 1 and 12, got {month}.")
    try:
        level = DataLakeFileLevel.parse(data_lake_file_level)
    except ValueError as exc:
        raise InvalidInputError(str(exc)) from exc
    return {
        "customerId": customer_id,
        "dataLakeFileLevel": level.wire_value,
        "year": year,
        "month": month,
    }


async def get_empty_dataset_keys(
    customer_id: int,
    data_lake_file_level: str | DataLakeFileLevel,
    year: int,
    month: int,
    config: ClientConfig | None = None,
) -> list[DatasetKey]:
    """
    Dataset keys of a customer that received no file at the given level during a month.

    Args:
        customer_id (int): The customer to inspect.
        data_lake_file_level (str | DataLakeFileLevel): raw, clean or standardized.
        year (int): Year of the period.
        month (int): Month of the period, 1-12.

    Returns:
        list[DatasetKey]: The dataset keys without files.
    """
    config = config or get_or_create_config()
    params = _period_params(customer_id, data_lake_file_level, year, month)
    res = await _request("GET", config.endpoints.dataset_keys_empty, config=config, params=params)
    return [DatasetKey.model_validate(item) for item in res.json()]


async def get_dataset_keys_with_files(
    customer_id: int,
    data_lake_file_level: str | DataLakeFileLevel,
    year: int,
    month: int,
    config: ClientConfig | None = None,
) -> list[DatasetKey]:
    """Counterpart of `get_empty_dataset_keys`: the dataset keys that did receive files."""
    config = config or get_or_create_config()
    params = _period_params(customer_id, data_lake_file_level, year, month)
    res = await _request("GET", config.endpoints.dataset_keys_with_files, config=config, params=params)
    return [DatasetKey.model_validate(item) for item in res.json()]
