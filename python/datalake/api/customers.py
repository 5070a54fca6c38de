from collections.abc import Mapping
from typing import Any

import structlog

from ..config import ClientConfig
from ..state import get_or_create_config
from ..types import Customer, CustomerCreateRequest, CustomerUpdateRequest, Page
from .utils import _request

logger = structlog.get_logger("datalake.api.customers")


async def list_customers(
    page: int = 0,
    size: int = 20,
    config: ClientConfig | None = None,
) -> Page[Customer]:
    """
    List customers, one page at a time.

    Args:
        page (int): Zero-based page index.
        size (int): Page size.

    Returns:
        Page[Customer]: The requested page.
    """
    config = config or get_or_create_config()
    params = {"page": page, "size": size}
    res = await _request("GET", config.endpoints.customers, config=config, params=params)
    return Page[Customer].model_validate(res.json())


async def get_customer(customer_id: int, config: ClientConfig | None = None) -> Customer:
    config = config or get_or_create_config()
    res = await _request("GET", config.endpoints.customer, config=config, path_params={"id": customer_id})
    return Customer.model_validate(res.json())


async def create_customer(
    customer: CustomerCreateRequest | Mapping[str, Any],
    config: ClientConfig | None = None,
) -> Customer:
    """Create a customer and return it with its backend-assigned id."""
    config = config or get_or_create_config()
    if not isinstance(customer, CustomerCreateRequest):
        customer = CustomerCreateRequest.model_validate(customer)

    res = await _request("POST", config.endpoints.customers, config=config, json=customer.to_wire())
    created = Customer.model_validate(res.json())
    logger.info("customer_created", customer_id=created.id, name=created.name)
    return created


async def update_customer(
    customer_id: int,
    customer: CustomerUpdateRequest | Mapping[str, Any],
    config: ClientConfig | None = None,
) -> Customer:
    """Partially update a customer. Fields left unset are not sent."""
    config = config or get_or_create_config()
    if not isinstance(customer, CustomerUpdateRequest):
        customer = CustomerUpdateRequest.model_validate(customer)

    res = await _request(
        "PUT",
        config.endpoints.customer,
        config=config,
        path_params={"id": customer_id},
        json=customer.to_wire(),
    )
    updated = Customer.model_validate(res.json())
    logger.info("customer_updated", customer_id=customer_id)
    return updated


async def delete_customer(customer_id: int, config: ClientConfig | None = None) -> None:
    config = config or get_or_create_config()
    await _request("DELETE", config.endpoints.customer, config=config, path_params={"id": customer_id})
    logger.info("customer_deleted", customer_id=customer_id)


async def search_customers(name: str, config: ClientConfig | None = None) -> list[Customer]:
    """Customers whose name matches `name`."""
    config = config or get_or_create_config()
    res = await _request("GET", config.endpoints.customers_search, config=config, params={"name": name})
    return [Customer.model_validate(item) for item in res.json()]
