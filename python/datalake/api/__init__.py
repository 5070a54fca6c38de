# ruff: noqa: F401
from .customers import (
    create_customer,
    delete_customer,
    get_customer,
    list_customers,
    search_customers,
    update_customer,
)
from .dataset_keys import (
    create_dataset_key,
    delete_dataset_key,
    get_dataset_key,
    get_dataset_keys_with_files,
    get_empty_dataset_keys,
    list_dataset_keys,
    search_dataset_keys,
    update_dataset_key,
)
from .files import download_file, download_file_by_filters, filter_files, iter_files, upload_file
