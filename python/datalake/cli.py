import argparse
import asyncio
import os
import sys
from collections.abc import Awaitable, Callable
from pathlib import Path
from typing import Any

from dotenv import load_dotenv
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from . import __version__
from .api import customers, dataset_keys, files
from .config import ClientConfig
from .errors import FILE_NOT_FOUND, FILES_NOT_FOUND, DatalakeError, describe_error
from .logs import setup_logging
from .state import set_config
from .types import Customer, DataLakeFileLevel, DatasetKey, FileFilterParams, LakeFile, Page
from .utils import format_file_size, parse_key_value

console = Console()

LEVELS = [level.value for level in DataLakeFileLevel]


def _customer_table(items: list[Customer], title: str) -> Table:
    table = Table(title=title)
    for column in ("ID", "Name", "Email", "Path", "Description"):
        table.add_column(column)
    for c in items:
        table.add_row(str(c.id), c.name, c.email or "", c.path_name or "", c.description or "")
    return table


def _dataset_key_table(items: list[DatasetKey], title: str) -> Table:
    table = Table(title=title)
    for column in ("ID", "Name", "Customer", "Path", "Description"):
        table.add_column(column)
    for k in items:
        table.add_row(
            str(k.id),
            k.name,
            str(k.customer_id) if k.customer_id is not None else "",
            k.path_name or "",
            k.description or "",
        )
    return table


def _page_caption(page: Page) -> str:
    return f"page {page.number + 1} of {max(page.total_pages, 1)} ({page.total_elements} total)"


async def cmd_upload(args: argparse.Namespace) -> None:
    file = LakeFile.from_path(args.path)
    metadata = dict(parse_key_value(item) for item in args.meta or [])
    result = await files.upload_file(
        file,
        customer={"id": args.customer_id, "name": args.customer_name},
        dataset_key={"id": args.dataset_key_id, "name": args.dataset_key_name},
        version_number=args.version,
        data_lake_file_level=args.level,
        metadata=metadata,
        version_description=args.description,
    )
    console.print(f"[green]Uploaded[/green] {file.name} ({format_file_size(file.size)})")
    if result.id is not None:
        console.print(f"  id: {result.id}")
    if result.file_url:
        console.print(f"  url: {result.file_url}")


async def cmd_files(args: argparse.Namespace) -> None:
    filters = FileFilterParams(
        file_name=args.file_name,
        customer_id=args.customer_id,
        dataset_key_id=args.dataset_key_id,
        data_lake_file_level=args.level,
        content_type=args.content_type,
        file_extension=args.extension,
        page=args.page,
        size=args.size,
        sort_by=args.sort_by,
        sort_dir=args.sort_dir,
    )
    page = await files.filter_files(filters)

    table = Table(title="Files", caption=_page_caption(page))
    for column in ("ID", "Name", "Level", "Customer", "Dataset", "Version", "Size", "Uploaded"):
        table.add_column(column)
    for f in page.content:
        table.add_row(
            str(f.id),
            f.file_name,
            f.data_lake_file_level or "",
            f.customer.name if f.customer else "",
            f.dataset_key.name if f.dataset_key else "",
            str(f.file_version.version_number) if f.file_version else "",
            format_file_size(f.size_in_bytes),
            f.uploaded_at.isoformat(sep=" ") if f.uploaded_at else "",
        )
    console.print(table)


async def cmd_download(args: argparse.Namespace) -> None:
    file = await files.download_file(args.file_id)
    path = file.to_disk(args.output)
    console.print(f"[green]Downloaded[/green] {file.name} to {path}")


async def cmd_download_by_filters(args: argparse.Namespace) -> None:
    file = await files.download_file_by_filters(
        data_lake_file_level=args.level,
        customer_id=args.customer_id,
        dataset_key_id=args.dataset_key_id,
        version_number=args.version,
        file_name=args.file_name,
        month=args.month,
        year=args.year,
    )
    path = file.to_disk(args.output)
    console.print(f"[green]Downloaded[/green] {file.name} to {path}")


async def cmd_customers(args: argparse.Namespace) -> None:
    if args.action == "list":
        page = await customers.list_customers(page=args.page, size=args.size)
        table = _customer_table(page.content, "Customers")
        table.caption = _page_caption(page)
        console.print(table)
    elif args.action == "get":
        console.print(_customer_table([await customers.get_customer(args.id)], "Customer"))
    elif args.action == "search":
        console.print(_customer_table(await customers.search_customers(args.name), "Customers"))
    elif args.action == "create":
        created = await customers.create_customer({
            "name": args.name,
            "email": args.email,
            "description": args.description,
            "path_name": args.path_name,
        })
        console.print(f"[green]Created[/green] customer {created.id} ({created.name})")
    elif args.action == "update":
        await customers.update_customer(args.id, {
            "name": args.name,
            "email": args.email,
            "description": args.description,
            "path_name": args.path_name,
        })
        console.print(f"[green]Updated[/green] customer {args.id}")
    elif args.action == "delete":
        await customers.delete_customer(args.id)
        console.print(f"[green]Deleted[/green] customer {args.id}")


async def cmd_dataset_keys(args: argparse.Namespace) -> None:
    if args.action == "list":
        page = await dataset_keys.list_dataset_keys(page=args.page, size=args.size)
        table = _dataset_key_table(page.content, "Dataset keys")
        table.caption = _page_caption(page)
        console.print(table)
    elif args.action == "get":
        console.print(_dataset_key_table([await dataset_keys.get_dataset_key(args.id)], "Dataset key"))
    elif args.action == "search":
        console.print(_dataset_key_table(await dataset_keys.search_dataset_keys(args.name), "Dataset keys"))
    elif args.action == "create":
        created = await dataset_keys.create_dataset_key({
            "name": args.name,
            "description": args.description,
            "path_name": args.path_name,
            "customer_id": args.customer_id,
        })
        console.print(f"[green]Created[/green] dataset key {created.id} ({created.name})")
    elif args.action == "update":
        await dataset_keys.update_dataset_key(args.id, {
            "name": args.name,
            "description": args.description,
            "path_name": args.path_name,
            "customer_id": args.customer_id,
        })
        console.print(f"[green]Updated[/green] dataset key {args.id}")
    elif args.action == "delete":
        await dataset_keys.delete_dataset_key(args.id)
        console.print(f"[green]Deleted[/green] dataset key {args.id}")
    elif args.action in ("empty", "with-files"):
        fetch = dataset_keys.get_empty_dataset_keys if args.action == "empty" else dataset_keys.get_dataset_keys_with_files
        items = await fetch(args.customer_id, args.level, args.year, args.month)
        title = "Dataset keys without files" if args.action == "empty" else "Dataset keys with files"
        table = _dataset_key_table(items, title)
        table.caption = f"{args.level.upper()} {args.month:02d}/{args.year}: {len(items)} dataset keys"
        console.print(table)


def _add_level(parser: argparse.ArgumentParser, required: bool = False, default: str | None = None) -> None:
    parser.add_argument(
        "--level",
        type=str.lower,
        choices=LEVELS,
        required=required,
        default=default,
        help="Data lake level.",
    )


def _add_period(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--month", type=int, required=True, help="Month, 1-12.")
    parser.add_argument("--year", type=int, required=True, help="Year, e.g. 2024.")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="datalake",
        description="Data lake file management CLI",
    )
    parser.add_argument(
        "--backend-url",
        type=str,
        default=None,
        help="Backend base url. Defaults to DATALAKE_BACKEND_URL or http://localhost:8087.",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Set logging level. Defaults to WARNING.",
    )
    parser.add_argument(
        "-V",
        "--version",
        dest="show_version",
        action="store_true",
        help="Show version and exit.",
    )
    subparsers = parser.add_subparsers(dest="command")

    upload = subparsers.add_parser("upload", help="Upload a file to the data lake.")
    upload.add_argument("path", type=Path, help="Local file to upload.")
    upload.add_argument("--customer-id", type=int, required=True)
    upload.add_argument("--customer-name", type=str, required=True)
    upload.add_argument("--dataset-key-id", type=int, required=True)
    upload.add_argument("--dataset-key-name", type=str, required=True)
    upload.add_argument("--version", type=int, default=1, help="Version number. Defaults to 1.")
    _add_level(upload, default="raw")
    upload.add_argument("--description", type=str, default=None, help="Version description.")
    upload.add_argument("--meta", action="append", metavar="KEY=VALUE", help="Metadata entry. Repeatable.")
    upload.set_defaults(handler=cmd_upload, action_label="upload file", not_found=None)

    files_parser = subparsers.add_parser("files", help="Filter the file catalog.")
    files_parser.add_argument("--file-name", type=str, default=None)
    files_parser.add_argument("--customer-id", type=int, default=None)
    files_parser.add_argument("--dataset-key-id", type=int, default=None)
    _add_level(files_parser)
    files_parser.add_argument("--content-type", type=str, default=None)
    files_parser.add_argument("--extension", type=str, default=None)
    files_parser.add_argument("--page", type=int, default=1, help="One-based page number.")
    files_parser.add_argument("--size", type=int, default=10)
    files_parser.add_argument("--sort-by", choices=["id", "fileName", "uploadedAt", "sizeInBytes"], default="id")
    files_parser.add_argument("--sort-dir", choices=["asc", "desc"], default="desc")
    files_parser.set_defaults(handler=cmd_files, action_label="load files", not_found=FILES_NOT_FOUND)

    download = subparsers.add_parser("download", help="Download a file by id.")
    download.add_argument("file_id", type=int)
    download.add_argument("-o", "--output", type=Path, default=Path.cwd())
    download.set_defaults(handler=cmd_download, action_label="download file", not_found=FILE_NOT_FOUND)

    download_filters = subparsers.add_parser("download-by-filters", help="Download a file by its catalog coordinates.")
    _add_level(download_filters, default="raw")
    download_filters.add_argument("--customer-id", type=int, required=True)
    download_filters.add_argument("--dataset-key-id", type=int, required=True)
    download_filters.add_argument("--version", type=int, default=1)
    download_filters.add_argument("--file-name", type=str, required=True)
    _add_period(download_filters)
    download_filters.add_argument("-o", "--output", type=Path, default=Path.cwd())
    download_filters.set_defaults(handler=cmd_download_by_filters, action_label="download file", not_found=FILE_NOT_FOUND)

    for name, handler, label, with_customer in (
        ("customers", cmd_customers, "customer", False),
        ("dataset-keys", cmd_dataset_keys, "dataset key", True),
    ):
        resource = subparsers.add_parser(name, help=f"Manage {label}s.")
        actions = resource.add_subparsers(dest="action", required=True)

        listing = actions.add_parser("list")
        listing.add_argument("--page", type=int, default=0, help="Zero-based page index.")
        listing.add_argument("--size", type=int, default=20)

        actions.add_parser("get").add_argument("id", type=int)
        actions.add_parser("delete").add_argument("id", type=int)
        actions.add_parser("search").add_argument("name", type=str)

        create = actions.add_parser("create")
        create.add_argument("name", type=str)
        update = actions.add_parser("update")
        update.add_argument("id", type=int)
        update.add_argument("--name", type=str, default=None)
        for sub in (create, update):
            sub.add_argument("--description", type=str, default=None)
            sub.add_argument("--path-name", type=str, default=None)
            if with_customer:
                sub.add_argument("--customer-id", type=int, default=None)
            else:
                sub.add_argument("--email", type=str, default=None)

        if with_customer:
            for action in ("empty", "with-files"):
                period = actions.add_parser(action)
                period.add_argument("--customer-id", type=int, required=True)
                _add_level(period, required=True)
                _add_period(period)

        resource.set_defaults(handler=handler, action_label=f"manage {label}s", not_found=None)

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.show_version:
        console.print(f"datalake {__version__}")
        return 0
    if not getattr(args, "handler", None):
        parser.print_help()
        return 1

    load_dotenv(override=True)

    os.environ["DATALAKE_LOG_LEVEL"] = args.log_level
    setup_logging()

    # The catalog pages are shown one-based.
    if args.command == "files":
        args.page = max(args.page - 1, 0)

    handler: Callable[[argparse.Namespace], Awaitable[Any]] = args.handler
    try:
        config = ClientConfig.from_env()
        if args.backend_url:
            config = config.model_copy(update={"backend_url": args.backend_url.rstrip("/")})
        set_config(config)
        asyncio.run(handler(args))
    except (DatalakeError, ValueError) as e:
        console.print(f"[red]Error:[/red] {escape(describe_error(e, args.action_label, not_found=args.not_found))}")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
