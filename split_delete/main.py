import argparse
import asyncio
import os
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, List, Mapping, Optional, Sequence, Tuple, Union

import aiohttp
import pandas as pd
from tqdm import tqdm

from split_delete.client import SplitAdminClient
from split_delete.confirm import ask_confirmation
from split_delete.console import echo, echo_error
from split_delete.models import (
    API_KEY_ENV,
    BASE_URL_ENV,
    DEFAULT_BASE_URL,
    Colors,
    DeleteResult,
    LogLevel,
    ResourceType,
    SegmentInfo,
    SegmentSubtype,
)
from split_delete.resources import RESOURCES, Resource

RESULT_COLUMNS = ["name", "type", "subtype", "status"]

Item = Union[str, SegmentInfo]
InputFunc = Callable[[str], str]


@dataclass
class Settings:
    api_key: str
    workspace_id: str
    item_type: ResourceType
    name: Optional[str] = None
    delete_all: bool = False
    log_level: LogLevel = LogLevel.DEFAULT
    base_url: str = DEFAULT_BASE_URL
    output: Optional[Path] = None


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="split-delete",
        description="Delete feature flags, segments or environments from a Split workspace.",
    )
    parser.add_argument(
        "--api-key",
        help=f"Split Admin API key (or set {API_KEY_ENV})",
    )
    parser.add_argument(
        "--workspace-id",
        required=True,
        help="Split workspace ID",
    )
    parser.add_argument(
        "--name",
        help="Name of the flag, segment, or environment to delete",
    )
    parser.add_argument(
        "--type",
        dest="item_type",
        choices=[item.value for item in ResourceType],
        default=ResourceType.FLAG.value,
        help="Type of item to delete (default: flag)",
    )
    parser.add_argument(
        "--all",
        dest="delete_all",
        action="store_true",
        help="Delete all items of the specified type in the workspace",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging (request URLs, response status and body)",
    )
    parser.add_argument(
        "--trace",
        action="store_true",
        help="Enable trace logging (debug output plus redacted request headers)",
    )
    parser.add_argument(
        "--base-url",
        default=os.environ.get(BASE_URL_ENV, DEFAULT_BASE_URL),
        help=f"Admin API base URL (or set {BASE_URL_ENV}; default: {DEFAULT_BASE_URL})",
    )
    parser.add_argument(
        "--output",
        type=Path,
        help="Write a CSV log of every attempted delete to this path",
    )
    return parser


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.delete_all and args.name:
        parser.error("Cannot specify both --all and --name")
    if not args.delete_all and not args.name:
        parser.error("You must specify either --name or --all")
    return args


def resolve_log_level(args: argparse.Namespace) -> LogLevel:
    if args.trace:
        return LogLevel.TRACE
    if args.debug:
        return LogLevel.DEBUG
    return LogLevel.DEFAULT


def resolve_settings(
    args: argparse.Namespace, environ: Mapping[str, str] = os.environ
) -> Optional[Settings]:
    api_key = args.api_key or environ.get(API_KEY_ENV)
    if not api_key:
        return None
    return Settings(
        api_key=api_key,
        workspace_id=args.workspace_id,
        item_type=ResourceType(args.item_type),
        name=args.name,
        delete_all=args.delete_all,
        log_level=resolve_log_level(args),
        base_url=args.base_url,
        output=args.output,
    )


def split_item(item: Item) -> Tuple[str, Optional[SegmentSubtype]]:
    if isinstance(item, SegmentInfo):
        return item.name, item.subtype
    return item, None


def describe_item(item: Item) -> str:
    if isinstance(item, SegmentInfo):
        return f"{item.name} ({item.subtype.value})"
    return item


async def delete_item(
    client: SplitAdminClient,
    resource: Resource,
    item_type: ResourceType,
    name: str,
    subtype: Optional[SegmentSubtype] = None,
) -> DeleteResult:
    subtype_value = subtype.value if subtype else None
    try:
        deleted = await resource.delete(client, name, subtype)
    except Exception as error:  # noqa: BLE001
        echo_error(f"Error deleting {item_type.value} '{name}': {error}")
        return DeleteResult(name, item_type.value, subtype_value, "error")
    return DeleteResult(
        name, item_type.value, subtype_value, "deleted" if deleted else "failed"
    )


def print_summary(results: List[DeleteResult]) -> None:
    deleted = sum(1 for result in results if result.status == "deleted")
    failed = len(results) - deleted
    echo(f"\n{Colors.BOLD}Summary:{Colors.RESET}")
    echo(f"  - {Colors.GREEN}Deleted: {deleted}{Colors.RESET}")
    color = Colors.RED if failed else Colors.GREEN
    echo(f"  - {color}Failed: {failed}{Colors.RESET}")


async def delete_all_items(
    client: SplitAdminClient,
    resource: Resource,
    item_type: ResourceType,
    input_func: InputFunc = input,
) -> List[DeleteResult]:
    type_name = item_type.value
    items: List[Item] = list(await resource.list(client))
    if not items:
        echo(f"No {type_name}s found in workspace.")
        return []

    echo(f"Found {len(items)} {type_name}s:")
    for item in items:
        echo(f"- {describe_item(item)}")
    echo()

    confirmed = ask_confirmation(
        f"Are you sure you want to delete all {len(items)} {type_name}s? (y/N): ",
        input_func,
    )
    if not confirmed:
        echo("Deletion cancelled.")
        return []

    echo(f"Deleting {len(items)} {type_name}s...")
    results: List[DeleteResult] = []
    with tqdm(
        total=len(items),
        desc=f"Deleting {type_name}s",
        unit=type_name,
        dynamic_ncols=True,
        leave=False,
    ) as progress_bar:
        for item in items:
            name, subtype = split_item(item)
            results.append(await delete_item(client, resource, item_type, name, subtype))
            progress_bar.update(1)

    echo(f"All {type_name}s processed.")
    print_summary(results)
    return results


async def delete_named_item(
    client: SplitAdminClient,
    resource: Resource,
    item_type: ResourceType,
    name: str,
    input_func: InputFunc = input,
) -> List[DeleteResult]:
    confirmed = ask_confirmation(
        f"Are you sure you want to delete {item_type.value} '{name}'? (y/N): ",
        input_func,
    )
    if not confirmed:
        echo("Deletion cancelled.")
        return []
    # No subtype here: segment deletes probe every segment endpoint
    return [await delete_item(client, resource, item_type, name)]


async def run(
    settings: Settings,
    input_func: InputFunc = input,
    session: Optional[aiohttp.ClientSession] = None,
) -> List[DeleteResult]:
    resource = RESOURCES[settings.item_type]
    async with SplitAdminClient(
        settings.api_key,
        settings.workspace_id,
        base_url=settings.base_url,
        log_level=settings.log_level,
        session=session,
    ) as client:
        if settings.delete_all:
            return await delete_all_items(
                client, resource, settings.item_type, input_func
            )
        return await delete_named_item(
            client, resource, settings.item_type, settings.name, input_func
        )


def write_results(results: List[DeleteResult], output: Path) -> None:
    frame = pd.DataFrame([result.as_row() for result in results], columns=RESULT_COLUMNS)
    try:
        frame.to_csv(output, index=False)
    except OSError as error:
        echo_error(f"Could not write log to {output}: {error}")
        return
    echo(f"{Colors.BLUE}Log written to: {output}{Colors.RESET}")


def main(
    argv: Optional[Sequence[str]] = None,
    input_func: InputFunc = input,
    session: Optional[aiohttp.ClientSession] = None,
) -> int:
    args = parse_args(argv)
    settings = resolve_settings(args)
    if settings is None:
        echo_error(
            f"Error: API key must be provided via --api-key or {API_KEY_ENV} env var."
        )
        return 1

    results = asyncio.run(run(settings, input_func, session))
    if settings.output:
        write_results(results, settings.output)
    return 0


def cli() -> None:
    try:
        sys.exit(main())
    except KeyboardInterrupt:
        print("\nInterrupted by user")
        sys.exit(130)


if __name__ == "__main__":
    cli()
