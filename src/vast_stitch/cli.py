"""Command-line interface: parse, unwrap and stitch VAST documents."""

import argparse
import asyncio
import dataclasses
import json
import sys
from collections.abc import Sequence
from pathlib import Path
from typing import Any

from .client import VastStitchClient
from .config import ResolverConfig
from .exceptions import VastException
from .fetchers import LocationFetcher
from .log_config import configure_logging
from .models import VastDocument
from .parser import VastParser
from .serializer import VastSerializer
from .settings import Settings, get_settings


def document_to_dict(document: VastDocument) -> dict[str, Any]:
    """Plain-data view of a document; each ad is tagged with its variant."""
    data = dataclasses.asdict(document)
    for ad, ad_data in zip(document.ads, data["ads"]):
        ad_data["type"] = type(ad).__name__
    return data


def _common_options() -> argparse.ArgumentParser:
    # SUPPRESS lets the options appear before or after the subcommand
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("--config", type=Path, default=argparse.SUPPRESS, help="Settings YAML file")
    common.add_argument(
        "--max-depth", type=int, default=argparse.SUPPRESS, help="Maximum wrapper hops to follow"
    )
    common.add_argument(
        "--timeout", type=float, default=argparse.SUPPRESS, help="Fetch timeout in seconds"
    )
    common.add_argument(
        "--log-level", default=argparse.SUPPRESS, help="Log level (DEBUG, INFO, WARNING, ERROR)"
    )
    common.add_argument(
        "--format",
        choices=["json", "xml"],
        default=argparse.SUPPRESS,
        help="Output format for parse and unwrap (default: json)",
    )
    return common


def parse_args(argv: Sequence[str]) -> argparse.Namespace:
    common = _common_options()
    parser = argparse.ArgumentParser(
        prog="vast-stitch",
        description="Parse VAST documents, resolve wrapper chains and stitch them into one InLine.",
        parents=[common],
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    for name, help_text in (
        ("parse", "Parse a document and print it"),
        ("unwrap", "Resolve the wrapper chain and print the InLine document"),
        ("stitch", "Resolve the wrapper chain and print the merged document"),
    ):
        sub = subparsers.add_parser(name, help=help_text, parents=[common])
        sub.add_argument("-i", "--input", required=True, help="Path or URI of the VAST document")
        sub.add_argument("-p", "--pretty", action="store_true", help="Indent the output")
        if name == "stitch":
            sub.add_argument("-o", "--output", type=Path, default=None, help="Write the result to a file")

    return parser.parse_args(argv)


def build_client(settings: Settings, args: argparse.Namespace) -> VastStitchClient:
    """Client from settings with command-line overrides applied."""
    fetcher_config = settings.fetcher_config()
    timeout = getattr(args, "timeout", None)
    if timeout is not None:
        fetcher_config = dataclasses.replace(fetcher_config, fetch_timeout=timeout)

    resolver_config = settings.resolver_config()
    max_depth = getattr(args, "max_depth", None)
    if max_depth is not None:
        resolver_config = ResolverConfig(max_depth=max_depth)

    return VastStitchClient(
        fetcher=LocationFetcher.from_config(fetcher_config),
        parser=VastParser(settings.parser_config()),
        serializer=VastSerializer(settings.serializer_config()),
        resolver_config=resolver_config,
        stitcher_config=settings.stitcher_config(),
    )


async def run_command(client: VastStitchClient, args: argparse.Namespace) -> str:
    """Execute the selected subcommand and return its rendered output."""
    async with client:
        if args.command == "stitch":
            document = await client.stitch(args.input)
            return client.serialize(document, pretty=args.pretty)

        if args.command == "parse":
            document = await client.parse(args.input)
        else:
            document = await client.unwrap(args.input)

        if getattr(args, "format", "json") == "xml":
            return client.serialize(document, pretty=args.pretty)
        return json.dumps(document_to_dict(document), indent=2 if args.pretty else None)


def main(argv: Sequence[str] | None = None) -> int:
    args = parse_args(sys.argv[1:] if argv is None else argv)

    try:
        settings = get_settings(getattr(args, "config", None))
        configure_logging(
            level=getattr(args, "log_level", None) or settings.log_level,
            json_output=settings.log_json,
        )
        client = build_client(settings, args)
        output = asyncio.run(run_command(client, args))
    except VastException as e:
        print(f"error: {e.kind}: {e}", file=sys.stderr)
        return 1

    output_path = getattr(args, "output", None)
    if output_path is not None:
        try:
            output_path.write_text(output, encoding="utf-8")
        except OSError as e:
            print(f"error: OutputFailed: cannot write {output_path}: {e}", file=sys.stderr)
            return 1
    else:
        print(output)
    return 0


if __name__ == "__main__":  # pragma: no cover - CLI entrypoint
    sys.exit(main())
