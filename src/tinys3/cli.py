"""CLI entry point for tinys3."""

import argparse
import asyncio
import logging
import sys
from pathlib import Path

from tinys3.bucket import Bucket
from tinys3.config import ClientConfig, load_config
from tinys3.errors import AnonymousCredentials, Error
from tinys3.etag import Etag
from tinys3.logging_config import configure_logging

logger = logging.getLogger("tinys3")

# Upload chunk size for `put`
_CHUNK_SIZE = 256 * 1024


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments.

    Args:
        argv: Argument list to parse. Defaults to sys.argv[1:].

    Returns:
        Parsed argument namespace.
    """
    parser = argparse.ArgumentParser(
        prog="tinys3",
        description="tinys3 - minimal S3-compatible object storage client",
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Path to YAML configuration file (default: tinys3.yaml if present)",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Log level (overrides config, default: INFO)",
    )
    parser.add_argument(
        "--log-format",
        type=str,
        default=None,
        choices=["text", "json"],
        help="Log format: 'text' (human-readable) or 'json' (structured)",
    )

    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("etag", help="Compute the ETag of local files")
    p.add_argument("paths", nargs="+", type=Path)

    p = sub.add_parser("mb", help="Create a bucket")
    p.add_argument("bucket")

    p = sub.add_parser("rb", help="Delete an empty bucket")
    p.add_argument("bucket")

    p = sub.add_parser("head", help="Show object metadata")
    p.add_argument("bucket")
    p.add_argument("key")

    p = sub.add_parser("get", help="Download an object")
    p.add_argument("bucket")
    p.add_argument("key")
    p.add_argument("-o", "--output", type=Path, default=None, help="Output file (default: stdout)")

    p = sub.add_parser("put", help="Upload a file")
    p.add_argument("bucket")
    p.add_argument("key")
    p.add_argument("path", type=Path)

    return parser.parse_args(argv)


def _load(path: Path | None) -> ClientConfig:
    if path is None:
        default = Path("tinys3.yaml")
        return load_config(default) if default.exists() else ClientConfig()
    return load_config(path)


def cmd_etag(paths: list[Path]) -> None:
    for path in paths:
        with open(path, "rb") as fh:
            etag = Etag.compute_blocking(fh)
        print(f"{etag}  {path}")


async def _read_file(path: Path):
    with open(path, "rb") as fh:
        while True:
            chunk = await asyncio.to_thread(fh.read, _CHUNK_SIZE)
            if not chunk:
                break
            yield chunk


async def run(args: argparse.Namespace, config: ClientConfig) -> None:
    """Execute a network subcommand."""
    region = config.region()
    credentials = config.credentials()
    timeout = config.endpoint.timeout

    if args.command == "mb":
        bucket = await Bucket.create(args.bucket, region, credentials, timeout=timeout)
        await bucket.aclose()
        print(f"created {args.bucket}")
        return

    async with Bucket(args.bucket, region, credentials, timeout=timeout) as bucket:
        if args.command == "rb":
            await bucket.delete()
            print(f"deleted {args.bucket}")
        elif args.command == "head":
            meta = await bucket.head_object(args.key)
            print(f"etag={meta.etag} size={meta.size} storage_class={meta.storage_class.value}")
        elif args.command == "get":
            async with await bucket.get_object(args.key) as obj:
                out = open(args.output, "wb") if args.output else sys.stdout.buffer
                try:
                    async for chunk in obj.aiter_bytes():
                        out.write(chunk)
                finally:
                    if args.output:
                        out.close()
        elif args.command == "put":
            size = args.path.stat().st_size
            etag = await bucket.put_object(args.key, _read_file(args.path), size=size)
            print(f"{etag}  {args.bucket}/{args.key}")


def main(argv: list[str] | None = None) -> None:
    """Main entry point for the tinys3 CLI.

    Loads configuration, applies CLI overrides, configures logging and runs
    the requested subcommand.

    Args:
        argv: Argument list to parse. Defaults to sys.argv[1:].
    """
    args = parse_args(argv)

    # Use a basic stderr logger for config-loading errors
    logging.basicConfig(level=logging.INFO, stream=sys.stderr)

    try:
        config = _load(args.config)
    except FileNotFoundError:
        logger.error("Config file not found: %s", args.config)
        sys.exit(1)
    except Exception as exc:
        logger.error("Failed to load config: %s", exc)
        sys.exit(1)

    # Apply CLI overrides
    if args.log_level is not None:
        config.logging.level = args.log_level
    if args.log_format is not None:
        config.logging.format = args.log_format

    configure_logging(level=config.logging.level, fmt=config.logging.format)

    try:
        if args.command == "etag":
            cmd_etag(args.paths)
        else:
            asyncio.run(run(args, config))
    except AnonymousCredentials:
        logger.error("%s failed: no access key and secret key configured", args.command)
        sys.exit(1)
    except (Error, OSError) as exc:
        logger.error("%s failed: %s", args.command, exc)
        sys.exit(1)


if __name__ == "__main__":
    main()
