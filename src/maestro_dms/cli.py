#!/usr/bin/env python3
"""
Maestro DMS CLI Commands

Provides command-line utilities for uploading files and polling content status.
These are exposed as console scripts via pyproject.toml.
"""

import argparse
import asyncio
import json
import sys
from typing import Any, Dict, List, Optional

from loguru import logger

from .config import load_config, setup_logging
from .document_service import DocumentService
from .exceptions import BulkUploadError, DMSError


def _add_common_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--host",
        help="DMS host (overrides config)"
    )
    parser.add_argument(
        "--api-key",
        help="DMS api key or bearer token (overrides config)"
    )
    parser.add_argument(
        "--env-file",
        help="Path to a .env file with DMS_* settings"
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Enable verbose output"
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="Output results in JSON format"
    )


def _build_service(args: argparse.Namespace) -> DocumentService:
    config = load_config(args.env_file, host=args.host, api_key=args.api_key)
    setup_logging(config)
    if args.verbose:
        logger.remove()
        logger.add(lambda message: sys.stderr.write(message), level="DEBUG")
    return DocumentService(config=config)


def upload(argv: Optional[List[str]] = None) -> None:
    """Console script for uploading local files to DMS storage."""
    parser = argparse.ArgumentParser(
        description="Upload local files to DMS storage through pre-signed POSTs"
    )
    parser.add_argument("directory", help="Directory holding the files")
    parser.add_argument("filenames", nargs="+", help="Files to upload")
    parser.add_argument(
        "--extension",
        help="Store every file under this extension instead of its own"
    )
    _add_common_arguments(parser)

    args = parser.parse_args(argv)

    try:
        results = asyncio.run(_run_upload(args))
    except BulkUploadError as e:
        for path, error in sorted(e.failures.items()):
            logger.error(f"Upload failed for {path}: {error}")
        sys.exit(1)
    except DMSError as e:
        logger.error(f"Upload failed: {e}")
        sys.exit(1)

    if args.json:
        print(json.dumps(results, indent=2))
    else:
        _print_upload_results(results)


async def _run_upload(args: argparse.Namespace) -> Dict[str, Dict[str, Any]]:
    file_configs = [
        {"directory": args.directory, "filename": name, "file_extension": args.extension}
        for name in args.filenames
    ]
    async with _build_service(args) as service:
        uploads = await service.upload_bulk_files(file_configs)
    return {name: upload.to_body() for name, upload in uploads.items()}


def _print_upload_results(results: Dict[str, Dict[str, Any]]) -> None:
    """Print upload results in human-readable format."""
    print("=" * 50)
    print("DMS UPLOAD RESULTS")
    print("=" * 50)

    for filename, upload in sorted(results.items()):
        print(f"✓ {filename}")
        print(f"   Key: {upload.get('key')}.{upload.get('fileExtension')}")
        print(f"   Extension: {upload.get('fileExtension')}")

    print("\n" + "=" * 50)


def status(argv: Optional[List[str]] = None) -> None:
    """Console script for polling the processing status of content."""
    parser = argparse.ArgumentParser(
        description="Show the processing status of DMS content"
    )
    parser.add_argument("identity", help="Content identity")
    _add_common_arguments(parser)

    args = parser.parse_args(argv)

    try:
        result = asyncio.run(_run_status(args))
    except DMSError as e:
        logger.error(f"Status check failed: {e}")
        sys.exit(1)

    if args.json or not isinstance(result, dict):
        print(json.dumps(result, indent=2))
    else:
        print(f"Content {args.identity}:")
        for key, value in result.items():
            print(f"   {key}: {value}")


async def _run_status(args: argparse.Namespace) -> Any:
    async with _build_service(args) as service:
        return await service.status({"identity": args.identity})


if __name__ == "__main__":
    # If called directly, show help
    print("Maestro DMS CLI - Available commands:")
    print("  dms-upload  - Upload local files to DMS storage")
    print("  dms-status  - Show the processing status of content")
