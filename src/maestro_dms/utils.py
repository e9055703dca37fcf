"""
Utility functions for maestro_dms library.

This module contains common helper functions used throughout the library.
"""

import mimetypes
import os
import time
from typing import Any, Mapping, Optional
from urllib.parse import urlencode

from loguru import logger


DEFAULT_CONTENT_TYPE = "application/octet-stream"


def create_query_string(params: Optional[Mapping[str, Any]]) -> str:
    """
    Build the query string appended to several endpoint paths.

    None values are dropped and keys are sorted, so the output is stable.

    Args:
        params: Plain key/value mapping

    Returns:
        str: "" for an empty mapping, otherwise "?" followed by the encoded pairs

    Example:
        create_query_string({"acl": "private", "filename": "a b.pdf"})
        # '?acl=private&filename=a+b.pdf'
    """
    if not params:
        return ""

    pairs = []
    for key in sorted(params):
        value = params[key]
        if value is None:
            continue
        if isinstance(value, bool):
            value = "true" if value else "false"
        pairs.append((key, value))

    if not pairs:
        return ""

    return f"?{urlencode(pairs)}"


def build_url(host: str, path: str) -> str:
    """
    Join host and path with a single separating slash.

    Args:
        host: Base URL, with or without a trailing slash
        path: Resource path, with or without a leading slash

    Returns:
        str: Full URL
    """
    return f"{host.rstrip('/')}/{path.lstrip('/')}"


def resolve_file_extension(filename: str, override: Optional[str] = None) -> str:
    """
    Resolve the extension an uploaded file is stored under.

    Args:
        filename: Local file name
        override: Caller-supplied extension, wins when set

    Returns:
        str: Extension without the leading dot ("" when the name has none)
    """
    if override:
        return override.lstrip(".")
    if "." not in filename:
        return ""
    return filename.rsplit(".", 1)[1]


def guess_content_type(extension: str) -> str:
    """
    Look up the MIME type for a file extension.

    Args:
        extension: Extension without the leading dot

    Returns:
        str: MIME type, application/octet-stream when unknown
    """
    if not extension:
        return DEFAULT_CONTENT_TYPE
    content_type, _ = mimetypes.guess_type(f"file.{extension}", strict=False)
    return content_type or DEFAULT_CONTENT_TYPE


def build_local_path(directory: str, filename: str) -> str:
    """Join upload directory and file name."""
    return os.path.join(directory, filename)


def timing_context(operation_name: str) -> 'TimingContext':
    """
    Create a timing context manager for performance measurement.

    Args:
        operation_name: Name of the operation being timed

    Returns:
        TimingContext: Context manager for timing
    """
    return TimingContext(operation_name)


class TimingContext:
    """Context manager for timing operations."""

    def __init__(self, operation_name: str):
        self.operation_name = operation_name
        self.start_time = None
        self.end_time = None

    def __enter__(self):
        self.start_time = time.monotonic()
        logger.debug(f"Starting operation: {self.operation_name}")
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.end_time = time.monotonic()

        if exc_type is None:
            logger.debug(f"Operation '{self.operation_name}' completed in {self.duration_ms:.1f}ms")
        else:
            logger.debug(f"Operation '{self.operation_name}' failed after {self.duration_ms:.1f}ms: {exc_val}")

    @property
    def duration_ms(self) -> float:
        """Elapsed milliseconds, measured up to now while still running."""
        if self.start_time is None:
            return 0.0
        end = self.end_time if self.end_time is not None else time.monotonic()
        return (end - self.start_time) * 1000


def format_file_size(size_bytes: int) -> str:
    """
    Format file size in human-readable format.

    Args:
        size_bytes: Size in bytes

    Returns:
        str: Formatted size (e.g., "1.5 MB")
    """
    if size_bytes == 0:
        return "0 B"

    units = ['B', 'KB', 'MB', 'GB', 'TB']
    unit_index = 0
    size = float(size_bytes)

    while size >= 1024 and unit_index < len(units) - 1:
        size /= 1024
        unit_index += 1

    return f"{size:.1f} {units[unit_index]}"
