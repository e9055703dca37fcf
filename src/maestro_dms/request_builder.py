"""
Outbound HTTP for maestro_dms library.

Two capabilities live here and are kept apart on purpose:

- RequestBuilder: authenticated calls to the DMS host. Merges credential
  headers with per-call overrides, decodes JSON and normalizes every failure
  into RequestError.
- StorageUploader: anonymous multipart POSTs to a pre-signed object-storage
  URL. Never sends DMS credentials.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, IO, Optional, Tuple, Union

import httpx
from loguru import logger

from .config import BearerCredentials, ApiKeyCredentials, LoggingOption, NoLogging
from .exceptions import RequestError, StorageUploadError, ValidationError
from .utils import build_url, timing_context

Credentials = Union[BearerCredentials, ApiKeyCredentials]


class HTTPMethod(Enum):
    """HTTP methods accepted by the DMS API."""
    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    DELETE = "DELETE"
    COPY = "COPY"
    HEAD = "HEAD"


@dataclass
class RequestDescriptor:
    """A single DMS call. ``uri`` replaces host + path when set."""
    path: str = ""
    method: Union[HTTPMethod, str] = HTTPMethod.GET
    body: Optional[Any] = None
    form_data: Optional[Dict[str, Any]] = None
    headers: Dict[str, str] = field(default_factory=dict)
    uri: Optional[str] = None

    def __post_init__(self):
        if not isinstance(self.method, HTTPMethod):
            try:
                self.method = HTTPMethod(str(self.method).upper())
            except ValueError:
                raise ValidationError(f"Unsupported HTTP method: {self.method}", field="method")


def _parse_body(response: httpx.Response) -> Any:
    if not response.content:
        return None
    try:
        return response.json()
    except ValueError:
        return response.text


def _status_of(error: httpx.HTTPError) -> int:
    if isinstance(error, httpx.HTTPStatusError):
        return error.response.status_code
    return 500


class RequestBuilder:
    """
    Issues authenticated requests against the DMS host.

    Host and credentials are read through callables so that the owning
    client can swap its configuration without rebuilding this object.
    """

    def __init__(
        self,
        client: httpx.AsyncClient,
        host: Callable[[], str],
        credentials: Callable[[], Credentials],
        log: Optional[LoggingOption] = None,
    ):
        self._client = client
        self._host = host
        self._credentials = credentials
        self.log = log or NoLogging()

    @property
    def default_headers(self) -> Dict[str, str]:
        headers = {"Accept": "application/json"}
        headers.update(self._credentials().headers())
        return headers

    def merge_headers(self, overrides: Optional[Dict[str, str]] = None) -> httpx.Headers:
        """Default headers overlaid by the caller's, caller wins on conflict.

        Names compare case-insensitively, so ``authorization`` replaces the
        default ``Authorization`` instead of being sent next to it.
        """
        headers = httpx.Headers(self.default_headers)
        if overrides:
            headers.update(overrides)
        return headers

    def build_request(self, descriptor: RequestDescriptor) -> httpx.Request:
        url = descriptor.uri or build_url(self._host(), descriptor.path)
        return self._client.build_request(
            descriptor.method.value,
            url,
            json=descriptor.body,
            data=descriptor.form_data,
            headers=self.merge_headers(descriptor.headers),
        )

    async def execute(self, descriptor: RequestDescriptor) -> Any:
        """
        Send a request and return its decoded body.

        Args:
            descriptor: Path, method, body and header overrides for the call

        Returns:
            Decoded JSON body, the raw text when it is not JSON, or None

        Raises:
            RequestError: On an unbuildable request, transport failure or a
                non-2xx response
        """
        try:
            request = self.build_request(descriptor)
        except (httpx.InvalidURL, TypeError, ValueError) as e:
            target = f"{descriptor.method.value} {descriptor.uri or descriptor.path}"
            logger.debug(f"DMS call {target} could not be built: {e}")
            raise RequestError(str(e) or type(e).__name__, status=500, error=e) from e

        timer = timing_context(f"{request.method} {request.url}")
        try:
            with timer:
                response = await self._client.send(request)
                response.raise_for_status()
        except httpx.HTTPError as e:
            status = _status_of(e)
            logger.debug(f"DMS call {request.method} {request.url} failed with status {status}")
            raise RequestError(
                str(e) or type(e).__name__,
                status=status,
                duration_ms=timer.duration_ms,
                error=e,
            ) from e

        body = _parse_body(response)
        self.log.emit({
            "status_code": response.status_code,
            "body": body,
            "duration_ms": timer.duration_ms,
        })
        return body


class StorageUploader:
    """Posts signed multipart forms straight to object storage."""

    def __init__(self, client: httpx.AsyncClient):
        self._client = client

    async def post_form(
        self,
        url: str,
        fields: Dict[str, str],
        file: Tuple[str, IO[bytes], str],
    ) -> httpx.Response:
        """
        Submit signed policy fields followed by the file part.

        Args:
            url: Pre-signed storage URL
            fields: Form fields, sent in insertion order before the file
            file: (filename, binary stream, content type)

        Returns:
            httpx.Response from storage

        Raises:
            StorageUploadError: On transport failure or a non-2xx response
        """
        timer = timing_context(f"POST {url}")
        try:
            with timer:
                response = await self._client.post(url, data=fields, files={"file": file})
                response.raise_for_status()
        except httpx.HTTPError as e:
            raise StorageUploadError(
                f"Storage upload failed: {str(e) or type(e).__name__}",
                status=_status_of(e),
                duration_ms=timer.duration_ms,
                error=e,
            ) from e

        logger.debug(f"Storage accepted upload with status {response.status_code} in {timer.duration_ms:.1f}ms")
        return response
