"""
High-level DocumentService API for maestro_dms library.

This module provides the DocumentService class, the primary interface for
talking to the Maestro document-management service.

Endpoint methods validate their payload before returning an awaitable, so a
missing required field raises ValidationError at call time and no request
is sent:

    service = DocumentService(api_key="...")
    pending = service.register({"path": "a/b.pdf"})  # raises ValidationError
"""

from typing import Any, Awaitable, Dict, Iterable, List, Mapping, Optional, Union

import httpx
from loguru import logger

from .config import DMSConfig, LogSink, LoggingOption, load_config, resolve_logging
from .exceptions import ValidationError
from .models import (
    ContentCopyPayload,
    ContentStatusPayload,
    CourseLearningStandardPayload,
    InteractionsPayload,
    PreSignPayload,
    PresignedUpload,
    RegistrationPayload,
    SigningPayload,
    ViewPayload,
    WordTemplateRequestPayload,
    XApiStatementsPayload,
    coerce_payload,
    require,
)
from .request_builder import HTTPMethod, RequestBuilder, RequestDescriptor, StorageUploader
from .uploads import FileConfigLike, UploadOrchestrator, UploadOutcome
from .utils import create_query_string

Payload = Union[Mapping[str, Any], Any]


class DocumentService:
    """
    Client for the Maestro document-management service.

    Holds one immutable DMSConfig that setters replace wholesale, an
    authenticated RequestBuilder for DMS calls and an anonymous
    StorageUploader for pre-signed POSTs.
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        config: Optional[DMSConfig] = None,
        *,
        host: Optional[str] = None,
        api_secret: Optional[str] = None,
        customer: Optional[str] = None,
        logging: Union[None, bool, LogSink, LoggingOption] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        """
        Initialize DocumentService.

        Args:
            api_key: Bearer token, or the api key of the header triplet
            config: Full configuration (defaults to environment, see load_config)
            host: DMS host override
            api_secret: Secret of the header triplet
            customer: Customer of the header triplet
            logging: False/None, True, a callable sink or a LoggingOption
            transport: httpx transport, mostly for tests
            http_client: Pre-built httpx.AsyncClient to share; not closed by aclose()
        """
        base = config or load_config()
        updates = {
            k: v for k, v in {
                "api_key": api_key,
                "host": host,
                "api_secret": api_secret,
                "customer": customer,
            }.items() if v is not None
        }
        self._config = base.with_updates(**updates) if updates else base
        # fail fast on missing or half-configured credentials
        self._config.get_credentials()

        if logging is None:
            logging = self._config.logging

        self._owns_client = http_client is None
        self._http = http_client or httpx.AsyncClient(
            timeout=httpx.Timeout(self._config.timeout_seconds),
            transport=transport,
        )
        self._requests = RequestBuilder(
            self._http,
            host=lambda: self._config.host,
            credentials=lambda: self._config.get_credentials(),
            log=resolve_logging(logging),
        )
        self._uploads = UploadOrchestrator(
            presign=lambda: self.get_pre_signed_data(),
            storage=StorageUploader(self._http),
        )

        logger.debug(f"DocumentService initialized for host: {self._config.host}")

    @property
    def config(self) -> DMSConfig:
        return self._config

    @property
    def host(self) -> str:
        return self._config.host

    @property
    def request_builder(self) -> RequestBuilder:
        return self._requests

    def set_api_key(self, api_key: str) -> None:
        """Replace the api key (bearer token or triplet key)."""
        if not api_key:
            raise ValidationError("Invalid API key", field="api_key")
        self._config = self._config.with_updates(api_key=api_key)

    def set_host(self, host: str) -> None:
        """Point the client at another DMS host."""
        self._config = self._config.with_updates(host=host)

    async def aclose(self) -> None:
        if self._owns_client:
            await self._http.aclose()

    async def __aenter__(self) -> "DocumentService":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.aclose()

    def _request(
        self,
        path: str,
        method: HTTPMethod = HTTPMethod.GET,
        body: Optional[Any] = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> Awaitable[Any]:
        return self._requests.execute(
            RequestDescriptor(path=path, method=method, body=body, headers=headers or {})
        )

    # ==========================================
    # Storage
    # ==========================================

    def get_bucket(self) -> Awaitable[Any]:
        """Fetch the bucket name the connection uses."""
        return self._request("api/v1/bucket")

    def get_pre_signed_data(self, payload: Optional[Payload] = None) -> Awaitable[Any]:
        """
        Fetch the pre-signed POST data used to upload straight to storage.

        Args:
            payload: Optional filename, acl ("private" or "public") and expiration
        """
        presign = coerce_payload(PreSignPayload, payload or {})
        params = create_query_string(presign.to_body())
        return self._request(f"api/v1/pre-sign{params}")

    def get_signed_url(self, payload: Payload) -> Awaitable[Any]:
        """
        Fetch a signed url for viewing private storage content.

        Raises:
            ValidationError: If ``path`` is missing
        """
        signing = coerce_payload(SigningPayload, payload)
        require(signing, "path", message="Invalid Sign Data")
        return self._request("api/v1/sign", HTTPMethod.POST, signing.to_body())

    # ==========================================
    # Content
    # ==========================================

    def register(self, payload: Payload) -> Awaitable[Any]:
        """
        Register uploaded media with DMS.

        Raises:
            ValidationError: If ``path`` or ``file_format`` is missing
        """
        registration = coerce_payload(RegistrationPayload, payload)
        require(registration, "path", "file_format", message="Invalid Registration Data")
        return self._request("api/v1/content", HTTPMethod.POST, registration.to_body())

    def copy(self, payload: Payload) -> Awaitable[Any]:
        """
        Copy content into another connection.

        Raises:
            ValidationError: If ``source_content_identity`` or
                ``target_connection_api_key`` is missing
        """
        copy = coerce_payload(ContentCopyPayload, payload)
        require(
            copy, "source_content_identity", "target_connection_api_key",
            message="Invalid Copy Data",
        )
        return self._request(
            f"api/v1/content/{copy.source_content_identity}/copy",
            HTTPMethod.POST,
            copy.to_body(),
        )

    def generate_media_from_word_template(self, payload: Payload) -> Awaitable[Any]:
        """
        Generate a document from a word template.

        Raises:
            ValidationError: If neither template nor content identity is set,
                or ``payload`` is missing
        """
        request = coerce_payload(WordTemplateRequestPayload, payload)
        if not request.template_identity and not request.content_identity:
            raise ValidationError("Invalid template request", field="template_identity")
        require(request, "payload", message="Invalid template request")
        return self._request("api/v1/word-template", HTTPMethod.POST, request.to_body())

    def view(self, payload: Payload) -> Awaitable[Any]:
        """
        Fetch view information for registered media.

        Raises:
            ValidationError: If ``identity`` is missing
        """
        view = coerce_payload(ViewPayload, payload)
        require(view, "identity", message="Invalid View Data")
        params = create_query_string(view.query_params())
        return self._request(f"api/v1/content/{view.identity}/view{params}")

    def status(self, payload: Payload) -> Awaitable[Any]:
        """
        Fetch the processing status of content.

        Raises:
            ValidationError: If ``identity`` is missing
        """
        status = coerce_payload(ContentStatusPayload, payload)
        require(status, "identity", message="Invalid Status Data")
        return self._request(f"api/v1/content/{status.identity}/status")

    # ==========================================
    # SCORM / xAPI
    # ==========================================

    def get_course_learning_standard(self, payload: Payload) -> Awaitable[Any]:
        """Fetch the learning standard of a content item."""
        course = coerce_payload(CourseLearningStandardPayload, payload)
        require(course, "identity", message="Invalid Data")
        return self._request(f"api/v1/scorm/{course.identity}")

    def get_xapi_statements_for_registration(self, payload: Payload) -> Awaitable[Any]:
        """Fetch the xAPI statements recorded for a registration."""
        statements = coerce_payload(XApiStatementsPayload, payload)
        require(statements, "registration_identity", message="Invalid Data")
        return self._request(
            f"api/v1/scorm/registration/{statements.registration_identity}/xapi-statements"
        )

    def get_interactions_for_registration(self, payload: Payload) -> Awaitable[Any]:
        """Fetch the interactions recorded for a registration."""
        interactions = coerce_payload(InteractionsPayload, payload)
        require(interactions, "registration_identity", message="Invalid Data")
        return self._request(
            f"api/v1/scorm/registration/{interactions.registration_identity}/interactions"
        )

    # ==========================================
    # Uploads
    # ==========================================

    async def upload_file(self, file_config: FileConfigLike) -> PresignedUpload:
        """
        Upload a local file to storage through a pre-signed POST.

        Example:
            upload = await service.upload_file({"directory": "/tmp", "filename": "report.docx"})
            upload.file_extension  # "docx"
        """
        return await self._uploads.upload_file(file_config)

    async def upload_bulk_files(self, file_configs: Iterable[FileConfigLike]) -> Dict[str, PresignedUpload]:
        """Upload files concurrently; any failure fails the whole batch."""
        return await self._uploads.upload_bulk_files(file_configs)

    async def upload_bulk_files_settled(self, file_configs: Iterable[FileConfigLike]) -> List[UploadOutcome]:
        """Upload files concurrently and return one outcome per file."""
        return await self._uploads.upload_bulk_files_settled(file_configs)
