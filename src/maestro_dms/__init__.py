"""
Maestro DMS - client library for the Maestro document-management service.

Builds authenticated requests against DMS, uploads files to object storage
through pre-signed POSTs, and wraps content registration, copying, status
polling, view tickets, SCORM/xAPI reporting and word-template generation.

Usage:
    from maestro_dms import DocumentService

    async with DocumentService(api_key="...") as dms:
        upload = await dms.upload_file({"directory": "/tmp", "filename": "report.docx"})
        await dms.register({"title": "Report", "path": upload.key, "file_format": "docx"})
"""

from .document_service import DocumentService
from .request_builder import HTTPMethod, RequestBuilder, RequestDescriptor, StorageUploader
from .uploads import UploadOrchestrator, UploadOutcome, UploadState
from .models import (
    FileConfig,
    PreSignPayload,
    SigningPayload,
    RegistrationPayload,
    ContentCopyPayload,
    WordTemplateRequestPayload,
    WordTemplatePayload,
    ImagePayload,
    ViewPayload,
    ContentStatusPayload,
    CourseLearningStandardPayload,
    XApiStatementsPayload,
    InteractionsPayload,
    PresignedUpload,
)
from .utils import create_query_string

from .config import (
    DMSConfig,
    BearerCredentials,
    ApiKeyCredentials,
    NoLogging,
    DefaultLogging,
    CustomSink,
    get_config,
    load_config,
)
from .exceptions import (
    DMSError,
    ConfigurationError,
    ValidationError,
    RequestError,
    StorageUploadError,
    LocalFileNotFoundError,
    BulkUploadError,
)

__version__ = "0.1.0"

__all__ = [
    # Main API Classes
    "DocumentService",
    "RequestBuilder",
    "RequestDescriptor",
    "StorageUploader",
    "UploadOrchestrator",
    "UploadOutcome",
    "UploadState",
    "HTTPMethod",

    # Payloads
    "FileConfig",
    "PreSignPayload",
    "SigningPayload",
    "RegistrationPayload",
    "ContentCopyPayload",
    "WordTemplateRequestPayload",
    "WordTemplatePayload",
    "ImagePayload",
    "ViewPayload",
    "ContentStatusPayload",
    "CourseLearningStandardPayload",
    "XApiStatementsPayload",
    "InteractionsPayload",
    "PresignedUpload",

    # Configuration
    "DMSConfig",
    "BearerCredentials",
    "ApiKeyCredentials",
    "NoLogging",
    "DefaultLogging",
    "CustomSink",
    "get_config",
    "load_config",

    # Utilities
    "create_query_string",

    # Exceptions
    "DMSError",
    "ConfigurationError",
    "ValidationError",
    "RequestError",
    "StorageUploadError",
    "LocalFileNotFoundError",
    "BulkUploadError",
]
