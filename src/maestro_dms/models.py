"""
Payload and response models for the DMS API.

Attributes are snake_case in Python and camelCase on the wire. Every model
accepts either spelling when built from a mapping.
"""

from typing import Any, Dict, Literal, Mapping, Optional, Type, TypeVar, Union

from pydantic import BaseModel, ConfigDict, Field
from pydantic import ValidationError as PydanticValidationError
from pydantic.alias_generators import to_camel

from .exceptions import ValidationError

M = TypeVar("M", bound="DMSModel")


class DMSModel(BaseModel):
    """Base model for request and response bodies."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="allow",
    )

    def to_body(self) -> Dict[str, Any]:
        """Serialize for the wire, dropping unset optional fields."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


def coerce_payload(model: Type[M], payload: Union[None, M, Mapping[str, Any]]) -> M:
    """
    Accept a model instance or a plain mapping and return a model instance.

    Raises:
        ValidationError: If the payload is missing or has the wrong shape
    """
    if payload is None:
        raise ValidationError(f"Missing {model.__name__}")
    if isinstance(payload, model):
        return payload
    if not isinstance(payload, Mapping):
        raise ValidationError(
            f"Expected {model.__name__} or mapping, got {type(payload).__name__}"
        )
    try:
        return model.model_validate(dict(payload))
    except PydanticValidationError as e:
        first = e.errors()[0]
        field = ".".join(str(part) for part in first.get("loc", ()))
        raise ValidationError(f"Invalid {model.__name__}: {first.get('msg')}", field=field or None)


def require(payload: BaseModel, *fields: str, message: str) -> None:
    """
    Raise ValidationError for the first required field that is empty.

    Args:
        payload: Model instance to check
        *fields: Attribute names that must be truthy
        message: Error message for the endpoint
    """
    for field in fields:
        if not getattr(payload, field, None):
            raise ValidationError(message, field=field)


# ==========================================
# Request payloads
# ==========================================

class FileConfig(DMSModel):
    """A local file queued for upload."""
    directory: str
    filename: str
    file_extension: Optional[str] = None


class PreSignPayload(DMSModel):
    filename: Optional[str] = None
    acl: Optional[Literal["private", "public"]] = None
    expiration: Optional[int] = None


class SigningPayload(DMSModel):
    path: Optional[str] = None
    filename: Optional[str] = None
    expiration: Optional[int] = None


class RegistrationPayload(DMSModel):
    """Content registration. ``identity`` pins the uuid the content is created with."""
    identity: Optional[str] = None
    title: Optional[str] = None
    path: Optional[str] = None
    file_format: Optional[str] = None
    convert_format: Optional[str] = None
    should_generate_thumbnail: Optional[bool] = None
    # returned untouched on every callback
    metadata: Optional[Any] = None


class ContentCopyPayload(DMSModel):
    source_content_identity: Optional[str] = None
    target_content_identity: Optional[str] = None
    target_connection_api_key: Optional[str] = None
    convert_format: Optional[str] = None
    should_generate_thumbnail: Optional[bool] = None
    metadata: Optional[Any] = None


class ImagePayload(DMSModel):
    url: Optional[str] = None
    svg_string: Optional[str] = None
    height: Optional[int] = None
    width: Optional[int] = None


class WordTemplatePayload(DMSModel):
    replacements: Optional[Dict[str, str]] = None
    images: Optional[Dict[str, ImagePayload]] = None


class WordTemplateRequestPayload(DMSModel):
    """
    Templated document generation request.

    Either ``template_identity`` (a registered word template) or
    ``content_identity`` (a word document already in DMS) must be set.
    """
    template_identity: Optional[str] = None
    content_identity: Optional[str] = None
    title: Optional[str] = None
    payload: Optional[WordTemplatePayload] = None
    metadata: Optional[Any] = None


class ViewPayload(DMSModel):
    identity: Optional[str] = None
    # scorm engine registration and learner details
    registration_id: Optional[str] = None
    learner_first_name: Optional[str] = None
    learner_last_name: Optional[str] = None
    learner_identity: Optional[str] = None

    def query_params(self) -> Dict[str, Any]:
        return {
            "registrationId": self.registration_id,
            "learnerFirstName": self.learner_first_name,
            "learnerLastName": self.learner_last_name,
            "learnerIdentity": self.learner_identity,
        }


class ContentStatusPayload(DMSModel):
    identity: Optional[str] = None


class CourseLearningStandardPayload(DMSModel):
    identity: Optional[str] = None


class XApiStatementsPayload(DMSModel):
    registration_identity: Optional[str] = None


class InteractionsPayload(DMSModel):
    registration_identity: Optional[str] = None


# ==========================================
# Responses
# ==========================================

class PresignedUpload(DMSModel):
    """
    Pre-signed POST descriptor issued by DMS.

    ``original_filename`` and ``file_extension`` are filled in locally once
    the file has been transferred to storage.
    """
    url: str
    key: str
    policy: Optional[str] = None
    signature: Optional[str] = None
    aws_access_key_id: Optional[str] = Field(default=None, alias="AWSAccessKeyId")
    acl: Optional[str] = None
    original_filename: Optional[str] = None
    file_extension: Optional[str] = None
