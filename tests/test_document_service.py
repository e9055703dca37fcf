"""
Endpoint wrappers: required-field validation happens at call time with no
request sent, and each wrapper targets the right path, method and body.
"""
from __future__ import annotations

from datetime import date
from uuid import UUID

import pytest

from maestro_dms import (
    ConfigurationError,
    DocumentService,
    RegistrationPayload,
    ValidationError,
    ViewPayload,
)


@pytest.mark.parametrize(
    "method,payload,field",
    [
        ("register", {"title": "t", "file_format": "pdf"}, "path"),
        ("register", {"title": "t", "path": "a/b.pdf"}, "file_format"),
        ("register", {"title": "t", "path": "", "file_format": "pdf"}, "path"),
        ("view", {"registration_id": "r1"}, "identity"),
        ("status", {}, "identity"),
        ("copy", {"target_connection_api_key": "k"}, "source_content_identity"),
        ("copy", {"source_content_identity": "c1"}, "target_connection_api_key"),
        ("get_signed_url", {"filename": "x.pdf"}, "path"),
        ("get_course_learning_standard", {}, "identity"),
        ("get_xapi_statements_for_registration", {}, "registration_identity"),
        ("get_interactions_for_registration", {}, "registration_identity"),
        ("generate_media_from_word_template", {"payload": {"replacements": {}}}, "template_identity"),
        ("generate_media_from_word_template", {"template_identity": "t1"}, "payload"),
    ],
)
def test_missing_required_field_raises_before_any_request(service, fake_dms, method, payload, field):
    with pytest.raises(ValidationError) as exc_info:
        getattr(service, method)(payload)

    assert exc_info.value.field == field
    assert fake_dms.requests == []


def test_missing_payload_raises_validation_error(service, fake_dms):
    with pytest.raises(ValidationError):
        service.register(None)
    assert fake_dms.requests == []


def test_wrong_payload_shape_raises_validation_error(service):
    with pytest.raises(ValidationError) as exc_info:
        service.get_pre_signed_data({"acl": "world-writable"})
    assert exc_info.value.field == "acl"


@pytest.mark.anyio
async def test_register_posts_camel_case_body(service, fake_dms):
    await service.register({
        "title": "Report",
        "path": "uploads/abc.docx",
        "file_format": "docx",
        "should_generate_thumbnail": True,
        "metadata": {"courseId": 7},
    })

    request = fake_dms.requests[0]
    assert request.method == "POST"
    assert request.url.path == "/api/v1/content"
    assert fake_dms.json_body(request) == {
        "title": "Report",
        "path": "uploads/abc.docx",
        "fileFormat": "docx",
        "shouldGenerateThumbnail": True,
        "metadata": {"courseId": 7},
    }


@pytest.mark.anyio
async def test_register_serializes_dates_and_ids_in_metadata(service, fake_dms):
    await service.register({
        "title": "Report",
        "path": "uploads/abc.docx",
        "file_format": "docx",
        "metadata": {"at": date(2024, 1, 1), "ref": UUID(int=1)},
    })

    assert fake_dms.json_body(fake_dms.requests[0])["metadata"] == {
        "at": "2024-01-01",
        "ref": "00000000-0000-0000-0000-000000000001",
    }


@pytest.mark.anyio
async def test_register_accepts_model_and_camel_case_mapping(service, fake_dms):
    await service.register(RegistrationPayload(title="A", path="p", file_format="pdf"))
    await service.register({"title": "B", "path": "p", "fileFormat": "pdf"})

    assert [fake_dms.json_body(r)["fileFormat"] for r in fake_dms.requests] == ["pdf", "pdf"]


@pytest.mark.anyio
async def test_copy_targets_source_content(service, fake_dms):
    await service.copy({
        "source_content_identity": "c-1",
        "target_connection_api_key": "other-key",
        "target_content_identity": "c-2",
    })

    request = fake_dms.requests[0]
    assert request.method == "POST"
    assert request.url.path == "/api/v1/content/c-1/copy"
    assert fake_dms.json_body(request)["targetConnectionApiKey"] == "other-key"


@pytest.mark.anyio
async def test_view_builds_query_from_learner_fields(service, fake_dms):
    await service.view(ViewPayload(
        identity="c-9",
        registration_id="reg-1",
        learner_first_name="Ada",
        learner_last_name="Lovelace",
    ))

    request = fake_dms.requests[0]
    assert request.method == "GET"
    assert request.url.path == "/api/v1/content/c-9/view"
    assert fake_dms.query(request) == {
        "registrationId": "reg-1",
        "learnerFirstName": "Ada",
        "learnerLastName": "Lovelace",
    }


@pytest.mark.anyio
async def test_view_without_learner_fields_has_no_query(service, fake_dms):
    await service.view({"identity": "c-9"})

    assert str(fake_dms.requests[0].url) == "https://dms.test/api/v1/content/c-9/view"


@pytest.mark.anyio
async def test_pre_sign_query_parameters(service, fake_dms):
    await service.get_pre_signed_data({"filename": "a.pdf", "acl": "public", "expiration": 60})

    request = fake_dms.requests[0]
    assert request.url.path == "/api/v1/pre-sign"
    assert fake_dms.query(request) == {"acl": "public", "expiration": "60", "filename": "a.pdf"}


@pytest.mark.anyio
async def test_pre_sign_without_parameters(service, fake_dms):
    await service.get_pre_signed_data()

    assert str(fake_dms.requests[0].url) == "https://dms.test/api/v1/pre-sign"


@pytest.mark.anyio
@pytest.mark.parametrize(
    "method,payload,method_name,path",
    [
        ("get_signed_url", {"path": "a/b.pdf"}, "POST", "/api/v1/sign"),
        ("status", {"identity": "c-1"}, "GET", "/api/v1/content/c-1/status"),
        ("get_course_learning_standard", {"identity": "c-1"}, "GET", "/api/v1/scorm/c-1"),
        (
            "get_xapi_statements_for_registration",
            {"registration_identity": "r-1"},
            "GET",
            "/api/v1/scorm/registration/r-1/xapi-statements",
        ),
        (
            "get_interactions_for_registration",
            {"registrationIdentity": "r-1"},
            "GET",
            "/api/v1/scorm/registration/r-1/interactions",
        ),
        (
            "generate_media_from_word_template",
            {"content_identity": "c-1", "title": "Letter", "payload": {"replacements": {"name": "Ada"}}},
            "POST",
            "/api/v1/word-template",
        ),
    ],
)
async def test_endpoint_paths(service, fake_dms, method, payload, method_name, path):
    await getattr(service, method)(payload)

    request = fake_dms.requests[0]
    assert request.method == method_name
    assert request.url.path == path


@pytest.mark.anyio
async def test_word_template_body_keeps_nested_images(service, fake_dms):
    await service.generate_media_from_word_template({
        "template_identity": "t-1",
        "title": "Certificate",
        "payload": {"images": {"logo": {"svg_string": "<svg/>", "height": 10}}},
        "metadata": {"ref": "x"},
    })

    body = fake_dms.json_body(fake_dms.requests[0])
    assert body["templateIdentity"] == "t-1"
    assert body["payload"]["images"]["logo"] == {"svgString": "<svg/>", "height": 10}


@pytest.mark.anyio
async def test_set_api_key_and_host_apply_to_next_call(service, fake_dms):
    old_config = service.config

    service.set_api_key("rotated")
    service.set_host("https://dms2.test/")
    await service.get_bucket()

    request = fake_dms.requests[0]
    assert str(request.url) == "https://dms2.test/api/v1/bucket"
    assert request.headers["Authorization"] == "Bearer rotated"
    assert old_config.api_key == "token-123"
    assert old_config.host == "https://dms.test"


def test_set_host_rejects_invalid_host(service):
    with pytest.raises(ConfigurationError):
        service.set_host("dms.test")
    assert service.host == "https://dms.test"


def test_set_api_key_rejects_empty(service):
    with pytest.raises(ValidationError):
        service.set_api_key("")


def test_missing_api_key_is_a_configuration_error():
    with pytest.raises(ConfigurationError) as exc_info:
        DocumentService()
    assert exc_info.value.config_key == "api_key"


def test_half_configured_triplet_is_a_configuration_error():
    with pytest.raises(ConfigurationError) as exc_info:
        DocumentService(api_key="key", api_secret="secret")
    assert exc_info.value.config_key == "customer"


def test_default_host():
    service = DocumentService(api_key="token")
    assert service.host == "https://dms.meetmaestro.com"


@pytest.mark.anyio
async def test_async_context_manager_closes_owned_client(make_service):
    async with make_service() as service:
        pass
    assert service._http.is_closed
