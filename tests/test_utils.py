from urllib.parse import parse_qs

import pytest

from maestro_dms.utils import (
    build_url,
    create_query_string,
    guess_content_type,
    resolve_file_extension,
    timing_context,
)


def test_query_string_empty_mapping_has_no_question_mark():
    assert create_query_string({}) == ""
    assert create_query_string(None) == ""


def test_query_string_only_none_values_is_empty():
    assert create_query_string({"registrationId": None, "learnerIdentity": None}) == ""


def test_query_string_is_prefixed_and_escaped():
    qs = create_query_string({"filename": "my report & notes.pdf", "acl": "private"})
    assert qs.startswith("?")
    assert " " not in qs
    assert "&notes" not in qs
    assert qs == "?acl=private&filename=my+report+%26+notes.pdf"


@pytest.mark.parametrize(
    "params",
    [
        {"a": "1"},
        {"learnerFirstName": "Zoë", "learnerLastName": "O'Brien"},
        {"filename": "x=y&z.pdf", "expiration": "3600"},
    ],
)
def test_query_string_decodes_back_to_mapping(params):
    decoded = parse_qs(create_query_string(params)[1:])
    assert {k: v[0] for k, v in decoded.items()} == params


def test_query_string_serializes_booleans_and_numbers():
    assert create_query_string({"expiration": 60, "flag": True}) == "?expiration=60&flag=true"


@pytest.mark.parametrize(
    "host,path,expected",
    [
        ("https://dms.test", "api/v1/bucket", "https://dms.test/api/v1/bucket"),
        ("https://dms.test/", "/api/v1/bucket", "https://dms.test/api/v1/bucket"),
    ],
)
def test_build_url_uses_single_slash(host, path, expected):
    assert build_url(host, path) == expected


def test_extension_from_filename():
    assert resolve_file_extension("report.docx") == "docx"
    assert resolve_file_extension("archive.tar.gz") == "gz"
    assert resolve_file_extension("README") == ""


def test_extension_override_wins():
    assert resolve_file_extension("report.docx", "pdf") == "pdf"
    assert resolve_file_extension("report.docx", ".pdf") == "pdf"


def test_content_type_lookup():
    assert guess_content_type("pdf") == "application/pdf"
    assert guess_content_type("png") == "image/png"
    assert guess_content_type("") == "application/octet-stream"
    assert guess_content_type("nosuchext") == "application/octet-stream"


def test_timing_context_measures_non_negative_duration():
    with timing_context("noop") as timer:
        pass
    assert timer.duration_ms >= 0
