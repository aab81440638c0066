"""Tests for the listing API client."""

import json
from unittest.mock import Mock

import pytest
import requests

from client import PropertyClient
from errors import ApiError
from tests.utils.factories import create_photo, create_property_payload


def make_response(status_code=200, payload=None):
    response = Mock(spec=requests.Response)
    response.status_code = status_code
    response.ok = status_code < 400
    if payload is None:
        response.json.side_effect = ValueError("no json")
    else:
        response.json.return_value = payload
    return response


@pytest.fixture
def session():
    return Mock(spec=requests.Session)


@pytest.mark.unit
def test_create_without_photos_sends_json(session):
    payload = create_property_payload()
    session.request.return_value = make_response(201, {"success": True, "data": {"id": "1"}})
    client = PropertyClient(session=session, base_url="http://api.test/", timeout=3)

    created = client.create_property(payload)

    assert created == {"id": "1"}
    session.request.assert_called_once_with(
        "POST", "http://api.test/api/properties", timeout=3, json=payload
    )


@pytest.mark.unit
def test_create_with_photos_sends_multipart(session):
    payload = create_property_payload()
    photo = create_photo()
    session.request.return_value = make_response(201, {"success": True, "data": {"id": "1"}})
    client = PropertyClient(session=session, base_url="http://api.test")

    client.create_property(payload, photos=[photo])

    _, kwargs = session.request.call_args
    assert json.loads(kwargs["data"]["data"]) == payload
    assert kwargs["files"] == [("photos", photo)]
    assert "json" not in kwargs


@pytest.mark.unit
def test_photo_paths_are_read_from_disk(session, tmp_path):
    image = tmp_path / "porch.png"
    image.write_bytes(b"png-bytes")
    session.request.return_value = make_response(200, {"success": True, "data": {}})
    client = PropertyClient(session=session, base_url="http://api.test")

    client.update_property("abc", {"price": 1}, photos=[str(image)])

    method, url = session.request.call_args.args
    assert (method, url) == ("PUT", "http://api.test/api/properties/abc")
    assert session.request.call_args.kwargs["files"] == [("photos", ("porch.png", b"png-bytes", "image/png"))]


@pytest.mark.unit
def test_validation_errors_become_api_error(session):
    session.request.return_value = make_response(
        400, {"success": False, "error": ["Price is required", "Area is required"]}
    )
    client = PropertyClient(session=session)

    with pytest.raises(ApiError) as exc_info:
        client.create_property({})

    assert exc_info.value.messages == ["Price is required", "Area is required"]
    assert exc_info.value.status_code == 400


@pytest.mark.unit
def test_single_error_string(session):
    session.request.return_value = make_response(404, {"success": False, "error": "Property not found"})
    client = PropertyClient(session=session)

    with pytest.raises(ApiError) as exc_info:
        client.get_property("missing")

    assert exc_info.value.messages == ["Property not found"]


@pytest.mark.unit
def test_non_json_error_body(session):
    session.request.return_value = make_response(502)
    client = PropertyClient(session=session)

    with pytest.raises(ApiError) as exc_info:
        client.list_properties()

    assert exc_info.value.messages == ["HTTP 502"]


@pytest.mark.unit
def test_connection_failure(session):
    session.request.side_effect = requests.exceptions.ConnectionError("refused")
    client = PropertyClient(session=session)

    with pytest.raises(ApiError) as exc_info:
        client.delete_property("abc")

    assert exc_info.value.status_code is None
    assert exc_info.value.messages[0].startswith("Could not reach listing API")
