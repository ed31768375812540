"""Unit tests for response decoding and the error taxonomy."""

from __future__ import annotations

import httpx
import pytest

from cribl_provider.client.decoder import decode, error_detail, raise_for_status
from cribl_provider.client.errors import DecodeError, NotFoundError, StatusError
from cribl_provider.client.models import AuthToken, ItemList, Pipeline

URL = "http://cribl.test:9000/api/v1/pipelines"


def _response(status: int, **kwargs) -> httpx.Response:
    return httpx.Response(status, request=httpx.Request("GET", URL), **kwargs)


class TestDecode:
    def test_success_populates_target(self):
        resp = _response(200, json={"token": "abc", "forcePasswordChange": False})
        token = decode(resp, AuthToken)
        assert token.token == "abc"
        assert token.force_password_change is False

    def test_item_list_envelope(self):
        resp = _response(
            200,
            json={
                "count": 1,
                "items": [{"id": "p1", "conf": {"asyncFuncTimeout": 1000}}],
            },
        )
        result = decode(resp, ItemList[Pipeline])
        assert result.count == 1
        assert result.items[0].id == "p1"
        assert result.items[0].conf.async_func_timeout == 1000

    def test_unknown_fields_ignored(self):
        resp = _response(200, json={"token": "abc", "somethingNew": 1})
        assert decode(resp, AuthToken).token == "abc"

    def test_unexpected_status_carries_code(self):
        resp = _response(500, text="boom")
        with pytest.raises(StatusError, match="status code: 500") as exc_info:
            decode(resp, AuthToken)
        assert exc_info.value.status_code == 500
        assert exc_info.value.method == "GET"
        assert exc_info.value.url == URL

    def test_201_is_not_success_by_default(self):
        resp = _response(201, json={"token": "abc"})
        with pytest.raises(StatusError, match="201"):
            decode(resp, AuthToken)

    def test_expected_statuses_override(self):
        resp = _response(205, json={"token": "abc"})
        assert decode(resp, AuthToken, expected=(200, 205)).token == "abc"

    def test_404_raises_not_found(self):
        resp = _response(404, json={"message": "no such pipeline"})
        with pytest.raises(NotFoundError) as exc_info:
            decode(resp, Pipeline)
        assert exc_info.value.status_code == 404
        assert exc_info.value.detail == "no such pipeline"

    def test_malformed_json_raises_decode_error(self):
        resp = _response(200, text="{not json")
        with pytest.raises(DecodeError, match="Unable to decode GET"):
            decode(resp, AuthToken)

    def test_schema_mismatch_raises_decode_error(self):
        resp = _response(200, json={"forcePasswordChange": True})
        with pytest.raises(DecodeError):
            decode(resp, AuthToken)


class TestRaiseForStatus:
    def test_expected_status_passes(self):
        raise_for_status(_response(204), (200, 204))

    def test_status_error_message_includes_detail(self):
        resp = _response(400, json={"error": "bucket is required"})
        with pytest.raises(StatusError, match=r"status code: 400 \(bucket is required\)"):
            raise_for_status(resp)

    def test_not_found_is_a_status_error(self):
        with pytest.raises(StatusError):
            raise_for_status(_response(404))


class TestErrorDetail:
    def test_message_field(self):
        assert error_detail(_response(500, json={"message": "oops"})) == "oops"

    def test_reason_field(self):
        assert error_detail(_response(500, json={"reason": "locked"})) == "locked"

    def test_non_json_body(self):
        assert error_detail(_response(500, text="<html>")) is None

    def test_non_object_body(self):
        assert error_detail(_response(500, json=["a"])) is None


class TestStatusError:
    def test_bare_message(self):
        assert str(StatusError(502)) == "status code: 502"

    def test_message_with_request(self):
        err = StatusError(409, method="POST", url=URL, detail="exists")
        assert str(err) == f"POST {URL} returned status code: 409 (exists)"
