import json
from dataclasses import dataclass
from datetime import datetime, timezone

from researchapi.envelope import ErrorBody, Envelope, Meta, data, data_with_meta, err


@dataclass
class _Item:
    name: str

    def to_dict(self):
        return {"name": self.name}


def test_data_wraps_value():
    assert data({"status": "ok"}).to_dict() == {"data": {"status": "ok"}}


def test_data_converts_nested_objects():
    result = data([_Item("a"), _Item("b")]).to_dict()
    assert result == {"data": [{"name": "a"}, {"name": "b"}]}


def test_data_keeps_empty_list():
    assert data([]).to_dict() == {"data": []}


def test_err_builds_error_only():
    result = err(401, "invalid or missing api token").to_dict()
    assert result == {"error": {"code": 401, "message": "invalid or missing api token"}}
    assert "data" not in result


def test_data_with_meta_includes_cursor():
    result = data_with_meta([1], Meta(next_cursor="abc")).to_dict()
    assert result == {"data": [1], "meta": {"next_cursor": "abc"}}


def test_empty_meta_renders_empty_object():
    result = data_with_meta([1], Meta()).to_dict()
    assert result["meta"] == {}


def test_error_details_included_when_present():
    body = ErrorBody(code=400, message="bad", details={"field": "url"})
    assert body.to_dict() == {"code": 400, "message": "bad", "details": {"field": "url"}}


def test_error_details_omitted_when_empty():
    body = ErrorBody(code=400, message="bad", details={})
    assert "details" not in body.to_dict()


def test_empty_envelope_is_empty_object():
    assert Envelope().to_dict() == {}


def test_datetime_rendered_in_utc_form():
    moment = datetime(2026, 4, 20, 12, 0, 0, tzinfo=timezone.utc)
    result = data({"at": moment}).to_dict()
    assert result["data"]["at"] == "2026-04-20T12:00:00Z"


def test_envelope_is_json_serialisable():
    encoded = json.dumps(data([]).to_dict(), separators=(",", ":"))
    assert encoded == '{"data":[]}'