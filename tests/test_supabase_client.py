"""Unit tests for Supabase client query encoding and error normalization."""

from __future__ import annotations

import json
from io import BytesIO
from urllib.error import HTTPError, URLError

import pytest

from backend.db.supabase_client import SupabaseClient, SupabaseSettings


def _build_client() -> SupabaseClient:
    return SupabaseClient(
        SupabaseSettings(url="https://example.supabase.co", service_role_key="service-role")
    )


def _response(body: bytes, headers: dict[str, str] | None = None):
    class _Response:
        def __init__(self) -> None:
            self.headers = headers or {}

        def __enter__(self):
            return self

        def __exit__(self, exc_type, exc, tb):
            return False

        def read(self) -> bytes:
            return body

    return _Response()


def test_get_rows_uses_doseq_for_repeated_query_keys(monkeypatch: pytest.MonkeyPatch) -> None:
    client = _build_client()

    def _fake_urlopen(request, timeout=None):
        assert "order=id.asc" in request.full_url
        assert "limit=10" in request.full_url
        assert "offset=20" in request.full_url
        assert request.get_header("Apikey") == "service-role"
        assert timeout == 30.0
        return _response(b"[]")

    monkeypatch.setattr("backend.db.supabase_client.urlopen", _fake_urlopen)

    rows, total = client.get_rows(
        table="product_transactions",
        query=[("order", "id.asc"), ("limit", 10), ("offset", 20)],
        with_count=False,
    )

    assert rows == []
    assert total is None


def test_get_rows_parses_exact_count_from_content_range(monkeypatch: pytest.MonkeyPatch) -> None:
    client = _build_client()

    def _fake_urlopen(request, timeout=None):
        assert request.get_header("Prefer") == "count=exact"
        return _response(b'[{"id": 1}]', headers={"content-range": "0-0/42"})

    monkeypatch.setattr("backend.db.supabase_client.urlopen", _fake_urlopen)

    rows, total = client.get_rows(table="product_transactions", query={"select": "id"}, with_count=True)

    assert rows == [{"id": 1}]
    assert total == 42


def test_get_rows_includes_status_and_body_on_http_error(monkeypatch: pytest.MonkeyPatch) -> None:
    client = _build_client()

    def _raise_http_error(_request, timeout=None):
        raise HTTPError(
            url="https://example.supabase.co/rest/v1/product_transactions",
            code=400,
            msg="Bad Request",
            hdrs=None,
            fp=BytesIO(b"Bad Request from Supabase"),
        )

    monkeypatch.setattr("backend.db.supabase_client.urlopen", _raise_http_error)

    with pytest.raises(RuntimeError, match="status 400") as error:
        client.get_rows(table="product_transactions", query={"select": "*"}, with_count=False)

    assert "Bad Request from Supabase" in str(error.value)


def test_get_rows_wraps_connection_errors(monkeypatch: pytest.MonkeyPatch) -> None:
    client = _build_client()

    def _raise_url_error(_request, timeout=None):
        raise URLError("Connection refused")

    monkeypatch.setattr("backend.db.supabase_client.urlopen", _raise_url_error)

    with pytest.raises(RuntimeError, match="Connection refused"):
        client.get_rows(table="product_transactions", query={"select": "*"}, with_count=False)


def test_post_rows_sends_json_payload_and_prefer_header(monkeypatch: pytest.MonkeyPatch) -> None:
    client = _build_client()

    def _fake_urlopen(request, timeout=None):
        assert request.get_method() == "POST"
        assert request.full_url == "https://example.supabase.co/rest/v1/product_transactions"
        assert request.get_header("Prefer") == "return=minimal"
        assert request.get_header("Content-type") == "application/json"
        assert json.loads(request.data.decode("utf-8")) == [{"productName": "Mug"}]
        return _response(b"")

    monkeypatch.setattr("backend.db.supabase_client.urlopen", _fake_urlopen)

    rows = client.post_rows(
        table="product_transactions",
        payload=[{"productName": "Mug"}],
        prefer="return=minimal",
    )

    assert rows == []


def test_post_rows_wraps_single_object_representation(monkeypatch: pytest.MonkeyPatch) -> None:
    client = _build_client()
    monkeypatch.setattr(
        "backend.db.supabase_client.urlopen",
        lambda _request, timeout=None: _response(b'{"id": 3, "productName": "Mug"}'),
    )

    rows = client.post_rows(table="product_transactions", payload={"productName": "Mug"})

    assert rows == [{"id": 3, "productName": "Mug"}]
