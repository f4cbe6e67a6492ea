"""Minimal Supabase PostgREST client used by backend repositories only."""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any
from urllib.error import HTTPError, URLError
from urllib.parse import urlencode
from urllib.request import Request, urlopen


@dataclass(slots=True)
class SupabaseSettings:
    url: str
    service_role_key: str
    timeout_seconds: float = 30.0


class SupabaseClient:
    def __init__(self, settings: SupabaseSettings) -> None:
        self.settings = settings

    def healthcheck(self) -> bool:
        return bool(self.settings.url and self.settings.service_role_key)

    def _headers(self, *, prefer: str) -> dict[str, str]:
        api_key = self.settings.service_role_key
        if not api_key:
            raise ValueError("Missing Supabase API key")
        return {
            "apikey": api_key,
            "Authorization": f"Bearer {api_key}",
            "Accept": "application/json",
            "Prefer": prefer,
        }

    def _send(self, request: Request) -> tuple[Any, Any]:
        try:
            with urlopen(request, timeout=self.settings.timeout_seconds) as response:  # noqa: S310 - URL comes from trusted env config
                raw_body = response.read().decode("utf-8")
                return (json.loads(raw_body) if raw_body else []), response.headers
        except HTTPError as exc:
            body = exc.read().decode("utf-8", errors="replace")[:500]
            raise RuntimeError(
                f"Supabase request failed with status {exc.code}: {body}"
            ) from exc
        except (URLError, TimeoutError) as exc:
            raise RuntimeError(f"Supabase request failed: {exc}") from exc

    def get_rows(
        self,
        *,
        table: str,
        query: dict[str, str | int] | list[tuple[str, str | int]],
        with_count: bool,
    ) -> tuple[list[dict[str, Any]], int | None]:
        """Fetch rows from PostgREST and optionally parse exact row count."""

        encoded_query = urlencode(query, doseq=True)
        request = Request(
            url=f"{self.settings.url}/rest/v1/{table}?{encoded_query}",
            headers=self._headers(prefer="count=exact" if with_count else "return=representation"),
            method="GET",
        )
        rows, headers = self._send(request)
        total: int | None = None
        if with_count:
            content_range = headers.get("content-range")
            if content_range and "/" in content_range:
                _, total_str = content_range.split("/", maxsplit=1)
                if total_str.isdigit():
                    total = int(total_str)
        return rows, total

    def post_rows(
        self,
        *,
        table: str,
        payload: dict[str, Any] | list[dict[str, Any]],
        prefer: str = "return=representation",
    ) -> list[dict[str, Any]]:
        """Insert one or many rows and return the representation sent back."""

        request = Request(
            url=f"{self.settings.url}/rest/v1/{table}",
            data=json.dumps(payload).encode("utf-8"),
            headers={**self._headers(prefer=prefer), "Content-Type": "application/json"},
            method="POST",
        )
        rows, _ = self._send(request)
        if isinstance(rows, dict):
            return [rows]
        return rows
