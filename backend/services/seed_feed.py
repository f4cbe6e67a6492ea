"""HTTP client for the third-party JSON feed used to seed the store."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from urllib.error import HTTPError, URLError
from urllib.request import Request, urlopen

from pydantic import ValidationError

from shared.models import ProductTransaction


logger = logging.getLogger(__name__)


class SeedFeedError(RuntimeError):
    """Raised when the seed feed cannot be fetched or does not honor its contract."""


@dataclass(slots=True)
class SeedFeedClient:
    url: str
    timeout_seconds: float = 10.0

    def _read_body(self) -> bytes:
        request = Request(url=self.url, headers={"Accept": "application/json"}, method="GET")
        try:
            with urlopen(request, timeout=self.timeout_seconds) as response:  # noqa: S310 - URL comes from trusted env config
                return response.read()
        except HTTPError as exc:
            raise SeedFeedError(f"Seed feed request failed with status {exc.code}") from exc
        except (URLError, TimeoutError) as exc:
            raise SeedFeedError(f"Seed feed request failed: {exc}") from exc

    def fetch_transactions(self) -> list[ProductTransaction]:
        """Fetch and parse the whole feed; any malformed element rejects the batch."""

        body = self._read_body()
        try:
            payload = json.loads(body.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError) as exc:
            raise SeedFeedError("Seed feed returned invalid JSON") from exc

        if not isinstance(payload, list):
            raise SeedFeedError(f"Seed feed must return a JSON array, got {type(payload).__name__}")

        transactions: list[ProductTransaction] = []
        for index, item in enumerate(payload):
            if not isinstance(item, dict):
                raise SeedFeedError(f"Seed feed element {index} is not an object")
            try:
                transactions.append(ProductTransaction.model_validate(item))
            except ValidationError as exc:
                raise SeedFeedError(f"Seed feed element {index} is invalid: {exc.errors()[0]['msg']}") from exc

        logger.info("seed_feed_fetched url=%s records=%s", self.url, len(transactions))
        return transactions
