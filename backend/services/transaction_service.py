"""Backend service for seeding, listing and summarizing product transactions.

Every operation returns either its result model or a ``ServiceError``; the
HTTP layer maps error codes to status codes.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from pydantic import ValidationError

from backend.repositories.transactions_repository import TransactionsRepository
from backend.services.seed_feed import SeedFeedClient, SeedFeedError
from shared.models import (
    MonthlyStatistics,
    ProductTransaction,
    SeedResult,
    ServiceError,
    ServiceErrorCode,
    TransactionsQuery,
)


logger = logging.getLogger(__name__)


def parse_month(value: str | int) -> int | None:
    """Return a month-of-year from ``value`` ("3", "03" or 3), or None when invalid."""

    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        month = value
    else:
        raw_value = value.strip()
        if not (raw_value.isascii() and raw_value.isdigit()):
            return None
        month = int(raw_value)
    return month if 1 <= month <= 12 else None


def _storage_error(exc: Exception) -> ServiceError:
    return ServiceError(
        code=ServiceErrorCode.STORAGE_ERROR,
        message="Storage operation failed",
        details={"reason": str(exc)},
    )


@dataclass(slots=True)
class TransactionService:
    repository: TransactionsRepository
    seed_feed: SeedFeedClient

    def initialize_database(self) -> SeedResult | ServiceError:
        """Fetch the seed feed and append every record; repeated calls duplicate data."""

        try:
            transactions = self.seed_feed.fetch_transactions()
        except SeedFeedError as exc:
            logger.warning("seed_feed_failed url=%s error=%s", self.seed_feed.url, exc)
            return ServiceError(
                code=ServiceErrorCode.UPSTREAM_ERROR,
                message=str(exc),
                details={"source_url": self.seed_feed.url},
            )

        try:
            inserted = self.repository.insert_transactions_bulk(transactions)
        except Exception as exc:
            logger.exception("seed_insert_failed records=%s", len(transactions))
            return _storage_error(exc)

        logger.info("database_initialized inserted=%s source_url=%s", inserted, self.seed_feed.url)
        return SeedResult(inserted=inserted, source_url=self.seed_feed.url)

    def list_transactions(
        self,
        *,
        search: str | None = None,
        page: int = 1,
        per_page: int = 10,
    ) -> list[ProductTransaction] | ServiceError:
        try:
            query = TransactionsQuery(search=search, page=page, per_page=per_page)
        except ValidationError as exc:
            return ServiceError(
                code=ServiceErrorCode.VALIDATION_ERROR,
                message="Invalid pagination parameters",
                details={"errors": [error["msg"] for error in exc.errors()]},
            )

        try:
            return self.repository.list_transactions(query)
        except Exception as exc:
            logger.exception("list_transactions_failed search=%s page=%s", query.search, query.page)
            return _storage_error(exc)

    def monthly_statistics(self, month: str | int) -> MonthlyStatistics | ServiceError:
        """Summarize sales for a month of any year.

        ``totalNotSoldItems`` is the matched record count minus the sold
        quantity. The formula mixes units and goes negative as soon as one
        record sold more than one item; it is kept for compatibility with
        existing consumers.
        """

        parsed_month = parse_month(month)
        if parsed_month is None:
            return ServiceError(
                code=ServiceErrorCode.VALIDATION_ERROR,
                message="Invalid month. Expected an integer between 1 and 12",
                details={"month": str(month)},
            )

        try:
            sale_amount, sold_items, count = self.repository.monthly_totals(parsed_month)
        except Exception as exc:
            logger.exception("monthly_statistics_failed month=%s", parsed_month)
            return _storage_error(exc)

        return MonthlyStatistics(
            total_sale_amount=sale_amount,
            total_sold_items=sold_items,
            total_not_sold_items=count - sold_items,
        )
