"""Transactions repository adapters.

Records live in one table (or list, for the in-memory adapter) and are only
ever appended; ``id`` follows insertion order and is the listing order.
"""

from __future__ import annotations

import math
from datetime import datetime, timezone
from typing import Any, Protocol

from backend.db.supabase_client import SupabaseClient
from shared.models import ProductTransaction, TransactionsQuery


_SELECT_COLUMNS = "id,productId,productName,productDescription,productPrice,dateOfSale,quantity"
_STATISTICS_COLUMNS = "productPrice,quantity,dateOfSale"


class TransactionsRepository(Protocol):
    def insert_transactions_bulk(self, transactions: list[ProductTransaction]) -> int:
        """Append transactions and return the inserted count."""

    def list_transactions(self, query: TransactionsQuery) -> list[ProductTransaction]:
        """Return one page of transactions matching the optional search term."""

    def monthly_totals(self, month: int) -> tuple[float, int, int]:
        """Return price sum, quantity sum and record count for a month of any year."""


def parse_price_term(search: str) -> float | None:
    """Return the search term as a finite number, or None when it is not one."""

    # float() accepts digit separators such as "1_68"; a price term does not.
    if "_" in search:
        return None
    try:
        value = float(search.strip())
    except ValueError:
        return None
    return value if math.isfinite(value) else None


def sale_month(value: datetime | str | None) -> int | None:
    """Return the calendar month of a sale date, read in UTC when timezone-aware."""

    if value is None:
        return None
    if isinstance(value, str):
        try:
            value = datetime.fromisoformat(value)
        except ValueError:
            return None
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc)
    return value.month


class InMemoryTransactionsRepository:
    """In-memory repository used for local dev/tests when Supabase is not configured."""

    def __init__(self) -> None:
        self._rows: list[ProductTransaction] = []

    def insert_transactions_bulk(self, transactions: list[ProductTransaction]) -> int:
        for transaction in transactions:
            next_id = len(self._rows) + 1
            self._rows.append(transaction.model_copy(update={"id": next_id}))
        return len(transactions)

    def _matches(self, row: ProductTransaction, needle: str, price: float | None) -> bool:
        if needle in (row.product_name or "").lower():
            return True
        if needle in (row.product_description or "").lower():
            return True
        return price is not None and row.product_price == price

    def list_transactions(self, query: TransactionsQuery) -> list[ProductTransaction]:
        rows = self._rows
        if query.search:
            needle = query.search.lower()
            price = parse_price_term(query.search)
            rows = [row for row in rows if self._matches(row, needle, price)]
        return rows[query.offset : query.offset + query.per_page]

    def monthly_totals(self, month: int) -> tuple[float, int, int]:
        matching = [row for row in self._rows if sale_month(row.date_of_sale) == month]
        sale_amount = sum(row.product_price or 0 for row in matching)
        sold_items = sum(row.quantity or 0 for row in matching)
        return sale_amount, sold_items, len(matching)


def _quote_filter_value(value: str) -> str:
    """Quote a value for a PostgREST logical filter as a literal contains pattern.

    LIKE wildcards are escaped first, then the pattern is escaped for the
    double-quoted PostgREST value.
    """

    pattern = value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    escaped = pattern.replace("\\", "\\\\").replace('"', '\\"')
    return f'"*{escaped}*"'


class SupabaseTransactionsRepository:
    """Supabase-backed repository for product transactions."""

    def __init__(self, client: SupabaseClient, *, table: str, batch_size: int = 500) -> None:
        self._client = client
        self._table = table
        self._batch_size = batch_size

    def _build_search_filter(self, search: str) -> tuple[str, str]:
        quoted = _quote_filter_value(search)
        conditions = [
            f"productName.ilike.{quoted}",
            f"productDescription.ilike.{quoted}",
        ]
        price = parse_price_term(search)
        if price is not None:
            conditions.append(f"productPrice.eq.{price!r}")
        return ("or", f"({','.join(conditions)})")

    def insert_transactions_bulk(self, transactions: list[ProductTransaction]) -> int:
        inserted = 0
        payload = [transaction.to_store_payload() for transaction in transactions]
        for start in range(0, len(payload), self._batch_size):
            chunk = payload[start : start + self._batch_size]
            rows = self._client.post_rows(table=self._table, payload=chunk, prefer="return=minimal")
            # return=minimal answers with an empty body
            inserted += len(rows) if rows else len(chunk)
        return inserted

    def list_transactions(self, query: TransactionsQuery) -> list[ProductTransaction]:
        params: list[tuple[str, str | int]] = [("select", _SELECT_COLUMNS)]
        if query.search:
            params.append(self._build_search_filter(query.search))
        params.extend(
            [
                ("order", "id.asc"),
                ("limit", query.per_page),
                ("offset", query.offset),
            ]
        )
        rows, _ = self._client.get_rows(table=self._table, query=params, with_count=False)
        return [ProductTransaction.model_validate(row) for row in rows]

    def _fetch_statistics_rows(self) -> list[dict[str, Any]]:
        collected: list[dict[str, Any]] = []
        offset = 0
        while True:
            rows, _ = self._client.get_rows(
                table=self._table,
                query=[
                    ("select", _STATISTICS_COLUMNS),
                    ("dateOfSale", "not.is.null"),
                    ("order", "id.asc"),
                    ("limit", self._batch_size),
                    ("offset", offset),
                ],
                with_count=False,
            )
            collected.extend(rows)
            if len(rows) < self._batch_size:
                return collected
            offset += self._batch_size

    def monthly_totals(self, month: int) -> tuple[float, int, int]:
        sale_amount = 0.0
        sold_items = 0
        count = 0
        for row in self._fetch_statistics_rows():
            if sale_month(row.get("dateOfSale")) != month:
                continue
            sale_amount += float(row.get("productPrice") or 0)
            sold_items += int(row.get("quantity") or 0)
            count += 1
        return sale_amount, sold_items, count
