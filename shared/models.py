"""Pydantic contracts shared across the API and backend services."""

from __future__ import annotations

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator


class ServiceErrorCode(str, Enum):
    """Stable error codes returned by backend services."""

    VALIDATION_ERROR = "VALIDATION_ERROR"
    UPSTREAM_ERROR = "UPSTREAM_ERROR"
    STORAGE_ERROR = "STORAGE_ERROR"


class ServiceError(BaseModel):
    model_config = ConfigDict(extra="forbid")

    code: ServiceErrorCode
    message: str
    details: dict[str, object] | None = None


class ProductTransaction(BaseModel):
    """One product sale, serialized with the feed's camelCase field names.

    Only the shape is checked: every field may be missing, and unknown feed
    fields are dropped. ``id`` is assigned by the store in insertion order.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: int | None = None
    product_id: str | None = Field(default=None, alias="productId")
    product_name: str | None = Field(default=None, alias="productName")
    product_description: str | None = Field(default=None, alias="productDescription")
    product_price: float | None = Field(default=None, alias="productPrice")
    date_of_sale: datetime | None = Field(default=None, alias="dateOfSale")
    quantity: int | None = None

    @field_validator("product_id", mode="before")
    @classmethod
    def coerce_product_id(cls, value: object) -> object:
        # Feeds commonly ship numeric identifiers.
        if isinstance(value, int) and not isinstance(value, bool):
            return str(value)
        return value

    def to_store_payload(self) -> dict[str, object]:
        """Return the JSON-ready document written to the store (without ``id``)."""

        return self.model_dump(mode="json", by_alias=True, exclude={"id"})


class TransactionsQuery(BaseModel):
    model_config = ConfigDict(extra="forbid")

    search: str | None = None
    page: int = Field(default=1, ge=1)
    per_page: int = Field(default=10, ge=1, le=500)

    @field_validator("search")
    @classmethod
    def blank_search_is_none(cls, value: str | None) -> str | None:
        if value is None or not value.strip():
            return None
        return value

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.per_page


class MonthlyStatistics(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    total_sale_amount: float = Field(default=0, alias="totalSaleAmount")
    total_sold_items: int = Field(default=0, alias="totalSoldItems")
    # Matched record count minus sold quantity; kept for compatibility and can be negative.
    total_not_sold_items: int = Field(default=0, alias="totalNotSoldItems")


class SeedResult(BaseModel):
    model_config = ConfigDict(extra="forbid")

    inserted: int
    source_url: str
