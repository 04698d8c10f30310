"""Parameter models for list queries.

Every list query takes an explicit, defaulted parameter model instead of a
free-form mapping, so equal requests always derive equal query keys.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, TypeVar

from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator

from storefront_query.shared.constants import Pagination, ResourceDefaults
from storefront_query.shared.errors import create_validation_error

P = TypeVar("P", bound="ListParams")


class ListParams(BaseModel):
    """Common base for list parameter models."""

    model_config = ConfigDict(frozen=True, extra="forbid", populate_by_name=True)

    page: int = Field(default=Pagination.DEFAULT_PAGE, ge=1)
    limit: int = Field(default=Pagination.DEFAULT_PAGE_SIZE, ge=1, le=Pagination.MAX_PAGE_SIZE)
    search: str | None = Field(default=None, description="Free-text search")

    @classmethod
    def coerce(cls: type[P], params: P | Mapping[str, Any] | None) -> P:
        """Build parameters from a model, a mapping or nothing.

        Raises:
            DomainError: If the mapping does not validate
        """
        if params is None:
            return cls()
        if isinstance(params, cls):
            return params
        try:
            return cls.model_validate(dict(params))
        except ValidationError as e:
            first_loc = e.errors()[0]["loc"]
            raise create_validation_error(
                f"Invalid {cls.__name__}: {e.error_count()} validation error(s)",
                field=str(first_loc[0]) if first_loc else None,
                operation="coerce_params",
                original_error=e,
            ) from e

    def to_query_params(self) -> dict[str, Any]:
        """Query-string parameters using the service's field names."""
        return self.model_dump(by_alias=True, exclude_none=True)


class NewsListParams(ListParams):
    """Parameters of the news list.

    Example:
        >>> NewsListParams(page=2, limit=10).to_query_params()
        {'page': 2, 'limit': 10}
    """


class AccountListParams(ListParams):
    """Filters of the game account list.

    Prices are in VND. ``min_price``/``max_price`` are sent as ``minPrice``
    and ``maxPrice``.
    """

    category: str | None = None
    min_price: int | None = Field(default=None, alias="minPrice", ge=0)
    max_price: int | None = Field(
        default=None,
        alias="maxPrice",
        ge=0,
        le=ResourceDefaults.MAX_PRICE,
    )
    platform: str | None = None
    sort: str | None = None

    @model_validator(mode="after")
    def _check_price_bounds(self) -> AccountListParams:
        if (
            self.min_price is not None
            and self.max_price is not None
            and self.min_price > self.max_price
        ):
            msg = f"min_price ({self.min_price}) must not exceed max_price ({self.max_price})"
            raise ValueError(msg)
        return self


__all__ = ["AccountListParams", "ListParams", "NewsListParams"]
