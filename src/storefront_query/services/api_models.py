"""Resource service response models.

This module defines Pydantic models for the response envelope returned by
the storefront resource service. Only the envelope is validated: the
``data`` payload is passed through exactly as decoded from JSON.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class ApiPagination(BaseModel):
    """Pagination block sent alongside list payloads.

    Attributes:
        current_page: 1-based page number (``currentPage`` on the wire)
        total_pages: Number of pages
        total_items: Number of items across all pages
        items_per_page: Page size

    Example:
        >>> ApiPagination.model_validate(
        ...     {"currentPage": 2, "totalPages": 5, "totalItems": 48, "itemsPerPage": 10}
        ... ).current_page
        2
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore", frozen=True)

    current_page: int = Field(..., alias="currentPage", ge=1)
    total_pages: int = Field(..., alias="totalPages", ge=0)
    total_items: int = Field(..., alias="totalItems", ge=0)
    items_per_page: int = Field(..., alias="itemsPerPage", ge=0)


class ApiEnvelope(BaseModel):
    """Response envelope ``{success, data, message?, errors?, pagination?}``.

    The validated envelope is the value cached for a query; ``data`` is the
    untouched service payload.
    """

    model_config = ConfigDict(extra="ignore", frozen=True)

    success: bool = Field(..., description="Whether the service handled the request")
    data: Any = Field(default=None, description="Service payload, passed through unchanged")
    message: str | None = Field(default=None, description="Human-readable service message")
    errors: dict[str, list[str]] | None = Field(
        default=None,
        description="Field-level validation errors reported by the service",
    )
    pagination: ApiPagination | None = Field(
        default=None,
        description="Top-level pagination block, when the service sends one",
    )


__all__ = ["ApiEnvelope", "ApiPagination"]
