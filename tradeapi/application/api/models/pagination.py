"""
Pagination Models
=================

PageRequest     validated page/size/sort parameters and the cache key they map to
PageMetadata    derived navigation fields (total pages, first/last, next/previous)
PageResponse[T] one page of content plus its metadata

Cache key format (stable, one key per distinct request):

    {resource}:page:{page}:size:{size}:sort:{sortBy}:{direction}

An absent sortBy is rendered as the literal ``null``:

    >>> PageRequest(page=2, size=10, sort_by="symbol").cache_key("trades")
    'trades:page:2:size:10:sort:symbol:ASC'
    >>> PageRequest().cache_key("users")
    'users:page:0:size:20:sort:null:ASC'
"""

import math
from collections.abc import Sequence
from typing import Generic, TypeVar

from pydantic import Field, ValidationError as PydanticValidationError, field_validator

from tradeapi.application.api.models.base import ApiModel
from tradeapi.core.config.constants import (
    DEFAULT_PAGE,
    DEFAULT_PAGE_SIZE,
    MAX_PAGE_SIZE,
    MIN_PAGE_SIZE,
    SORT_BY_SENTINEL,
    Resource,
    SortDirection,
)
from tradeapi.core.exceptions import InvalidPageRequestError

T = TypeVar("T")


class PageRequest(ApiModel):
    """Validated pagination parameters."""

    page: int = Field(default=DEFAULT_PAGE, ge=0, description="Zero-based page number")
    size: int = Field(
        default=DEFAULT_PAGE_SIZE,
        ge=MIN_PAGE_SIZE,
        le=MAX_PAGE_SIZE,
        description="Page size",
    )
    sort_by: str | None = Field(default=None, description="Field to sort by")
    sort_direction: SortDirection = Field(default=SortDirection.ASC, description="ASC or DESC")

    @field_validator("sort_direction", mode="before")
    @classmethod
    def normalize_direction(cls, v):
        """Accept asc/Desc/etc.; anything else fails enum validation."""
        if isinstance(v, str):
            return v.strip().upper()
        return v

    @field_validator("sort_by", mode="before")
    @classmethod
    def blank_sort_is_none(cls, v):
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @classmethod
    def from_query(
        cls,
        page: int = DEFAULT_PAGE,
        size: int = DEFAULT_PAGE_SIZE,
        sort_by: str | None = None,
        sort_direction: str | None = None,
    ) -> "PageRequest":
        """
        Build a PageRequest from raw query parameters.

        Raises:
            InvalidPageRequestError: page < 0, size outside 1..100 or an
                unknown sort direction
        """
        try:
            return cls(
                page=page,
                size=size,
                sort_by=sort_by,
                sort_direction=sort_direction or SortDirection.ASC,
            )
        except PydanticValidationError as e:
            errors = [
                {"field": ".".join(str(p) for p in err["loc"]), "message": err["msg"]}
                for err in e.errors()
            ]
            raise InvalidPageRequestError(
                "; ".join(f"{err['field']}: {err['message']}" for err in errors),
                details={"errors": errors},
            ) from e

    @property
    def offset(self) -> int:
        return self.page * self.size

    @property
    def descending(self) -> bool:
        return self.sort_direction is SortDirection.DESC

    def cache_key(self, resource: Resource | str) -> str:
        prefix = resource.value if isinstance(resource, Resource) else resource
        sort_by = self.sort_by if self.sort_by is not None else SORT_BY_SENTINEL
        return (
            f"{prefix}:page:{self.page}:size:{self.size}"
            f":sort:{sort_by}:{self.sort_direction.value}"
        )


class PageMetadata(ApiModel):
    """Navigation metadata for one page."""

    page: int
    size: int
    total_elements: int
    number_of_elements: int
    total_pages: int
    first: bool
    last: bool
    has_next: bool
    has_previous: bool

    @classmethod
    def build(
        cls, page: int, size: int, total_elements: int, number_of_elements: int
    ) -> "PageMetadata":
        total_pages = math.ceil(total_elements / size) if size > 0 else 0
        return cls(
            page=page,
            size=size,
            total_elements=total_elements,
            number_of_elements=number_of_elements,
            total_pages=total_pages,
            first=page == 0,
            last=page >= total_pages - 1,
            has_next=page < total_pages - 1,
            has_previous=page > 0,
        )


class PageResponse(ApiModel, Generic[T]):
    """One page of results."""

    content: list[T]
    metadata: PageMetadata

    @classmethod
    def of(cls, content: Sequence[T], page_request: PageRequest, total_elements: int):
        """Assemble a page from its rows and the total row count."""
        items = list(content)
        return cls(
            content=items,
            metadata=PageMetadata.build(
                page_request.page, page_request.size, total_elements, len(items)
            ),
        )
