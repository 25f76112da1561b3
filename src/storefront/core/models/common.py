"""Shared API models: camelCase base, pagination and the response envelope."""

import math
from datetime import datetime
from typing import Any, Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

T = TypeVar("T")


class CamelModel(BaseModel):
    """Model exchanged with clients using camelCase keys.

    Both ``firstName`` and ``first_name`` are accepted on input; output is
    always camelCase.
    """

    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, from_attributes=True
    )


class PaginatedResult(CamelModel, Generic[T]):
    """One page of results plus the totals needed to navigate."""

    data: list[T]
    total: int
    page: int
    limit: int
    total_pages: int

    @classmethod
    def build(cls, data: list[T], total: int, page: int, limit: int) -> "PaginatedResult[T]":
        return cls(
            data=data,
            total=total,
            page=page,
            limit=limit,
            total_pages=math.ceil(total / limit) if limit else 0,
        )


class PaginationMeta(CamelModel):
    page: int
    limit: int
    total: int
    total_pages: int
    has_next: bool
    has_previous: bool

    @classmethod
    def from_page(cls, page: int, limit: int, total: int, total_pages: int) -> "PaginationMeta":
        return cls(
            page=page,
            limit=limit,
            total=total,
            total_pages=total_pages,
            has_next=page < total_pages,
            has_previous=page > 1,
        )


class ResponseMeta(CamelModel):
    timestamp: datetime
    correlation_id: str
    path: str
    method: str
    status_code: int
    version: str


class ErrorBody(BaseModel):
    code: str
    message: str
    details: Any = None


class ApiResponse(CamelModel):
    """Envelope wrapped around every JSON response."""

    success: bool
    data: Any = None
    error: ErrorBody | None = None
    meta: ResponseMeta
    pagination: PaginationMeta | None = None

    def to_payload(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"success": self.success}
        if self.error is not None:
            payload["error"] = self.error.model_dump(mode="json", exclude_none=True)
        else:
            payload["data"] = self.data
        payload["meta"] = self.meta.model_dump(mode="json", by_alias=True)
        if self.pagination is not None:
            payload["pagination"] = self.pagination.model_dump(mode="json", by_alias=True)
        return payload


class MessageResponse(BaseModel):
    message: str = Field(description="Human readable outcome")
