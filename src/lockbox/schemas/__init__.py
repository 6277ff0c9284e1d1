"""Pydantic schemas for API request/response models."""

from lockbox.schemas.jsonapi import (
    JSONAPIError,
    JSONAPIErrorResponse,
    JSONAPIResource,
    JSONAPISingleResponse,
)

__all__ = [
    "JSONAPIError",
    "JSONAPIErrorResponse",
    "JSONAPIResource",
    "JSONAPISingleResponse",
]
