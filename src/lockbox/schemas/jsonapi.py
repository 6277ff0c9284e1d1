"""JSON:API envelope models using Pydantic v2.

Enforces the JSON:API specification's data/type/id/attributes structure
for API responses. Resource creation accepts a raw JSON object because
the body may arrive in either the current or the legacy shape; every
endpoint returns one of the response envelope types.

Reference: https://jsonapi.org/format/
"""

from typing import Any

from pydantic import BaseModel


class JSONAPIResource(BaseModel):
    """A single JSON:API resource object with type, id, and attributes."""

    type: str
    id: str
    attributes: dict[str, Any]
    relationships: dict[str, Any] | None = None


class JSONAPISingleResponse(BaseModel):
    """JSON:API response envelope containing a single resource.

    ``included`` carries the related resources referenced from
    ``data.relationships`` (compound document).
    """

    data: JSONAPIResource
    included: list[JSONAPIResource] | None = None
    meta: dict[str, Any] | None = None


class JSONAPIError(BaseModel):
    """A single JSON:API error object."""

    status: str
    title: str
    code: str | None = None
    detail: str | None = None
    source: dict[str, str] | None = None


class JSONAPIErrorResponse(BaseModel):
    """JSON:API response envelope containing a list of errors."""

    errors: list[JSONAPIError]
