"""Pydantic v2 projections of the resource creation payload.

Each model lists the only fields a client may populate on that entity;
anything else in the payload is ignored. All fields are optional here so
that missing values are reported by the resource validator, with the same
field paths as every other rule, rather than by request parsing.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict


class SecretFields(BaseModel):
    """Writable fields of a secret entry."""

    model_config = ConfigDict(extra="ignore")

    user_id: str | None = None
    data: str | None = None


class PermissionFields(BaseModel):
    """Writable fields of a permission entry."""

    model_config = ConfigDict(extra="ignore")

    aro: str | None = None
    aro_foreign_key: str | None = None
    aco: str | None = None
    type: int | None = None


class CreateResourceRequest(BaseModel):
    """Writable fields of a resource, after normalization to the current shape."""

    model_config = ConfigDict(extra="ignore")

    name: str | None = None
    username: str | None = None
    uri: str | None = None
    description: str | None = None
    created_by: str | None = None
    modified_by: str | None = None
    secrets: list[SecretFields] | None = None
    permissions: list[PermissionFields] | None = None
