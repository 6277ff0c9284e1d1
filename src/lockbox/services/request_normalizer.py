"""Map inbound resource payloads onto the current request shape.

The current API version (``v2``) already sends the canonical shape. The
legacy version (``v1``) nests the resource fields under ``Resource`` and
the secrets under ``Secret``. Nothing is validated here: an incomplete
legacy payload produces an incomplete request and the validator reports
what is missing.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

CURRENT_API_VERSION = "v2"
LEGACY_API_VERSION = "v1"
SUPPORTED_API_VERSIONS = (LEGACY_API_VERSION, CURRENT_API_VERSION)


def normalize_request(raw: Any, api_version: str) -> dict[str, Any]:
    """Return the canonical creation request for ``raw``.

    Args:
        raw: The decoded request body.
        api_version: ``v2`` for the current shape, anything else is
            treated as the legacy shape.

    Returns:
        A new dict; ``raw`` is never modified.
    """
    if not isinstance(raw, Mapping):
        return {}

    if api_version == CURRENT_API_VERSION:
        return dict(raw)

    output: dict[str, Any] = {}
    resource = raw.get("Resource")
    if isinstance(resource, Mapping):
        output.update(resource)
    if raw.get("Secret") is not None:
        output["secrets"] = raw["Secret"]
    return output
