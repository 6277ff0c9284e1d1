"""Render workflow failures as JSON:API error documents."""

import logging
import re

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from lockbox.errors import LockboxError, ValidationFailure
from lockbox.schemas.jsonapi import JSONAPIError, JSONAPIErrorResponse

logger = logging.getLogger(__name__)

_INDEX = re.compile(r"\[(\d+)\]")


def error_pointer(path: str) -> str:
    """Convert a field path such as ``secrets[0].data`` to ``/secrets/0/data``."""
    return "/" + _INDEX.sub(r".\1", path).replace(".", "/")


async def validation_failure_handler(request: Request, exc: ValidationFailure) -> JSONResponse:
    """Return 400 with one error object per (field path, code) pair."""
    errors = [
        JSONAPIError(
            status="400",
            title=exc.message,
            code=code,
            detail=f"{path}: {code}",
            source={"pointer": error_pointer(path)},
        )
        for path, codes in exc.errors.items()
        for code in codes
    ]
    return JSONResponse(
        status_code=400,
        content=JSONAPIErrorResponse(errors=errors).model_dump(exclude_none=True),
    )


async def lockbox_error_handler(request: Request, exc: LockboxError) -> JSONResponse:
    """Return an opaque 500 for storage, listener and read-back failures."""
    logger.error("%s on %s %s", type(exc).__name__, request.method, request.url.path)
    error = JSONAPIError(status="500", title=exc.message)
    return JSONResponse(
        status_code=500,
        content=JSONAPIErrorResponse(errors=[error]).model_dump(exclude_none=True),
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Attach the workflow failure handlers to ``app``."""
    app.add_exception_handler(ValidationFailure, validation_failure_handler)
    app.add_exception_handler(LockboxError, lockbox_error_handler)
