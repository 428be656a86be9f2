# citybuild/core/http_errors.py
from __future__ import annotations

from fastapi import HTTPException

from citybuild.core.errors import ConflictError, NotFoundError, ValidationError

_UPLOAD_STATUS = {
    "unsupported_media_type": 415,
    "too_large": 413,
}


def http_error(exc: Exception) -> HTTPException:
    """
    Service errors -> HTTP status. Anything unrecognised is re-raised by
    the caller, not mapped here.
    """
    if isinstance(exc, NotFoundError):
        return HTTPException(status_code=404, detail=str(exc))
    if isinstance(exc, ConflictError):
        return HTTPException(status_code=409, detail=str(exc))
    if isinstance(exc, ValidationError):
        return HTTPException(status_code=_UPLOAD_STATUS.get(exc.code, 422), detail=str(exc))
    if isinstance(exc, PermissionError):
        return HTTPException(status_code=403, detail=str(exc))
    return HTTPException(status_code=400, detail=str(exc))
