"""HTTP-aware domain errors raised from the service layer."""

from __future__ import annotations

from fastapi import HTTPException, status


class NotFoundError(HTTPException):
    """A referenced section, component instance or board does not exist."""

    def __init__(self, detail: str):
        super().__init__(status_code=status.HTTP_404_NOT_FOUND, detail=detail)


class ConflictError(HTTPException):
    """A pin slot was claimed by another writer after the plan was computed."""

    def __init__(self, detail: str):
        super().__init__(status_code=status.HTTP_409_CONFLICT, detail=detail)
