# services/errors.py
from typing import Optional

from fastapi import status


class PhotoAppError(Exception):
    """Base class for service-layer errors. Each carries the HTTP status it maps to."""
    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict:
        return {"message": self.message}


class ValidationError(PhotoAppError):
    status_code = status.HTTP_400_BAD_REQUEST


class InvalidReferenceError(PhotoAppError):
    status_code = status.HTTP_400_BAD_REQUEST


class ConflictError(PhotoAppError):
    status_code = status.HTTP_409_CONFLICT


class NotFoundError(PhotoAppError):
    status_code = status.HTTP_404_NOT_FOUND


class UpstreamError(PhotoAppError):
    """The external photo source failed or returned something unusable."""
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str, error: Optional[str] = None):
        super().__init__(message)
        self.error = error

    def to_dict(self) -> dict:
        body = super().to_dict()
        if self.error:
            body["error"] = self.error
        return body
