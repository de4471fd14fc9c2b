"""
Application error taxonomy.

Every error raised by the service layer derives from ``ReportifyError`` and
carries the HTTP status code it maps to. The handlers registered in
``app.main`` turn them into the JSON error envelope.
"""

from typing import Any, Optional

from fastapi import status


class ReportifyError(Exception):
    """Base class for errors reported to API callers."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(
        self,
        message: str,
        details: Optional[Any] = None,
        status_code: Optional[int] = None,
    ):
        super().__init__(message)
        self.message = message
        self.details = details
        if status_code is not None:
            self.status_code = status_code


class ValidationError(ReportifyError):
    """Missing or malformed request input."""

    status_code = status.HTTP_400_BAD_REQUEST


class StoreError(ReportifyError):
    """The record store rejected a query."""


class DeliveryError(ReportifyError):
    """The email transport rejected or failed to send a message."""


class RenderError(ReportifyError):
    """An export could not be produced.

    Empty input is a client error (400); failures inside the rendering
    libraries stay at 500.
    """

    @classmethod
    def empty(cls) -> "RenderError":
        return cls("No data to export", status_code=status.HTTP_400_BAD_REQUEST)
