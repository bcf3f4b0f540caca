"""
Translate service errors into HTTP responses.
"""

from typing import NoReturn

from fastapi import HTTPException, status

from cvm_capital.services.errors import (
    AlreadyProcessedError,
    CapitalError,
    NotFoundError,
    PartialWriteError,
    ValidationError,
)

STATUS_BY_ERROR = (
    (NotFoundError, status.HTTP_404_NOT_FOUND),
    (AlreadyProcessedError, status.HTTP_409_CONFLICT),
    (ValidationError, status.HTTP_400_BAD_REQUEST),
    (PartialWriteError, status.HTTP_500_INTERNAL_SERVER_ERROR),
)


def raise_http_error(exc: CapitalError) -> NoReturn:
    """Re-raise a service error as an HTTPException carrying its message."""
    for error_type, status_code in STATUS_BY_ERROR:
        if isinstance(exc, error_type):
            raise HTTPException(status_code=status_code, detail=exc.message) from exc
    raise HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail=exc.message,
    ) from exc
