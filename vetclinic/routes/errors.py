from fastapi import HTTPException, status

from vetclinic.scheduling.errors import (
    AlreadyCompleted,
    CancellationWindowExpired,
    InvalidStatus,
    InvalidTransition,
    NotFound,
    SchedulingError,
    SlotUnavailable,
    Unauthorized,
    ValidationFailed,
)

STATUS_CODES = {
    NotFound: status.HTTP_404_NOT_FOUND,
    SlotUnavailable: status.HTTP_409_CONFLICT,
    InvalidTransition: status.HTTP_409_CONFLICT,
    InvalidStatus: status.HTTP_400_BAD_REQUEST,
    CancellationWindowExpired: status.HTTP_400_BAD_REQUEST,
    AlreadyCompleted: status.HTTP_400_BAD_REQUEST,
    Unauthorized: status.HTTP_403_FORBIDDEN,
    ValidationFailed: status.HTTP_400_BAD_REQUEST,
}

DATABASE_UNAVAILABLE = 'Database unavailable. Verify DATABASE_URL and database credentials.'


def to_http_exception(exc: SchedulingError) -> HTTPException:
    status_code = STATUS_CODES.get(type(exc), status.HTTP_400_BAD_REQUEST)
    return HTTPException(status_code=status_code, detail=exc.message)


def database_unavailable() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        detail=DATABASE_UNAVAILABLE,
    )
