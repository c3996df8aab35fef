from fastapi import HTTPException, status

from adhub.services.errors import (
    ExternalServiceFailure,
    GamesForbiddenError,
    GamesNotFoundError,
    LookupFailure,
    NotFoundError,
    PermissionDenied,
    PreconditionFailure,
    ServiceError,
    ValidationError,
)


def http_error(exc: ServiceError) -> HTTPException:
    """Translate a service-layer error into the HTTP response the client sees."""
    if isinstance(exc, GamesNotFoundError):
        return HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail={"message": exc.message, "missingIds": exc.missing_ids},
        )
    if isinstance(exc, GamesForbiddenError):
        return HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail={"message": exc.message, "unauthorizedIds": exc.unauthorized_ids},
        )
    if isinstance(exc, NotFoundError):
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=exc.message)
    if isinstance(exc, PermissionDenied):
        return HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=exc.message)
    if isinstance(exc, ValidationError):
        return HTTPException(status_code=422, detail=exc.message)
    if isinstance(exc, (LookupFailure, PreconditionFailure)):
        return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=exc.message)
    if isinstance(exc, ExternalServiceFailure):
        return HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=exc.message)
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=exc.message)
