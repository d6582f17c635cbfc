"""Translate provider failures into structured HTTP errors."""

from fastapi import HTTPException

from models.errors import CollaboratorError, ConfigurationMissingError


def provider_http_exception(exc: Exception, fallback: str) -> HTTPException:
    """Map a provider-layer exception onto the HTTP error returned to clients.

    Args:
        exc: The exception raised by a provider service.
        fallback: Message used for unexpected failures.
    """
    if isinstance(exc, ConfigurationMissingError):
        return HTTPException(status_code=500, detail=exc.to_payload())
    if isinstance(exc, CollaboratorError):
        detail = {"error": str(exc)}
        if exc.details:
            detail["details"] = exc.details
        return HTTPException(status_code=exc.status_code, detail=detail)
    if isinstance(exc, ValueError):
        return HTTPException(status_code=400, detail={"error": str(exc)})
    return HTTPException(status_code=500, detail={"error": fallback})
