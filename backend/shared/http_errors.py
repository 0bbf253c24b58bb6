from fastapi import HTTPException
from fastapi import status

from shared.models.exceptions import GreenStarException, InvalidInputError


def create_http_exception(exc: GreenStarException) -> HTTPException:
    """
    Convert a GreenStarException into an HTTPException.

    Uses each exception's `status_code` and `error_code` attributes for the response.

    Example:
        try:
            summary = calculator.calculate_project_compliance(project)
        except GreenStarException as e:
            raise create_http_exception(e)
    """
    detail = {
        "error": exc.error_code,
        "message": str(exc)
    }
    if isinstance(exc, InvalidInputError) and exc.errors:
        detail["errors"] = exc.errors

    status_code = getattr(exc, "status_code", status.HTTP_500_INTERNAL_SERVER_ERROR)

    return HTTPException(
        status_code=status_code,
        detail=detail
    )


__all__ = [
    "create_http_exception",
]
