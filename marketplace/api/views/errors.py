"""
Translation of failed ServiceResults into HTTP responses.
"""

from rest_framework import status
from rest_framework.response import Response

from marketplace.services import ErrorCodes, ServiceResult

HTTP_STATUS_BY_ERROR = {
    ErrorCodes.VALIDATION_ERROR: status.HTTP_400_BAD_REQUEST,
    ErrorCodes.BAD_REQUEST: status.HTTP_400_BAD_REQUEST,
    ErrorCodes.UNAUTHORIZED: status.HTTP_401_UNAUTHORIZED,
    ErrorCodes.FORBIDDEN: status.HTTP_403_FORBIDDEN,
    ErrorCodes.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorCodes.CONFLICT: status.HTTP_409_CONFLICT,
    ErrorCodes.INTERNAL_ERROR: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


def error_body(code: str, message: str, details=None) -> dict:
    return {"error": {"code": code, "message": message, "details": details}}


def error_response(result: ServiceResult) -> Response:
    """
    Build the HTTP error response for a failed service result.

    Unknown codes are reported as 500.
    """
    http_status = HTTP_STATUS_BY_ERROR.get(result.error, status.HTTP_500_INTERNAL_SERVER_ERROR)
    return Response(error_body(result.error, result.error_detail, result.details), status=http_status)


def validation_error_response(errors) -> Response:
    """400 response for a request body rejected by a serializer."""
    return Response(
        error_body(ErrorCodes.VALIDATION_ERROR, "Invalid request data", {"fields": errors}),
        status=status.HTTP_400_BAD_REQUEST,
    )
