"""
Custom exception handlers for API.
"""
import logging

from django.utils import timezone
from rest_framework import status
from rest_framework.exceptions import APIException, ValidationError
from rest_framework.response import Response
from rest_framework.views import exception_handler

from apps.core.exceptions import AirQualityError

logger = logging.getLogger(__name__)


def error_body(message: str, code: str) -> dict:
    """Error envelope shared by every failing endpoint."""
    return {
        'success': False,
        'error': {'message': message, 'code': code},
        'timestamp': timezone.now().isoformat(),
    }


def _validation_message(detail) -> str:
    """Flatten DRF validation detail into one readable line."""
    if isinstance(detail, dict):
        return '; '.join(
            f"{field}: {_validation_message(errors)}" for field, errors in detail.items()
        )
    if isinstance(detail, list):
        return ' '.join(_validation_message(item) for item in detail)
    return str(detail)


def custom_exception_handler(exc, context):
    """
    Custom exception handler for DRF.
    Logs errors and renders them as {"success": false, "error": {message, code}}.
    Stack traces and upstream details never reach the client.
    """
    view = context.get('view')
    view_name = type(view).__name__ if view else 'unknown'

    if isinstance(exc, AirQualityError):
        log = logger.error if exc.status_code >= 500 else logger.warning
        log(f"API Exception in {view_name}: {exc.code} {exc.message}")
        return Response(error_body(exc.message, exc.code), status=exc.status_code)

    # Call REST framework's default exception handler first
    response = exception_handler(exc, context)

    if response is None:
        logger.error(f"Unhandled exception in {view_name}", exc_info=True)
        return Response(
            error_body('Internal server error', 'INTERNAL_ERROR'),
            status=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )

    logger.warning(f"API Exception in {view_name}: {exc}")

    if isinstance(exc, ValidationError):
        response.data = error_body(_validation_message(exc.detail), 'INVALID_PARAMS')
    elif isinstance(exc, APIException):
        codes = exc.get_codes()
        code = codes.upper() if isinstance(codes, str) else 'ERROR'
        response.data = error_body(str(exc.detail), code)

    return response
