# exceptions.py
from rest_framework.views import exception_handler
from rest_framework.exceptions import APIException
from rest_framework.response import Response
from rest_framework import status
from django.core.exceptions import ValidationError
from django.db import IntegrityError
import logging
from django.conf import settings

logger = logging.getLogger(__name__)


class CanteenError(APIException):
    """Base class for settlement and ordering errors"""
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = 'Request could not be completed'
    default_code = 'canteen_error'
    message = 'Request could not be completed'


class Unavailable(CanteenError):
    default_code = 'unavailable'
    message = 'Item unavailable'

    def __init__(self, item_name):
        super().__init__({'item': item_name, 'message': f"{item_name} is not available"})


class InsufficientStock(CanteenError):
    default_code = 'insufficient_stock'
    message = 'Insufficient stock'

    def __init__(self, item_name, required, available):
        super().__init__({
            'item': item_name,
            'required': required,
            'available': available,
            'message': f"Only {available} {item_name} available",
        })


class InsufficientFunds(CanteenError):
    default_code = 'insufficient_funds'
    message = 'Insufficient wallet balance'

    def __init__(self, required, available):
        super().__init__({
            'required': str(required),
            'available': str(available),
            'message': 'Insufficient wallet balance',
        })


class InvalidTransition(CanteenError):
    default_code = 'invalid_transition'
    message = 'Invalid status transition'

    def __init__(self, current, requested):
        super().__init__({
            'current_status': current,
            'requested_status': requested,
            'message': f"Order cannot move from {current} to {requested}",
        })


class Conflict(CanteenError):
    status_code = status.HTTP_409_CONFLICT
    default_code = 'conflict'
    message = 'Conflict'


def custom_exception_handler(exc, context):
    """
    Custom exception handler for the canteen API
    """
    # Call REST framework's default exception handler first
    response = exception_handler(exc, context)

    if response is not None:
        custom_response_data = {
            'error': True,
            'message': 'An error occurred',
            'details': response.data,
            'status_code': response.status_code
        }

        if isinstance(exc, CanteenError):
            custom_response_data['message'] = exc.message
        elif response.status_code == 400:
            custom_response_data['message'] = 'Validation error'
        elif response.status_code == 401:
            custom_response_data['message'] = 'Authentication required'
        elif response.status_code == 403:
            custom_response_data['message'] = 'Permission denied'
        elif response.status_code == 404:
            custom_response_data['message'] = 'Resource not found'
        elif response.status_code == 405:
            custom_response_data['message'] = 'Method not allowed'

        response.data = custom_response_data

    # Handle Django ValidationError
    elif isinstance(exc, ValidationError):
        logger.warning(f"Validation Error: {exc}")
        response = Response({
            'error': True,
            'message': 'Validation error',
            'details': {'non_field_errors': exc.messages},
            'status_code': 400
        }, status=status.HTTP_400_BAD_REQUEST)

    # Handle Django IntegrityError
    elif isinstance(exc, IntegrityError):
        logger.error(f"Integrity Error: {exc}")
        response = Response({
            'error': True,
            'message': 'Database integrity error',
            'details': {'error': 'This operation violates database constraints'},
            'status_code': 400
        }, status=status.HTTP_400_BAD_REQUEST)

    # Handle unexpected errors
    else:
        logger.exception(f"Unexpected Error: {exc}")
        response = Response({
            'error': True,
            'message': 'An unexpected error occurred',
            'details': {'error': str(exc)} if settings.DEBUG else {},
            'status_code': 500
        }, status=status.HTTP_500_INTERNAL_SERVER_ERROR)

    return response
