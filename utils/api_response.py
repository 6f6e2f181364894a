"""
Standardized API response helpers.

Provides consistent JSON response format across all API endpoints:

    Success:  {"success": true, "data": {...}, "message": "..."}
    Error:    {"success": false, "error": "...", "error_kind": "...", "detail": {...}}

Usage:
    from utils.api_response import api_success, api_error, result_response

    return api_success(data={'id': 1}, message='Created')
    return api_error('Missing required fields', status=400)
    return result_response(cancel_reservation(get_db(), reservation_id))
"""

from datetime import date, datetime
from decimal import Decimal
from typing import Any

from flask import jsonify

from utils.results import OperationResult


def to_json_safe(value: Any) -> Any:
    """
    Convert dates and decimals in nested payloads to JSON-friendly values.
    Decimals become floats, dates become ISO strings.
    """
    if isinstance(value, dict):
        return {key: to_json_safe(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [to_json_safe(item) for item in value]
    if isinstance(value, Decimal):
        return float(value)
    if isinstance(value, (date, datetime)):
        return value.isoformat()
    return value


def api_success(
    data: Any = None,
    message: str | None = None,
    status: int = 200,
    **extra_fields: Any
) -> tuple:
    """
    Build a standardized success JSON response.

    Args:
        data: Optional payload to include as 'data' key.
        message: Optional success message.
        status: HTTP status code (default 200).
        **extra_fields: Additional top-level fields to include in the response.

    Returns:
        Tuple of (Response, status_code)
    """
    response = {'success': True}

    if data is not None:
        response['data'] = to_json_safe(data)

    if message:
        response['message'] = message

    if extra_fields:
        response.update(to_json_safe(extra_fields))

    return jsonify(response), status


def api_error(error: str, status: int = 400, **extra_fields: Any) -> tuple:
    """
    Build a standardized error JSON response.

    Args:
        error: Error message.
        status: HTTP status code (default 400).
        **extra_fields: Additional top-level fields (e.g., error_kind, detail).

    Returns:
        Tuple of (Response, status_code)
    """
    response = {'success': False, 'error': error}

    if extra_fields:
        response.update(to_json_safe(extra_fields))

    return jsonify(response), status


def result_response(result: OperationResult) -> tuple:
    """
    Serialize a core OperationResult.

    Args:
        result: Outcome returned by a model operation

    Returns:
        Tuple of (Response, status_code)
    """
    if result.success:
        return api_success(data=result.data, message=result.message, status=result.status_code)

    extra = {'error_kind': result.kind.value if result.kind else None}
    if result.detail:
        extra['detail'] = result.detail
    return api_error(result.message, status=result.status_code, **extra)
