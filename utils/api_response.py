"""
JSON envelope used by every endpoint.

    ok:       {"success": true, "data": ..., "message": "..."}
    failure:  {"success": false, "error": "...", ...extra}

Failures may carry extra top-level keys, e.g. the swap endpoints add
"errors" (one line per rejected swap) and "updated_rentals".
"""

from flask import jsonify
from typing import Any


def api_success(
    data: Any = None,
    message: str | None = None,
    warning: str | None = None,
    status: int = 200,
    **extra_fields: Any
) -> tuple:
    """
    Success envelope.

    Args:
        data: Payload under 'data' (omitted when None)
        message: Operator-facing confirmation
        warning: Non-blocking notice shown next to the result
        status: HTTP status code
        **extra_fields: Merged into the top level

    Returns:
        (Response, status) tuple for Flask
    """
    body = {'success': True}
    if data is not None:
        body['data'] = data
    if message:
        body['message'] = message
    if warning:
        body['warning'] = warning
    body.update(extra_fields)
    return jsonify(body), status


def api_error(error: str, status: int = 400, **extra_fields: Any) -> tuple:
    """Failure envelope with a single message and optional extra keys."""
    body = {'success': False, 'error': error}
    body.update(extra_fields)
    return jsonify(body), status
