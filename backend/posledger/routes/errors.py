# Overview: Maps service-layer errors to JSON responses for the API routes.

from flask import jsonify

from ..services.errors import NOT_FOUND_ERRORS, LedgerError, TransientConflict
from ..services.permission_service import PermissionDeniedError


def ledger_error_response(e: Exception):
    """
    Translate a ledger or permission error into (response, status).

    - not found -> 404
    - transient conflict -> 409 (client should retry)
    - permission -> 403
    - any other ledger error -> 400
    """
    if isinstance(e, PermissionDeniedError):
        return jsonify({"error": "Permission denied", "message": str(e)}), 403
    if isinstance(e, NOT_FOUND_ERRORS):
        return jsonify(e.to_dict()), 404
    if isinstance(e, TransientConflict):
        return jsonify(e.to_dict()), 409
    if isinstance(e, LedgerError):
        return jsonify(e.to_dict()), 400
    raise e
