# Overview: Request and permission decorators for API routes.

from functools import wraps
from flask import request, jsonify, g

from .services import permission_service
from .services.permission_service import Actor

ACTOR_ID_HEADER = "X-Actor-Id"
ACTOR_ROLE_HEADER = "X-Actor-Role"


def _is_authenticated() -> bool:
    return hasattr(g, 'actor')


def require_actor(f):
    """
    Establish the caller identity for the request.

    Authentication happens upstream; the auth layer forwards the verified
    identity in two headers:
    - X-Actor-Id: integer user id
    - X-Actor-Role: manager | salesperson

    Sets g.actor (an Actor) for the route and the services it calls.

    SECURITY: Returns 401 if either header is missing or malformed.
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        raw_id = request.headers.get(ACTOR_ID_HEADER)
        role = request.headers.get(ACTOR_ROLE_HEADER)

        if not raw_id or not role:
            return jsonify({"error": "Authentication required"}), 401

        try:
            g.actor = Actor(user_id=int(raw_id), role=role)
        except ValueError:
            return jsonify({"error": "Invalid actor identity"}), 401

        return f(*args, **kwargs)

    return decorated_function


def require_permission(permission_code: str):
    """
    Require a specific permission.
    """
    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            # Ensure @require_actor was called first
            if not _is_authenticated():
                return jsonify({"error": "Authentication required"}), 401

            if not permission_service.has_permission(g.actor, permission_code):
                return jsonify({
                    "error": "Permission denied",
                    "required_permission": permission_code,
                }), 403

            return f(*args, **kwargs)

        return decorated_function
    return decorator
