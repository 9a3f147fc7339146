# Overview: Service-layer operations for permission checks against an explicitly passed actor.

from __future__ import annotations

from dataclasses import dataclass

from ..models import Sale
from ..permissions import DEFAULT_ROLE_PERMISSIONS, VALID_ROLES


class PermissionDeniedError(Exception):
    """Raised when an actor lacks a required permission."""
    pass


@dataclass(frozen=True)
class Actor:
    """
    Caller identity as established by the external auth layer.

    Passed explicitly into every ledger operation and query; services never
    read "current user" state from globals.
    """
    user_id: int
    role: str

    def __post_init__(self):
        if self.role not in VALID_ROLES:
            raise ValueError(f"Unknown role: {self.role}. Must be one of {VALID_ROLES}")


def get_permissions(actor: Actor) -> set[str]:
    return set(DEFAULT_ROLE_PERMISSIONS.get(actor.role, set()))


def has_permission(actor: Actor, permission_code: str) -> bool:
    return permission_code in get_permissions(actor)


def require_permission(actor: Actor, permission_code: str) -> None:
    """
    Require actor to have permission, raise PermissionDeniedError if not.
    """
    if not has_permission(actor, permission_code):
        raise PermissionDeniedError(f"Permission denied: {permission_code}")


def can_view_all_sales(actor: Actor) -> bool:
    """Privileged actors see every salesperson's rows; others only their own."""
    return has_permission(actor, "VIEW_ALL_SALES")


def scope_sales_query(query, actor: Actor):
    """
    Restrict a query over Sale to rows the actor may see.

    The query must already select from (or join) Sale.
    """
    if can_view_all_sales(actor):
        return query
    return query.filter(Sale.salesperson_id == actor.user_id)
