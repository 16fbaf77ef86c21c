"""Authorization policy: which roles may invoke which dispatch operation.

The whole matrix lives in ``POLICY`` so it can be audited and tested without
touching the database. Handlers call :func:`authorize` once, before any store
access.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from rescuelink.enums import Role
from rescuelink.errors import Forbidden


class Operation(str, Enum):
    LIST = "list"
    GET = "get"
    CREATE = "create"
    UPDATE = "update"
    SET_STATUS = "set_status"
    ASSIGN = "assign"
    DELETE = "delete"


@dataclass(frozen=True)
class Caller:
    """Verified identity of the user making a request."""

    id: int
    role: Role


ALL_ROLES = frozenset(Role)

POLICY: dict[Operation, frozenset[Role]] = {
    Operation.LIST: ALL_ROLES,
    Operation.GET: ALL_ROLES,
    Operation.CREATE: ALL_ROLES,
    Operation.UPDATE: frozenset({Role.ADMIN, Role.DISPATCHER}),
    Operation.SET_STATUS: frozenset({Role.ADMIN, Role.DISPATCHER, Role.RESCUER}),
    Operation.ASSIGN: frozenset({Role.ADMIN, Role.DISPATCHER}),
    Operation.DELETE: frozenset({Role.ADMIN}),
}

# Roles that may only ever see alerts they reported themselves.
OWNER_SCOPED_ROLES = frozenset({Role.USER})

_DENIED_MESSAGES = {
    Operation.DELETE: "Access denied. Admin only.",
}


def is_allowed(role: Role, operation: Operation) -> bool:
    return role in POLICY.get(operation, frozenset())


def authorize(caller: Caller, operation: Operation) -> None:
    """Raise :class:`Forbidden` unless ``caller`` may perform ``operation``."""
    if not is_allowed(caller.role, operation):
        raise Forbidden(_DENIED_MESSAGES.get(operation, "Access denied"))


def is_owner_scoped(caller: Caller) -> bool:
    return caller.role in OWNER_SCOPED_ROLES


def check_ownership(caller: Caller, owner_id: int) -> None:
    """Owner-scoped callers may only touch their own records."""
    if is_owner_scoped(caller) and owner_id != caller.id:
        raise Forbidden("Access denied")
