# Overview: Role definitions and the role-to-permission gate.

"""
Role gate

Three fixed roles. Each route names the permission it needs; a role either
holds it or not. The matrix mirrors the store's access rules:

- admin:   everything, including users/settings and promotion management
- manager: inventory management and reports on top of cashier rights
- cashier: register, customers, transaction history, item lookup
"""

ROLE_ADMIN = "admin"
ROLE_MANAGER = "manager"
ROLE_CASHIER = "cashier"

ROLES = (ROLE_ADMIN, ROLE_MANAGER, ROLE_CASHIER)

ALL_ROLES = frozenset(ROLES)
MANAGEMENT_ROLES = frozenset({ROLE_ADMIN, ROLE_MANAGER})
ADMIN_ONLY = frozenset({ROLE_ADMIN})

PERMISSIONS = {
    "PROCESS_SALES": ALL_ROLES,
    "VIEW_INVENTORY": ALL_ROLES,
    "MANAGE_INVENTORY": MANAGEMENT_ROLES,
    "MANAGE_CUSTOMERS": ALL_ROLES,
    "VIEW_TRANSACTIONS": ALL_ROLES,
    "VIEW_REPORTS": MANAGEMENT_ROLES,
    "MANAGE_PROMOTIONS": ADMIN_ONLY,
    "MANAGE_USERS": ADMIN_ONLY,
}


def normalize_role(role: str | None) -> str | None:
    """Persisted roles are free strings ("Admin", " cashier"); compare them lower-cased."""
    if role is None:
        return None
    return role.strip().lower()


def has_permission(role: str | None, permission_code: str) -> bool:
    allowed = PERMISSIONS.get(permission_code)
    if allowed is None:
        raise KeyError(f"Unknown permission: {permission_code}")
    return normalize_role(role) in allowed


def permissions_for_role(role: str | None) -> list[str]:
    role = normalize_role(role)
    return sorted(code for code, roles in PERMISSIONS.items() if role in roles)
