"""
Permission System Constants and Definitions

WHY: Centralized permission definitions ensure consistency across the application.
All permission codes and role mappings defined here.

DESIGN PRINCIPLES:
- Roles and identities are owned by the external auth layer; this module only
  maps a role name to the capabilities the ledger checks
- Permissions are granular (one action per permission)
- Default role mappings follow principle of least privilege
"""

# =============================================================================
# ROLES
# =============================================================================

ROLE_MANAGER = "manager"
ROLE_SALESPERSON = "salesperson"

VALID_ROLES = [ROLE_MANAGER, ROLE_SALESPERSON]


# =============================================================================
# PERMISSION DEFINITIONS
# =============================================================================

# Each permission is defined as: (code, name, description)
PERMISSION_DEFINITIONS = [
    (
        "CREATE_SALE",
        "Create Sale",
        "Record cash and credit sales against the catalog",
    ),
    (
        "RECORD_PAYMENT",
        "Record Payment",
        "Apply payments to a sale or across a customer's debts",
    ),
    (
        "VIEW_ALL_SALES",
        "View All Sales",
        "View sales, debts and payments recorded by any salesperson",
    ),
    (
        "MANAGE_CATALOG",
        "Manage Catalog",
        "Create products and set their opening stock",
    ),
    (
        "DELETE_SALE",
        "Delete Sale",
        "Hard-delete a sale, its payments, and restore its stock",
    ),
]

PERMISSION_CODES = [code for code, _, _ in PERMISSION_DEFINITIONS]


# =============================================================================
# DEFAULT ROLE PERMISSIONS
# =============================================================================

# manager: everything, including the destructive override
# salesperson: sell and collect, scoped to its own sales
DEFAULT_ROLE_PERMISSIONS = {
    ROLE_MANAGER: set(PERMISSION_CODES),
    ROLE_SALESPERSON: {
        "CREATE_SALE",
        "RECORD_PAYMENT",
    },
}
