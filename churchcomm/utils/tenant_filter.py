"""
Tenant Filter Utility
Shared helper for scoping every Supabase query to one organization
"""
from typing import Any


def apply_tenant_filter(query: Any, organization_id: str, column: str = "organization_id") -> Any:
    """
    Apply organization scoping to a Supabase query.

    Unlike request-scoped filtering, the scheduler always runs on behalf of a
    single organization, so a missing id is a programming error rather than an
    admin-wide query.

    Args:
        query: Supabase query builder object (from supabase.table(...).select(...))
        organization_id: Organization the query must be confined to
        column: Name of the tenant column (default: "organization_id")

    Raises:
        ValueError: If organization_id is empty

    Usage:
        query = supabase.table("people").select("*")
        query = apply_tenant_filter(query, org.id)
        response = query.execute()
    """
    if not organization_id:
        raise ValueError("organization_id is required for tenant-scoped queries")
    return query.eq(column, organization_id)
