# scripts/verify_super_admin.py

"""
Report who holds the super_admin role and how users are spread over roles.

    python -m scripts.verify_super_admin

Exit status is 1 when credentials are missing or no super admin exists.
"""

import sys
from collections import Counter

from core.supabase_client import get_supabase_client
from models.enums import Role


def fetch_super_admins(client) -> list:
    return (
        client.table("users")
        .select("id, email, full_name, created_at")
        .eq("role", Role.super_admin.value)
        .execute()
        .data
    ) or []


def role_counts(client) -> Counter:
    rows = client.table("users").select("role").order("role").execute().data or []
    return Counter(row.get("role") or "none" for row in rows)


def run() -> int:
    client = get_supabase_client()
    if not client:
        print("Error: SUPABASE_URL and SUPABASE_SERVICE_ROLE_KEY must be set.")
        return 1

    print("Super Admin Verification")
    print("========================")

    super_admins = fetch_super_admins(client)
    if not super_admins:
        print("No super admin found!")
        print("To set one up, run: python -m scripts.setup_super_admin")
        return 1

    if len(super_admins) > 1:
        print("Warning: multiple super admins found. Only one is expected.")

    print(f"Super admin status: {len(super_admins)} super admin(s) found")
    for index, admin in enumerate(super_admins, start=1):
        print(f"Super Admin {index}:")
        print(f"  Name:    {admin.get('full_name')}")
        print(f"  Email:   {admin.get('email')}")
        print(f"  ID:      {admin.get('id')}")
        print(f"  Created: {admin.get('created_at')}")

    print("User role summary:")
    for role, count in sorted(role_counts(client).items()):
        print(f"  {role}: {count} user(s)")

    return 0


if __name__ == "__main__":
    sys.exit(run())
