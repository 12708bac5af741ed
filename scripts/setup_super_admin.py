# scripts/setup_super_admin.py

"""
Make one registered user the super admin of the dashboard.

    python -m scripts.setup_super_admin [email]

With an email argument the change is applied without prompts.
Without one, the current super admin is shown, the user list is printed
and the email is asked for interactively.

Requires SUPABASE_URL and SUPABASE_SERVICE_ROLE_KEY in the environment.
"""

import sys

from core.supabase_client import get_supabase_client
from models.enums import Role


def get_current_super_admin(client):
    rows = (
        client.table("users")
        .select("id, email, full_name, created_at")
        .eq("role", Role.super_admin.value)
        .limit(1)
        .execute()
        .data
    )
    return rows[0] if rows else None


def find_user_by_email(client, email: str):
    rows = (
        client.table("users")
        .select("id, email, full_name, role")
        .eq("email", email.strip().lower())
        .limit(1)
        .execute()
        .data
    )
    return rows[0] if rows else None


def list_all_users(client) -> list:
    return (
        client.table("users")
        .select("id, email, full_name, role, created_at")
        .order("created_at", desc=True)
        .execute()
        .data
    ) or []


def promote_to_super_admin(client, user_id: str):
    client.table("users").update({"role": Role.super_admin.value}).eq("id", user_id).execute()


def _confirmed(answer: str) -> bool:
    return answer.strip().lower() in ("y", "yes")


def run(argv=None, ask=input) -> int:
    argv = sys.argv[1:] if argv is None else argv
    email = argv[0] if argv else None
    interactive = email is None

    client = get_supabase_client()
    if not client:
        print("Error: SUPABASE_URL and SUPABASE_SERVICE_ROLE_KEY must be set.")
        return 1

    print("Super Admin Setup")
    print("=================")

    current = get_current_super_admin(client)
    if current:
        print(f"Current super admin: {current.get('full_name')} ({current.get('email')})")
        if interactive and not _confirmed(ask("A super admin already exists. Do you want to change it? (y/N): ")):
            print("Setup cancelled.")
            return 0
    else:
        print("No super admin currently set.")

    if interactive:
        print("Available users:")
        for index, user in enumerate(list_all_users(client), start=1):
            print(f"{index}. {user.get('full_name')} ({user.get('email')}) - {user.get('role')}")
        email = ask("Enter the email address of the user to make super admin: ").strip()

    if not email:
        print("No email provided. Exiting.")
        return 1

    user = find_user_by_email(client, email)
    if not user:
        print(f"User not found: {email}")
        print("Make sure the user has registered in the system first.")
        return 1

    print(f"Found user: {user.get('full_name')} ({user.get('email')}), current role: {user.get('role')}")

    if interactive and not _confirmed(ask(f"Make {user.get('full_name')} the super admin? (y/N): ")):
        print("Setup cancelled.")
        return 0

    promote_to_super_admin(client, user["id"])
    print(f"{user.get('full_name')} ({user.get('email')}) is now the super admin.")
    return 0


if __name__ == "__main__":
    sys.exit(run())
