#!/usr/bin/env python3
"""Attach the admin role to a user (idempotent), optionally creating the user.

Usage:
  python scripts/attach_admin_role.py --email staff@example.com
  python scripts/attach_admin_role.py --email staff@example.com --create --password 'S3cret!'
"""

import argparse
import sys
from pathlib import Path

from werkzeug.security import generate_password_hash

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from app.portal.models import Role, User  # noqa: E402
from scripts._db_utils import default_database_url, script_session  # noqa: E402


def main() -> None:
    parser = argparse.ArgumentParser()
    parser.add_argument("--email", required=True, help="User email to attach admin role")
    parser.add_argument("--create", action="store_true", help="Create the user if it does not exist")
    parser.add_argument("--password", help="Password for a newly created user")
    args = parser.parse_args()

    email = args.email.strip().lower()
    with script_session(default_database_url()) as s:
        role = s.query(Role).filter(Role.key == "admin").one_or_none()
        if not role:
            print("Admin role not found. Run python scripts/init_db.py first.")
            return
        user = s.query(User).filter(User.email == email).one_or_none()
        if not user:
            if not args.create:
                print(f"User not found: {email}")
                return
            if not args.password:
                parser.error("--password is required with --create")
            user = User(email=email, password_hash=generate_password_hash(args.password), is_active=True)
            s.add(user)
            print(f"Created user {email}")
        if role in (user.roles or []):
            print(f"User already has admin role: {email}")
            return
        user.roles.append(role)
        print(f"Admin role attached to {email}")


if __name__ == "__main__":
    main()
