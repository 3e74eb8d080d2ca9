"""
Create the first back-office admin account.

Usage:
    python -m app.create_admin --name "Site Admin" --email admin@example.com
"""
import argparse
import getpass
import sys

import app.db.base  # noqa: F401
from app.core.security import hash_password
from app.db.session import SessionLocal
from app.models.enums import UserRole
from app.models.user import User


def main(argv=None):
    parser = argparse.ArgumentParser(description="Create an admin user")
    parser.add_argument("--name", required=True)
    parser.add_argument("--email", required=True)
    args = parser.parse_args(argv)

    password = getpass.getpass("Password: ")
    if not password:
        print("Password must not be empty")
        return 1

    db = SessionLocal()
    try:
        if db.query(User).filter(User.email == args.email).first():
            print(f"User {args.email} already exists")
            return 1

        db.add(User(
            name=args.name,
            email=args.email,
            password_hash=hash_password(password),
            role=UserRole.ADMIN,
        ))
        db.commit()
        print(f"Admin {args.email} created")
        return 0
    finally:
        db.close()


if __name__ == "__main__":
    sys.exit(main())
