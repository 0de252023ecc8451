"""
Create an account with a verified email (e.g. the first Administrator). Run from project root:
  python -m app.scripts.create_user NAME EMAIL PASSWORD [role]
Example:
  python -m app.scripts.create_user "Site Admin" admin@example.com your-secure-password Administrator
"""
import argparse
import sys

from app.core.config import get_settings
from app.core.database import SessionLocal
from app.core.security import (
    NAME_MAX_LEN,
    PASSWORD_MAX_LEN,
    PASSWORD_MIN_LEN,
    hash_password,
)
from app.models.user import User, UserRole
from app.services.credentials import UserStore
from app.services.errors import DuplicateEmailError


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Create a Whiskers user with a verified email.")
    parser.add_argument("name", help=f"Display name (1-{NAME_MAX_LEN} chars)")
    parser.add_argument("email", help="Email address")
    parser.add_argument("password", help=f"Password ({PASSWORD_MIN_LEN}-{PASSWORD_MAX_LEN} chars)")
    parser.add_argument(
        "role",
        nargs="?",
        default=UserRole.USER.value,
        choices=[r.value for r in UserRole],
    )
    args = parser.parse_args(argv)

    name = args.name.strip()
    if not name or len(name) > NAME_MAX_LEN:
        print("Invalid name length.", file=sys.stderr)
        return 1
    if "@" not in args.email:
        print("Invalid email address.", file=sys.stderr)
        return 1
    if not (PASSWORD_MIN_LEN <= len(args.password) <= PASSWORD_MAX_LEN):
        print(f"Password must be {PASSWORD_MIN_LEN}-{PASSWORD_MAX_LEN} characters.", file=sys.stderr)
        return 1

    settings = get_settings()
    db = SessionLocal()
    try:
        store = UserStore(db)
        if store.find_by_email(args.email) is not None:
            print(f"User '{args.email}' already exists.", file=sys.stderr)
            return 1
        user = store.create(
            User(
                name=name,
                email=args.email,
                password_hash=hash_password(args.password, settings.BCRYPT_ROUNDS),
                role=UserRole(args.role),
                is_email_verified=True,
            )
        )
        db.commit()
        print(f"Created user '{user.email}' with role '{args.role}'.")
        return 0
    except DuplicateEmailError:
        print(f"User '{args.email}' already exists.", file=sys.stderr)
        return 1
    finally:
        db.close()


if __name__ == "__main__":
    sys.exit(main())
