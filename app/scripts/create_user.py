"""
Create a user (e.g. the first admin; signup only ever creates role 'user'). Run from project root:
  python -m app.scripts.create_user NAME EMAIL PASSWORD [role]
Example:
  python -m app.scripts.create_user "Support Lead" lead@example.com your-secure-password admin
"""
import argparse
import logging
import sys

from sqlalchemy.exc import IntegrityError

from app.core.database import SessionLocal
from app.core.errors import AppError
from app.models.user import USER_ROLES
from app.services.users import create_user, get_user_by_email

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s %(message)s",
    datefmt="%Y-%m-%dT%H:%M:%SZ",
)


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Create a helpdesk user from the command line.")
    parser.add_argument("name", help="Display name")
    parser.add_argument("email", help="Unique email address")
    parser.add_argument("password", help="Password (8-128 chars)")
    parser.add_argument("role", nargs="?", default="user", choices=list(USER_ROLES))
    args = parser.parse_args(argv)

    db = SessionLocal()
    try:
        if get_user_by_email(db, args.email, include_inactive=True) is not None:
            print(f"User '{args.email}' already exists.", file=sys.stderr)
            return 1
        user = create_user(
            db,
            name=args.name,
            email=args.email,
            password=args.password,
            password_confirm=args.password,
            role=args.role,
        )
        print(f"Created user '{user.email}' with role '{user.role}'.")
        return 0
    except AppError as e:
        print(e.message, file=sys.stderr)
        return 1
    except IntegrityError:
        print(f"User '{args.email}' already exists.", file=sys.stderr)
        return 1
    finally:
        db.close()


if __name__ == "__main__":
    sys.exit(main())
