"""
Set the role of an account, creating it if needed (e.g. the first admin).
Run from project root:
  python -m app.scripts.set_role EMAIL ROLE
Example:
  python -m app.scripts.set_role ops@city.example admin
"""
import argparse
import sys

from app.db.session import SessionLocal
from app.models.user import UserRole
from app.services.users import create_if_absent


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Set a user's role (bootstrap for the first admin).")
    parser.add_argument("email", help="Account email, as the identity provider reports it")
    parser.add_argument("role", choices=[r.value for r in UserRole])
    args = parser.parse_args(argv)

    email = args.email.strip()
    if not email or len(email) > 255:
        print("Invalid email.", file=sys.stderr)
        return 1

    db = SessionLocal()
    try:
        user, created = create_if_absent(db, email)
        user.role = UserRole(args.role)
        db.commit()
        verb = "Created" if created else "Updated"
        print(f"{verb} user '{email}' with role '{args.role}'.")
        return 0
    finally:
        db.close()


if __name__ == "__main__":
    sys.exit(main())
