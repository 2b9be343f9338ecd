#!/usr/bin/env python3
"""
Admin seeding script.
Creates the database schema and the first admin account, since admins
cannot be registered through the public API.

    python -m edublog.seed_admin [--email ...] [--name ...] [--password ...]
"""

import argparse
import sys

from sqlmodel import Session, select

DEFAULT_ADMIN_EMAIL = "admin@escola.com"
DEFAULT_ADMIN_NAME = "Administrator"
DEFAULT_ADMIN_PASSWORD = "admin123"


def seed_admin(session, email: str, name: str, password: str):
    """Insert an admin unless one already exists. Returns ``(user, created)``."""
    from edublog.auth.auth_handler import get_password_hash
    from edublog.models import User, UserRole

    existing = session.exec(select(User).where(User.role == UserRole.admin)).first()
    if existing:
        return existing, False

    admin = User(
        email=email,
        name=name,
        password_hash=get_password_hash(password),
        role=UserRole.admin,
        is_active=True,
    )
    session.add(admin)
    session.commit()
    session.refresh(admin)
    return admin, True


def main(argv=None):
    parser = argparse.ArgumentParser(description="Create the initial admin account")
    parser.add_argument("--email", default=DEFAULT_ADMIN_EMAIL)
    parser.add_argument("--name", default=DEFAULT_ADMIN_NAME)
    parser.add_argument("--password", default=DEFAULT_ADMIN_PASSWORD)
    args = parser.parse_args(argv)

    try:
        from edublog.configs.database import init_db, make_engine
        from edublog.configs.settings import get_settings

        engine = make_engine(get_settings())
        print("🗃️  Initializing database schema...")
        init_db(engine)

        with Session(engine) as session:
            admin, created = seed_admin(session, args.email, args.name, args.password)

        if not created:
            print("An admin account already exists:")
            print(f"Email: {admin.email}")
            print(f"Name: {admin.name}")
            print("\nTo add or change admins, edit the database directly.")
            return 0

        print("\n✅ Admin created successfully!")
        print(f"Email: {admin.email}")
        print(f"Password: {args.password}")
        print("\nIMPORTANT: change this password after the first login!")
        return 0

    except Exception as e:
        print(f"❌ Error creating admin: {e}")
        print(f"📊 Error type: {type(e).__name__}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
