#!/usr/bin/env python3
"""
Create the administrator account.
Run with: python init_admin.py

Reads ADMIN_EMAIL, ADMIN_PASSWORD and ADMIN_BUSINESS_NAME from the
environment (or .env). The admin role bypasses all per-business scoping.
"""
import os
import sys

from queuedesk import create_app
from queuedesk.extensions import db
from queuedesk.models import User
from queuedesk.utils.validators import slugify_business_name


def create_admin(email, password, business_name):
    """Create the admin user unless the email is already registered"""
    existing = User.query.filter_by(email=email).first()
    if existing:
        print(f"  - Admin '{email}' already exists (skipping)")
        return None

    admin = User(
        email=email,
        business_name=business_name,
        business_name_for_url=slugify_business_name(business_name),
        role='admin',
    )
    admin.set_password(password)
    db.session.add(admin)
    db.session.commit()

    print(f"  ✓ Created admin: {email}")
    return admin


def main():
    email = os.getenv('ADMIN_EMAIL')
    password = os.getenv('ADMIN_PASSWORD')
    business_name = os.getenv('ADMIN_BUSINESS_NAME', 'Administrator')

    if not email or not password:
        print("ADMIN_EMAIL and ADMIN_PASSWORD must be set")
        return 1

    app = create_app()
    with app.app_context():
        db.create_all()
        print("=" * 60)
        print("Initializing Admin User")
        print("=" * 60)
        create_admin(email.strip().lower(), password, business_name)
        print("\n⚠️  IMPORTANT: Change the password after first login!")
    return 0


if __name__ == '__main__':
    sys.exit(main())
