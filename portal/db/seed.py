"""Database seeding for the CITT portal.

Creates one account per role for local development and demos.
"""

from typing import Dict, Optional

from sqlalchemy.orm import Session

from portal.core.rbac.roles import Role
from portal.db.models import User


TEST_ACCOUNTS = [
    {"email": "superadmin@citt.ac.tz", "name": "CITT Super Administrator", "role": Role.SUPER_ADMIN.value},
    {"email": "admin@citt.ac.tz", "name": "John Admin", "role": Role.ADMIN.value},
    {"email": "ipmanager@citt.ac.tz", "name": "Mary IP Manager", "role": Role.IP_MANAGER.value},
    {"email": "investor@citt.ac.tz", "name": "Ian Investor", "role": Role.INVESTOR.value},
    {"email": "innovator@citt.ac.tz", "name": "Alice Innovator", "role": Role.INNOVATOR.value},
]


def seed_test_accounts(db: Session) -> Dict[str, User]:
    """
    Create the test account for every role.

    Idempotent: an existing account keeps its row but has its role and
    active flag restored.

    Args:
        db: Database session

    Returns:
        Dict mapping role key to User
    """
    accounts = {}

    for account in TEST_ACCOUNTS:
        user = db.query(User).filter(User.email == account["email"]).first()
        if user:
            user.role = account["role"]
            user.is_active = True
        else:
            user = User(email=account["email"], name=account["name"], role=account["role"], is_active=True)
            db.add(user)
        accounts[account["role"]] = user

    db.flush()
    return accounts


def get_user_by_email(db: Session, email: str) -> Optional[User]:
    return db.query(User).filter(User.email == email).first()


# CLI script for seeding
if __name__ == "__main__":
    import sys
    from datetime import timedelta

    from portal.core.security import create_access_token
    from portal.db.session import SessionLocal

    db = SessionLocal()
    try:
        accounts = seed_test_accounts(db)
        db.commit()

        print(f"Seeded {len(accounts)} test accounts:")
        for role, user in accounts.items():
            token = create_access_token(user.id, expires_delta=timedelta(days=7))
            print(f"  - {user.email} ({role})\n    token: {token}")

    except Exception as e:
        db.rollback()
        print(f"Error: {e}")
        sys.exit(1)
    finally:
        db.close()
