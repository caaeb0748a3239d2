"""Tests for development account seeding."""

from portal.core.rbac import Role
from portal.db.models import User
from portal.db.seed import TEST_ACCOUNTS, get_user_by_email, seed_test_accounts


def test_creates_one_account_per_role(db_session):
    accounts = seed_test_accounts(db_session)
    assert set(accounts) == {r.value for r in Role}
    assert accounts["ipManager"].email == "ipmanager@citt.ac.tz"
    assert all(u.id is not None for u in accounts.values())


def test_is_idempotent_and_restores_accounts(db_session):
    seed_test_accounts(db_session)
    admin = get_user_by_email(db_session, "admin@citt.ac.tz")
    admin.role = "innovator"
    admin.is_active = False
    db_session.flush()

    accounts = seed_test_accounts(db_session)

    assert db_session.query(User).count() == len(TEST_ACCOUNTS)
    assert accounts["admin"].id == admin.id
    assert admin.role == "admin"
    assert admin.is_active is True


def test_get_user_by_email_missing(db_session):
    assert get_user_by_email(db_session, "nobody@citt.ac.tz") is None
