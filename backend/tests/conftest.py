"""
Pytest fixtures for the parish backend tests.

Provides an in-memory application, a clean database per test with the RBAC
catalog seeded, two parishes in one diocese, one user per role and bearer
headers for each of them.
"""

import pytest

from sanctus import create_app
from sanctus.extensions import db
from sanctus.models import Diocese, Parish, User
from sanctus.permissions import UserRole
from sanctus.services import permission_service
from sanctus.services.auth_service import hash_password
from sanctus.services.token_service import Principal


TEST_PASSWORD = "Password123!"

# Low cost factor keeps the suite fast; verification reads the cost from the hash
FAST_HASH = hash_password(TEST_PASSWORD, rounds=4)


@pytest.fixture(scope='session')
def app():
    """Create application for testing."""
    app = create_app({
        'TESTING': True,
        'SQLALCHEMY_DATABASE_URI': 'sqlite:///:memory:',
        'JWT_SECRET': 'test-secret-do-not-use',
        'LOG_LEVEL': 'WARNING',
    })

    with app.app_context():
        db.create_all()
        yield app
        db.drop_all()


@pytest.fixture(scope='function')
def client(app):
    """Create test client."""
    return app.test_client()


@pytest.fixture(scope='function')
def db_session(app):
    """Fresh database for each test, with permissions and system roles seeded."""
    with app.app_context():
        for table in reversed(db.metadata.sorted_tables):
            db.session.execute(table.delete())
        db.session.commit()

        permission_service.bootstrap_rbac()

        yield db.session

        db.session.rollback()


@pytest.fixture(scope='function')
def diocese(db_session):
    row = Diocese(diocese_code="DAR", diocese_name="Archdiocese of Dar es Salaam", is_active=True)
    db_session.add(row)
    db_session.commit()
    return row


@pytest.fixture(scope='function')
def parish_a(db_session, diocese):
    """Parish A (first tenant)."""
    row = Parish(diocese_id=diocese.id, parish_code="STJ", parish_name="St. Joseph", is_active=True)
    db_session.add(row)
    db_session.commit()
    return row


@pytest.fixture(scope='function')
def parish_b(db_session, diocese):
    """Parish B (second tenant)."""
    row = Parish(diocese_id=diocese.id, parish_code="STP", parish_name="St. Peter", is_active=True)
    db_session.add(row)
    db_session.commit()
    return row


def make_user(db_session, username: str, role: str, parish=None, **kwargs) -> User:
    """Insert a user directly with the shared test password."""
    user = User(
        username=username,
        email=f"{username}@parish.test",
        password_hash=kwargs.pop("password_hash", FAST_HASH),
        full_name=username.replace("_", " ").title(),
        role=role,
        parish_id=parish.id if parish is not None else None,
        is_active=kwargs.pop("is_active", True),
        **kwargs,
    )
    db_session.add(user)
    db_session.commit()
    return user


@pytest.fixture(scope='function')
def super_admin(db_session):
    """Diocese-level super admin with no home parish."""
    return make_user(db_session, "bishop_office", UserRole.SUPER_ADMIN)


@pytest.fixture(scope='function')
def parish_admin_a(db_session, parish_a):
    return make_user(db_session, "admin_a", UserRole.PARISH_ADMIN, parish_a)


@pytest.fixture(scope='function')
def parish_admin_b(db_session, parish_b):
    return make_user(db_session, "admin_b", UserRole.PARISH_ADMIN, parish_b)


@pytest.fixture(scope='function')
def accountant_a(db_session, parish_a):
    return make_user(db_session, "accountant_a", UserRole.ACCOUNTANT, parish_a)


@pytest.fixture(scope='function')
def secretary_a(db_session, parish_a):
    return make_user(db_session, "secretary_a", UserRole.SECRETARY, parish_a)


@pytest.fixture(scope='function')
def secretary_b(db_session, parish_b):
    return make_user(db_session, "secretary_b", UserRole.SECRETARY, parish_b)


@pytest.fixture(scope='function')
def viewer_a(db_session, parish_a):
    return make_user(db_session, "viewer_a", UserRole.VIEWER, parish_a)


def principal_for(user: User) -> Principal:
    return Principal(user_id=user.id, role=user.role, parish_id=user.parish_id)


def auth_headers(app, user: User) -> dict:
    """Bearer header for a user, signed by the app's token service."""
    token = app.extensions["sanctus_tokens"].issue(user.id, user.role, user.parish_id)
    return {'Authorization': f'Bearer {token}'}


@pytest.fixture(scope='function')
def super_admin_headers(app, super_admin):
    return auth_headers(app, super_admin)


@pytest.fixture(scope='function')
def admin_a_headers(app, parish_admin_a):
    return auth_headers(app, parish_admin_a)


@pytest.fixture(scope='function')
def accountant_a_headers(app, accountant_a):
    return auth_headers(app, accountant_a)


@pytest.fixture(scope='function')
def secretary_a_headers(app, secretary_a):
    return auth_headers(app, secretary_a)


@pytest.fixture(scope='function')
def secretary_b_headers(app, secretary_b):
    return auth_headers(app, secretary_b)


@pytest.fixture(scope='function')
def viewer_a_headers(app, viewer_a):
    return auth_headers(app, viewer_a)
