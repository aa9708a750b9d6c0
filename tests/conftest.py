"""
Shared fixtures.

Each test gets a fresh app over an in-memory SQLite database and runs
inside its application context, so services can be called directly.
"""
import itertools

import pytest

from shared_expenses import create_app, db
from shared_expenses.security import token_issuer
from shared_expenses.services.groups import add_members, create_group
from shared_expenses.services.users import register_user


@pytest.fixture
def app():
    app = create_app(
        {
            "TESTING": True,
            "SQLALCHEMY_DATABASE_URI": "sqlite://",
            "JWT_SECRET": "test-secret",
            "SPLIT_TOLERANCE": "0.01",
        }
    )
    with app.app_context():
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def make_user(app):
    counter = itertools.count()

    def _make(name="Alice", password="correct horse"):
        return register_user(name, f"user{next(counter)}@example.com", password)

    return _make


@pytest.fixture
def make_group(app):
    def _make(creator, *members, name="Weekend Trip"):
        group = create_group(name, "shared costs", creator.id)
        if members:
            add_members(group.id, creator.id, [m.id for m in members])
        return group

    return _make


@pytest.fixture
def auth_header(app):
    def _header(user):
        return {"Authorization": f"Bearer {token_issuer().issue(user.id)}"}

    return _header


@pytest.fixture
def alice(make_user):
    return make_user("Alice")


@pytest.fixture
def bob(make_user):
    return make_user("Bob")


@pytest.fixture
def carol(make_user):
    return make_user("Carol")


@pytest.fixture
def group(make_group, alice, bob):
    """Alice's group with Bob as a member; Carol stays outside."""
    return make_group(alice, bob)

