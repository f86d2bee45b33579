# conftest.py

import os
import tempfile

import pytest

# Set testing environment BEFORE importing app so TestingConfig is used
os.environ["FLASK_ENV"] = "testing"

from app import create_app  # noqa: E402
from peoplefinder.completion import CompletionPolicy, FieldRegistry  # noqa: E402
from peoplefinder.models import Group, Membership, Person, ProfilePhoto, db  # noqa: E402
from peoplefinder.services.completion_service import CompletionService  # noqa: E402


@pytest.fixture(scope="function")
def app():
    """Create and configure a test Flask application"""
    import uuid

    # Create a unique temporary database file for each test
    db_fd, temp_db = tempfile.mkstemp(suffix=f"_{uuid.uuid4().hex[:8]}.db")

    try:
        flask_app = create_app(
            "testing",
            {
                "TESTING": True,
                "SQLALCHEMY_DATABASE_URI": f"sqlite:///{temp_db}",
                "SQLALCHEMY_ECHO": False,
                "ENABLE_FILE_LOGGING": False,
                "ENABLE_CONSOLE_LOGGING": False,
                "LOG_LEVEL": "DEBUG",
            },
        )

        with flask_app.app_context():
            db.drop_all()
            db.create_all()
            yield flask_app
            db.session.remove()
            db.drop_all()
            db.engine.dispose()
    finally:
        # Always close and remove the temporary database file, even on error
        try:
            os.close(db_fd)
        except OSError:
            pass
        for suffix in ("", "-wal", "-shm"):
            try:
                if os.path.exists(temp_db + suffix):
                    os.unlink(temp_db + suffix)
            except OSError:
                pass


@pytest.fixture(autouse=True)
def app_context(app):
    """Automatically provide app context for all tests"""
    with app.app_context():
        yield


@pytest.fixture
def client(app):
    """Create a test client for the Flask application"""
    return app.test_client()


@pytest.fixture
def completion_service(app):
    """The application-wide service built from configuration"""
    return app.extensions["completion_service"]


@pytest.fixture
def registry(app):
    return FieldRegistry(Person.__table__)


@pytest.fixture
def four_field_policy(registry):
    """Four equally weighted fields, one of each presence kind plus a second scalar"""
    return CompletionPolicy(
        registry,
        adequate_fields=("given_name",),
        full_fields=("given_name", "surname", "profile_photo", "groups"),
    )


@pytest.fixture
def four_field_service(app, four_field_policy):
    return CompletionService(db.engine, four_field_policy)


@pytest.fixture
def test_group(app):
    group = Group(name="Digital Services")
    db.session.add(group)
    db.session.commit()
    return group


@pytest.fixture
def scenario_people(app, test_group):
    """
    Half complete, fully complete and empty profiles under the four field policy:
    scores 50, 100 and 0.
    """
    half = Person(given_name="Ada", surname="Lovelace", email="ada@example.com")
    photo = ProfilePhoto(image="grace.png")
    full = Person(given_name="Grace", surname="Hopper", email="grace@example.com", profile_photo=photo)
    empty = Person(email="empty@example.com")
    db.session.add_all([half, full, empty])
    db.session.flush()

    db.session.add(Membership(person_id=full.id, group_id=test_group.id, role="Lead"))
    db.session.commit()
    return half, full, empty


@pytest.fixture
def make_complete_person(app, test_group):
    """Factory for profiles with every default completion field populated"""

    def _make(email, **overrides):
        attributes = {
            "given_name": "Complete",
            "surname": "Person",
            "email": email,
            "primary_phone_number": "020 7946 0000",
            "building": "102 Petty France",
            "location_in_building": "10th floor",
            "city": "London",
            "image": "legacy.png",
        }
        attributes.update(overrides)
        person = Person(**attributes)
        db.session.add(person)
        db.session.flush()
        db.session.add(Membership(person_id=person.id, group_id=test_group.id))
        return person

    return _make
