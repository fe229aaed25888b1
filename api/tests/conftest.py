import pytest

from roommate_match.database import init_db, make_session_factory
from roommate_match.services.directory import ProfileDirectory
from roommate_match.services.engine import InterestEngine
from roommate_match.store import InMemoryStore, SqlStore


@pytest.fixture(params=["memory", "sql"])
def store(request):
    if request.param == "memory":
        yield InMemoryStore()
        return
    engine, session_factory = make_session_factory("sqlite://")
    init_db(engine)
    yield SqlStore(session_factory)
    engine.dispose()


@pytest.fixture
def directory(store):
    return ProfileDirectory(store)


@pytest.fixture
def engine(store, directory):
    return InterestEngine(store, directory, message_max_length=1000)


def profile_payload(email: str, **overrides):
    payload = {
        "email": email,
        "first_name": "Test",
        "last_name": "User",
        "age": 25,
        "bio": None,
        "location": "New York, NY",
        "budget_min": 800,
        "budget_max": 1200,
        "preferred_gender": None,
        "lifestyle_preferences": None,
        "profile_image_url": None,
    }
    payload.update(overrides)
    return payload


@pytest.fixture
def payload():
    return profile_payload


@pytest.fixture
def make_profile(directory):
    def _make(email: str, **overrides):
        return directory.create_profile(profile_payload(email, **overrides))

    return _make
