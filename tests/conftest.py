import pytest

from kioku.application.review_service import ReviewService
from kioku.infrastructure.adapters.store import InMemoryStore, JsonFileStore


@pytest.fixture
def mock_home(tmp_path, monkeypatch):
    """Points HOME at a temp dir so no real config file is picked up."""
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    for var in ("KIOKU_BACKEND", "KIOKU_STORE_PATH", "KIOKU_QUEUE_LIMIT", "KIOKU_VERBOSE"):
        monkeypatch.delenv(var, raising=False)
    return home


@pytest.fixture
def memory_store():
    return InMemoryStore()


@pytest.fixture
def deck_path(tmp_path):
    return tmp_path / "data" / "deck.json"


@pytest.fixture
def json_store(deck_path):
    return JsonFileStore(deck_path)


@pytest.fixture
def service(memory_store):
    return ReviewService(memory_store)
