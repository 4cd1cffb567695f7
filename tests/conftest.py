import pytest
from datetime import datetime, timedelta, timezone

from sense import create_app
from sense.config import TestingConfig, PUZZLES
from sense.models.game import PuzzleDefinition
from sense.services.game_service import GameService, initialize_game_service
from sense.services.stats_service import StatsService, initialize_stats_service
from sense.services.storage_service import MemoryStorageService


class FakeClock:
    """Deterministic clock that only moves when told to."""

    def __init__(self, start=None):
        self.now = start or datetime(2026, 10, 19, 9, 0, 0, tzinfo=timezone.utc)

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now = self.now + timedelta(seconds=seconds)


@pytest.fixture
def cinnamon_record():
    return {
        "date": "2026-10-19",
        "answer": "cinnamon",
        "category": "smell",
        "synonyms": ["spice"],
        "hints": ["Warm and sweet.", "Tree bark.", "Apples love it.", "Rolled into quills."],
        "fact": "Cinnamaldehyde gives cinnamon its aroma."
    }


@pytest.fixture
def puzzle(cinnamon_record):
    return PuzzleDefinition.from_record(cinnamon_record)


@pytest.fixture
def storage(cinnamon_record):
    return MemoryStorageService([cinnamon_record])


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def stats_service(storage):
    return StatsService(storage)


@pytest.fixture
def game_service(storage, stats_service, clock):
    return GameService(storage, stats_service, clock)


@pytest.fixture
def app_storage():
    return MemoryStorageService(PUZZLES)


@pytest.fixture
def app(app_storage, clock):
    stats = initialize_stats_service(app_storage)
    initialize_game_service(app_storage, stats, clock)
    return create_app(TestingConfig)


@pytest.fixture
def client(app):
    return app.test_client()
