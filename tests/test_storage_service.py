import pytest
from unittest.mock import MagicMock

from pymongo.errors import PyMongoError, ServerSelectionTimeoutError

from sense.services.storage_service import MemoryStorageService, StorageError, StorageService


@pytest.fixture
def mongo_client():
    client = MagicMock()
    db = MagicMock()
    client.__getitem__.return_value = db
    return client


@pytest.fixture
def mongo_storage(mongo_client):
    return StorageService("mongodb://example", "sense_test", client=mongo_client)


@pytest.mark.unit
def test_memory_storage_returns_copies(cinnamon_record):
    storage = MemoryStorageService([cinnamon_record])

    puzzle = storage.get_puzzle("2026-10-19")
    puzzle["answer"] = "tampered"

    assert storage.get_puzzle("2026-10-19")["answer"] == "cinnamon"


@pytest.mark.unit
def test_memory_storage_not_found_is_none():
    storage = MemoryStorageService()
    assert storage.get_puzzle("2026-01-01") is None
    assert storage.get_progress("user_1", "2026-01-01") is None
    assert storage.get_stats("user_1") is None


@pytest.mark.unit
def test_memory_progress_upsert_is_keyed_by_user_and_date():
    storage = MemoryStorageService()
    storage.upsert_progress({"user_id": "u", "puzzle_date": "2026-10-19", "attempts": 1})
    storage.upsert_progress({"user_id": "u", "puzzle_date": "2026-10-19", "attempts": 2})
    storage.upsert_progress({"user_id": "u", "puzzle_date": "2026-10-20", "attempts": 5})

    assert storage.get_progress("u", "2026-10-19")["attempts"] == 2
    assert storage.get_progress("u", "2026-10-20")["attempts"] == 5


@pytest.mark.unit
def test_mongo_storage_creates_indexes(mongo_client, mongo_storage):
    mongo_client.admin.command.assert_called_once_with('ping')
    mongo_storage.progress_collection.create_index.assert_called_once_with(
        [("user_id", 1), ("puzzle_date", 1)], unique=True
    )
    mongo_storage.stats_collection.create_index.assert_called_once_with("user_id", unique=True)


@pytest.mark.unit
def test_mongo_ping_failure_raises_storage_error(mongo_client):
    mongo_client.admin.command.side_effect = ServerSelectionTimeoutError("no servers")
    with pytest.raises(StorageError) as excinfo:
        StorageService("mongodb://example", client=mongo_client)
    assert excinfo.value.operation == 'ping'


@pytest.mark.unit
def test_mongo_upsert_progress_uses_compound_key(mongo_storage):
    record = {"user_id": "u", "puzzle_date": "2026-10-19", "guesses": ["lemon"]}

    mongo_storage.upsert_progress(record)

    mongo_storage.progress_collection.replace_one.assert_called_once_with(
        {"user_id": "u", "puzzle_date": "2026-10-19"}, record, upsert=True
    )


@pytest.mark.unit
def test_mongo_lookups_exclude_object_id(mongo_storage):
    mongo_storage.stats_collection.find_one.return_value = {"user_id": "u", "total_played": 3}

    assert mongo_storage.get_stats("u") == {"user_id": "u", "total_played": 3}
    mongo_storage.stats_collection.find_one.assert_called_once_with({"user_id": "u"}, {"_id": 0})


@pytest.mark.unit
def test_mongo_driver_errors_are_wrapped(mongo_storage):
    mongo_storage.puzzles_collection.find_one.side_effect = PyMongoError("boom")
    with pytest.raises(StorageError) as excinfo:
        mongo_storage.get_puzzle("2026-10-19")
    assert excinfo.value.operation == 'get_puzzle'
    assert isinstance(excinfo.value.cause, PyMongoError)


@pytest.mark.unit
def test_mongo_seed_puzzles_upserts_each(mongo_storage, cinnamon_record):
    count = mongo_storage.seed_puzzles([cinnamon_record, {**cinnamon_record, "date": "2026-10-20"}])
    assert count == 2
    assert mongo_storage.puzzles_collection.replace_one.call_count == 2
