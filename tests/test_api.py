import pytest

from sense.services.storage_service import StorageError

DAY = "2026-10-19"
HEADERS = {"X-User-Id": "user_test_1"}


def _guess(client, guess, day=DAY, headers=HEADERS):
    return client.post(f"/api/puzzle/{day}/guess", json={"guess": guess}, headers=headers)


@pytest.mark.integration
def test_health(client):
    response = client.get("/api/health")
    assert response.status_code == 200
    assert response.get_json()["success"] is True


@pytest.mark.integration
def test_get_state_for_new_player(client):
    response = client.get(f"/api/puzzle/{DAY}", headers=HEADERS)

    data = response.get_json()
    assert response.status_code == 200
    assert data["user_id"] == "user_test_1"
    state = data["state"]
    assert state["category"] == "smell"
    assert state["attempts"] == 0
    assert state["max_attempts"] == 6
    assert len(state["hints"]) == 1
    assert state["answer"] is None


@pytest.mark.integration
def test_missing_user_header_gets_generated_id(client):
    response = client.get(f"/api/puzzle/{DAY}")
    assert response.status_code == 200
    assert response.get_json()["user_id"].startswith("user_")


@pytest.mark.integration
def test_malformed_user_header_is_rejected(client):
    response = client.get(f"/api/puzzle/{DAY}", headers={"X-User-Id": "bad id!"})
    assert response.status_code == 400


@pytest.mark.integration
def test_unknown_and_invalid_dates(client):
    assert client.get("/api/puzzle/1999-01-01", headers=HEADERS).status_code == 404
    assert client.get("/api/puzzle/yesterday", headers=HEADERS).status_code == 400
    assert _guess(client, "lemon", day="1999-01-01").status_code == 404


@pytest.mark.integration
def test_guess_flow_to_win(client):
    first = _guess(client, "cinamon").get_json()
    assert first["success"] is True
    assert first["result"]["tier"] == "close"
    assert first["result"]["match_kind"] == "fuzzy"
    assert first["state"]["hint_index"] == 1

    second = _guess(client, "cinnamon").get_json()
    assert second["result"]["tier"] == "correct"
    assert second["state"]["outcome"] == "won"
    assert second["state"]["answer"] == "cinnamon"
    assert second["stats"]["total_wins"] == 1

    stats = client.get("/api/stats", headers=HEADERS).get_json()
    assert stats["stats"]["current_streak"] == 1
    assert stats["stats"]["best_attempts"] == 2


@pytest.mark.integration
def test_validation_rejections(client):
    assert _guess(client, "   ").status_code == 400
    assert client.post(f"/api/puzzle/{DAY}/guess", json={}, headers=HEADERS).status_code == 400
    assert client.post(f"/api/puzzle/{DAY}/guess", json={"guess": 7}, headers=HEADERS).status_code == 400

    assert _guess(client, "lemon").status_code == 200
    duplicate = _guess(client, "LEMON")
    assert duplicate.status_code == 400
    assert "already tried" in duplicate.get_json()["error"]

    state = client.get(f"/api/puzzle/{DAY}", headers=HEADERS).get_json()["state"]
    assert state["attempts"] == 1


@pytest.mark.integration
def test_progress_is_per_user(client):
    _guess(client, "lemon")
    other = client.get(f"/api/puzzle/{DAY}", headers={"X-User-Id": "user_test_2"}).get_json()
    assert other["state"]["attempts"] == 0


@pytest.mark.integration
def test_share_text_requires_finished_game(client):
    assert client.get(f"/api/puzzle/{DAY}/share", headers=HEADERS).status_code == 409

    _guess(client, "lemon")
    _guess(client, "cinnamon")

    response = client.get(f"/api/puzzle/{DAY}/share", headers=HEADERS)
    assert response.status_code == 200
    assert response.get_json()["text"] == f"SENSE {DAY} 2/6\n\n⬜🟩\n\nPlay at: https://sense.example"


@pytest.mark.integration
def test_finished_game_rejects_more_guesses(client):
    _guess(client, "cinnamon")
    response = _guess(client, "lemon")
    assert response.status_code == 400


@pytest.mark.integration
def test_stats_for_new_user_is_null(client):
    data = client.get("/api/stats", headers=HEADERS).get_json()
    assert data["success"] is True
    assert data["stats"] is None


@pytest.mark.integration
def test_storage_failure_returns_503(client, app_storage, monkeypatch):
    def failing_upsert(record):
        raise StorageError('upsert_progress', RuntimeError('timeout'))

    monkeypatch.setattr(app_storage, "upsert_progress", failing_upsert)

    response = _guess(client, "lemon")

    assert response.status_code == 503
    assert response.get_json()["success"] is False
    assert app_storage.get_progress("user_test_1", DAY) is None


@pytest.mark.integration
def test_generated_user_id_is_returned_in_header(client):
    response = client.get(f"/api/puzzle/{DAY}")
    assert response.headers["X-User-Id"] == response.get_json()["user_id"]

    known = client.get(f"/api/puzzle/{DAY}", headers=HEADERS)
    assert "X-User-Id" not in known.headers
