"""
Smoke tests for the directors endpoints and the snapshot store behind them.
"""

from __future__ import annotations

import threading

import pytest
from fastapi.testclient import TestClient

from api import deps
from api.main import app
from api.snapshots import DirectorSnapshotStore
from cinemavault.aggregation.directors import DirectorAggregation, DirectorFailure, group_directors
from cinemavault.integrations.tmdb.client import TmdbClientError
from cinemavault.models.movies import Movie


def _aggregation() -> DirectorAggregation:
    movies = [
        Movie.from_tmdb({"id": 1, "title": "One", "release_date": "2001-01-01", "vote_average": 8.0, "vote_count": 100}),
        Movie.from_tmdb({"id": 2, "title": "Two", "vote_average": 6.0, "vote_count": 50}),
        Movie.from_tmdb({"id": 3, "title": "Three", "vote_average": 9.0, "vote_count": 10}),
    ]
    directors = group_directors([(movies[0], "Alice Smith"), (movies[1], "Alice Smith"), (movies[2], "Bob Jones")])
    return DirectorAggregation(
        directors=tuple(directors),
        attempted=4,
        resolved=3,
        unresolved=0,
        failed=1,
        failures=(DirectorFailure(movie_id=4, title="Four", message="TMDb request failed with HTTP 500."),),
    )


class _CountingBuilder:
    def __init__(self, result=None, error: Exception | None = None) -> None:
        self.calls = 0
        self._result = result
        self._error = error

    def __call__(self) -> DirectorAggregation:
        self.calls += 1
        if self._error is not None:
            raise self._error
        return self._result if self._result is not None else _aggregation()


@pytest.fixture
def builder():
    return _CountingBuilder()


@pytest.fixture
def client(builder):
    store = DirectorSnapshotStore(builder)
    app.dependency_overrides[deps.get_director_store] = lambda: store
    yield TestClient(app)
    app.dependency_overrides.clear()


class TestDirectorEndpoints:
    def test_list_directors_builds_once_and_sorts(self, client: TestClient, builder: _CountingBuilder):
        response = client.get("/api/v1/directors")
        assert response.status_code == 200
        data = response.json()
        assert [d["name"] for d in data["directors"]] == ["Bob Jones", "Alice Smith"]
        alice = data["directors"][1]
        assert alice["total_movies"] == 2
        assert alice["average_rating"] == 3.5
        assert alice["total_reviews"] == 150
        assert [m["id"] for m in alice["movies"]] == [1, 2]
        assert alice["movies"][1]["year"] is None
        assert data["label"] == "Showing 2 directors"

        client.get("/api/v1/directors")
        assert builder.calls == 1

    def test_list_directors_filters_by_query(self, client: TestClient):
        response = client.get("/api/v1/directors", params={"q": "a"})
        assert response.status_code == 200
        assert [d["name"] for d in response.json()["directors"]] == ["Alice Smith"]

        response = client.get("/api/v1/directors", params={"q": "nobody"})
        assert response.json()["label"] == "No directors found"

    def test_refresh_rebuilds_and_reports_failures(self, client: TestClient, builder: _CountingBuilder):
        client.get("/api/v1/directors")
        response = client.post("/api/v1/directors/refresh")
        assert response.status_code == 200
        data = response.json()
        assert builder.calls == 2
        assert data["directors"] == 2
        assert data["failed"] == 1
        assert data["failures"][0]["movie_id"] == 4


def test_list_directors_fatal_failure_returns_502():
    store = DirectorSnapshotStore(_CountingBuilder(error=TmdbClientError("TMDb request failed with HTTP 401.")))
    app.dependency_overrides[deps.get_director_store] = lambda: store
    try:
        response = TestClient(app).get("/api/v1/directors")
    finally:
        app.dependency_overrides.clear()

    assert response.status_code == 502
    assert response.json()["detail"] == "Failed to load directors"


def test_snapshot_store_replaces_snapshot_wholesale():
    builder = _CountingBuilder()
    store = DirectorSnapshotStore(builder)
    assert store.current() is None

    first = store.get_or_build()
    assert store.get_or_build() is first

    second = store.refresh()
    assert second is not first
    assert store.current() is second
    assert first.aggregation.directors == second.aggregation.directors

    store.clear()
    assert store.current() is None


def test_snapshot_store_keeps_previous_snapshot_when_refresh_fails():
    store = DirectorSnapshotStore(_CountingBuilder())
    first = store.get_or_build()
    store._builder = _CountingBuilder(error=TmdbClientError("boom"))

    with pytest.raises(TmdbClientError):
        store.refresh()
    assert store.current() is first


@pytest.mark.parametrize(("method", "path"), [("get", "/api/v1/directors"), ("post", "/api/v1/directors/refresh")])
def test_missing_api_key_returns_failed_to_load(monkeypatch: pytest.MonkeyPatch, method: str, path: str):
    monkeypatch.delenv("TMDB_API_KEY", raising=False)
    deps.get_tmdb_api_key.cache_clear()
    store = DirectorSnapshotStore(deps._build_director_aggregation)
    app.dependency_overrides[deps.get_director_store] = lambda: store
    try:
        response = getattr(TestClient(app), method)(path)
    finally:
        app.dependency_overrides.clear()
        deps.get_tmdb_api_key.cache_clear()

    assert response.status_code == 502
    assert response.json()["detail"] == "Failed to load directors"
    assert store.current() is None


def test_snapshot_store_clear_waits_for_build_lock():
    store = DirectorSnapshotStore(_CountingBuilder())
    store.get_or_build()

    store._build_lock.acquire()
    try:
        cleared = threading.Thread(target=store.clear)
        cleared.start()
        cleared.join(timeout=0.05)
        assert cleared.is_alive()
        assert store.current() is not None
    finally:
        store._build_lock.release()
    cleared.join(timeout=1)
    assert store.current() is None
