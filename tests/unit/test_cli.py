from __future__ import annotations

import json
from datetime import datetime, timezone
from typing import List, Optional

import pytest
from typer.testing import CliRunner

from catalog_store import main
from catalog_store.domain.filters import MovieQuery, build_list_query, calculate_metadata
from catalog_store.domain.models import Movie
from catalog_store.errors import EditConflict, RecordNotFound

runner = CliRunner()


class _FakeStore:
    def __init__(self) -> None:
        self.inserted: List[Movie] = []
        self.queries: List[MovieQuery] = []

    def insert(self, draft: Movie) -> Movie:
        self.inserted.append(draft)
        return draft.model_copy(update={"id": 1, "version": 1, "created_at": datetime.now(timezone.utc)})

    def get(self, movie_id: int) -> Movie:
        raise RecordNotFound()

    def update(self, movie: Movie, expected_version: Optional[int] = None) -> Movie:
        raise EditConflict()

    def delete(self, movie_id: int) -> None:
        return None

    def list_page(self, query: MovieQuery):
        build_list_query(query)
        self.queries.append(query)
        movies = [Movie(id=1, title="Heat", year=1995, runtime=170, genres=["crime"], version=2)]
        return movies, calculate_metadata(1, query.filters.page, query.filters.page_size)


@pytest.fixture
def fake_store(monkeypatch: pytest.MonkeyPatch) -> _FakeStore:
    store = _FakeStore()
    monkeypatch.setattr(main, "_store", lambda: store)
    monkeypatch.setattr(main, "configure_logging", lambda **kwargs: None)
    return store


def test_create_decodes_runtime_and_prints_wire_form(fake_store: _FakeStore) -> None:
    result = runner.invoke(
        main.app,
        ["create", "--title", "Heat", "--year", "1995", "--runtime", "170 mins", "-g", "crime", "-g", "drama"],
    )

    assert result.exit_code == 0, result.output
    assert fake_store.inserted[0].runtime == 170
    payload = json.loads(result.output)
    assert payload["movie"] == {
        "id": 1,
        "title": "Heat",
        "year": 1995,
        "runtime": "170 mins",
        "genres": ["crime", "drama"],
        "version": 1,
    }


def test_create_with_malformed_runtime_reports_400(fake_store: _FakeStore) -> None:
    result = runner.invoke(main.app, ["create", "--title", "Heat", "--year", "1995", "--runtime", "170 minutes"])

    assert result.exit_code == 1
    assert '"status": 400' in result.output
    assert fake_store.inserted == []


def test_show_missing_movie_reports_404(fake_store: _FakeStore) -> None:
    result = runner.invoke(main.app, ["show", "42"])

    assert result.exit_code == 1
    assert '"status": 404' in result.output


def test_update_conflict_reports_409(fake_store: _FakeStore) -> None:
    result = runner.invoke(
        main.app,
        ["update", "1", "--version", "1", "--title", "Heat", "--year", "1995", "--runtime", "170 mins", "-g", "crime"],
    )

    assert result.exit_code == 1
    assert '"status": 409' in result.output


def test_delete(fake_store: _FakeStore) -> None:
    result = runner.invoke(main.app, ["delete", "1"])

    assert result.exit_code == 0
    assert "successfully deleted" in result.output


def test_list_parses_filters_and_prints_metadata(fake_store: _FakeStore) -> None:
    result = runner.invoke(
        main.app, ["list", "--title", "heat", "--genres", "crime,drama", "--page-size", "5", "--sort", "-year"]
    )

    assert result.exit_code == 0, result.output
    query = fake_store.queries[0]
    assert query.title == "heat"
    assert list(query.genres) == ["crime", "drama"]
    assert query.filters.sort == "-year"
    payload = json.loads(result.output)
    assert payload["metadata"]["total_records"] == 1
    assert payload["movies"][0]["runtime"] == "170 mins"


def test_list_with_unknown_sort_reports_422(fake_store: _FakeStore) -> None:
    result = runner.invoke(main.app, ["list", "--sort", "created_at"])

    assert result.exit_code == 1
    assert '"status": 422' in result.output
    assert fake_store.queries == []


def test_list_renders_table(fake_store: _FakeStore) -> None:
    result = runner.invoke(main.app, ["list", "--table"])

    assert result.exit_code == 0, result.output
    assert "Heat" in result.output
