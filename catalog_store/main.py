from __future__ import annotations

import json
import sys
from typing import Any, Dict, List, NoReturn, Optional

import psycopg
import typer
from rich import box
from rich.console import Console
from rich.table import Table

from catalog_store import __version__
from catalog_store.config import get_settings
from catalog_store.domain.filters import DEFAULT_PAGE_SIZE, Filters, MovieQuery, parse_genres
from catalog_store.domain.models import Movie, movie_from_wire
from catalog_store.errors import StoreError, error_payload, status_code_for
from catalog_store.infrastructure.db_factory import check_connection, get_sync_pool
from catalog_store.store import MovieStore
from catalog_store.utils.logging import configure_logging

app = typer.Typer(help="Catalog store CLI.")


def _store() -> MovieStore:
    return MovieStore()


def _fail(error: StoreError) -> NoReturn:
    typer.echo(
        json.dumps({"status": status_code_for(error), **error_payload(error)}),
        err=True,
    )
    raise typer.Exit(code=1)


def _draft(title: str, year: int, runtime: Optional[str], genres: Optional[List[str]]) -> Movie:
    payload: Dict[str, Any] = {"title": title, "year": year}
    if runtime is not None:
        payload["runtime"] = runtime
    if genres:
        payload["genres"] = genres
    return movie_from_wire(payload)


def _render_table(movies: List[Movie]) -> None:
    table = Table(title="Movies", box=box.SIMPLE_HEAVY)
    for column in ("ID", "Title", "Year", "Runtime", "Genres", "Version"):
        table.add_column(column)
    for movie in movies:
        wire = movie.to_wire()
        table.add_row(
            str(movie.id),
            movie.title,
            str(wire.get("year", "")),
            wire.get("runtime", ""),
            ", ".join(wire.get("genres", [])),
            str(movie.version),
        )
    Console().print(table)


@app.callback()
def _configure() -> None:
    settings = get_settings()
    configure_logging(level=settings.log_level, json_logs=settings.log_json)


@app.command()
def info() -> None:
    """
    Show effective configuration values.
    """
    settings = get_settings()
    typer.echo(
        f"DB={settings.db_user}@{settings.db_host}:{settings.db_port}/{settings.db_name} | "
        f"pool=({settings.db_pool_min_size},{settings.db_pool_max_size}) "
        f"timeout_ms={settings.db_statement_timeout_ms} env={settings.app_env}"
    )


@app.command()
def healthcheck() -> None:
    """
    Report availability, environment and version.
    """
    settings = get_settings()
    try:
        database = "ok" if check_connection(get_sync_pool(settings)) else "unavailable"
    except psycopg.Error:
        database = "unavailable"
    typer.echo(
        json.dumps(
            {
                "status": "available",
                "environment": settings.app_env,
                "version": __version__,
                "database": database,
            }
        )
    )


@app.command()
def create(
    title: str = typer.Option(..., "--title", help="Movie title."),
    year: int = typer.Option(..., "--year", help="Release year."),
    runtime: Optional[str] = typer.Option(None, "--runtime", help='Runtime, e.g. "102 mins".'),
    genre: Optional[List[str]] = typer.Option(None, "--genre", "-g", help="Genre tag (repeatable)."),
) -> None:
    """
    Insert a new movie and print it.
    """
    try:
        movie = _store().insert(_draft(title, year, runtime, genre))
    except StoreError as exc:
        _fail(exc)
    typer.echo(json.dumps({"movie": movie.to_wire()}, indent=2))


@app.command()
def show(movie_id: int = typer.Argument(..., help="Movie id.")) -> None:
    """
    Print one movie.
    """
    try:
        movie = _store().get(movie_id)
    except StoreError as exc:
        _fail(exc)
    typer.echo(json.dumps({"movie": movie.to_wire()}, indent=2))


@app.command()
def update(
    movie_id: int = typer.Argument(..., help="Movie id."),
    version: int = typer.Option(..., "--version", help="Version returned by the last read."),
    title: str = typer.Option(..., "--title", help="Movie title."),
    year: int = typer.Option(..., "--year", help="Release year."),
    runtime: Optional[str] = typer.Option(None, "--runtime", help='Runtime, e.g. "102 mins".'),
    genre: Optional[List[str]] = typer.Option(None, "--genre", "-g", help="Genre tag (repeatable)."),
) -> None:
    """
    Replace all fields of a movie, guarded by its version.
    """
    try:
        draft = _draft(title, year, runtime, genre)
        movie = _store().update(draft.model_copy(update={"id": movie_id, "version": version}))
    except StoreError as exc:
        _fail(exc)
    typer.echo(json.dumps({"movie": movie.to_wire()}, indent=2))


@app.command()
def delete(movie_id: int = typer.Argument(..., help="Movie id.")) -> None:
    """
    Permanently delete a movie.
    """
    try:
        _store().delete(movie_id)
    except StoreError as exc:
        _fail(exc)
    typer.echo(json.dumps({"message": "movie successfully deleted"}))


@app.command("list")
def list_movies(
    title: str = typer.Option("", "--title", help="Full-text title search."),
    genres: str = typer.Option("", "--genres", help="Comma-separated genres that must all match."),
    page: int = typer.Option(1, "--page", help="Page number."),
    page_size: int = typer.Option(DEFAULT_PAGE_SIZE, "--page-size", help="Rows per page (max 100)."),
    sort: str = typer.Option("id", "--sort", help="id, title, year, runtime; prefix '-' for descending."),
    as_table: bool = typer.Option(False, "--table", help="Render a table instead of JSON."),
) -> None:
    """
    Search movies with pagination and sorting.
    """
    query = MovieQuery(
        title=title,
        genres=parse_genres(genres),
        filters=Filters(page=page, page_size=page_size, sort=sort),
    )
    try:
        movies, metadata = _store().list_page(query)
    except StoreError as exc:
        _fail(exc)

    if as_table:
        _render_table(movies)
        return
    typer.echo(
        json.dumps(
            {"metadata": metadata.to_wire(), "movies": [movie.to_wire() for movie in movies]},
            indent=2,
        )
    )


def main() -> None:
    try:
        app()
    except KeyboardInterrupt:
        typer.echo("Cancelled by user.", err=True)
        sys.exit(130)


if __name__ == "__main__":
    main()
