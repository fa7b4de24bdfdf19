"""
Seeding script for the catalog store.

Generates deterministic pseudo-random movies and inserts them through
MovieStore, so every row passes the same validation as API writes.
"""

from __future__ import annotations

import random
import sys
import time
from typing import List, Optional

import typer
from psycopg_pool import ConnectionPool

from catalog_store.config import get_settings
from catalog_store.domain.models import Movie
from catalog_store.infrastructure.db_factory import open_pool
from catalog_store.store import MovieStore

app = typer.Typer(help="Generate synthetic movies and insert them into Postgres.")

_GENRES = ["action", "adventure", "animation", "comedy", "crime", "drama", "romance", "sci-fi", "western"]
_WORDS = ["black", "night", "river", "iron", "lost", "city", "golden", "silent", "storm", "garden", "empire"]


def _generate_movies(rows: int, seed: int) -> List[Movie]:
    rng = random.Random(seed)
    movies: List[Movie] = []
    for i in range(rows):
        words = rng.sample(_WORDS, k=rng.randint(1, 3))
        movies.append(
            Movie(
                title=" ".join(words).title() + f" {i + 1}",
                year=rng.randint(1920, 2020),
                runtime=rng.randint(60, 200),
                genres=rng.sample(_GENRES, k=rng.randint(1, 3)),
            )
        )
    return movies


def _insert_movies(store: MovieStore, movies: List[Movie]) -> int:
    for movie in movies:
        store.insert(movie)
    return len(movies)


@app.command()
def main(
    rows: int = typer.Option(
        100,
        "--rows",
        "-r",
        help="Number of movies to generate.",
    ),
    seed: int = typer.Option(
        42,
        "--seed",
        help="Deterministic RNG seed.",
    ),
    dsn: Optional[str] = typer.Option(
        None,
        "--dsn",
        help="Optional DSN override for Postgres.",
    ),
) -> None:
    """
    Generate synthetic movies and insert them one by one.
    """
    settings = get_settings()
    start = time.perf_counter()
    movies = _generate_movies(rows, seed)
    typer.echo(f"Generated {rows:,} movies (seed={seed})")

    pool = ConnectionPool(conninfo=dsn or settings.dsn, min_size=1, max_size=2, open=False)
    try:
        open_pool(pool, timeout=settings.default_timeout_seconds, attempts=settings.db_connect_attempts)
        inserted = _insert_movies(MovieStore(pool=pool, settings=settings), movies)
    finally:
        pool.close()

    duration = time.perf_counter() - start
    typer.echo(f"Inserted {inserted:,} movies in {duration:.2f}s.")


if __name__ == "__main__":
    try:
        app()
    except KeyboardInterrupt:
        typer.echo("Cancelled by user.", err=True)
        sys.exit(130)
