"""
Domain models for the catalog store.

Defines the `Movie` record aligned with `db/init.sql`, its validation rules,
and its external (wire) representation.
"""
from __future__ import annotations

import json
from datetime import datetime, timezone
from typing import Any, Dict, List, Mapping, Optional

from pydantic import BaseModel, Field
from pydantic import ValidationError as PydanticValidationError

from catalog_store.domain.runtime import INT32_MAX, format_runtime, parse_runtime
from catalog_store.domain.validator import Validator, unique
from catalog_store.errors import InvalidFormat, ValidationFailure

MIN_YEAR = 1888
MAX_TITLE_BYTES = 500
MAX_GENRES = 5


class Movie(BaseModel):
    """
    Representation of a single row in the `movies` table.

    Drafts carry id 0, no created_at and version 0 until the store assigns them.
    """

    id: int = Field(0, description="Primary key (BIGSERIAL), assigned on insert.")
    created_at: Optional[datetime] = Field(None, description="Row creation timestamp.")
    title: str = Field("", description="Movie title.")
    year: int = Field(0, description="Release year.")
    runtime: int = Field(0, description="Runtime in minutes.")
    genres: Optional[List[str]] = Field(None, description="Genre tags.")
    version: int = Field(0, description="Optimistic concurrency counter.")

    model_config = {
        "frozen": True,
        "extra": "ignore",
    }

    def to_wire(self) -> Dict[str, Any]:
        """External representation; created_at is never exposed."""
        payload: Dict[str, Any] = {"id": self.id, "title": self.title}
        if self.year:
            payload["year"] = self.year
        if self.runtime:
            payload["runtime"] = format_runtime(self.runtime)
        if self.genres:
            payload["genres"] = list(self.genres)
        payload["version"] = self.version
        return payload

    def to_json(self) -> str:
        return json.dumps(self.to_wire())


def validate_movie(v: Validator, movie: Movie) -> None:
    v.check(movie.title != "", "title", "must be provided")
    v.check(len(movie.title.encode("utf-8")) <= MAX_TITLE_BYTES, "title", "must not be more than 500 bytes long")

    current_year = datetime.now(timezone.utc).year
    v.check(movie.year != 0, "year", "must be provided")
    v.check(movie.year >= MIN_YEAR, "year", "must be greater than 1888")
    v.check(movie.year <= current_year, "year", "must not be in the future")

    v.check(movie.runtime != 0, "runtime", "must be provided")
    v.check(movie.runtime > 0, "runtime", "must be a positive integer")
    v.check(movie.runtime <= INT32_MAX, "runtime", "must not be more than 2147483647")

    genres = movie.genres
    v.check(genres is not None, "genres", "must be provided")
    if genres is not None:
        v.check(len(genres) >= 1, "genres", "must contain at least 1 genre")
        v.check(len(genres) <= MAX_GENRES, "genres", "must not contain more than 5 genres")
        v.check(unique(genres), "genres", "must not contain duplicate values")


def movie_from_wire(payload: Mapping[str, Any]) -> Movie:
    """
    Build a draft Movie from a decoded JSON object.

    `runtime` goes through the runtime codec. Fields with the wrong JSON type are
    reported together as a ValidationFailure; identity fields are ignored.
    """
    if not isinstance(payload, Mapping):
        raise InvalidFormat("body must contain a single JSON object")

    fields: Dict[str, Any] = {key: payload[key] for key in ("title", "year", "genres") if key in payload}
    raw_runtime = payload.get("runtime")
    if raw_runtime is not None:
        fields["runtime"] = parse_runtime(raw_runtime)

    try:
        return Movie.model_validate(fields)
    except PydanticValidationError as exc:
        errors = {str(err["loc"][0]): err["msg"] for err in exc.errors()}
        raise ValidationFailure(errors) from exc


def movie_from_json(text: str | bytes) -> Movie:
    try:
        payload = json.loads(text)
    except ValueError as exc:
        raise InvalidFormat("body contains badly-formed JSON") from exc
    return movie_from_wire(payload)


__all__ = [
    "Movie",
    "validate_movie",
    "movie_from_wire",
    "movie_from_json",
    "MIN_YEAR",
    "MAX_GENRES",
    "MAX_TITLE_BYTES",
]
