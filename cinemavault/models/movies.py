from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Iterable, Mapping

from cinemavault.integrations.tmdb.client import build_image_url

logger = logging.getLogger(__name__)


def _as_str(value: Any) -> str | None:
    if isinstance(value, str) and value.strip():
        return value.strip()
    return None


def _as_float(value: Any, default: float = 0.0) -> float:
    if isinstance(value, bool):
        return default
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value.strip())
        except ValueError:
            return default
    return default


def _as_int(value: Any, default: int = 0) -> int:
    if isinstance(value, bool):
        return default
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value)
    if isinstance(value, str) and value.strip().isdigit():
        return int(value.strip())
    return default


def rescale_rating(vote_average: float) -> float:
    """TMDb votes are on a 0-10 scale; the front end shows 0-5 stars."""
    return vote_average / 2


def release_year(release_date: str | None) -> int | None:
    """
    Year part of an ISO `YYYY-MM-DD` date.

    None is the single "unknown year" marker, used for absent and unparseable dates alike.
    """

    raw = _as_str(release_date)
    if raw is None:
        return None
    head = raw.split("-", 1)[0]
    if len(head) == 4 and head.isdigit():
        return int(head)
    return None


@dataclass(frozen=True)
class Movie:
    """A movie as listed by TMDb (`/movie/popular`, `/search/movie`)."""

    id: int | str
    title: str
    release_date: str | None = None
    vote_average: float = 0.0
    vote_count: int = 0
    poster_path: str | None = None
    genre_ids: tuple[int, ...] = ()

    @classmethod
    def from_tmdb(cls, payload: Mapping[str, Any]) -> Movie:
        if not isinstance(payload, Mapping):
            raise ValueError("TMDb movie payload is not an object.")
        movie_id = payload.get("id")
        if movie_id is None or isinstance(movie_id, bool) or movie_id == "":
            raise ValueError(f"TMDb movie payload is missing an id: {dict(payload)!r}")
        genre_ids = payload.get("genre_ids")
        return cls(
            id=movie_id,
            title=str(payload.get("title") or ""),
            release_date=_as_str(payload.get("release_date")),
            vote_average=_as_float(payload.get("vote_average")),
            vote_count=_as_int(payload.get("vote_count")),
            poster_path=_as_str(payload.get("poster_path")),
            genre_ids=tuple(g for g in genre_ids if isinstance(g, int)) if isinstance(genre_ids, list) else (),
        )

    @property
    def year(self) -> int | None:
        return release_year(self.release_date)

    @property
    def rating(self) -> float:
        return rescale_rating(self.vote_average)

    @property
    def poster_url(self) -> str:
        return build_image_url(self.poster_path)


@dataclass(frozen=True)
class CreditsEntry:
    name: str
    job: str | None = None
    department: str | None = None


@dataclass(frozen=True)
class Credits:
    """
    Cast/crew listing for one movie (`/movie/{id}/credits`).

    `cast` keeps billing order as returned by TMDb.
    """

    cast: tuple[str, ...] = ()
    crew: tuple[CreditsEntry, ...] = ()

    @classmethod
    def from_tmdb(cls, payload: Mapping[str, Any]) -> Credits:
        if not isinstance(payload, Mapping):
            raise ValueError("TMDb credits payload is not an object.")
        crew = payload.get("crew")
        if not isinstance(crew, list):
            raise ValueError("TMDb credits payload has no crew list.")
        cast = payload.get("cast")

        crew_entries = []
        for item in crew:
            if not isinstance(item, Mapping):
                continue
            # kept verbatim: directors are grouped on the exact credited name
            name = item.get("name")
            if not isinstance(name, str):
                continue
            crew_entries.append(
                CreditsEntry(
                    name=name,
                    job=item.get("job") if isinstance(item.get("job"), str) else None,
                    department=item.get("department") if isinstance(item.get("department"), str) else None,
                )
            )

        cast_names = []
        if isinstance(cast, list):
            for item in cast:
                if isinstance(item, Mapping) and _as_str(item.get("name")):
                    cast_names.append(str(item["name"]).strip())

        return cls(cast=tuple(cast_names), crew=tuple(crew_entries))


@dataclass(frozen=True)
class DirectorMovie:
    id: int | str
    title: str
    year: int | None
    rating: float
    review_count: int
    poster_url: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "year": self.year,
            "rating": self.rating,
            "review_count": self.review_count,
            "poster_url": self.poster_url,
        }


@dataclass(frozen=True)
class Director:
    """
    A director and the movies attributed to them.

    Directors are keyed by their exact credited name. The aggregate figures are derived from
    `movies` on every access and cannot be set on their own.
    """

    name: str
    movies: tuple[DirectorMovie, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        if not self.movies:
            raise ValueError(f"Director {self.name!r} must have at least one movie.")

    @property
    def total_movies(self) -> int:
        return len(self.movies)

    @property
    def average_rating(self) -> float:
        return sum(m.rating for m in self.movies) / self.total_movies

    @property
    def total_reviews(self) -> int:
        return sum(m.review_count for m in self.movies)

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "total_movies": self.total_movies,
            "average_rating": self.average_rating,
            "total_reviews": self.total_reviews,
            "movies": [m.to_dict() for m in self.movies],
        }


def parse_movies(payloads: Iterable[Any]) -> list[Movie]:
    """Parse TMDb movie list results, skipping (and logging) entries without an id."""
    movies: list[Movie] = []
    for payload in payloads:
        try:
            movies.append(Movie.from_tmdb(payload))
        except ValueError as exc:
            logger.warning("Skipping malformed movie payload: %s", exc)
    return movies
