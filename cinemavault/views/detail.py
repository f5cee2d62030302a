from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable, Mapping

from cinemavault.aggregation.directors import resolve_director
from cinemavault.integrations.tmdb.client import build_image_url
from cinemavault.models.movies import Credits, release_year, rescale_rating
from cinemavault.views.stars import star_states

CAST_LIMIT = 6
YOUTUBE_EMBED_BASE_URL = "https://www.youtube.com/embed/"


@dataclass(frozen=True)
class MovieDetail:
    id: int | str
    title: str
    year: int | None
    runtime: int | None
    director: str | None
    rating: float
    review_count: int
    poster_url: str
    genres: tuple[str, ...] = ()
    synopsis: str = ""
    cast: tuple[str, ...] = ()
    trailer_url: str = ""

    @property
    def stars(self) -> list[str]:
        return star_states(self.rating)


@dataclass(frozen=True)
class MovieReview:
    author: str
    content: str
    date: str | None
    source: str = "tmdb"


def trailer_embed_url(trailer: Mapping[str, Any] | None) -> str:
    if not trailer:
        return ""
    key = trailer.get("key")
    if not isinstance(key, str) or not key.strip():
        return ""
    return YOUTUBE_EMBED_BASE_URL + key.strip()


def build_movie_detail(
    details: Mapping[str, Any],
    credits: Credits,
    trailer: Mapping[str, Any] | None = None,
) -> MovieDetail:
    """
    Detail-page view model from `/movie/{id}`, its credits and its trailer (if any).

    The director is resolved with the same job/department policy the directors page uses.
    """

    if details.get("id") is None:
        raise ValueError("TMDb movie details payload is missing an id.")

    director = resolve_director(credits)
    runtime = details.get("runtime")
    vote_average = details.get("vote_average")
    vote_count = details.get("vote_count")
    genres = details.get("genres") if isinstance(details.get("genres"), list) else []

    return MovieDetail(
        id=details["id"],
        title=str(details.get("title") or ""),
        year=release_year(details.get("release_date")),
        runtime=runtime if isinstance(runtime, int) and runtime > 0 else None,
        director=director.name if director else None,
        rating=rescale_rating(float(vote_average)) if isinstance(vote_average, (int, float)) else 0.0,
        review_count=vote_count if isinstance(vote_count, int) else 0,
        poster_url=build_image_url(details.get("poster_path")),
        genres=tuple(g["name"] for g in genres if isinstance(g, Mapping) and isinstance(g.get("name"), str)),
        synopsis=str(details.get("overview") or ""),
        cast=credits.cast[:CAST_LIMIT],
        trailer_url=trailer_embed_url(trailer),
    )


def build_reviews(payloads: Iterable[Mapping[str, Any]]) -> list[MovieReview]:
    reviews: list[MovieReview] = []
    for payload in payloads:
        author = payload.get("author")
        content = payload.get("content")
        if not isinstance(author, str) or not isinstance(content, str):
            continue
        date = payload.get("date")
        reviews.append(
            MovieReview(
                author=author,
                content=content,
                date=date if isinstance(date, str) else None,
                source=str(payload.get("source") or "tmdb"),
            )
        )
    return reviews
