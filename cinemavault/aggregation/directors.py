"""
Director aggregation: popular movies -> credits -> one director per movie -> grouped, sorted directors.
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass
from typing import Any, Callable, Iterable, Mapping, Sequence

import requests

from cinemavault.integrations.tmdb.client import (
    DEFAULT_TIMEOUT_SECONDS,
    TmdbClientError,
    fetch_movie_credits,
    fetch_popular_movies,
)
from cinemavault.models.movies import Credits, CreditsEntry, Director, DirectorMovie, Movie, parse_movies

logger = logging.getLogger(__name__)

DEFAULT_PAGE_COUNT = 4
MAX_CONCURRENCY = 5

DIRECTOR_JOB = "Director"
DIRECTING_DEPARTMENT = "Directing"

CreditsFetcher = Callable[[Any], Mapping[str, Any]]

_SKIPPABLE_ERRORS = (TmdbClientError, requests.RequestException, ValueError, TypeError, KeyError)


@dataclass(frozen=True)
class DirectorFailure:
    movie_id: Any
    title: str
    message: str


@dataclass(frozen=True)
class DirectorAggregation:
    directors: tuple[Director, ...]
    attempted: int
    resolved: int
    unresolved: int
    failed: int
    failures: tuple[DirectorFailure, ...] = ()


def resolve_director(credits: Credits) -> CreditsEntry | None:
    """
    Pick the crew entry credited as the movie's director.

    First a `job == "Director"` entry, else a `department == "Directing"` entry, else None.
    """

    for entry in credits.crew:
        if entry.job == DIRECTOR_JOB:
            return entry
    for entry in credits.crew:
        if entry.department == DIRECTING_DEPARTMENT:
            return entry
    return None


def build_director_movie(movie: Movie) -> DirectorMovie:
    return DirectorMovie(
        id=movie.id,
        title=movie.title,
        year=movie.year,
        rating=movie.rating,
        review_count=movie.vote_count,
        poster_url=movie.poster_url,
    )


def group_directors(resolved: Iterable[tuple[Movie, str]]) -> list[Director]:
    """
    Group `(movie, director_name)` pairs by exact director name.

    Names are not normalized: two spellings of the same person are two directors. Both sorts are
    stable, so equal ratings keep input order.
    """

    grouped: dict[str, list[DirectorMovie]] = {}
    for movie, name in resolved:
        grouped.setdefault(name, []).append(build_director_movie(movie))

    directors = [
        Director(name=name, movies=tuple(sorted(movies, key=lambda m: m.rating, reverse=True)))
        for name, movies in grouped.items()
    ]
    directors.sort(key=lambda d: d.average_rating, reverse=True)
    return directors


def _fetch_credits(movie: Movie, fetch_credits: CreditsFetcher) -> Credits:
    return Credits.from_tmdb(fetch_credits(movie.id))


def _fetch_all_credits(
    movies: Sequence[Movie],
    fetch_credits: CreditsFetcher,
    *,
    concurrency: int,
) -> list[Credits | Exception]:
    """Fetch credits for every movie; the result list lines up with `movies`, failures included."""

    results: list[Credits | Exception] = []
    if concurrency <= 1:
        for movie in movies:
            try:
                results.append(_fetch_credits(movie, fetch_credits))
            except _SKIPPABLE_ERRORS as exc:
                results.append(exc)
        return results

    slots: list[Credits | Exception | None] = [None] * len(movies)
    with ThreadPoolExecutor(max_workers=concurrency) as pool:
        futures = {pool.submit(_fetch_credits, movie, fetch_credits): idx for idx, movie in enumerate(movies)}
        for fut in as_completed(futures):
            idx = futures[fut]
            try:
                slots[idx] = fut.result()
            except _SKIPPABLE_ERRORS as exc:
                slots[idx] = exc
    return [slot for slot in slots if slot is not None]


def collect_directors(
    movies: Iterable[Movie],
    fetch_credits: CreditsFetcher,
    *,
    concurrency: int = 1,
) -> DirectorAggregation:
    """
    Resolve a director for each movie and build the sorted director collection.

    A movie whose credits cannot be fetched or parsed is skipped with a warning; a movie with no
    resolvable director is skipped too. Neither aborts the run. Grouping happens only after every
    fetch has settled, in input order, so the output does not depend on completion timing.
    """

    movie_list = list(movies)
    concurrency = max(1, min(int(concurrency), MAX_CONCURRENCY))
    outcomes = _fetch_all_credits(movie_list, fetch_credits, concurrency=concurrency)

    resolved: list[tuple[Movie, str]] = []
    failures: list[DirectorFailure] = []
    unresolved = 0
    for movie, outcome in zip(movie_list, outcomes):
        if isinstance(outcome, Exception):
            logger.warning("Credits failed for %r (id=%s): %s", movie.title, movie.id, outcome)
            failures.append(DirectorFailure(movie_id=movie.id, title=movie.title, message=str(outcome)))
            continue
        director = resolve_director(outcome)
        if director is None:
            logger.warning("No director found for %r (id=%s)", movie.title, movie.id)
            unresolved += 1
            continue
        resolved.append((movie, director.name))

    directors = group_directors(resolved)
    logger.info(
        "Aggregated %d directors from %d movies (%d unresolved, %d failed).",
        len(directors),
        len(movie_list),
        unresolved,
        len(failures),
    )
    return DirectorAggregation(
        directors=tuple(directors),
        attempted=len(movie_list),
        resolved=len(resolved),
        unresolved=unresolved,
        failed=len(failures),
        failures=tuple(failures),
    )


def run_director_aggregation(
    page_count: int = DEFAULT_PAGE_COUNT,
    *,
    api_key: str | None = None,
    session: requests.Session | None = None,
    concurrency: int = 1,
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
) -> DirectorAggregation:
    """
    One aggregation run against TMDb.

    A failure fetching the popular movie list raises `TmdbClientError`; per-movie failures do not.
    """

    session = session or requests.Session()
    payloads = fetch_popular_movies(
        page_count,
        api_key=api_key,
        session=session,
        timeout_seconds=timeout_seconds,
    )
    movies = parse_movies(payloads)

    def fetch_credits(movie_id: Any) -> Mapping[str, Any]:
        return fetch_movie_credits(movie_id, api_key=api_key, session=session, timeout_seconds=timeout_seconds)

    return collect_directors(movies, fetch_credits, concurrency=concurrency)


def aggregate_directors(
    page_count: int = DEFAULT_PAGE_COUNT,
    *,
    api_key: str | None = None,
    session: requests.Session | None = None,
    concurrency: int = 1,
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
) -> list[Director]:
    aggregation = run_director_aggregation(
        page_count,
        api_key=api_key,
        session=session,
        concurrency=concurrency,
        timeout_seconds=timeout_seconds,
    )
    return list(aggregation.directors)
