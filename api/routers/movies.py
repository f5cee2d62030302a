"""
Movie browse, detail and review endpoints.
"""

from __future__ import annotations

import logging
from dataclasses import asdict

from fastapi import APIRouter, HTTPException, Query
from pydantic import BaseModel

from api.deps import Tmdb, raise_for_tmdb_error
from cinemavault.integrations.tmdb.client import (
    TmdbClientError,
    fetch_genres,
    fetch_movie_credits,
    fetch_movie_details,
    fetch_movie_reviews,
    fetch_movie_trailer,
    fetch_popular_movies,
    search_movies,
)
from cinemavault.models.movies import Credits, parse_movies
from cinemavault.views.detail import build_movie_detail, build_reviews
from cinemavault.views.movies import (
    MovieBrowseState,
    MovieCard,
    build_movie_cards,
    change_sort,
    genre_options,
    load_movies,
    movies_count_label,
    search_movies_locally,
    toggle_genre,
    visible_movies,
)

logger = logging.getLogger(__name__)

POPULAR_PAGES = 3


router = APIRouter(tags=["movies"])


# --- Pydantic models ---

class MovieCardOut(BaseModel):
    id: str
    title: str
    year: int | None
    rating: float
    review_count: int
    poster_url: str
    genres: list[str]
    stars: list[str]


class MovieList(BaseModel):
    count: int
    label: str
    query: str
    sort: str
    selected_genres: list[str]
    genres: list[str]
    movies: list[MovieCardOut]


class MovieDetailOut(BaseModel):
    id: int | str
    title: str
    year: int | None
    runtime: int | None
    director: str | None
    rating: float
    review_count: int
    poster_url: str
    genres: list[str]
    synopsis: str
    cast: list[str]
    trailer_url: str
    stars: list[str]


class ReviewOut(BaseModel):
    author: str
    content: str
    date: str | None
    source: str


def _card_out(card: MovieCard) -> dict:
    return {**asdict(card), "genres": list(card.genres), "stars": card.stars}


# --- Endpoints ---

@router.get("/genres", response_model=list[str])
def list_genres(tmdb: Tmdb) -> list[str]:
    """Genre filter options, starting with "All"."""
    try:
        genres = fetch_genres(api_key=tmdb.api_key, session=tmdb.session, timeout_seconds=tmdb.timeout_seconds)
    except TmdbClientError as exc:
        raise_for_tmdb_error(exc, "listing genres")
    names = tuple(g["name"] for g in genres if isinstance(g.get("name"), str))
    return genre_options(MovieBrowseState(genres=names))


@router.get("/movies", response_model=MovieList)
def list_movies(
    tmdb: Tmdb,
    q: str = Query(default="", max_length=200),
    genre: list[str] = Query(default=[]),
    sort: str = Query(default="rating"),
) -> dict:
    """
    Popular movies (blank query) or TMDb search results, with local genre filter and sort.
    """
    state = MovieBrowseState()
    try:
        state = change_sort(state, sort)
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc

    try:
        genres = fetch_genres(api_key=tmdb.api_key, session=tmdb.session, timeout_seconds=tmdb.timeout_seconds)
        if q.strip():
            payloads = search_movies(
                q.strip(), api_key=tmdb.api_key, session=tmdb.session, timeout_seconds=tmdb.timeout_seconds
            )
        else:
            payloads = fetch_popular_movies(
                POPULAR_PAGES, api_key=tmdb.api_key, session=tmdb.session, timeout_seconds=tmdb.timeout_seconds
            )
    except TmdbClientError as exc:
        raise_for_tmdb_error(exc, "listing movies")

    state = MovieBrowseState(
        genres=tuple(g["name"] for g in genres if isinstance(g.get("name"), str)),
        sort_by=state.sort_by,
    )
    state = load_movies(state, build_movie_cards(parse_movies(payloads), genres))
    # title filter also applies to remote search results
    state = search_movies_locally(state, q)
    for name in dict.fromkeys(genre):
        state = toggle_genre(state, name)

    cards = visible_movies(state)
    return {
        "count": len(cards),
        "label": movies_count_label(len(cards)),
        "query": state.search_query,
        "sort": state.sort_by,
        "selected_genres": list(state.selected_genres),
        "genres": genre_options(state),
        "movies": [_card_out(card) for card in cards],
    }


@router.get("/movies/{movie_id}", response_model=MovieDetailOut)
def get_movie(tmdb: Tmdb, movie_id: int) -> dict:
    """Movie detail page data: details, director, top cast and trailer."""
    try:
        details = fetch_movie_details(
            movie_id, api_key=tmdb.api_key, session=tmdb.session, timeout_seconds=tmdb.timeout_seconds
        )
        credits_payload = fetch_movie_credits(
            movie_id, api_key=tmdb.api_key, session=tmdb.session, timeout_seconds=tmdb.timeout_seconds
        )
    except TmdbClientError as exc:
        raise_for_tmdb_error(exc, "fetching movie", not_found="Movie not found")

    try:
        trailer = fetch_movie_trailer(
            movie_id, api_key=tmdb.api_key, session=tmdb.session, timeout_seconds=tmdb.timeout_seconds
        )
    except TmdbClientError as exc:
        logger.warning(f"Trailer lookup failed for movie {movie_id}: {exc}")
        trailer = None

    try:
        detail = build_movie_detail(details, Credits.from_tmdb(credits_payload), trailer)
    except ValueError as exc:
        logger.error(f"Malformed TMDb payload for movie {movie_id}: {exc}")
        raise HTTPException(status_code=502, detail="Upstream error during fetching movie") from exc

    return {
        **asdict(detail),
        "genres": list(detail.genres),
        "cast": list(detail.cast),
        "stars": detail.stars,
    }


@router.get("/movies/{movie_id}/reviews", response_model=list[ReviewOut])
def list_movie_reviews(tmdb: Tmdb, movie_id: int) -> list[dict]:
    """TMDb reviews for a movie."""
    try:
        payloads = fetch_movie_reviews(
            movie_id, api_key=tmdb.api_key, session=tmdb.session, timeout_seconds=tmdb.timeout_seconds
        )
    except TmdbClientError as exc:
        raise_for_tmdb_error(exc, "listing reviews", not_found="Movie not found")
    return [asdict(review) for review in build_reviews(payloads)]
