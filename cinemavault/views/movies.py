"""
Movie browsing page: cards, search, genre toggles and sorting.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any, Iterable, Mapping, Sequence

from cinemavault.models.movies import Movie
from cinemavault.utils.text import normalize_text
from cinemavault.views.stars import star_states

ALL_GENRES = "All"
SORT_OPTIONS = ("rating", "year", "alphabetical")
DEFAULT_SORT = "rating"
NO_MOVIES = "No movies found"


@dataclass(frozen=True)
class MovieCard:
    id: str
    title: str
    year: int | None
    rating: float
    review_count: int
    poster_url: str
    genres: tuple[str, ...] = ()

    @property
    def stars(self) -> list[str]:
        return star_states(self.rating)


def genre_names_by_id(genres: Iterable[Mapping[str, Any]]) -> dict[int, str]:
    out: dict[int, str] = {}
    for genre in genres:
        genre_id = genre.get("id")
        name = genre.get("name")
        if isinstance(genre_id, int) and isinstance(name, str) and name.strip():
            out[genre_id] = name.strip()
    return out


def build_movie_card(movie: Movie, genre_names: Mapping[int, str]) -> MovieCard:
    return MovieCard(
        id=str(movie.id),
        title=movie.title,
        year=movie.year,
        rating=movie.rating,
        review_count=movie.vote_count,
        poster_url=movie.poster_url,
        genres=tuple(genre_names[g] for g in movie.genre_ids if g in genre_names),
    )


def build_movie_cards(movies: Iterable[Movie], genres: Iterable[Mapping[str, Any]]) -> list[MovieCard]:
    names = genre_names_by_id(genres)
    return [build_movie_card(movie, names) for movie in movies]


def movies_count_label(count: int) -> str:
    if count <= 0:
        return NO_MOVIES
    return f"Showing {count} {'movie' if count == 1 else 'movies'}"


@dataclass(frozen=True)
class MovieBrowseState:
    movies: tuple[MovieCard, ...] = ()
    genres: tuple[str, ...] = ()
    search_query: str = ""
    selected_genres: tuple[str, ...] = (ALL_GENRES,)
    sort_by: str = DEFAULT_SORT


def genre_options(state: MovieBrowseState) -> list[str]:
    return [ALL_GENRES, *state.genres]


def load_movies(state: MovieBrowseState, movies: Sequence[MovieCard]) -> MovieBrowseState:
    return replace(state, movies=tuple(movies))


def search_movies_locally(state: MovieBrowseState, query: str) -> MovieBrowseState:
    return replace(state, search_query=query or "")


def toggle_genre(state: MovieBrowseState, genre: str) -> MovieBrowseState:
    """
    Clicking "All" resets the selection; any other genre toggles on/off.

    Deselecting the last genre falls back to "All".
    """

    if genre == ALL_GENRES:
        return replace(state, selected_genres=(ALL_GENRES,))

    selected = [g for g in state.selected_genres if g != ALL_GENRES]
    if genre in selected:
        selected = [g for g in selected if g != genre]
        if not selected:
            selected = [ALL_GENRES]
    else:
        selected.append(genre)
    return replace(state, selected_genres=tuple(selected))


def change_sort(state: MovieBrowseState, sort_by: str) -> MovieBrowseState:
    if sort_by not in SORT_OPTIONS:
        raise ValueError(f"Unsupported sort option: {sort_by!r} (expected one of {', '.join(SORT_OPTIONS)})")
    return replace(state, sort_by=sort_by)


def clear_filters(state: MovieBrowseState) -> MovieBrowseState:
    return replace(state, search_query="", selected_genres=(ALL_GENRES,), sort_by=DEFAULT_SORT)


def _year_sort_key(card: MovieCard) -> tuple[int, int]:
    # unknown years sort last
    if card.year is None:
        return (1, 0)
    return (0, -card.year)


def visible_movies(state: MovieBrowseState) -> list[MovieCard]:
    result = list(state.movies)

    query = normalize_text(state.search_query)
    if query:
        result = [card for card in result if query in normalize_text(card.title)]

    if ALL_GENRES not in state.selected_genres:
        selected = set(state.selected_genres)
        result = [card for card in result if any(g in selected for g in card.genres)]

    if state.sort_by == "rating":
        result.sort(key=lambda card: card.rating, reverse=True)
    elif state.sort_by == "year":
        result.sort(key=_year_sort_key)
    elif state.sort_by == "alphabetical":
        result.sort(key=lambda card: card.title.casefold())
    return result
