from __future__ import annotations

import pytest

from cinemavault.models.movies import Movie
from cinemavault.views.movies import (
    MovieBrowseState,
    build_movie_cards,
    change_sort,
    clear_filters,
    genre_options,
    load_movies,
    movies_count_label,
    search_movies_locally,
    toggle_genre,
    visible_movies,
)

GENRES = [{"id": 28, "name": "Action"}, {"id": 35, "name": "Comedy"}, {"id": 18, "name": "Drama"}]


def _state() -> MovieBrowseState:
    movies = [
        Movie.from_tmdb({"id": 1, "title": "Zeta Force", "release_date": "2019-01-01", "vote_average": 6.0, "genre_ids": [28]}),
        Movie.from_tmdb({"id": 2, "title": "alpha  Laughs", "release_date": "2022-01-01", "vote_average": 8.0, "genre_ids": [35, 99]}),
        Movie.from_tmdb({"id": 3, "title": "Mid Drama", "vote_average": 7.0, "genre_ids": [18, 28]}),
    ]
    state = MovieBrowseState(genres=tuple(g["name"] for g in GENRES))
    return load_movies(state, build_movie_cards(movies, GENRES))


def test_build_movie_cards_resolves_genres_and_string_ids() -> None:
    cards = _state().movies

    assert [c.id for c in cards] == ["1", "2", "3"]
    assert cards[1].genres == ("Comedy",)
    assert cards[2].genres == ("Drama", "Action")
    assert cards[1].rating == 4.0


def test_default_view_sorts_by_rating() -> None:
    assert [c.id for c in visible_movies(_state())] == ["2", "3", "1"]


def test_sort_by_year_puts_unknown_last_and_alphabetical_ignores_case() -> None:
    state = _state()

    assert [c.id for c in visible_movies(change_sort(state, "year"))] == ["2", "1", "3"]
    assert [c.title for c in visible_movies(change_sort(state, "alphabetical"))] == [
        "alpha  Laughs",
        "Mid Drama",
        "Zeta Force",
    ]


def test_change_sort_rejects_unknown_option() -> None:
    with pytest.raises(ValueError):
        change_sort(_state(), "popularity")


def test_search_filters_by_normalized_title() -> None:
    state = search_movies_locally(_state(), "  ALPHA laughs ")

    assert [c.id for c in visible_movies(state)] == ["2"]


def test_toggle_genre_rules() -> None:
    state = _state()

    action = toggle_genre(state, "Action")
    assert action.selected_genres == ("Action",)
    assert [c.id for c in visible_movies(action)] == ["3", "1"]

    both = toggle_genre(action, "Comedy")
    assert both.selected_genres == ("Action", "Comedy")
    assert len(visible_movies(both)) == 3

    back_to_all = toggle_genre(toggle_genre(both, "Action"), "Comedy")
    assert back_to_all.selected_genres == ("All",)

    assert toggle_genre(both, "All").selected_genres == ("All",)
    assert state.selected_genres == ("All",)


def test_clear_filters_resets_everything_but_movies() -> None:
    state = toggle_genre(change_sort(search_movies_locally(_state(), "mid"), "year"), "Drama")

    cleared = clear_filters(state)

    assert cleared.search_query == ""
    assert cleared.selected_genres == ("All",)
    assert cleared.sort_by == "rating"
    assert len(cleared.movies) == 3


def test_genre_options_and_count_label() -> None:
    assert genre_options(_state()) == ["All", "Action", "Comedy", "Drama"]
    assert movies_count_label(0) == "No movies found"
    assert movies_count_label(1) == "Showing 1 movie"
    assert movies_count_label(3) == "Showing 3 movies"
