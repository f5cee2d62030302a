from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Sequence

from cinemavault.models.movies import Director
from cinemavault.utils.text import normalize_text

LOADING_DIRECTORS = "Loading directors..."
FAILED_DIRECTORS = "Failed to load directors"
NO_DIRECTORS = "No directors found"


def filter_directors(directors: Sequence[Director], query: str | None) -> list[Director]:
    """
    Directors whose normalized name contains the normalized query.

    A blank query returns every director, in the original order.
    """

    needle = normalize_text(query)
    if not needle:
        return list(directors)
    return [d for d in directors if needle in normalize_text(d.name)]


def directors_count_label(count: int) -> str:
    if count <= 0:
        return NO_DIRECTORS
    return f"Showing {count} {'director' if count == 1 else 'directors'}"


@dataclass(frozen=True)
class DirectorsViewState:
    directors: tuple[Director, ...] = ()
    query: str = ""


def load_directors(state: DirectorsViewState, directors: Sequence[Director]) -> DirectorsViewState:
    return replace(state, directors=tuple(directors))


def search_directors(state: DirectorsViewState, query: str) -> DirectorsViewState:
    return replace(state, query=query or "")


def clear_director_search(state: DirectorsViewState) -> DirectorsViewState:
    return replace(state, query="")


def visible_directors(state: DirectorsViewState) -> list[Director]:
    return filter_directors(state.directors, state.query)
