"""
Directors page endpoints: the aggregated director collection and its search.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, HTTPException, Query
from pydantic import BaseModel

from api.deps import DirectorStore
from api.snapshots import DirectorSnapshot
from cinemavault.models.movies import Director
from cinemavault.views.directors import FAILED_DIRECTORS, directors_count_label, filter_directors

logger = logging.getLogger(__name__)


router = APIRouter(prefix="/directors", tags=["directors"])


# --- Pydantic models ---

class DirectorMovieOut(BaseModel):
    id: int | str
    title: str
    year: int | None
    rating: float
    review_count: int
    poster_url: str


class DirectorOut(BaseModel):
    name: str
    total_movies: int
    average_rating: float
    total_reviews: int
    movies: list[DirectorMovieOut]


class DirectorList(BaseModel):
    status: str
    count: int
    label: str
    built_at: str
    directors: list[DirectorOut]


class FailureOut(BaseModel):
    movie_id: int | str
    title: str
    message: str


class RefreshSummary(BaseModel):
    built_at: str
    directors: int
    attempted: int
    resolved: int
    unresolved: int
    failed: int
    failures: list[FailureOut]


def _director_out(director: Director) -> dict:
    return director.to_dict()


def _summary(snapshot: DirectorSnapshot) -> dict:
    aggregation = snapshot.aggregation
    return {
        "built_at": snapshot.built_at,
        "directors": len(aggregation.directors),
        "attempted": aggregation.attempted,
        "resolved": aggregation.resolved,
        "unresolved": aggregation.unresolved,
        "failed": aggregation.failed,
        "failures": [
            {"movie_id": f.movie_id, "title": f.title, "message": f.message} for f in aggregation.failures
        ],
    }


# --- Endpoints ---

@router.get("", response_model=DirectorList)
def list_directors(
    store: DirectorStore,
    q: str = Query(default="", max_length=200),
) -> dict:
    """List aggregated directors, optionally filtered by a name query."""
    try:
        snapshot = store.get_or_build()
    except RuntimeError as exc:
        # TmdbClientError or missing TMDb configuration
        logger.error(f"Director aggregation failed: {exc}")
        raise HTTPException(status_code=502, detail=FAILED_DIRECTORS) from exc

    directors = filter_directors(snapshot.aggregation.directors, q)
    return {
        "status": "ok",
        "count": len(directors),
        "label": directors_count_label(len(directors)),
        "built_at": snapshot.built_at,
        "directors": [_director_out(d) for d in directors],
    }


@router.post("/refresh", response_model=RefreshSummary)
def refresh_directors(store: DirectorStore) -> dict:
    """Discard the current director snapshot and rebuild it from TMDb."""
    try:
        snapshot = store.refresh()
    except RuntimeError as exc:
        # TmdbClientError or missing TMDb configuration
        logger.error(f"Director aggregation failed: {exc}")
        raise HTTPException(status_code=502, detail=FAILED_DIRECTORS) from exc
    return _summary(snapshot)
