"""
Dependency injection for TMDb access, settings and the director snapshot store.
"""
from __future__ import annotations

import logging
import os
from collections.abc import Iterator
from dataclasses import dataclass
from functools import lru_cache
from typing import Annotated

import requests
from fastapi import Depends, HTTPException

from api.snapshots import DirectorSnapshotStore
from cinemavault.aggregation.directors import DEFAULT_PAGE_COUNT, DirectorAggregation, run_director_aggregation
from cinemavault.integrations.tmdb.client import DEFAULT_TIMEOUT_SECONDS, TmdbClientError
from cinemavault.utils.env import load_env

load_env()

logger = logging.getLogger(__name__)


def _int_env(name: str, default: int) -> int:
    raw = (os.getenv(name) or "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError as exc:
        raise RuntimeError(f"{name} must be an integer, got {raw!r}") from exc


def _float_env(name: str, default: float) -> float:
    raw = (os.getenv(name) or "").strip()
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError as exc:
        raise RuntimeError(f"{name} must be a number, got {raw!r}") from exc


@lru_cache
def get_tmdb_api_key() -> str:
    key = (os.getenv("TMDB_API_KEY") or "").strip()
    if not key:
        raise RuntimeError("TMDB_API_KEY environment variable is not set")
    return key


@lru_cache
def get_popular_pages() -> int:
    return max(1, _int_env("TMDB_POPULAR_PAGES", DEFAULT_PAGE_COUNT))


@lru_cache
def get_credits_concurrency() -> int:
    return max(1, _int_env("TMDB_CREDITS_CONCURRENCY", 1))


@lru_cache
def get_timeout_seconds() -> float:
    return _float_env("TMDB_TIMEOUT_SECONDS", DEFAULT_TIMEOUT_SECONDS)


@dataclass(frozen=True)
class TmdbContext:
    api_key: str
    session: requests.Session
    timeout_seconds: float


def get_tmdb_context() -> Iterator[TmdbContext]:
    """
    One requests session per API request, closed when the response is done.
    """
    session = requests.Session()
    try:
        yield TmdbContext(api_key=get_tmdb_api_key(), session=session, timeout_seconds=get_timeout_seconds())
    finally:
        session.close()


def _build_director_aggregation() -> DirectorAggregation:
    with requests.Session() as session:
        return run_director_aggregation(
            get_popular_pages(),
            api_key=get_tmdb_api_key(),
            session=session,
            concurrency=get_credits_concurrency(),
            timeout_seconds=get_timeout_seconds(),
        )


@lru_cache
def get_director_store() -> DirectorSnapshotStore:
    return DirectorSnapshotStore(_build_director_aggregation)


# Type aliases for dependency injection
Tmdb = Annotated[TmdbContext, Depends(get_tmdb_context)]
DirectorStore = Annotated[DirectorSnapshotStore, Depends(get_director_store)]


def raise_for_tmdb_error(exc: TmdbClientError, context: str = "TMDb request", *, not_found: str | None = None) -> None:
    """
    Translate a TMDb client error into an HTTP exception.

    Args:
        exc: The error raised by the TMDb client
        context: Description of the operation for log messages
        not_found: Detail to return as a 404 when TMDb itself answered 404

    Raises:
        HTTPException: 404 when `not_found` is given and TMDb returned 404, otherwise 502
    """
    logger.error(f"TMDb error during {context}: {exc} (status={exc.status_code})")
    if not_found and exc.status_code == 404:
        raise HTTPException(status_code=404, detail=not_found) from exc
    # Don't leak upstream error details to client
    raise HTTPException(status_code=502, detail=f"Upstream error during {context}") from exc
