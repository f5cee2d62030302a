from __future__ import annotations

import os
from typing import Any, Mapping

import requests

TMDB_API_BASE_URL = "https://api.themoviedb.org/3"
IMAGE_BASE_URL = "https://image.tmdb.org/t/p/w500"
DEFAULT_LANGUAGE = "en-US"
DEFAULT_TIMEOUT_SECONDS = 20.0


class TmdbClientError(RuntimeError):
    def __init__(self, message: str, *, status_code: int | None = None, body_snippet: str | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.body_snippet = body_snippet


def _require_api_key(api_key: str | None) -> str:
    resolved = (api_key or os.getenv("TMDB_API_KEY") or "").strip()
    if not resolved:
        raise RuntimeError("TMDB_API_KEY is not set.")
    return resolved


def resolve_api_key(api_key: str | None = None) -> str | None:
    """
    Best-effort API key resolution for callers that want to continue when the key is missing.
    """

    resolved = (api_key or os.getenv("TMDB_API_KEY") or "").strip()
    return resolved or None


def build_image_url(path: str | None) -> str:
    if not isinstance(path, str) or not path.strip():
        return ""
    return IMAGE_BASE_URL + path.strip()


def _request_json(
    session: requests.Session,
    url: str,
    *,
    params: Mapping[str, Any] | None = None,
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
) -> dict[str, Any]:
    """
    GET a TMDb endpoint once and return the decoded JSON object.

    Every failure mode (transport error, timeout, non-200 status, non-JSON body) surfaces as
    `TmdbClientError`.
    """

    headers = {
        "accept": "application/json",
    }
    try:
        resp = session.get(url, params=params, headers=headers, timeout=timeout_seconds)
    except requests.RequestException as exc:
        raise TmdbClientError(f"TMDb request failed: {exc}") from exc

    if resp.status_code != 200:
        raise TmdbClientError(
            f"TMDb request failed with HTTP {resp.status_code}.",
            status_code=resp.status_code,
            body_snippet=(resp.text or "")[:400],
        )

    try:
        payload = resp.json()
    except ValueError as exc:
        raise TmdbClientError(
            "TMDb returned non-JSON response.",
            status_code=resp.status_code,
            body_snippet=(resp.text or "")[:400],
        ) from exc

    if not isinstance(payload, dict):
        raise TmdbClientError("TMDb returned unexpected JSON shape (not an object).")
    return payload


def _results_list(payload: Mapping[str, Any], key: str = "results") -> list[dict[str, Any]]:
    items = payload.get(key)
    if not isinstance(items, list):
        return []
    return [item for item in items if isinstance(item, dict)]


def search_movies(
    query: str,
    *,
    api_key: str | None = None,
    session: requests.Session | None = None,
    language: str = DEFAULT_LANGUAGE,
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
) -> list[dict[str, Any]]:
    api_key = _require_api_key(api_key)
    session = session or requests.Session()
    url = f"{TMDB_API_BASE_URL}/search/movie"
    payload = _request_json(
        session,
        url,
        params={"api_key": api_key, "language": language, "query": query},
        timeout_seconds=timeout_seconds,
    )
    return _results_list(payload)


def fetch_genres(
    *,
    api_key: str | None = None,
    session: requests.Session | None = None,
    language: str = DEFAULT_LANGUAGE,
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
) -> list[dict[str, Any]]:
    """Fetch the movie genre list as `[{"id": ..., "name": ...}]`."""

    api_key = _require_api_key(api_key)
    session = session or requests.Session()
    url = f"{TMDB_API_BASE_URL}/genre/movie/list"
    payload = _request_json(
        session,
        url,
        params={"api_key": api_key, "language": language},
        timeout_seconds=timeout_seconds,
    )
    return _results_list(payload, "genres")


def fetch_movie_reviews(
    movie_id: int | str,
    *,
    api_key: str | None = None,
    session: requests.Session | None = None,
    language: str = DEFAULT_LANGUAGE,
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
) -> list[dict[str, Any]]:
    api_key = _require_api_key(api_key)
    session = session or requests.Session()
    url = f"{TMDB_API_BASE_URL}/movie/{movie_id}/reviews"
    payload = _request_json(
        session,
        url,
        params={"api_key": api_key, "language": language, "page": 1},
        timeout_seconds=timeout_seconds,
    )
    return [
        {
            "author": review.get("author"),
            "content": review.get("content"),
            "date": review.get("created_at"),
            "source": "tmdb",
        }
        for review in _results_list(payload)
    ]


def fetch_popular_movies(
    pages: int = 3,
    *,
    api_key: str | None = None,
    session: requests.Session | None = None,
    language: str = DEFAULT_LANGUAGE,
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
) -> list[dict[str, Any]]:
    """
    Fetch `pages` pages of `/movie/popular` (page numbering starts at 1) and concatenate the results.

    Pages are requested one at a time; any failing page raises `TmdbClientError` and nothing is returned.
    """

    api_key = _require_api_key(api_key)
    session = session or requests.Session()
    url = f"{TMDB_API_BASE_URL}/movie/popular"

    movies: list[dict[str, Any]] = []
    for page in range(1, int(pages) + 1):
        payload = _request_json(
            session,
            url,
            params={"api_key": api_key, "language": language, "page": page},
            timeout_seconds=timeout_seconds,
        )
        movies.extend(_results_list(payload))
    return movies


def fetch_movie_details(
    movie_id: int | str,
    *,
    api_key: str | None = None,
    session: requests.Session | None = None,
    language: str = DEFAULT_LANGUAGE,
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
) -> dict[str, Any]:
    api_key = _require_api_key(api_key)
    session = session or requests.Session()
    url = f"{TMDB_API_BASE_URL}/movie/{movie_id}"
    return _request_json(
        session,
        url,
        params={"api_key": api_key, "language": language},
        timeout_seconds=timeout_seconds,
    )


def fetch_movie_credits(
    movie_id: int | str,
    *,
    api_key: str | None = None,
    session: requests.Session | None = None,
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
) -> dict[str, Any]:
    """
    Fetch the full credits payload (`cast` + `crew`) for a movie.
    """

    api_key = _require_api_key(api_key)
    session = session or requests.Session()
    url = f"{TMDB_API_BASE_URL}/movie/{movie_id}/credits"
    return _request_json(session, url, params={"api_key": api_key}, timeout_seconds=timeout_seconds)


def fetch_movie_cast(
    movie_id: int | str,
    *,
    api_key: str | None = None,
    session: requests.Session | None = None,
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
) -> list[dict[str, Any]]:
    payload = fetch_movie_credits(movie_id, api_key=api_key, session=session, timeout_seconds=timeout_seconds)
    return _results_list(payload, "cast")


def fetch_movie_trailer(
    movie_id: int | str,
    *,
    api_key: str | None = None,
    session: requests.Session | None = None,
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
) -> dict[str, Any] | None:
    """Return the first `/videos` result with `type == "Trailer"`, or None."""

    api_key = _require_api_key(api_key)
    session = session or requests.Session()
    url = f"{TMDB_API_BASE_URL}/movie/{movie_id}/videos"
    payload = _request_json(session, url, params={"api_key": api_key}, timeout_seconds=timeout_seconds)
    for video in _results_list(payload):
        if video.get("type") == "Trailer":
            return video
    return None
