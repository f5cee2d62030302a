"""
TMDb integration clients.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from cinemavault.integrations.tmdb.client import (
        IMAGE_BASE_URL,
        TmdbClientError,
        build_image_url,
        fetch_movie_credits,
        fetch_popular_movies,
    )

__all__ = [
    "IMAGE_BASE_URL",
    "TmdbClientError",
    "build_image_url",
    "fetch_movie_credits",
    "fetch_popular_movies",
]


def __getattr__(name: str):
    if name in __all__:
        from cinemavault.integrations.tmdb import client

        return getattr(client, name)
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
