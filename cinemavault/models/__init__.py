"""
Domain models shared across scripts and services.
"""

from cinemavault.models.movies import (
    Credits,
    CreditsEntry,
    Director,
    DirectorMovie,
    Movie,
    parse_movies,
    release_year,
    rescale_rating,
)

__all__ = [
    "Credits",
    "CreditsEntry",
    "Director",
    "DirectorMovie",
    "Movie",
    "parse_movies",
    "release_year",
    "rescale_rating",
]
