"""
Derived collections built from TMDb data.
"""

from cinemavault.aggregation.directors import (
    DirectorAggregation,
    DirectorFailure,
    aggregate_directors,
    collect_directors,
    group_directors,
    resolve_director,
    run_director_aggregation,
)

__all__ = [
    "DirectorAggregation",
    "DirectorFailure",
    "aggregate_directors",
    "collect_directors",
    "group_directors",
    "resolve_director",
    "run_director_aggregation",
]
