#!/usr/bin/env python3
from __future__ import annotations

import argparse
import json
import logging
import sys

import requests

from cinemavault.aggregation.directors import (
    DEFAULT_PAGE_COUNT,
    MAX_CONCURRENCY,
    DirectorAggregation,
    run_director_aggregation,
)
from cinemavault.integrations.tmdb.client import DEFAULT_TIMEOUT_SECONDS, TmdbClientError, resolve_api_key
from cinemavault.models.movies import Director
from cinemavault.utils.env import load_env
from cinemavault.views.directors import FAILED_DIRECTORS, directors_count_label, filter_directors


def _parse_args(argv: list[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="aggregate_directors",
        description="Aggregate directors from TMDb popular movies and print them sorted by average rating.",
    )
    parser.add_argument(
        "--pages",
        type=int,
        default=DEFAULT_PAGE_COUNT,
        help=f"Number of popular-movie pages to fetch (default: {DEFAULT_PAGE_COUNT}).",
    )
    parser.add_argument(
        "--concurrency",
        type=int,
        default=1,
        help=f"Max concurrent credits requests, capped at {MAX_CONCURRENCY} (default: 1, sequential).",
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=DEFAULT_TIMEOUT_SECONDS,
        help=f"Per-request timeout in seconds (default: {DEFAULT_TIMEOUT_SECONDS:g}).",
    )
    parser.add_argument("--query", default="", help="Only print directors whose name contains this text.")
    parser.add_argument("--limit", type=int, default=None, help="Optional cap on number of directors printed.")
    parser.add_argument("--json", action="store_true", help="Print directors as JSON.")
    parser.add_argument("--verbose", action="store_true", help="Enable verbose logging.")
    return parser.parse_args(argv)


def _format_year(year: int | None) -> str:
    return "N/A" if year is None else str(year)


def _format_director(director: Director) -> list[str]:
    lines = [
        f"{director.name}  movies={director.total_movies} "
        f"avg={director.average_rating:.1f} reviews={director.total_reviews:,}"
    ]
    for movie in director.movies:
        lines.append(f"  - {movie.title} ({_format_year(movie.year)})  {movie.rating:.1f}")
    return lines


def _print_summary(aggregation: DirectorAggregation) -> None:
    print("Summary", file=sys.stderr)
    print(f"movies_attempted={aggregation.attempted}", file=sys.stderr)
    print(f"movies_resolved={aggregation.resolved}", file=sys.stderr)
    print(f"movies_unresolved={aggregation.unresolved}", file=sys.stderr)
    print(f"failures={aggregation.failed}", file=sys.stderr)
    for failure in aggregation.failures[:10]:
        print(f"- {failure.movie_id} {failure.title}: {failure.message}", file=sys.stderr)


def main(argv: list[str] | None = None) -> int:
    args = _parse_args(sys.argv[1:] if argv is None else argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    load_env()

    api_key = resolve_api_key()
    if not api_key:
        print("Missing required environment variable: TMDB_API_KEY", file=sys.stderr)
        return 2

    print("Loading directors...", file=sys.stderr)
    try:
        with requests.Session() as session:
            aggregation = run_director_aggregation(
                max(1, args.pages),
                api_key=api_key,
                session=session,
                concurrency=args.concurrency,
                timeout_seconds=args.timeout,
            )
    except TmdbClientError as exc:
        print(f"{FAILED_DIRECTORS}: {exc}", file=sys.stderr)
        return 1

    directors = filter_directors(aggregation.directors, args.query)
    if args.limit is not None:
        directors = directors[: max(0, int(args.limit))]

    if args.json:
        print(json.dumps([d.to_dict() for d in directors], indent=2))
    else:
        print(directors_count_label(len(directors)))
        for director in directors:
            print("\n".join(_format_director(director)))

    _print_summary(aggregation)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
