"""
Holder for the latest director aggregation.

The snapshot is replaced wholesale on refresh and never mutated in place, so readers
always see one complete aggregation run.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime

from cinemavault.aggregation.directors import DirectorAggregation

logger = logging.getLogger(__name__)


def _now_utc_iso() -> str:
    return datetime.now(UTC).replace(microsecond=0).isoformat().replace("+00:00", "Z")


@dataclass(frozen=True)
class DirectorSnapshot:
    aggregation: DirectorAggregation
    built_at: str


class DirectorSnapshotStore:
    def __init__(self, builder: Callable[[], DirectorAggregation]) -> None:
        self._builder = builder
        self._snapshot: DirectorSnapshot | None = None
        self._build_lock = threading.Lock()

    def current(self) -> DirectorSnapshot | None:
        return self._snapshot

    def get_or_build(self) -> DirectorSnapshot:
        snapshot = self._snapshot
        if snapshot is not None:
            return snapshot
        with self._build_lock:
            # another request may have finished a build while we waited
            if self._snapshot is not None:
                return self._snapshot
            return self._build()

    def refresh(self) -> DirectorSnapshot:
        with self._build_lock:
            return self._build()

    def clear(self) -> None:
        with self._build_lock:
            self._snapshot = None

    def _build(self) -> DirectorSnapshot:
        logger.info("Building director snapshot...")
        aggregation = self._builder()
        snapshot = DirectorSnapshot(aggregation=aggregation, built_at=_now_utc_iso())
        self._snapshot = snapshot
        return snapshot
