"""Cumulative league totals and idempotent gameweek crediting.

Each (league, team) pair is either uncredited (no entry) or credited
through some gameweek G. The only transition is to the gameweek that comes
right after G, which adds that gameweek's score. Crediting G or an earlier
gameweek again leaves the entry untouched, so repeating a credit request
never double-counts. Skipping ahead is rejected.
"""

import logging
import threading
from abc import ABC, abstractmethod
from contextlib import contextmanager
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Iterator, Optional

from .exceptions import ValidationError
from .models import CumulativeEntry
from .schemas import CumulativeEntryRecord, CumulativeFile
from .utils import load_json, save_json

logger = logging.getLogger('fantasy_cricket.cumulative')


class CumulativeTotalsStore(ABC):
    """Durable get/set of CumulativeEntry rows with per-key serialization."""

    @abstractmethod
    def get(self, league_id: int, team_id: int) -> Optional[CumulativeEntry]:
        ...

    @abstractmethod
    def put(self, entry: CumulativeEntry) -> None:
        ...

    @abstractmethod
    def delete(self, league_id: int, team_id: int) -> bool:
        """Remove an entry. Returns True if one existed."""

    @abstractmethod
    def entries(self, league_id: int) -> list[CumulativeEntry]:
        ...

    @abstractmethod
    def lock(self, league_id: int, team_id: int):
        """Context manager held for the whole read-modify-write of one key."""


class InMemoryCumulativeStore(CumulativeTotalsStore):
    """Process-local store with one lock per (league, team) key."""

    def __init__(self):
        self._entries: dict[tuple[int, int], CumulativeEntry] = {}
        self._locks: dict[tuple[int, int], threading.Lock] = {}
        self._locks_guard = threading.Lock()

    def get(self, league_id: int, team_id: int) -> Optional[CumulativeEntry]:
        return self._entries.get((league_id, team_id))

    def put(self, entry: CumulativeEntry) -> None:
        self._entries[entry.key] = entry

    def delete(self, league_id: int, team_id: int) -> bool:
        return self._entries.pop((league_id, team_id), None) is not None

    def entries(self, league_id: int) -> list[CumulativeEntry]:
        return [e for (lid, _), e in sorted(self._entries.items()) if lid == league_id]

    @contextmanager
    def lock(self, league_id: int, team_id: int) -> Iterator[None]:
        with self._locks_guard:
            key_lock = self._locks.setdefault((league_id, team_id), threading.Lock())
        with key_lock:
            yield


class JsonCumulativeStore(CumulativeTotalsStore):
    """
    Store backed by a JSON file.

    Every access re-reads the file and every write rewrites it, all under a
    single lock, so writers for any key are serialized.
    """

    def __init__(self, path: Path | str):
        self.path = Path(path)
        self._lock = threading.RLock()

    def _load(self) -> dict[tuple[int, int], CumulativeEntry]:
        if not self.path.exists():
            return {}
        data = load_json(self.path, schema=CumulativeFile)
        return {
            (r.league_id, r.team_id): CumulativeEntry(**r.model_dump())
            for r in data.entries
        }

    def _save(self, entries: dict[tuple[int, int], CumulativeEntry]) -> None:
        data = CumulativeFile(
            entries=[
                CumulativeEntryRecord(
                    league_id=e.league_id,
                    team_id=e.team_id,
                    total_points=e.total_points,
                    last_credited_gameweek=e.last_credited_gameweek,
                )
                for _, e in sorted(entries.items())
            ]
        )
        save_json(self.path, data)

    def get(self, league_id: int, team_id: int) -> Optional[CumulativeEntry]:
        with self._lock:
            return self._load().get((league_id, team_id))

    def put(self, entry: CumulativeEntry) -> None:
        with self._lock:
            entries = self._load()
            entries[entry.key] = entry
            self._save(entries)

    def delete(self, league_id: int, team_id: int) -> bool:
        with self._lock:
            entries = self._load()
            if entries.pop((league_id, team_id), None) is None:
                return False
            self._save(entries)
            return True

    def entries(self, league_id: int) -> list[CumulativeEntry]:
        with self._lock:
            return [e for (lid, _), e in sorted(self._load().items()) if lid == league_id]

    @contextmanager
    def lock(self, league_id: int, team_id: int) -> Iterator[None]:
        with self._lock:
            yield


@dataclass(frozen=True)
class CreditResult:
    entry: CumulativeEntry
    credited: bool


def credit_gameweek(
    store: CumulativeTotalsStore,
    league_id: int,
    team_id: int,
    gameweek: int,
    points: int,
    previous_gameweek: Optional[int] = None,
) -> CreditResult:
    """
    Add one gameweek's points to a team's running league total.

    The entry is created on first credit. If it is already credited through
    ``gameweek`` (or later) nothing changes. Otherwise the entry must be
    credited through exactly ``previous_gameweek``, so gameweeks are added
    one at a time and none is skipped.

    Args:
        store: Where entries live
        league_id: League the total belongs to
        team_id: Fantasy team
        gameweek: Gameweek number being credited
        points: The team's score for that gameweek
        previous_gameweek: Gameweek number that must already be credited
            (default: ``gameweek - 1``; 0 means none)

    Returns:
        CreditResult with the stored entry and whether it changed

    Raises:
        ValidationError: If gameweek is not a positive number, or the entry
            is not yet credited through ``previous_gameweek``
    """
    if gameweek < 1:
        raise ValidationError(f'Gameweek number must be positive, got {gameweek}')
    if previous_gameweek is None:
        previous_gameweek = gameweek - 1
    if not 0 <= previous_gameweek < gameweek:
        raise ValidationError(
            f'Previous gameweek must be between 0 and {gameweek - 1}, got {previous_gameweek}'
        )

    with store.lock(league_id, team_id):
        entry = store.get(league_id, team_id) or CumulativeEntry(league_id=league_id, team_id=team_id)

        if entry.is_credited_through(gameweek):
            logger.debug(
                f'League {league_id} team {team_id} already credited through '
                f'gameweek {entry.last_credited_gameweek}, skipping gameweek {gameweek}'
            )
            return CreditResult(entry=entry, credited=False)

        if entry.last_credited_gameweek != previous_gameweek:
            raise ValidationError(
                f'League {league_id} team {team_id} is credited through gameweek '
                f'{entry.last_credited_gameweek}; gameweek {previous_gameweek} must be '
                f'credited before gameweek {gameweek}'
            )

        updated = replace(
            entry,
            total_points=entry.total_points + points,
            last_credited_gameweek=gameweek,
        )
        store.put(updated)

    logger.info(
        f'Credited league {league_id} team {team_id} gameweek {gameweek}: '
        f'+{points} -> {updated.total_points}'
    )
    return CreditResult(entry=updated, credited=True)
