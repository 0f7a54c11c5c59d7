"""Stat storage with upsert semantics and transactional bulk ingestion."""

import logging
import threading
from collections.abc import Collection, Iterable, Mapping
from contextlib import contextmanager
from dataclasses import asdict
from pathlib import Path
from typing import Iterator, Optional, Union

from pydantic import ValidationError as PydanticValidationError

from .exceptions import NotFound, ValidationError
from .models import BulkIngestResult, PlayerMatchStat, PointBreakdown
from .schemas import PlayerStatInput, StatFile
from .scoring import compute_points
from .utils import load_json, save_json

logger = logging.getLogger('fantasy_cricket.ingestion')

StatKey = tuple[int, int]
StatRow = Union[PlayerMatchStat, PlayerStatInput, Mapping]


def format_pydantic_errors(exc: PydanticValidationError) -> str:
    """Flatten a pydantic error into 'field: message; ...'."""
    parts = []
    for err in exc.errors():
        loc = '.'.join(str(p) for p in err.get('loc', ()))
        parts.append(f'{loc}: {err.get("msg")}' if loc else str(err.get('msg')))
    return '; '.join(parts)


def parse_stat_row(row: StatRow) -> PlayerMatchStat:
    """
    Turn a submitted row into a PlayerMatchStat.

    Raises:
        ValidationError: If the row is missing ids or has negative counters
    """
    if isinstance(row, PlayerMatchStat):
        row = asdict(row)
    try:
        parsed = row if isinstance(row, PlayerStatInput) else PlayerStatInput.model_validate(row)
    except PydanticValidationError as e:
        raise ValidationError(format_pydantic_errors(e)) from e
    return parsed.to_stat()


class StatBatch:
    """Staged view of the repository used inside a transaction."""

    def __init__(self, rows: dict[StatKey, tuple[PlayerMatchStat, PointBreakdown]]):
        self.rows = rows

    def upsert(self, stat: PlayerMatchStat) -> tuple[PointBreakdown, bool]:
        breakdown = compute_points(stat)
        created = stat.key not in self.rows
        self.rows[stat.key] = (stat, breakdown)
        return breakdown, created


class StatRepository:
    """
    In-process store of player match stats keyed by (player_id, gameweek_id).

    A re-submitted row for the same key supersedes the stored one and its
    PointBreakdown is recomputed. All writes go through transaction(), which
    stages changes on a copy and swaps it in only if the block completes.
    """

    def __init__(self):
        self._rows: dict[StatKey, tuple[PlayerMatchStat, PointBreakdown]] = {}
        self._lock = threading.RLock()

    @classmethod
    def from_file(cls, path: Path | str) -> 'StatRepository':
        """
        Load stat rows saved by save(). A missing file gives an empty repository.

        Raises:
            ValidationError: If the file has invalid structure
        """
        repo = cls()
        path = Path(path)
        if not path.exists():
            logger.debug(f'No stats file at {path}, starting empty')
            return repo

        data = load_json(path, schema=StatFile)
        with repo.transaction() as batch:
            for row in data.stats:
                batch.upsert(row.to_stat())
        logger.info(f'Loaded {len(repo)} stat rows from {path}')
        return repo

    def save(self, path: Path | str) -> None:
        """Write every stored stat row to a JSON file, ordered by (player_id, gameweek_id)."""
        rows = [PlayerStatInput(**asdict(self._rows[key][0])) for key in sorted(self._rows)]
        save_json(path, StatFile(stats=rows))

    def __len__(self) -> int:
        return len(self._rows)

    def __contains__(self, key: StatKey) -> bool:
        return key in self._rows

    @contextmanager
    def transaction(self) -> Iterator[StatBatch]:
        with self._lock:
            batch = StatBatch(dict(self._rows))
            yield batch
            self._rows = batch.rows

    def upsert(self, stat: PlayerMatchStat) -> tuple[PointBreakdown, bool]:
        """
        Insert or replace one stat row.

        Returns:
            Tuple of (PointBreakdown, created) where created is False on update
        """
        with self.transaction() as batch:
            breakdown, created = batch.upsert(stat)
        logger.info(
            f'Player points {"added" if created else "updated"}: player={stat.player_id} '
            f'gameweek={stat.gameweek_id} total={breakdown.total_points}'
        )
        return breakdown, created

    def bulk_upsert(
        self,
        rows: Iterable[StatRow],
        known_players: Optional[Collection[int]] = None,
        known_gameweeks: Optional[Collection[int]] = None,
    ) -> BulkIngestResult:
        """
        Upsert a batch of stat rows as one transaction.

        Invalid rows (bad counters, unknown player or gameweek) are reported
        in ``errors`` and left out; the remaining rows are committed together.
        If committing fails, nothing from the batch is kept and the error
        propagates.

        Args:
            rows: Stat rows as dicts, PlayerStatInput or PlayerMatchStat
            known_players: If given, player ids a row may reference
            known_gameweeks: If given, gameweek ids a row may reference

        Returns:
            BulkIngestResult with inserted/updated counts and per-row errors
        """
        result = BulkIngestResult()

        with self.transaction() as batch:
            for index, row in enumerate(rows):
                player_id = row.get('player_id') if isinstance(row, Mapping) else getattr(row, 'player_id', None)
                try:
                    stat = parse_stat_row(row)
                    if known_players is not None and stat.player_id not in known_players:
                        raise NotFound('Player', stat.player_id)
                    if known_gameweeks is not None and stat.gameweek_id not in known_gameweeks:
                        raise NotFound('Gameweek', stat.gameweek_id)
                    _, created = batch.upsert(stat)
                except (ValidationError, NotFound) as e:
                    result.errors.append({'index': index, 'player_id': player_id, 'error': str(e)})
                    continue
                if created:
                    result.inserted += 1
                else:
                    result.updated += 1

        logger.info(
            f'Bulk player points processed: inserted={result.inserted} '
            f'updated={result.updated} errors={len(result.errors)}'
        )
        return result

    def get(self, player_id: int, gameweek_id: int) -> Optional[tuple[PlayerMatchStat, PointBreakdown]]:
        return self._rows.get((player_id, gameweek_id))

    def gameweeks_recorded(self) -> set[int]:
        """Gameweek ids with at least one stat row."""
        return {gw_id for _, gw_id in self._rows}

    def points_for_gameweek(self, gameweek_id: int) -> dict[int, int]:
        """Map player id -> total points for every player with a row in the gameweek."""
        return {
            player_id: breakdown.total_points
            for (player_id, gw_id), (_, breakdown) in self._rows.items()
            if gw_id == gameweek_id
        }

    def player_summary(self, player_id: int, recent: int = 5) -> dict:
        """Aggregate a player's recorded gameweeks, most recent gameweek id first."""
        history = sorted(
            ((gw_id, breakdown.total_points) for (pid, gw_id), (_, breakdown) in self._rows.items() if pid == player_id),
            reverse=True,
        )
        total = sum(points for _, points in history)
        played = len(history)
        return {
            'total_points': total,
            'matches_played': played,
            'average_points': round(total / played, 1) if played else 0,
            'recent_form': [points for _, points in history[:recent]],
        }
