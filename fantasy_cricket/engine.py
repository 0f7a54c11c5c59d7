"""Engine facade: the request/response shapes the API layer calls into.

The engine works over a LeagueData snapshot supplied by the caller
(players, teams, leagues, memberships, gameweeks and recorded stats) plus a
CumulativeTotalsStore. Lookups of ids that are not in the snapshot raise
NotFound.
"""

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from .config import get_default_max_members
from .cumulative import CreditResult, CumulativeTotalsStore, InMemoryCumulativeStore, credit_gameweek
from .exceptions import AccessDenied, NotFound, ValidationError
from .ingestion import StatRepository, StatRow, parse_stat_row
from .leaderboard import can_view_leaderboard, league_member_ids, rank_league
from .league import join_league, leave_league
from .models import (
    BulkIngestResult,
    FantasyTeam,
    Gameweek,
    League,
    LeaderboardPage,
    LeagueMembership,
    Player,
    PointBreakdown,
    TeamGameweekScore,
)
from .schemas import LeagueDataFile
from .scoring import compute_points
from .team_scorer import GameweekScorer
from .utils import load_json
from .validators import validate_team

logger = logging.getLogger('fantasy_cricket.engine')


@dataclass
class LeagueData:
    """Collaborator data the engine reads from."""
    players: dict[int, Player] = field(default_factory=dict)
    teams: dict[int, FantasyTeam] = field(default_factory=dict)
    leagues: dict[int, League] = field(default_factory=dict)
    memberships: list[LeagueMembership] = field(default_factory=list)
    gameweeks: dict[int, Gameweek] = field(default_factory=dict)
    stats: StatRepository = field(default_factory=StatRepository)

    @classmethod
    def from_file(cls, path: Path | str) -> 'LeagueData':
        """Load players, teams, leagues and gameweeks from a league_data.json file."""
        data = load_json(path, schema=LeagueDataFile)
        max_members = get_default_max_members()
        return cls(
            players={p.id: p.to_player() for p in data.players},
            teams={t.id: t.to_team() for t in data.teams},
            leagues={lg.id: lg.to_league(max_members) for lg in data.leagues},
            memberships=[
                LeagueMembership(league_id=lg.id, team_id=team_id)
                for lg in data.leagues
                for team_id in lg.members
            ],
            gameweeks={gw.id: gw.to_gameweek() for gw in data.gameweeks},
        )

    def player(self, player_id: int) -> Player:
        if player_id not in self.players:
            raise NotFound('Player', player_id)
        return self.players[player_id]

    def team(self, team_id: int) -> FantasyTeam:
        if team_id not in self.teams:
            raise NotFound('Fantasy team', team_id)
        return self.teams[team_id]

    def league(self, league_id: int) -> League:
        if league_id not in self.leagues:
            raise NotFound('League', league_id)
        return self.leagues[league_id]

    def gameweek(self, gameweek_id: int) -> Gameweek:
        if gameweek_id not in self.gameweeks:
            raise NotFound('Gameweek', gameweek_id)
        return self.gameweeks[gameweek_id]


class FantasyEngine:
    """Scoring, ranking and crediting over a LeagueData snapshot."""

    def __init__(self, data: LeagueData, store: Optional[CumulativeTotalsStore] = None):
        self.data = data
        self.store = store if store is not None else InMemoryCumulativeStore()

    # Stats

    def compute_points(self, stats: StatRow) -> PointBreakdown:
        """Point breakdown for one stat row without storing it."""
        return compute_points(parse_stat_row(stats))

    def ingest_stat(self, row: StatRow) -> tuple[PointBreakdown, bool]:
        """
        Validate and upsert one stat row.

        Returns:
            Tuple of (PointBreakdown, created)

        Raises:
            ValidationError: If counters are malformed
            NotFound: If the player or gameweek is unknown
        """
        stat = parse_stat_row(row)
        self.data.player(stat.player_id)
        self.data.gameweek(stat.gameweek_id)
        return self.data.stats.upsert(stat)

    def ingest_stats(self, rows: Iterable[StatRow]) -> BulkIngestResult:
        """Upsert a batch of stat rows, reporting bad rows instead of failing."""
        return self.data.stats.bulk_upsert(
            rows,
            known_players=self.data.players.keys(),
            known_gameweeks=self.data.gameweeks.keys(),
        )

    # Teams

    def validate_teams(self) -> dict[int, list[str]]:
        """Selection-rule problems per team id (teams without problems are left out)."""
        problems = {}
        for team_id, team in self.data.teams.items():
            errors = validate_team(team, self.data.players)
            if errors:
                problems[team_id] = errors
        return problems

    def team_gameweek_score(self, team_id: int, gameweek_id: int) -> TeamGameweekScore:
        team = self.data.team(team_id)
        self.data.gameweek(gameweek_id)
        return GameweekScorer(self.data.stats, gameweek_id).score_team(team)

    def gameweek_scores(self, team_ids: Iterable[int]) -> dict[int, dict[int, int]]:
        """
        Recorded gameweek scores for each team, keyed by gameweek number.

        A gameweek counts as recorded once it has at least one stat row.
        """
        team_ids = list(team_ids)
        scores: dict[int, dict[int, int]] = {team_id: {} for team_id in team_ids}

        recorded = self.data.stats.gameweeks_recorded()
        for gameweek_id in sorted(recorded):
            gameweek = self.data.gameweeks.get(gameweek_id)
            if gameweek is None:
                logger.warning(f'Stats recorded for unknown gameweek {gameweek_id}, ignoring')
                continue
            scorer = GameweekScorer(self.data.stats, gameweek_id)
            for team_id in team_ids:
                scores[team_id][gameweek.number] = scorer.score_team(self.data.team(team_id)).score
        return scores

    # Leagues

    def viewer_team_ids(self, viewer_id: Optional[int]) -> set[int]:
        if viewer_id is None:
            return set()
        return {t.id for t in self.data.teams.values() if t.owner_id == viewer_id}

    def league_leaderboard(
        self,
        league_id: int,
        as_of_gameweek: Optional[int] = None,
        limit: Optional[int] = None,
        offset: int = 0,
        viewer_id: Optional[int] = None,
    ) -> LeaderboardPage:
        """
        Ranked leaderboard page for a league.

        Args:
            league_id: League to rank
            as_of_gameweek: Gameweek id to reconstruct the table at; None for all-time
            limit: Page size
            offset: Rows to skip
            viewer_id: User asking; required to see a private league

        Raises:
            NotFound: If the league or gameweek is unknown
            AccessDenied: If the league is private and the viewer has no team in it
        """
        league = self.data.league(league_id)
        if not can_view_leaderboard(league, self.data.memberships, self.viewer_team_ids(viewer_id)):
            raise AccessDenied(f'Access denied to private league {league_id} leaderboard')

        upto = self.data.gameweek(as_of_gameweek).number if as_of_gameweek is not None else None
        member_ids = league_member_ids(league, self.data.memberships)

        page = rank_league(
            league,
            self.data.memberships,
            self.gameweek_scores(member_ids),
            upto_gameweek=upto,
            limit=limit,
            offset=offset,
            teams=self.data.teams,
        )
        logger.info(f'Leaderboard accessed: league={league_id} gameweek={as_of_gameweek} viewer={viewer_id}')
        return page

    def join_league(self, league_id: int, team_id: int, user_id: Optional[int] = None) -> LeagueMembership:
        return join_league(
            self.data.league(league_id), self.data.memberships, self.data.team(team_id), user_id
        )

    def leave_league(self, league_id: int, team_id: int) -> None:
        leave_league(self.data.league(league_id), self.data.memberships, team_id, self.store)

    # Cumulative totals

    def recorded_gameweek_numbers(self) -> list[int]:
        """Sorted numbers of the known gameweeks that have at least one stat row."""
        return sorted(
            self.data.gameweeks[gw_id].number
            for gw_id in self.data.stats.gameweeks_recorded()
            if gw_id in self.data.gameweeks
        )

    def credit_team(self, league_id: int, team_id: int, gameweek_id: int) -> CreditResult:
        """
        Credit one team's running total with its score for one gameweek.

        Gameweeks are credited in recorded order: the team must already be
        credited through the recorded gameweek before this one. A no-op if
        the team is already credited through this gameweek.

        Raises:
            NotFound: If the league, team or gameweek is unknown, or the
                team is not a member of the league
            ValidationError: If the gameweek has no stats yet, or an earlier
                recorded gameweek has not been credited
        """
        league = self.data.league(league_id)
        team = self.data.team(team_id)
        gameweek = self.data.gameweek(gameweek_id)
        if team_id not in league_member_ids(league, self.data.memberships):
            raise NotFound('League membership', (league_id, team_id))

        recorded = self.recorded_gameweek_numbers()
        if gameweek.number not in recorded:
            raise ValidationError(f'Gameweek {gameweek_id} has no recorded stats to credit')
        previous = max((n for n in recorded if n < gameweek.number), default=0)

        score = GameweekScorer(self.data.stats, gameweek_id).score_team(team).score
        return credit_gameweek(
            self.store, league_id, team_id, gameweek.number, score, previous_gameweek=previous
        )

    def credit_through(self, league_id: int, gameweek_id: int) -> dict[int, list[CreditResult]]:
        """
        Credit every member team's running total up to a gameweek.

        Recorded gameweeks up to and including the target are credited in
        order, one step each; gameweeks a team is already credited through
        are skipped, so calling this again for the same gameweek changes
        nothing.

        Returns:
            Team id -> the CreditResults that changed its entry

        Raises:
            ValidationError: If a team's entry is credited through a
                gameweek that is not among the recorded ones
        """
        league = self.data.league(league_id)
        target = self.data.gameweek(gameweek_id).number
        member_ids = league_member_ids(league, self.data.memberships)
        scores = self.gameweek_scores(member_ids)
        numbers = [n for n in self.recorded_gameweek_numbers() if n <= target]

        results: dict[int, list[CreditResult]] = {}
        for team_id in member_ids:
            applied = []
            previous = 0
            for number in numbers:
                result = credit_gameweek(
                    self.store, league_id, team_id, number, scores[team_id][number],
                    previous_gameweek=previous,
                )
                if result.credited:
                    applied.append(result)
                previous = number
            results[team_id] = applied
        return results

    def cumulative_totals(self, league_id: int) -> Mapping[int, int]:
        """Team id -> stored running total for the league."""
        self.data.league(league_id)
        return {e.team_id: e.total_points for e in self.store.entries(league_id)}
