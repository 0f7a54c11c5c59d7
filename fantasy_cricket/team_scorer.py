"""Gameweek scoring for fantasy teams, including the captain multiplier."""

import logging
from collections.abc import Iterable, Mapping

from .constants import CAPTAIN_MULTIPLIER
from .exceptions import InvalidTeamState
from .ingestion import StatRepository
from .models import FantasyTeam, SlotScore, TeamGameweekScore
from .validators import validate_captaincy, validate_unique_players

logger = logging.getLogger('fantasy_cricket.team_scorer')


def compute_team_gameweek_score(
    team: FantasyTeam,
    gw_points_by_player: Mapping[int, int],
) -> TeamGameweekScore:
    """
    Score a fantasy team for one gameweek.

    A player "played" if their id is a key of ``gw_points_by_player``; a
    recorded 0 still counts as played. Missing players score 0.

    The captain's points are doubled. If the captain did not play, the
    vice-captain's points are doubled instead. If neither played, nothing
    is doubled.

    Args:
        team: FantasyTeam with 11 slots, captain and vice-captain
        gw_points_by_player: Player id -> total points for the gameweek

    Returns:
        TeamGameweekScore with the total and per-slot breakdown

    Raises:
        InvalidTeamState: If a player fills more than one slot, or captain or
            vice-captain do not occupy a slot
    """
    problems = validate_unique_players(team) + validate_captaincy(team)
    if problems:
        raise InvalidTeamState(f'Cannot score team {team.id}: {problems[0]}', problems)

    if team.captain_id in gw_points_by_player:
        doubled_id = team.captain_id
    elif team.vice_captain_id in gw_points_by_player:
        doubled_id = team.vice_captain_id
    else:
        doubled_id = None

    slots = []
    for slot in team.slots:
        played = slot.player_id in gw_points_by_player
        slots.append(
            SlotScore(
                slot=slot.name,
                player_id=slot.player_id,
                base_points=gw_points_by_player.get(slot.player_id, 0),
                played=played,
                multiplier=CAPTAIN_MULTIPLIER if slot.player_id == doubled_id else 1,
                is_captain=slot.player_id == team.captain_id,
                is_vice_captain=slot.player_id == team.vice_captain_id,
            )
        )

    return TeamGameweekScore(
        team_id=team.id,
        score=sum(s.points for s in slots),
        slots=slots,
        doubled_player_id=doubled_id,
    )


class GameweekScorer:
    """
    Scores fantasy teams for one gameweek from a StatRepository.

    The points lookup is built once from the stat rows recorded for the
    gameweek and reused for every team.
    """

    def __init__(self, stats: StatRepository, gameweek_id: int):
        """
        Initialize scorer.

        Args:
            stats: Repository holding the gameweek's stat rows
            gameweek_id: Gameweek to score
        """
        self.stats = stats
        self.gameweek_id = gameweek_id
        self._points: dict[int, int] | None = None

    @property
    def points_by_player(self) -> dict[int, int]:
        """Lazy load the gameweek's player points."""
        if self._points is None:
            self._points = self.stats.points_for_gameweek(self.gameweek_id)
            logger.debug(f'Loaded points for {len(self._points)} players in gameweek {self.gameweek_id}')
        return self._points

    def score_team(self, team: FantasyTeam) -> TeamGameweekScore:
        return compute_team_gameweek_score(team, self.points_by_player)

    def score_teams(
        self, teams: Iterable[FantasyTeam], verbose: bool = False
    ) -> dict[int, TeamGameweekScore]:
        """
        Score multiple fantasy teams.

        Args:
            teams: Teams to score
            verbose: Whether to print a per-slot breakdown

        Returns:
            Dict mapping team id to its TeamGameweekScore
        """
        results = {}

        for team in teams:
            result = self.score_team(team)
            results[team.id] = result
            logger.info(f'Scored team {team.id} ({team.name}) gameweek {self.gameweek_id}: {result.score} pts')

            if verbose:
                print(f'\n{"=" * 60}')
                print(f'Scoring: {team.name}')
                print('=' * 60)
                for s in result.slots:
                    status = '✓' if s.played else '✗'
                    mark = ''
                    if s.multiplier > 1:
                        mark = ' (C x2)' if s.is_captain else ' (VC x2)'
                    print(f'  {s.slot} #{s.player_id}: {s.points} pts {status}{mark}')
                print(f'\n  TOTAL: {result.score} points')

        return results
