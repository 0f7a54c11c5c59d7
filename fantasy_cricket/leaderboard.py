"""League leaderboard ranking."""

import logging
from collections.abc import Collection, Iterable, Mapping
from itertools import groupby
from typing import Optional

from .config import get_default_page_limit
from .exceptions import ValidationError
from .models import FantasyTeam, League, LeaderboardPage, LeaderboardRow, LeagueMembership

logger = logging.getLogger('fantasy_cricket.leaderboard')


def league_member_ids(league: League, memberships: Iterable[LeagueMembership]) -> list[int]:
    """Team ids that belong to ``league``, each once, in membership order."""
    seen: dict[int, None] = {}
    for m in memberships:
        if m.league_id == league.id:
            seen.setdefault(m.team_id, None)
    return list(seen)


def team_totals(
    gameweek_scores: Mapping[int, int],
    upto_gameweek: Optional[int] = None,
) -> tuple[int, int]:
    """
    Total and latest-gameweek points for one team.

    Args:
        gameweek_scores: Gameweek number -> team score
        upto_gameweek: If given, only gameweeks <= this count, and "latest"
            means exactly this gameweek (0 if not recorded)

    Returns:
        Tuple of (total_points, latest_gw_points)
    """
    if upto_gameweek is None:
        total = sum(gameweek_scores.values())
        latest = gameweek_scores[max(gameweek_scores)] if gameweek_scores else 0
    else:
        total = sum(points for gw, points in gameweek_scores.items() if gw <= upto_gameweek)
        latest = gameweek_scores.get(upto_gameweek, 0)
    return total, latest


def assign_ranks(totals: Mapping[int, int]) -> list[tuple[int, int, int]]:
    """
    Rank teams by total points, highest first.

    Equal totals form one group and share a rank; each group's rank is the
    number of teams strictly ahead of it plus one (1, 2, 2, 4). Teams within
    a group are ordered by id.

    Args:
        totals: Team id -> total points

    Returns:
        List of (rank, team_id, total_points) in leaderboard order
    """
    ordered = sorted(totals.items(), key=lambda item: (-item[1], item[0]))

    ranked = []
    ahead = 0
    for total, group in groupby(ordered, key=lambda item: item[1]):
        members = list(group)
        rank = ahead + 1
        ranked.extend((rank, team_id, total) for team_id, _ in members)
        ahead += len(members)
    return ranked


def rank_league(
    league: League,
    memberships: Iterable[LeagueMembership],
    per_team_gameweek_scores: Mapping[int, Mapping[int, int]],
    upto_gameweek: Optional[int] = None,
    limit: Optional[int] = None,
    offset: int = 0,
    teams: Optional[Mapping[int, FantasyTeam]] = None,
) -> LeaderboardPage:
    """
    Build one page of a league's leaderboard.

    Ranks are computed over every member of the league before the page is
    cut, so a team's rank does not depend on which page it appears on.

    Args:
        league: League to rank
        memberships: Memberships (other leagues' entries are ignored)
        per_team_gameweek_scores: Team id -> {gameweek number -> score}
        upto_gameweek: As-of gameweek number; None for all-time
        limit: Page size (default: from game config)
        offset: Rows to skip
        teams: Optional team lookup for names and owners

    Returns:
        LeaderboardPage with the rows and the league's member count

    Raises:
        ValidationError: If limit or offset are out of range
    """
    if limit is None:
        limit = get_default_page_limit()
    if limit < 1:
        raise ValidationError(f'limit must be at least 1, got {limit}')
    if offset < 0:
        raise ValidationError(f'offset must be non-negative, got {offset}')

    teams = teams or {}
    member_ids = league_member_ids(league, memberships)

    totals = {}
    latest = {}
    for team_id in member_ids:
        totals[team_id], latest[team_id] = team_totals(
            per_team_gameweek_scores.get(team_id, {}), upto_gameweek
        )

    rows = []
    for rank, team_id, total in assign_ranks(totals):
        team = teams.get(team_id)
        rows.append(
            LeaderboardRow(
                rank=rank,
                team_id=team_id,
                team_name=team.name if team else '',
                owner_id=team.owner_id if team else None,
                total_points=total,
                latest_gw_points=latest[team_id],
            )
        )

    logger.debug(
        f'Ranked league {league.id}: {len(rows)} teams, as_of={upto_gameweek}, '
        f'limit={limit}, offset={offset}'
    )

    return LeaderboardPage(
        league=league,
        rows=rows[offset:offset + limit],
        limit=limit,
        offset=offset,
        total=len(member_ids),
        as_of_gameweek=upto_gameweek,
    )


def can_view_leaderboard(
    league: League,
    memberships: Iterable[LeagueMembership],
    viewer_team_ids: Collection[int],
) -> bool:
    """Public leagues are visible to all; private ones only to owners of a member team."""
    if league.is_public:
        return True
    return any(team_id in viewer_team_ids for team_id in league_member_ids(league, memberships))
