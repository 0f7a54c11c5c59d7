"""League membership rules."""

import logging
from typing import Optional

from .cumulative import CumulativeTotalsStore
from .exceptions import AccessDenied, DuplicateMembership, LeagueFull, NotFound
from .leaderboard import league_member_ids
from .models import FantasyTeam, League, LeagueMembership

logger = logging.getLogger('fantasy_cricket.league')


def join_league(
    league: League,
    memberships: list[LeagueMembership],
    team: FantasyTeam,
    user_id: Optional[int] = None,
) -> LeagueMembership:
    """
    Add a team to a league.

    Args:
        league: League to join
        memberships: Current memberships; the new one is appended
        team: Team joining
        user_id: If given, must own the team

    Returns:
        The new LeagueMembership

    Raises:
        AccessDenied: If ``user_id`` does not own the team
        DuplicateMembership: If the team is already in the league
        LeagueFull: If the league is at capacity
    """
    if user_id is not None and team.owner_id != user_id:
        raise AccessDenied(f'Fantasy team {team.id} does not belong to user {user_id}')

    members = league_member_ids(league, memberships)
    if team.id in members:
        raise DuplicateMembership(f'Team {team.id} is already a member of league {league.id}')
    if len(members) >= league.max_members:
        raise LeagueFull(f'League {league.id} is full ({league.max_members} members)')

    membership = LeagueMembership(league_id=league.id, team_id=team.id)
    memberships.append(membership)
    logger.info(f'Team {team.id} joined league {league.id}')
    return membership


def leave_league(
    league: League,
    memberships: list[LeagueMembership],
    team_id: int,
    store: Optional[CumulativeTotalsStore] = None,
) -> None:
    """
    Remove a team from a league, dropping its cumulative entry.

    Raises:
        NotFound: If the team is not a member of the league
    """
    membership = LeagueMembership(league_id=league.id, team_id=team_id)
    if membership not in memberships:
        raise NotFound('League membership', (league.id, team_id))

    memberships[:] = [m for m in memberships if m != membership]
    if store is not None:
        with store.lock(league.id, team_id):
            store.delete(league.id, team_id)
    logger.info(f'Team {team_id} left league {league.id}')
