"""Validation functions for fantasy teams."""

from collections import Counter
from collections.abc import Mapping
from typing import Optional

from .config import get_budget_ceiling, get_max_players_per_real_team
from .constants import SLOT_ELIGIBILITY, SLOT_LAYOUT, TEAM_SIZE
from .exceptions import InvariantViolation
from .models import FantasyTeam, Player


def validate_captaincy(team: FantasyTeam) -> list[str]:
    """
    Check captain and vice-captain against the team's slots.

    Checks:
    - Both are nominated
    - They are different players
    - Each occupies one of the team's slots

    Returns:
        List of validation error messages (empty if valid)
    """
    errors = []
    occupied = set(team.player_ids)

    if team.captain_id is None:
        errors.append(f'{team.name} has no captain')
    elif team.captain_id not in occupied:
        errors.append(f'{team.name} captain {team.captain_id} is not in the team')

    if team.vice_captain_id is None:
        errors.append(f'{team.name} has no vice-captain')
    elif team.vice_captain_id not in occupied:
        errors.append(f'{team.name} vice-captain {team.vice_captain_id} is not in the team')

    if team.captain_id is not None and team.captain_id == team.vice_captain_id:
        errors.append(f'{team.name} captain and vice-captain are the same player')

    return errors


def validate_unique_players(team: FantasyTeam) -> list[str]:
    """
    Check that no player occupies more than one slot.

    Returns:
        List of validation error messages (empty if valid)
    """
    duplicates = sorted(pid for pid, count in Counter(team.player_ids).items() if count > 1)
    if duplicates:
        return [f'{team.name} has duplicate players: {", ".join(map(str, duplicates))}']
    return []


def validate_team(
    team: FantasyTeam,
    players: Mapping[int, Player],
    budget_ceiling: Optional[float] = None,
    max_per_real_team: Optional[int] = None,
) -> list[str]:
    """
    Validate that a fantasy team complies with the selection rules.

    Checks:
    - Exactly 11 slots in the fixed layout (3 batting, 1 keeper, 3 bowling, 4 flex)
    - No player in more than one slot
    - Every player exists and is eligible for the slot role
    - Captaincy (see validate_captaincy)
    - At most ``max_per_real_team`` players from one real team
    - Total cost within ``budget_ceiling``

    Args:
        team: FantasyTeam to validate
        players: Player catalog keyed by player id
        budget_ceiling: Maximum total cost (default: from game config)
        max_per_real_team: Per-real-team cap (default: from game config)

    Returns:
        List of validation error messages (empty if valid)
    """
    if budget_ceiling is None:
        budget_ceiling = get_budget_ceiling()
    if max_per_real_team is None:
        max_per_real_team = get_max_players_per_real_team()

    errors = []

    if len(team.slots) != TEAM_SIZE:
        errors.append(f'{team.name} has {len(team.slots)} slots (need {TEAM_SIZE})')

    role_counts = Counter(slot.role for slot in team.slots)
    for role, required in SLOT_LAYOUT.items():
        if role_counts.get(role, 0) != required:
            errors.append(f'{team.name} has {role_counts.get(role, 0)} {role} slots (need {required})')
    for role in role_counts:
        if role not in SLOT_LAYOUT:
            errors.append(f'{team.name} has unknown slot role: {role}')

    errors.extend(validate_unique_players(team))

    total_cost = 0.0
    real_team_counts: Counter = Counter()
    for slot in team.slots:
        player = players.get(slot.player_id)
        if player is None:
            errors.append(f'{team.name} slot {slot.name} references unknown player {slot.player_id}')
            continue
        eligible = SLOT_ELIGIBILITY.get(slot.role)
        if eligible is not None and player.role not in eligible:
            errors.append(f'{team.name} slot {slot.name} cannot hold a {player.role} ({player.name})')
        total_cost += player.cost
        real_team_counts[player.real_team] += 1

    errors.extend(validate_captaincy(team))

    for real_team, count in sorted(real_team_counts.items()):
        if count > max_per_real_team:
            errors.append(
                f'{team.name} has {count} players from {real_team} (max {max_per_real_team})'
            )

    if total_cost > budget_ceiling:
        errors.append(f'{team.name} costs {total_cost:.1f} (budget {budget_ceiling:.1f})')

    return errors


def ensure_valid_team(
    team: FantasyTeam,
    players: Mapping[int, Player],
    budget_ceiling: Optional[float] = None,
    max_per_real_team: Optional[int] = None,
) -> None:
    """Raise InvariantViolation listing every problem validate_team() finds."""
    errors = validate_team(team, players, budget_ceiling, max_per_real_team)
    if errors:
        raise InvariantViolation(f'Invalid team {team.name}: {errors[0]}', errors)
