"""Point calculation for a single player's match statistics."""

from collections.abc import Mapping
from typing import Union

from .constants import (
    DUCK_PENALTY,
    HAUL_BONUS_BANDS,
    POINTS_PER_CATCH,
    POINTS_PER_DOT_BALL,
    POINTS_PER_FOUR,
    POINTS_PER_MAIDEN,
    POINTS_PER_RUN,
    POINTS_PER_RUN_OUT,
    POINTS_PER_SIX,
    POINTS_PER_STUMPING,
    POINTS_PER_WICKET,
    STAT_COUNTERS,
)
from .exceptions import ValidationError
from .models import PlayerMatchStat, PointBreakdown

StatLike = Union[PlayerMatchStat, Mapping]


def _counters(stat: StatLike) -> dict:
    """Read the raw counters from a stat row or dict, defaulting absent ones to 0."""
    if isinstance(stat, Mapping):
        counters = {name: stat.get(name, 0) or 0 for name in STAT_COUNTERS}
        is_duck = stat.get('is_duck')
    else:
        counters = {name: getattr(stat, name) or 0 for name in STAT_COUNTERS}
        is_duck = stat.is_duck
    counters['is_duck'] = False if is_duck is None else is_duck
    return counters


def validate_stat(stat: StatLike) -> list[str]:
    """
    Check that every counter is a non-negative integer and the duck flag is a bool.

    Returns:
        List of error messages (empty if valid)
    """
    errors = []
    counters = _counters(stat)
    if not isinstance(counters['is_duck'], bool):
        errors.append(f'is_duck must be a boolean, got {counters["is_duck"]!r}')
    for name in STAT_COUNTERS:
        value = counters[name]
        if isinstance(value, bool) or not isinstance(value, int):
            errors.append(f'{name} must be an integer, got {value!r}')
        elif value < 0:
            errors.append(f'{name} must be non-negative, got {value}')
    return errors


def score_batting(runs_scored: int, fours: int, sixes: int, is_duck: bool) -> int:
    """
    Score batting.

    Scoring:
        - Runs: 1 point each
        - Fours: 2 points each (on top of the runs)
        - Sixes: 3 points each (on top of the runs)
        - Duck: -2 points, only when the duck flag is set and no runs were scored
    """
    points = runs_scored * POINTS_PER_RUN + fours * POINTS_PER_FOUR + sixes * POINTS_PER_SIX
    if is_duck and runs_scored == 0:
        points += DUCK_PENALTY
    return points


def haul_bonus(wickets: int) -> int:
    """
    Bonus for a wicket haul in a single fixture.

    Bands are checked from the highest threshold down and only the first
    match applies: 5+ wickets 20, 4 wickets 15, 3 wickets 10.
    """
    for threshold, bonus in HAUL_BONUS_BANDS:
        if wickets >= threshold:
            return bonus
    return 0


def score_bowling(wickets: int, maiden_overs: int, dot_balls: int) -> int:
    """
    Score bowling.

    Scoring:
        - Wickets: 25 points each
        - Maiden overs: 8 points each
        - Dot balls: 4 points each
        - Haul bonus: see haul_bonus()
    """
    return (
        wickets * POINTS_PER_WICKET
        + maiden_overs * POINTS_PER_MAIDEN
        + dot_balls * POINTS_PER_DOT_BALL
        + haul_bonus(wickets)
    )


def score_fielding(catches: int, stumpings: int, run_outs: int) -> int:
    """
    Score fielding.

    Scoring:
        - Catches: 8 points each
        - Stumpings: 12 points each
        - Run outs: 6 points each
    """
    return catches * POINTS_PER_CATCH + stumpings * POINTS_PER_STUMPING + run_outs * POINTS_PER_RUN_OUT


def compute_points(stat: StatLike) -> PointBreakdown:
    """
    Convert one player's raw match statistics into a point breakdown.

    Args:
        stat: PlayerMatchStat or a dict of counters (absent counters count as 0)

    Returns:
        PointBreakdown with batting, bowling, fielding and total points

    Raises:
        ValidationError: If any counter is negative or not an integer
    """
    errors = validate_stat(stat)
    if errors:
        raise ValidationError('; '.join(errors))

    c = _counters(stat)
    batting = score_batting(c['runs_scored'], c['fours'], c['sixes'], c['is_duck'])
    bowling = score_bowling(c['wickets'], c['maiden_overs'], c['dot_balls'])
    fielding = score_fielding(c['catches'], c['stumpings'], c['run_outs'])

    return PointBreakdown(
        batting_points=batting,
        bowling_points=bowling,
        fielding_points=fielding,
        total_points=batting + bowling + fielding,
    )
