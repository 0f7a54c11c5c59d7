from .models import (
    PlayerMatchStat,
    PointBreakdown,
    Player,
    FantasySlot,
    FantasyTeam,
    Gameweek,
    League,
    LeagueMembership,
    CumulativeEntry,
    SlotScore,
    TeamGameweekScore,
    LeaderboardRow,
    LeaderboardPage,
    BulkIngestResult,
)
from .exceptions import (
    FantasyCricketError,
    ValidationError,
    InvariantViolation,
    InvalidTeamState,
    NotFound,
    AccessDenied,
    LeagueFull,
    DuplicateMembership,
)
from .scoring import compute_points, haul_bonus
from .team_scorer import compute_team_gameweek_score, GameweekScorer
from .leaderboard import rank_league, assign_ranks, can_view_leaderboard
from .cumulative import (
    CumulativeTotalsStore,
    InMemoryCumulativeStore,
    JsonCumulativeStore,
    CreditResult,
    credit_gameweek,
)
from .ingestion import StatRepository
from .league import join_league, leave_league
from .validators import validate_team, ensure_valid_team
from .engine import FantasyEngine, LeagueData

__all__ = [
    # Models
    'PlayerMatchStat',
    'PointBreakdown',
    'Player',
    'FantasySlot',
    'FantasyTeam',
    'Gameweek',
    'League',
    'LeagueMembership',
    'CumulativeEntry',
    'SlotScore',
    'TeamGameweekScore',
    'LeaderboardRow',
    'LeaderboardPage',
    'BulkIngestResult',
    # Errors
    'FantasyCricketError',
    'ValidationError',
    'InvariantViolation',
    'InvalidTeamState',
    'NotFound',
    'AccessDenied',
    'LeagueFull',
    'DuplicateMembership',
    # Scoring
    'compute_points',
    'haul_bonus',
    'compute_team_gameweek_score',
    'GameweekScorer',
    # Leaderboard
    'rank_league',
    'assign_ranks',
    'can_view_leaderboard',
    # Cumulative totals
    'CumulativeTotalsStore',
    'InMemoryCumulativeStore',
    'JsonCumulativeStore',
    'CreditResult',
    'credit_gameweek',
    # Stats, teams and leagues
    'StatRepository',
    'join_league',
    'leave_league',
    'validate_team',
    'ensure_valid_team',
    # Engine
    'FantasyEngine',
    'LeagueData',
]
