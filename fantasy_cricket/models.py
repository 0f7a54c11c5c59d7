"""Data models for the fantasy cricket engine."""

from dataclasses import dataclass, field
from typing import Dict, List, Optional


@dataclass(frozen=True)
class PlayerMatchStat:
    """Raw counters for one player in one gameweek's fixture."""
    player_id: int
    gameweek_id: int
    fixture_id: Optional[int] = None
    runs_scored: int = 0
    fours: int = 0
    sixes: int = 0
    is_duck: bool = False
    wickets: int = 0
    maiden_overs: int = 0
    dot_balls: int = 0
    catches: int = 0
    stumpings: int = 0
    run_outs: int = 0

    @property
    def key(self) -> tuple[int, int]:
        return (self.player_id, self.gameweek_id)


@dataclass(frozen=True)
class PointBreakdown:
    """Points derived from a PlayerMatchStat."""
    batting_points: int = 0
    bowling_points: int = 0
    fielding_points: int = 0
    total_points: int = 0

    def as_dict(self) -> Dict[str, int]:
        return {
            'batting_points': self.batting_points,
            'bowling_points': self.bowling_points,
            'fielding_points': self.fielding_points,
            'total_points': self.total_points,
        }


@dataclass(frozen=True)
class Player:
    """A real-world cricketer available for selection."""
    id: int
    name: str
    role: str
    real_team: str
    cost: float = 0.0


@dataclass(frozen=True)
class FantasySlot:
    """One of the 11 named roles in a fantasy team."""
    name: str  # e.g. 'batting_1', 'keeper', 'flex_4'
    role: str  # batting, keeper, bowling, flex
    player_id: int


@dataclass
class FantasyTeam:
    """Container for a fantasy team's selection."""
    id: int
    owner_id: int
    name: str
    slots: List[FantasySlot] = field(default_factory=list)
    captain_id: Optional[int] = None
    vice_captain_id: Optional[int] = None

    @property
    def player_ids(self) -> List[int]:
        return [slot.player_id for slot in self.slots]


@dataclass(frozen=True)
class Gameweek:
    """Scheduling period used as the unit of scoring."""
    id: int
    number: int
    name: str = ''


@dataclass(frozen=True)
class League:
    id: int
    name: str
    code: str = ''
    is_public: bool = True
    max_members: int = 100


@dataclass(frozen=True)
class LeagueMembership:
    league_id: int
    team_id: int


@dataclass(frozen=True)
class CumulativeEntry:
    """Running total for a (league, team) pair and the last gameweek credited."""
    league_id: int
    team_id: int
    total_points: int = 0
    last_credited_gameweek: int = 0

    @property
    def key(self) -> tuple[int, int]:
        return (self.league_id, self.team_id)

    def is_credited_through(self, gameweek: int) -> bool:
        return self.last_credited_gameweek >= gameweek


@dataclass(frozen=True)
class SlotScore:
    """Score contribution of one slot for a gameweek."""
    slot: str
    player_id: int
    base_points: int
    played: bool
    multiplier: int = 1
    is_captain: bool = False
    is_vice_captain: bool = False

    @property
    def points(self) -> int:
        return self.base_points * self.multiplier


@dataclass
class TeamGameweekScore:
    """A fantasy team's score for one gameweek with per-slot detail."""
    team_id: int
    score: int
    slots: List[SlotScore] = field(default_factory=list)
    doubled_player_id: Optional[int] = None


@dataclass(frozen=True)
class LeaderboardRow:
    rank: int
    team_id: int
    team_name: str
    owner_id: Optional[int]
    total_points: int
    latest_gw_points: int


@dataclass
class LeaderboardPage:
    """One page of a league leaderboard plus the member count for pagination."""
    league: League
    rows: List[LeaderboardRow]
    limit: int
    offset: int
    total: int
    as_of_gameweek: Optional[int] = None


@dataclass
class BulkIngestResult:
    """Outcome of a batch stat upsert."""
    inserted: int = 0
    updated: int = 0
    errors: List[dict] = field(default_factory=list)

    @property
    def processed(self) -> int:
        return self.inserted + self.updated
