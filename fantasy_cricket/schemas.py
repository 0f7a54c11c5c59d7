"""Pydantic schemas for stat input, game configuration and JSON data files."""

from pydantic import BaseModel, Field, field_validator

from .constants import (
    DEFAULT_BUDGET_CEILING,
    DEFAULT_MAX_MEMBERS,
    DEFAULT_MAX_PLAYERS_PER_REAL_TEAM,
    DEFAULT_PAGE_LIMIT,
    PLAYER_ROLES,
    SLOT_LAYOUT,
)
from .models import FantasySlot, FantasyTeam, Gameweek, League, Player, PlayerMatchStat


class PlayerStatInput(BaseModel):
    """One submitted stat row. Absent counters default to 0."""

    player_id: int
    gameweek_id: int
    fixture_id: int | None = None
    runs_scored: int = Field(default=0, ge=0)
    fours: int = Field(default=0, ge=0)
    sixes: int = Field(default=0, ge=0)
    is_duck: bool = False
    wickets: int = Field(default=0, ge=0)
    maiden_overs: int = Field(default=0, ge=0)
    dot_balls: int = Field(default=0, ge=0)
    catches: int = Field(default=0, ge=0)
    stumpings: int = Field(default=0, ge=0)
    run_outs: int = Field(default=0, ge=0)

    class Config:
        extra = 'ignore'

    def to_stat(self) -> PlayerMatchStat:
        return PlayerMatchStat(**self.model_dump())


class GameConfig(BaseModel):
    """Game-wide settings. The point table is fixed and not part of this."""

    budget_ceiling: float = Field(default=DEFAULT_BUDGET_CEILING, gt=0)
    max_players_per_real_team: int = Field(default=DEFAULT_MAX_PLAYERS_PER_REAL_TEAM, ge=1, le=11)
    default_max_members: int = Field(default=DEFAULT_MAX_MEMBERS, ge=1)
    default_page_limit: int = Field(default=DEFAULT_PAGE_LIMIT, ge=1, le=1000)

    class Config:
        extra = 'forbid'


class PlayerRecord(BaseModel):
    """Player entry in players.json."""

    id: int
    name: str = Field(..., min_length=1)
    role: str
    real_team: str = Field(..., min_length=1)
    cost: float = Field(default=0.0, ge=0)

    @field_validator('role')
    @classmethod
    def validate_role(cls, v):
        """Ensure role is a known player role."""
        if v not in PLAYER_ROLES:
            raise ValueError(f'Invalid role: {v}')
        return v

    class Config:
        extra = 'forbid'

    def to_player(self) -> Player:
        return Player(**self.model_dump())


class TeamRecord(BaseModel):
    """Fantasy team entry in teams.json.

    ``slots`` maps slot name (``batting_1`` .. ``flex_4``) to player id.
    """

    id: int
    owner_id: int
    name: str = Field(..., min_length=1)
    slots: dict[str, int]
    captain_id: int
    vice_captain_id: int

    @field_validator('slots')
    @classmethod
    def validate_slot_names(cls, v):
        """Ensure every slot name maps to a known slot role."""
        for slot_name in v:
            role = slot_name.rsplit('_', 1)[0]
            if role not in SLOT_LAYOUT:
                raise ValueError(f'Invalid slot: {slot_name}')
        return v

    class Config:
        extra = 'forbid'

    def to_team(self) -> FantasyTeam:
        slots = [
            FantasySlot(name=name, role=name.rsplit('_', 1)[0], player_id=player_id)
            for name, player_id in self.slots.items()
        ]
        return FantasyTeam(
            id=self.id,
            owner_id=self.owner_id,
            name=self.name,
            slots=slots,
            captain_id=self.captain_id,
            vice_captain_id=self.vice_captain_id,
        )


class LeagueRecord(BaseModel):
    """League entry in leagues.json, including its member team ids."""

    id: int
    name: str = Field(..., min_length=1)
    code: str = ''
    is_public: bool = True
    max_members: int | None = Field(default=None, ge=1)
    members: list[int] = Field(default_factory=list)

    class Config:
        extra = 'forbid'

    def to_league(self, default_max_members: int = DEFAULT_MAX_MEMBERS) -> League:
        """Build the League, using ``default_max_members`` when no capacity is set."""
        return League(
            id=self.id,
            name=self.name,
            code=self.code,
            is_public=self.is_public,
            max_members=self.max_members if self.max_members is not None else default_max_members,
        )


class GameweekRecord(BaseModel):
    id: int
    number: int = Field(..., ge=1)
    name: str = ''

    class Config:
        extra = 'forbid'

    def to_gameweek(self) -> Gameweek:
        return Gameweek(**self.model_dump())


class LeagueDataFile(BaseModel):
    """Complete league_data.json file structure."""

    players: list[PlayerRecord]
    teams: list[TeamRecord]
    leagues: list[LeagueRecord] = Field(default_factory=list)
    gameweeks: list[GameweekRecord] = Field(default_factory=list)

    class Config:
        extra = 'forbid'


class CumulativeEntryRecord(BaseModel):
    league_id: int
    team_id: int
    total_points: int = 0
    last_credited_gameweek: int = Field(default=0, ge=0)

    class Config:
        extra = 'forbid'


class CumulativeFile(BaseModel):
    """Complete cumulative_totals.json file structure."""

    entries: list[CumulativeEntryRecord] = Field(default_factory=list)

    class Config:
        extra = 'forbid'


class StatFile(BaseModel):
    """Complete player_stats.json file structure."""

    stats: list[PlayerStatInput] = Field(default_factory=list)

    class Config:
        extra = 'forbid'
