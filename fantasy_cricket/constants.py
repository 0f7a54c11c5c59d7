"""Constants and point values for the fantasy cricket engine."""

# Batting
POINTS_PER_RUN = 1
POINTS_PER_FOUR = 2
POINTS_PER_SIX = 3
DUCK_PENALTY = -2

# Bowling
POINTS_PER_WICKET = 25
POINTS_PER_MAIDEN = 8
POINTS_PER_DOT_BALL = 4

# Haul bonus bands, highest threshold first (bands are not cumulative)
HAUL_BONUS_BANDS = (
    (5, 20),
    (4, 15),
    (3, 10),
)

# Fielding
POINTS_PER_CATCH = 8
POINTS_PER_STUMPING = 12
POINTS_PER_RUN_OUT = 6

# Counters read from a stat row, in storage order
STAT_COUNTERS = (
    'runs_scored',
    'fours',
    'sixes',
    'wickets',
    'maiden_overs',
    'dot_balls',
    'catches',
    'stumpings',
    'run_outs',
)

CAPTAIN_MULTIPLIER = 2

# Player roles
BATSMAN = 'Batsman'
BOWLER = 'Bowler'
WICKET_KEEPER = 'Wicket-Keeper'
ALL_ROUNDER = 'All-Rounder'
PLAYER_ROLES = (BATSMAN, BOWLER, WICKET_KEEPER, ALL_ROUNDER)

# Slot role -> number of slots in a team
SLOT_LAYOUT = {
    'batting': 3,
    'keeper': 1,
    'bowling': 3,
    'flex': 4,
}
TEAM_SIZE = sum(SLOT_LAYOUT.values())

# Slot role -> player roles allowed in it (None = any role)
SLOT_ELIGIBILITY = {
    'batting': {BATSMAN},
    'keeper': {WICKET_KEEPER},
    'bowling': {BOWLER},
    'flex': None,
}

# Defaults used when no game config file is present
DEFAULT_BUDGET_CEILING = 100.0
DEFAULT_MAX_PLAYERS_PER_REAL_TEAM = 3
DEFAULT_MAX_MEMBERS = 100
DEFAULT_PAGE_LIMIT = 100
