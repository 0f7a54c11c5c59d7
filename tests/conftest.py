"""Shared fixtures for the fantasy cricket test suite."""

import pytest

from fantasy_cricket.models import FantasySlot, FantasyTeam, Player

SLOT_NAMES = [
    ('batting_1', 'batting'),
    ('batting_2', 'batting'),
    ('batting_3', 'batting'),
    ('keeper', 'keeper'),
    ('bowling_1', 'bowling'),
    ('bowling_2', 'bowling'),
    ('bowling_3', 'bowling'),
    ('flex_1', 'flex'),
    ('flex_2', 'flex'),
    ('flex_3', 'flex'),
    ('flex_4', 'flex'),
]


@pytest.fixture
def players():
    """Player catalog: ids 1-11 form a valid XI costing 88, 12-14 are extras."""
    catalog = [
        Player(1, 'Opener One', 'Batsman', 'MUM', 8.0),
        Player(2, 'Opener Two', 'Batsman', 'CHE', 8.0),
        Player(3, 'First Drop', 'Batsman', 'KOL', 8.0),
        Player(4, 'Gloveman', 'Wicket-Keeper', 'DEL', 8.0),
        Player(5, 'Quick One', 'Bowler', 'MUM', 8.0),
        Player(6, 'Quick Two', 'Bowler', 'CHE', 8.0),
        Player(7, 'Spinner', 'Bowler', 'KOL', 8.0),
        Player(8, 'Utility One', 'All-Rounder', 'DEL', 8.0),
        Player(9, 'Utility Two', 'All-Rounder', 'PUN', 8.0),
        Player(10, 'Utility Three', 'All-Rounder', 'PUN', 8.0),
        Player(11, 'Utility Four', 'All-Rounder', 'RAJ', 8.0),
        Player(12, 'Spare Bat', 'Batsman', 'MUM', 8.0),
        Player(13, 'Spare Bowler', 'Bowler', 'MUM', 8.0),
        Player(14, 'Star Allrounder', 'All-Rounder', 'RAJ', 30.0),
    ]
    return {p.id: p for p in catalog}


@pytest.fixture
def make_team():
    """Factory for a FantasyTeam filling the slots in order from player_ids."""
    def _make(
        team_id=1,
        owner_id=1,
        name=None,
        player_ids=None,
        captain_id=1,
        vice_captain_id=2,
    ):
        player_ids = list(player_ids or range(1, 12))
        slots = [
            FantasySlot(name=slot_name, role=role, player_id=player_id)
            for (slot_name, role), player_id in zip(SLOT_NAMES, player_ids)
        ]
        return FantasyTeam(
            id=team_id,
            owner_id=owner_id,
            name=name or f'Team {team_id}',
            slots=slots,
            captain_id=captain_id,
            vice_captain_id=vice_captain_id,
        )
    return _make
