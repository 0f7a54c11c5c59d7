"""Integration tests for end-to-end workflows."""

import json
import logging

import openpyxl
import pytest

import score_gameweek
from fantasy_cricket.cumulative import JsonCumulativeStore
from fantasy_cricket.engine import FantasyEngine, LeagueData
from fantasy_cricket.exceptions import (
    AccessDenied,
    DuplicateMembership,
    LeagueFull,
    NotFound,
    ValidationError,
)
from fantasy_cricket.logging_config import LOGGER_NAME, setup_logging
from fantasy_cricket.stat_sheets import read_stats_csv, read_stats_excel, write_leaderboard_excel

DEFAULT_XI = {
    'batting_1': 1, 'batting_2': 2, 'batting_3': 3, 'keeper': 4,
    'bowling_1': 5, 'bowling_2': 6, 'bowling_3': 7,
    'flex_1': 8, 'flex_2': 9, 'flex_3': 10, 'flex_4': 11,
}

# Gameweek 101 (number 1) points: 1 -> 38, 2 -> -2, 5 -> 125, 7 -> 33, 12 -> 56, 13 -> 8
GW1_CSV = (
    'player_id,gameweek_id,name,runs_scored,fours,sixes,is_duck,wickets,maiden_overs,dot_balls,catches\n'
    '1,101,Opener One,30,4,,0,,,,\n'
    '2,101,Opener Two,0,,,1,,,,\n'
    '5,101,Quick One,,,,0,3,,10,\n'
    '7,101,Spinner,,,,0,1,1,,\n'
    '12,101,Spare Bat,50,,2,0,,,,\n'
    '13,101,Spare Bowler,,,,0,,,,1\n'
)

# Gameweek 102 (number 2) points: 1 -> 10, 2 -> 16, 12 -> 5
GW2_ROWS = [
    ('player_id', 'gameweek_id', 'runs_scored', 'catches'),
    (1, 102, 10, None),
    (2, 102, None, 2),
    (None, None, None, None),
    (12, 102, 5, None),
]


@pytest.fixture
def temp_data_dir(tmp_path):
    """Create temporary data directory with a league_data.json file."""
    data_dir = tmp_path / 'data'
    data_dir.mkdir()

    players = [
        (1, 'Opener One', 'Batsman', 'MUM'),
        (2, 'Opener Two', 'Batsman', 'CHE'),
        (3, 'First Drop', 'Batsman', 'KOL'),
        (4, 'Gloveman', 'Wicket-Keeper', 'DEL'),
        (5, 'Quick One', 'Bowler', 'MUM'),
        (6, 'Quick Two', 'Bowler', 'CHE'),
        (7, 'Spinner', 'Bowler', 'KOL'),
        (8, 'Utility One', 'All-Rounder', 'DEL'),
        (9, 'Utility Two', 'All-Rounder', 'PUN'),
        (10, 'Utility Three', 'All-Rounder', 'PUN'),
        (11, 'Utility Four', 'All-Rounder', 'RAJ'),
        (12, 'Spare Bat', 'Batsman', 'MUM'),
        (13, 'Spare Bowler', 'Bowler', 'MUM'),
    ]
    league_data = {
        'players': [
            {'id': pid, 'name': name, 'role': role, 'real_team': real_team, 'cost': 8.0}
            for pid, name, role, real_team in players
        ],
        'teams': [
            {
                'id': 1, 'owner_id': 1, 'name': 'Yorkers',
                'slots': DEFAULT_XI, 'captain_id': 1, 'vice_captain_id': 2,
            },
            {
                'id': 2, 'owner_id': 2, 'name': 'Googlies',
                'slots': {**DEFAULT_XI, 'batting_1': 12, 'bowling_1': 13},
                'captain_id': 7, 'vice_captain_id': 12,
            },
            {
                'id': 3, 'owner_id': 3, 'name': 'Doosras',
                'slots': DEFAULT_XI, 'captain_id': 5, 'vice_captain_id': 6,
            },
        ],
        'leagues': [
            {'id': 1, 'name': 'Office League', 'code': 'OFF1', 'max_members': 3, 'members': [1, 2]},
            {'id': 2, 'name': 'Friends', 'is_public': False, 'max_members': 2, 'members': [1, 3]},
        ],
        'gameweeks': [
            {'id': 101, 'number': 1, 'name': 'Gameweek 1'},
            {'id': 102, 'number': 2, 'name': 'Gameweek 2'},
        ],
    }
    with open(data_dir / 'league_data.json', 'w') as f:
        json.dump(league_data, f, indent=2)

    (data_dir / 'gw1.csv').write_text(GW1_CSV)

    wb = openpyxl.Workbook()
    ws = wb.active
    ws.title = 'GW2'
    for row in GW2_ROWS:
        ws.append(row)
    wb.save(data_dir / 'gw2.xlsx')

    return data_dir


@pytest.fixture
def engine(temp_data_dir):
    """Engine over the temp league data with both gameweeks ingested."""
    data = LeagueData.from_file(temp_data_dir / 'league_data.json')
    engine = FantasyEngine(data, JsonCumulativeStore(temp_data_dir / 'cumulative_totals.json'))
    engine.ingest_stats(read_stats_csv(temp_data_dir / 'gw1.csv'))
    engine.ingest_stats(read_stats_excel(temp_data_dir / 'gw2.xlsx', sheet_name='GW2'))
    return engine


class TestLoadAndIngest:
    """Integration tests for loading league data and stat sheets."""

    def test_load_league_data(self, temp_data_dir):
        data = LeagueData.from_file(temp_data_dir / 'league_data.json')
        assert len(data.players) == 13
        assert data.team(2).player_ids[0] == 12
        assert data.team(2).slots[0].role == 'batting'
        assert data.league(2).is_public is False
        assert [(m.league_id, m.team_id) for m in data.memberships] == [(1, 1), (1, 2), (2, 1), (2, 3)]
        assert data.gameweek(102).number == 2

    def test_invalid_league_data(self, tmp_path):
        path = tmp_path / 'league_data.json'
        path.write_text(json.dumps({
            'players': [{'id': 1, 'name': 'X', 'role': 'Twelfth Man', 'real_team': 'MUM'}],
            'teams': [],
        }))
        with pytest.raises(ValidationError):
            LeagueData.from_file(path)

    def test_read_csv(self, temp_data_dir):
        """Test empty cells are dropped so counters fall back to 0."""
        rows = read_stats_csv(temp_data_dir / 'gw1.csv')
        assert len(rows) == 6
        assert rows[0]['runs_scored'] == 30
        assert 'sixes' not in rows[0]

    def test_read_excel_skips_blank_rows(self, temp_data_dir):
        rows = read_stats_excel(temp_data_dir / 'gw2.xlsx', sheet_name='GW2')
        assert rows == [
            {'player_id': 1, 'gameweek_id': 102, 'runs_scored': 10},
            {'player_id': 2, 'gameweek_id': 102, 'catches': 2},
            {'player_id': 12, 'gameweek_id': 102, 'runs_scored': 5},
        ]

    def test_missing_stats_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            read_stats_csv(tmp_path / 'nope.csv')

    def test_ingested_points(self, engine):
        stats = engine.data.stats
        assert stats.points_for_gameweek(101) == {1: 38, 2: -2, 5: 125, 7: 33, 12: 56, 13: 8}
        assert stats.points_for_gameweek(102) == {1: 10, 2: 16, 12: 5}

    def test_ingest_stat_unknown_player(self, engine):
        with pytest.raises(NotFound):
            engine.ingest_stat({'player_id': 99, 'gameweek_id': 101, 'runs_scored': 4})

    def test_ingest_stat_update(self, engine):
        """Test a corrected row replaces the stored one."""
        breakdown, created = engine.ingest_stat({'player_id': 13, 'gameweek_id': 101, 'catches': 2})
        assert not created
        assert breakdown.fielding_points == 16

    def test_teams_valid(self, engine):
        assert engine.validate_teams() == {}


class TestGameweekScoring:
    """Integration tests for team scores across gameweeks."""

    def test_team_scores(self, engine):
        """Test captain doubling in gameweek 1."""
        assert engine.team_gameweek_score(1, 101).score == 194 + 38
        assert engine.team_gameweek_score(2, 101).score == 95 + 33
        assert engine.team_gameweek_score(3, 101).score == 194 + 125

    def test_vice_captain_covers_absent_captain(self, engine):
        """Test team 2's captain missed gameweek 2 so the vice-captain is doubled."""
        result = engine.team_gameweek_score(2, 102)
        assert result.doubled_player_id == 12
        assert result.score == 21 + 5

    def test_nobody_doubled(self, engine):
        result = engine.team_gameweek_score(3, 102)
        assert result.doubled_player_id is None
        assert result.score == 26

    def test_gameweek_scores_by_number(self, engine):
        assert engine.gameweek_scores([1, 2]) == {1: {1: 232, 2: 36}, 2: {1: 128, 2: 26}}

    def test_unknown_gameweek(self, engine):
        with pytest.raises(NotFound):
            engine.team_gameweek_score(1, 999)


class TestLeaderboardFlow:
    """Integration tests for leaderboards built from ingested stats."""

    def test_all_time(self, engine):
        page = engine.league_leaderboard(1)
        assert [(r.rank, r.team_name, r.total_points, r.latest_gw_points) for r in page.rows] == [
            (1, 'Yorkers', 268, 36),
            (2, 'Googlies', 154, 26),
        ]

    def test_as_of_gameweek(self, engine):
        page = engine.league_leaderboard(1, as_of_gameweek=101)
        assert page.as_of_gameweek == 1
        assert [(r.team_id, r.total_points, r.latest_gw_points) for r in page.rows] == [
            (1, 232, 232),
            (2, 128, 128),
        ]

    def test_private_league_member(self, engine):
        page = engine.league_leaderboard(2, viewer_id=3)
        assert [(r.team_id, r.total_points) for r in page.rows] == [(3, 345), (1, 268)]

    @pytest.mark.parametrize('viewer_id', [None, 2])
    def test_private_league_denied(self, engine, viewer_id):
        with pytest.raises(AccessDenied):
            engine.league_leaderboard(2, viewer_id=viewer_id)

    def test_unknown_league(self, engine):
        with pytest.raises(NotFound):
            engine.league_leaderboard(999)

    def test_export(self, engine, tmp_path):
        """Test the leaderboard workbook layout."""
        path = tmp_path / 'out' / 'office.xlsx'
        write_leaderboard_excel(engine.league_leaderboard(1, as_of_gameweek=102), path)

        ws = openpyxl.load_workbook(path).active
        assert ws.title == 'Leaderboard'
        assert ws['A1'].value == 'Office League (as of gameweek 2)'
        assert [c.value for c in ws[3]] == ['Rank', 'Team', 'Owner', 'Total Points', 'Gameweek Points']
        assert [c.value for c in ws[4]] == [1, 'Yorkers', 1, 268, 36]
        assert [c.value for c in ws[5]] == [2, 'Googlies', 2, 154, 26]


class TestCreditingFlow:
    """Integration tests for cumulative totals."""

    def test_credit_through_is_idempotent(self, engine):
        results = engine.credit_through(1, 102)
        assert [r.entry.last_credited_gameweek for r in results[1]] == [1, 2]
        assert engine.cumulative_totals(1) == {1: 268, 2: 154}

        again = engine.credit_through(1, 102)
        assert again == {1: [], 2: []}
        assert engine.cumulative_totals(1) == {1: 268, 2: 154}

    def test_totals_match_leaderboard(self, engine):
        """Test credited totals agree with the all-time leaderboard."""
        engine.credit_through(1, 102)
        page = engine.league_leaderboard(1)
        assert {r.team_id: r.total_points for r in page.rows} == engine.cumulative_totals(1)

    def test_stepwise_credit(self, engine):
        assert engine.credit_team(1, 1, 101).entry.total_points == 232
        results = engine.credit_through(1, 102)
        assert len(results[1]) == 1
        assert results[1][0].entry.total_points == 268

    def test_totals_persist(self, engine, temp_data_dir):
        engine.credit_through(1, 101)
        store = JsonCumulativeStore(temp_data_dir / 'cumulative_totals.json')
        assert store.get(1, 2).total_points == 128

    def test_credit_non_member(self, engine):
        with pytest.raises(NotFound):
            engine.credit_team(1, 3, 101)

    def test_credit_skipping_gameweek_rejected(self, engine):
        """Test gameweek 2 cannot be credited before gameweek 1."""
        with pytest.raises(ValidationError, match='gameweek 1 must be credited before gameweek 2'):
            engine.credit_team(1, 1, 102)
        assert engine.cumulative_totals(1) == {}

        engine.credit_team(1, 1, 101)
        assert engine.credit_team(1, 1, 102).entry.total_points == 268



class TestMembershipFlow:
    """Integration tests for joining and leaving leagues."""

    def test_join(self, engine):
        engine.join_league(1, 3, user_id=3)
        assert [r.team_id for r in engine.league_leaderboard(1).rows] == [3, 1, 2]

    def test_join_twice(self, engine):
        with pytest.raises(DuplicateMembership):
            engine.join_league(1, 2)

    def test_join_full_league(self, engine):
        with pytest.raises(LeagueFull):
            engine.join_league(2, 2, user_id=2)

    def test_join_with_someone_elses_team(self, engine):
        with pytest.raises(AccessDenied):
            engine.join_league(1, 3, user_id=1)

    def test_leave_drops_total(self, engine):
        engine.credit_through(1, 102)
        engine.leave_league(1, 2)
        assert engine.cumulative_totals(1) == {1: 268}
        assert [r.team_id for r in engine.league_leaderboard(1).rows] == [1]

        with pytest.raises(NotFound):
            engine.leave_league(1, 2)


class TestConfigIntegration:
    """Test configuration integration with the engine."""

    def test_config_loaded(self):
        from fantasy_cricket.config import get_config

        config = get_config()
        assert config.budget_ceiling == 100.0
        assert config.max_players_per_real_team == 3
        assert config.default_page_limit == 100

    def test_league_capacity_defaults_from_config(self, tmp_path):
        path = tmp_path / 'league_data.json'
        path.write_text(json.dumps({
            'players': [],
            'teams': [],
            'leagues': [{'id': 5, 'name': 'Open League'}],
        }))
        data = LeagueData.from_file(path)
        assert data.league(5).max_members == 100
        assert data.league(5).is_public is True


@pytest.fixture
def reset_logging():
    """Drop the handlers the CLI installs on the package logger."""
    yield
    logger = logging.getLogger(LOGGER_NAME)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.setLevel(logging.NOTSET)


class TestCommandLine:
    """Run score_gameweek.main() the way a weekly cron job would."""

    def run(self, data_dir, gameweek_id, sheet, *extra):
        score_gameweek.main([
            '--gameweek', str(gameweek_id),
            '--stats', str(data_dir / sheet),
            '--data-dir', str(data_dir),
            '--quiet',
            *extra,
        ])

    def test_weekly_runs_accumulate(self, temp_data_dir, capsys, reset_logging):
        """Test a second week's run prints totals covering both gameweeks."""
        self.run(temp_data_dir, 101, 'gw1.csv', '--credit')
        first = capsys.readouterr().out
        assert '1. Yorkers: 232 pts (232 this gameweek)' in first

        self.run(temp_data_dir, 102, 'gw2.xlsx', '--credit')
        second = capsys.readouterr().out
        assert '1. Yorkers: 268 pts (36 this gameweek)' in second
        assert '2. Googlies: 154 pts (26 this gameweek)' in second
        assert 'Skipping private league Friends' in second

        store = JsonCumulativeStore(temp_data_dir / 'cumulative_totals.json')
        assert store.get(1, 1).total_points == 268
        assert store.get(1, 2).total_points == 154
        assert store.get(2, 3).total_points == 345
        assert (temp_data_dir / 'player_stats.json').exists()

    def test_rerun_same_week_is_idempotent(self, temp_data_dir, capsys, reset_logging):
        self.run(temp_data_dir, 101, 'gw1.csv', '--credit')
        self.run(temp_data_dir, 101, 'gw1.csv', '--credit')
        out = capsys.readouterr().out
        assert '6 updated' in out
        assert JsonCumulativeStore(temp_data_dir / 'cumulative_totals.json').get(1, 1).total_points == 232

    def test_unknown_gameweek_exits(self, temp_data_dir, capsys, reset_logging):
        with pytest.raises(SystemExit) as exc_info:
            self.run(temp_data_dir, 999, 'gw1.csv')
        assert exc_info.value.code == 1
        assert 'Gameweek' in capsys.readouterr().out

    def test_log_file(self, temp_data_dir, tmp_path, reset_logging):
        log_file = tmp_path / 'logs' / 'gw1.log'
        score_gameweek.main([
            '--gameweek', '101',
            '--stats', str(temp_data_dir / 'gw1.csv'),
            '--data-dir', str(temp_data_dir),
            '--log-file', str(log_file),
        ])
        text = log_file.read_text()
        assert 'fantasy_cricket.ingestion INFO: Bulk player points processed: inserted=6' in text


class TestSetupLogging:
    """Tests for the package logger setup."""

    def test_repeated_setup_replaces_handlers(self, tmp_path, reset_logging):
        setup_logging(log_file=tmp_path / 'a.log')
        logger = setup_logging(level=logging.DEBUG)
        assert len(logger.handlers) == 1
        assert logger.level == logging.DEBUG

    def test_records_written_to_file(self, tmp_path, reset_logging):
        log_file = tmp_path / 'run.log'
        setup_logging(log_file=log_file)
        logging.getLogger('fantasy_cricket.engine').info('credited league 1')
        logging.getLogger('fantasy_cricket.engine').debug('not shown')
        text = log_file.read_text()
        assert 'fantasy_cricket.engine INFO: credited league 1' in text
        assert 'not shown' not in text
