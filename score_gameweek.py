#!/usr/bin/env python3
"""
Fantasy Cricket Gameweek Scorer CLI

Loads players, teams, leagues and gameweeks from data/league_data.json,
ingests the gameweek's stat sheet, scores every team and prints each
league's leaderboard.

Ingested stat rows are kept in data/player_stats.json, so each week's run
only needs that week's sheet and the printed totals still cover every
earlier gameweek. Cumulative totals credited with --credit are kept in
data/cumulative_totals.json.

Usage:
    python score_gameweek.py --gameweek 3 --stats stats/gw3.csv
    python score_gameweek.py --gameweek 3 --stats stats/gw3.xlsx --credit --export out/gw3.xlsx
"""

import argparse
import logging
import sys
from pathlib import Path

from fantasy_cricket import (
    FantasyEngine,
    JsonCumulativeStore,
    LeagueData,
    NotFound,
    StatRepository,
    ValidationError,
)
from fantasy_cricket.logging_config import setup_logging
from fantasy_cricket.stat_sheets import read_stats_csv, read_stats_excel, write_leaderboard_excel
from fantasy_cricket.team_scorer import GameweekScorer


def load_stat_rows(path: Path) -> list[dict]:
    """Read stat rows from a CSV or Excel file."""
    if path.suffix.lower() in ('.xlsx', '.xlsm'):
        return read_stats_excel(path)
    return read_stats_csv(path)


def main(argv=None):
    parser = argparse.ArgumentParser(description="Fantasy Cricket gameweek scorer")
    parser.add_argument(
        "--gameweek", "-g",
        type=int,
        required=True,
        help="Gameweek id to score",
    )
    parser.add_argument(
        "--stats", "-s",
        action="append",
        default=[],
        help="Stat sheet (CSV or .xlsx) to ingest before scoring; may be repeated",
    )
    parser.add_argument(
        "--data-dir", "-d",
        default="data",
        help="Path to data directory",
    )
    parser.add_argument(
        "--credit",
        action="store_true",
        help="Credit cumulative league totals through this gameweek",
    )
    parser.add_argument(
        "--export", "-o",
        default=None,
        help="Write each league's leaderboard to this workbook (league id is appended)",
    )
    parser.add_argument(
        "--quiet", "-q",
        action="store_true",
        help="Suppress detailed output",
    )
    parser.add_argument(
        "--log-file",
        default=None,
        help="Also write log records to this file",
    )

    args = parser.parse_args(argv)

    setup_logging(
        level=logging.WARNING if args.quiet else logging.INFO,
        log_file=Path(args.log_file) if args.log_file else None,
    )

    data_dir = Path(args.data_dir)
    league_data_path = data_dir / "league_data.json"
    stats_file = data_dir / "player_stats.json"

    if not league_data_path.exists():
        print(f"❌ League data file not found: {league_data_path}")
        sys.exit(1)

    data = LeagueData.from_file(league_data_path)
    data.stats = StatRepository.from_file(stats_file)
    engine = FantasyEngine(data, JsonCumulativeStore(data_dir / "cumulative_totals.json"))

    try:
        data.gameweek(args.gameweek)
    except NotFound as e:
        print(f"❌ {e}")
        sys.exit(1)

    for problem_team, problems in engine.validate_teams().items():
        for problem in problems:
            print(f"⚠️  Team {problem_team}: {problem}")

    for stats_path in args.stats:
        result = engine.ingest_stats(load_stat_rows(Path(stats_path)))
        print(f"{stats_path}: {result.inserted} inserted, {result.updated} updated, {len(result.errors)} errors")
        for err in result.errors:
            print(f"   row {err['index']} (player {err['player_id']}): {err['error']}")
    if args.stats:
        data.stats.save(stats_file)
        print(f"Stats saved: {stats_file} ({len(data.stats)} rows)")

    print(f"Scoring gameweek {args.gameweek}...")
    GameweekScorer(data.stats, args.gameweek).score_teams(data.teams.values(), verbose=not args.quiet)

    for league_id, league in data.leagues.items():
        if args.credit:
            try:
                engine.credit_through(league_id, args.gameweek)
            except ValidationError as e:
                print(f"❌ Could not credit {league.name}: {e}")
                sys.exit(1)

        if not league.is_public:
            print(f"\nSkipping private league {league.name}")
            continue

        page = engine.league_leaderboard(
            league_id, as_of_gameweek=args.gameweek, limit=max(len(data.teams), 1)
        )

        print("\n" + "=" * 60)
        print(f"{league.name.upper()} LEADERBOARD")
        print("=" * 60)
        for row in page.rows:
            print(f"  {row.rank}. {row.team_name}: {row.total_points} pts ({row.latest_gw_points} this gameweek)")

        if args.export:
            export_path = Path(args.export)
            export_path = export_path.with_name(f"{export_path.stem}_league_{league_id}{export_path.suffix or '.xlsx'}")
            write_leaderboard_excel(page, export_path)
            print(f"Leaderboard saved: {export_path}")


if __name__ == "__main__":
    main()
