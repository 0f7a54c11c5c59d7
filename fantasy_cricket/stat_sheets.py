"""Spreadsheet import of stat rows and export of leaderboards."""

import logging
from pathlib import Path
from typing import Any, Optional

import openpyxl
import polars as pl
from openpyxl.styles import Font

from .models import LeaderboardPage

logger = logging.getLogger('fantasy_cricket.stat_sheets')

LEADERBOARD_HEADERS = ['Rank', 'Team', 'Owner', 'Total Points', 'Gameweek Points']


def _clean_row(row: dict[str, Any]) -> dict[str, Any]:
    """Drop empty cells so absent counters fall back to their defaults."""
    return {
        str(key).strip(): value
        for key, value in row.items()
        if key is not None and value is not None and value != ''
    }


def read_stats_csv(path: Path | str) -> list[dict[str, Any]]:
    """
    Read stat rows from a CSV file with a header row.

    Column names match PlayerStatInput fields (player_id, gameweek_id,
    runs_scored, ...). Extra columns such as a player name are ignored at
    validation time.

    Args:
        path: CSV file path

    Returns:
        List of row dicts ready for StatRepository.bulk_upsert()
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f'Stats file not found: {path}')

    df = pl.read_csv(path)
    rows = [_clean_row(row) for row in df.to_dicts()]
    logger.info(f'Read {len(rows)} stat rows from {path}')
    return rows


def read_stats_excel(path: Path | str, sheet_name: Optional[str] = None) -> list[dict[str, Any]]:
    """
    Read stat rows from an Excel sheet whose first row holds the column names.

    Args:
        path: Workbook path
        sheet_name: Sheet to read (default: the active sheet)

    Returns:
        List of row dicts, blank rows skipped
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f'Stats workbook not found: {path}')

    wb = openpyxl.load_workbook(path, read_only=True, data_only=True)
    try:
        ws = wb[sheet_name] if sheet_name else wb.active
        values = ws.iter_rows(values_only=True)
        headers = next(values, None)
        if headers is None:
            return []

        rows = []
        for raw in values:
            row = _clean_row(dict(zip(headers, raw)))
            if row:
                rows.append(row)
    finally:
        wb.close()

    logger.info(f'Read {len(rows)} stat rows from {path}')
    return rows


def write_leaderboard_excel(
    page: LeaderboardPage,
    path: Path | str,
    sheet_name: str = 'Leaderboard',
) -> None:
    """
    Save a leaderboard page to a new workbook.

    Args:
        page: LeaderboardPage from rank_league()
        path: Output workbook path
        sheet_name: Title of the sheet
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    wb = openpyxl.Workbook()
    ws = wb.active
    ws.title = sheet_name

    title = page.league.name
    if page.as_of_gameweek is not None:
        title += f' (as of gameweek {page.as_of_gameweek})'
    ws.cell(row=1, column=1, value=title).font = Font(bold=True, size=14)

    for col, header in enumerate(LEADERBOARD_HEADERS, start=1):
        ws.cell(row=3, column=col, value=header).font = Font(bold=True)

    for row_idx, row in enumerate(page.rows, start=4):
        ws.cell(row=row_idx, column=1, value=row.rank)
        ws.cell(row=row_idx, column=2, value=row.team_name)
        ws.cell(row=row_idx, column=3, value=row.owner_id)
        ws.cell(row=row_idx, column=4, value=row.total_points)
        ws.cell(row=row_idx, column=5, value=row.latest_gw_points)

    wb.save(path)
    logger.info(f'Leaderboard for league {page.league.id} saved to {path}')
