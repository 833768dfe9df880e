# armory/scraper/history.py
"""
Match-history table parsing.

The armory renders one <tr> per match inside table#data-table-history with
a fixed column layout: identifier, team (bracket), outcome, points change,
date, duration, arena. Missing cells yield empty strings.
"""

import re
from typing import List, Tuple

from bs4 import BeautifulSoup

from armory.models import MatchSummary

HISTORY_ROW_SELECTOR = "table#data-table-history tbody tr"
TEAM_BRACKET_RE = re.compile(r"(.*?)\s*\((\d+v\d+)\)")


def split_team_bracket(text: str) -> Tuple[str, str]:
    """Split 'Alpha Strike (2v2)' into ('Alpha Strike', '2v2'); ('', '') when it does not match."""
    match = TEAM_BRACKET_RE.search(text or "")
    if not match:
        return "", ""
    return match.group(1), match.group(2)


def _cell_text(row, column: int, selector: str = "") -> str:
    cell = row.select_one(f"td:nth-child({column}) {selector}".strip())
    if cell is None:
        return ""
    return cell.get_text().strip()


def parse_history_row(row) -> MatchSummary:
    team_name, bracket = split_team_bracket(_cell_text(row, 2, "a"))
    return MatchSummary(
        match_id=_cell_text(row, 1),
        team_name=team_name,
        bracket=bracket,
        outcome=_cell_text(row, 3),
        points_change=_cell_text(row, 4),
        date=_cell_text(row, 5),
        duration=_cell_text(row, 6),
        arena=_cell_text(row, 7),
    )


def extract_match_summaries(html: str) -> List[MatchSummary]:
    """Return one MatchSummary per history table row, in document order."""
    soup = BeautifulSoup(html or "", "html.parser")
    return [parse_history_row(row) for row in soup.select(HISTORY_ROW_SELECTOR)]
