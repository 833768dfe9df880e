# tests/helpers.py

import json
import os
import threading
import time
from typing import Dict, List, Optional

from armory.api_client import ArmoryClient, RemoteFetchError
from armory.models import CharacterDetail, MatchSummary

FIXTURES_DIR = os.path.join(os.path.dirname(__file__), "fixtures")


def fixture_path(filename: str) -> str:
    return os.path.join(FIXTURES_DIR, filename)


def load_text(filename: str) -> str:
    with open(fixture_path(filename), "r", encoding="utf-8") as f:
        return f.read()


def load_json(filename: str):
    return json.loads(load_text(filename))


def make_summary(match_id: str, **overrides) -> MatchSummary:
    values = {
        "team_name": "Alpha Strike",
        "bracket": "2v2",
        "outcome": "Win",
        "points_change": "+12",
        "date": "2024-03-02 21:14:07",
        "duration": "4 minutes",
        "arena": "Ring of Valor",
    }
    values.update(overrides)
    return MatchSummary(match_id=match_id, **values)


def make_detail_payload(charname: str = "Pinkbunny", **overrides) -> Dict:
    payload = {
        "realm": "Icecrown",
        "charname": charname,
        "class": "8",
        "race": "7",
        "gender": "1",
        "teamname": "Alpha Strike",
        "teamnamerich": "<span class=\"team-win\">Alpha Strike</span>",
        "damageDone": "48211",
        "deaths": "0",
        "healingDone": "1503",
        "killingBlows": "2",
        "matchmaking_change": "1587 (<span class=\"positive\">+14</span>)",
        "personal_change": "1543 (<span class=\"positive\">+12</span>)",
    }
    payload.update(overrides)
    return payload


class FakeArmoryClient(ArmoryClient):
    """ArmoryClient that answers from memory instead of the network."""

    def __init__(
        self,
        details_by_match: Optional[Dict[str, List[Dict]]] = None,
        history_html: str = "",
        failing_ids: Optional[set] = None,
        delays: Optional[Dict[str, float]] = None,
    ):
        super().__init__(base_url="https://armory.test", timeout_seconds=1)
        self.details_by_match = details_by_match or {}
        self.history_html = history_html
        self.failing_ids = failing_ids or set()
        self.delays = delays or {}
        self.calls: List[str] = []
        self.in_flight = 0
        self.peak_in_flight = 0
        self._lock = threading.Lock()

    def fetch_match_history_html(self, character: str, realm: str) -> str:
        return self.history_html

    def fetch_match_data(self, match_id: str, character: str, realm: str) -> List[CharacterDetail]:
        with self._lock:
            self.calls.append(match_id)
            self.in_flight += 1
            self.peak_in_flight = max(self.peak_in_flight, self.in_flight)
        try:
            delay = self.delays.get(match_id, 0)
            if delay:
                time.sleep(delay)
        finally:
            with self._lock:
                self.in_flight -= 1
        if match_id in self.failing_ids:
            raise RemoteFetchError(f"POST match {match_id} failed with HTTP 503", status=503)
        payloads = self.details_by_match.get(match_id, [make_detail_payload(f"Char{match_id}")])
        return [CharacterDetail.from_payload(p) for p in payloads]
