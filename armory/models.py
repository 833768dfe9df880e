# armory/models.py
"""
Records produced by the match-history crawler.

MatchSummary comes from one row of the history table, CharacterDetail from
one object of a match-detail payload, and MatchDetails joins the two for a
single match. All three are frozen; normalization builds new instances.
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields, replace
from typing import Any, Dict, Iterable, Optional, Tuple


@dataclass(frozen=True)
class MatchSummary:
    match_id: str
    team_name: str = ""
    bracket: str = ""
    outcome: str = ""
    points_change: str = ""
    date: str = ""
    duration: str = ""
    arena: str = ""

    def to_dict(self) -> Dict[str, str]:
        return {
            "matchId": self.match_id,
            "team_name": self.team_name,
            "bracket": self.bracket,
            "outcome": self.outcome,
            "points_change": self.points_change,
            "date": self.date,
            "duration": self.duration,
            "arena": self.arena,
        }


@dataclass(frozen=True)
class CharacterDetail:
    realm: str = ""
    charname: str = ""
    class_: Optional[str] = None
    race: Optional[str] = None
    gender: Optional[str] = None
    teamname: str = ""
    teamnamerich: str = ""
    damage_done: str = ""
    deaths: str = ""
    healing_done: str = ""
    killing_blows: str = ""
    matchmaking_change: Optional[str] = None
    personal_change: Optional[str] = None
    extra: Dict[str, Any] = field(default_factory=dict, hash=False)

    # attribute name -> key in the armory JSON payload
    PAYLOAD_KEYS = {
        "realm": "realm",
        "charname": "charname",
        "class_": "class",
        "race": "race",
        "gender": "gender",
        "teamname": "teamname",
        "teamnamerich": "teamnamerich",
        "damage_done": "damageDone",
        "deaths": "deaths",
        "healing_done": "healingDone",
        "killing_blows": "killingBlows",
        "matchmaking_change": "matchmaking_change",
        "personal_change": "personal_change",
    }
    OPTIONAL_FIELDS = ("class_", "race", "gender", "matchmaking_change", "personal_change")

    @staticmethod
    def _as_text(value: Any) -> Optional[str]:
        if value is None:
            return None
        return value if isinstance(value, str) else str(value)

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> "CharacterDetail":
        """Build a record from one decoded object of the match-detail payload."""
        kwargs: Dict[str, Any] = {}
        for attr, key in cls.PAYLOAD_KEYS.items():
            value = cls._as_text(payload.get(key))
            if value is None and attr not in cls.OPTIONAL_FIELDS:
                value = ""
            kwargs[attr] = value
        known = set(cls.PAYLOAD_KEYS.values())
        kwargs["extra"] = {k: v for k, v in payload.items() if k not in known}
        return cls(**kwargs)

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = dict(self.extra)
        for attr, key in self.PAYLOAD_KEYS.items():
            value = getattr(self, attr)
            if value is None:
                continue
            out[key] = value
        return out

    def with_changes(self, **changes: Any) -> "CharacterDetail":
        return replace(self, **changes)


@dataclass(frozen=True)
class MatchDetails:
    match_id: str
    team_name: str
    bracket: str
    outcome: str
    points_change: str
    date: str
    duration: str
    arena: str
    character_details: Tuple[CharacterDetail, ...] = ()

    @classmethod
    def from_summary(
        cls, summary: MatchSummary, character_details: Iterable[CharacterDetail]
    ) -> "MatchDetails":
        values = {f.name: getattr(summary, f.name) for f in fields(MatchSummary)}
        return cls(character_details=tuple(character_details), **values)

    @property
    def summary(self) -> MatchSummary:
        return MatchSummary(
            match_id=self.match_id,
            team_name=self.team_name,
            bracket=self.bracket,
            outcome=self.outcome,
            points_change=self.points_change,
            date=self.date,
            duration=self.duration,
            arena=self.arena,
        )

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = self.summary.to_dict()
        out["character_details"] = [detail.to_dict() for detail in self.character_details]
        return out
