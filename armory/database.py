# armory/database.py

import sqlite3
import os
import threading
import json
from pathlib import Path
from typing import Iterable, List, Optional, Set

from armory import config
from armory.models import CharacterDetail, MatchDetails, MatchSummary


class Database:
    """Store crawled arena matches for later analysis."""

    def __init__(self, db_path: Optional[str] = None):
        self.db_path = self._resolve_db_path(db_path or config.DB_PATH)
        self.conn = None
        self._lock = threading.Lock()
        self.init_database()

    @staticmethod
    def _resolve_db_path(db_path: str) -> str:
        """Return an absolute database path anchored to project root when relative."""
        path = Path(db_path)
        if path.is_absolute():
            return str(path)

        project_root = Path(__file__).resolve().parents[1]
        return str(project_root / path)

    def init_database(self):
        """Create tables if they don't exist."""
        db_dir = os.path.dirname(self.db_path)
        if db_dir:
            try:
                os.makedirs(db_dir, exist_ok=True)
            except OSError as e:
                raise RuntimeError(f"Failed to create database directory '{db_dir}': {e}")

        self.conn = sqlite3.connect(self.db_path, timeout=30.0, check_same_thread=False)
        self.conn.row_factory = sqlite3.Row  # Access columns by name
        self.conn.execute("PRAGMA foreign_keys = ON")

        cursor = self.conn.cursor()
        cursor.execute("""
            CREATE TABLE IF NOT EXISTS matches (
                row_id INTEGER PRIMARY KEY AUTOINCREMENT,
                character TEXT NOT NULL,
                realm TEXT NOT NULL,
                match_id TEXT NOT NULL,
                team_name TEXT,
                bracket TEXT,
                outcome TEXT,
                points_change TEXT,
                date TEXT,
                duration TEXT,
                arena TEXT,
                created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
                UNIQUE (character, realm, match_id)
            )
        """)

        cursor.execute("""
            CREATE TABLE IF NOT EXISTS character_details (
                detail_id INTEGER PRIMARY KEY AUTOINCREMENT,
                match_row_id INTEGER NOT NULL,
                position INTEGER NOT NULL,
                payload TEXT NOT NULL,
                FOREIGN KEY (match_row_id) REFERENCES matches(row_id) ON DELETE CASCADE
            )
        """)

        cursor.execute("""
            CREATE INDEX IF NOT EXISTS idx_character_details_match
            ON character_details (match_row_id, position)
        """)
        self.conn.commit()

    @staticmethod
    def _key(character: str, realm: str) -> tuple:
        return (character.strip().lower(), realm.strip().lower())

    def save_match_details(self, character: str, realm: str, matches: Iterable[MatchDetails]) -> int:
        """Upsert matches for a character; a re-saved match replaces its character rows."""
        char_key, realm_key = self._key(character, realm)
        with self._lock:
            cursor = self.conn.cursor()
            written = 0
            try:
                for match in matches:
                    cursor.execute("""
                        INSERT INTO matches (
                            character, realm, match_id, team_name, bracket,
                            outcome, points_change, date, duration, arena
                        ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                        ON CONFLICT (character, realm, match_id) DO UPDATE SET
                            team_name = excluded.team_name,
                            bracket = excluded.bracket,
                            outcome = excluded.outcome,
                            points_change = excluded.points_change,
                            date = excluded.date,
                            duration = excluded.duration,
                            arena = excluded.arena
                    """, (
                        char_key, realm_key, match.match_id, match.team_name, match.bracket,
                        match.outcome, match.points_change, match.date, match.duration, match.arena,
                    ))
                    cursor.execute(
                        "SELECT row_id FROM matches WHERE character = ? AND realm = ? AND match_id = ?",
                        (char_key, realm_key, match.match_id),
                    )
                    row_id = cursor.fetchone()["row_id"]

                    cursor.execute("DELETE FROM character_details WHERE match_row_id = ?", (row_id,))
                    cursor.executemany(
                        "INSERT INTO character_details (match_row_id, position, payload) VALUES (?, ?, ?)",
                        [
                            (row_id, position, json.dumps(detail.to_dict()))
                            for position, detail in enumerate(match.character_details)
                        ],
                    )
                    written += 1
                self.conn.commit()
            except sqlite3.Error:
                self.conn.rollback()
                raise
            return written

    def get_match_details(self, character: str, realm: str, limit: Optional[int] = None) -> List[MatchDetails]:
        """Return stored matches for a character, most recently inserted first."""
        char_key, realm_key = self._key(character, realm)
        query = """
            SELECT * FROM matches
            WHERE character = ? AND realm = ?
            ORDER BY row_id DESC
        """
        params: list = [char_key, realm_key]
        if limit is not None:
            query += " LIMIT ?"
            params.append(int(limit))
        with self._lock:
            cursor = self.conn.cursor()
            cursor.execute(query, params)
            match_rows = cursor.fetchall()
            payloads_by_row = {}
            for row in match_rows:
                cursor.execute(
                    "SELECT payload FROM character_details WHERE match_row_id = ? ORDER BY position",
                    (row["row_id"],),
                )
                payloads_by_row[row["row_id"]] = [r["payload"] for r in cursor.fetchall()]

        out: List[MatchDetails] = []
        for row in match_rows:
            details = [CharacterDetail.from_payload(json.loads(p)) for p in payloads_by_row[row["row_id"]]]
            summary = MatchSummary(
                match_id=row["match_id"],
                team_name=row["team_name"] or "",
                bracket=row["bracket"] or "",
                outcome=row["outcome"] or "",
                points_change=row["points_change"] or "",
                date=row["date"] or "",
                duration=row["duration"] or "",
                arena=row["arena"] or "",
            )
            out.append(MatchDetails.from_summary(summary, details))
        return out

    def get_match_ids(self, character: str, realm: str) -> Set[str]:
        char_key, realm_key = self._key(character, realm)
        with self._lock:
            cursor = self.conn.cursor()
            cursor.execute(
                "SELECT match_id FROM matches WHERE character = ? AND realm = ?",
                (char_key, realm_key),
            )
            return {row["match_id"] for row in cursor.fetchall()}

    def close(self):
        """Close database connection."""
        with self._lock:
            if self.conn:
                self.conn.close()
                self.conn = None
