# tests/test_database.py

import pytest
import os
import tempfile
import threading
from armory.database import Database
from armory.models import CharacterDetail, MatchDetails
from armory.scraper.normalize import normalize_character_details
from tests.helpers import load_json, make_detail_payload, make_summary


class TestDatabase:
    """Test suite for database operations."""

    @pytest.fixture
    def db(self):
        """Create a temporary database for testing."""
        fd, db_path = tempfile.mkstemp(suffix='.db')
        os.close(fd)

        database = Database(db_path)

        yield database

        database.close()
        if os.path.exists(db_path):
            os.remove(db_path)

    @pytest.fixture
    def sample_matches(self):
        """Two joined matches; the first carries the full fixture payload."""
        fixture_details = normalize_character_details(
            CharacterDetail.from_payload(p) for p in load_json('match_detail.json')
        )
        second_payload = make_detail_payload('Holyoak', **{'class': None, 'matchmaking_change': None})
        return [
            MatchDetails.from_summary(make_summary('7412093'), fixture_details),
            MatchDetails.from_summary(
                make_summary('7411877', outcome='Loss', points_change='-9'),
                [CharacterDetail.from_payload({k: v for k, v in second_payload.items() if v is not None})],
            ),
        ]

    def test_init_creates_tables(self, db):
        cursor = db.conn.cursor()
        cursor.execute("SELECT name FROM sqlite_master WHERE type='table'")
        tables = {row['name'] for row in cursor.fetchall()}

        assert 'matches' in tables
        assert 'character_details' in tables

    def test_save_and_load_round_trip(self, db, sample_matches):
        written = db.save_match_details('Pinkbunny', 'Icecrown', sample_matches)
        assert written == 2

        loaded = db.get_match_details('Pinkbunny', 'Icecrown')
        by_id = {m.match_id: m for m in loaded}

        assert by_id['7412093'] == sample_matches[0]
        assert by_id['7411877'].outcome == 'Loss'
        assert by_id['7411877'].character_details[0].class_ is None
        assert by_id['7411877'].character_details[0].matchmaking_change is None

    def test_character_order_preserved(self, db, sample_matches):
        db.save_match_details('Pinkbunny', 'Icecrown', sample_matches)
        loaded = {m.match_id: m for m in db.get_match_details('Pinkbunny', 'Icecrown')}

        names = [d.charname for d in loaded['7412093'].character_details]
        assert names == ['Pinkbunny', 'Holyoak', 'Grimtusk', 'Sylwen']

    def test_resave_replaces_character_rows(self, db, sample_matches):
        db.save_match_details('Pinkbunny', 'Icecrown', sample_matches)
        updated = MatchDetails.from_summary(
            make_summary('7412093', outcome='Loss'),
            [CharacterDetail.from_payload(make_detail_payload('Solo'))],
        )
        db.save_match_details('Pinkbunny', 'Icecrown', [updated])

        loaded = {m.match_id: m for m in db.get_match_details('Pinkbunny', 'Icecrown')}
        assert len(loaded) == 2
        assert loaded['7412093'].outcome == 'Loss'
        assert [d.charname for d in loaded['7412093'].character_details] == ['Solo']

    def test_character_and_realm_are_case_insensitive(self, db, sample_matches):
        db.save_match_details('Pinkbunny', 'Icecrown', sample_matches)

        assert db.get_match_ids('PINKBUNNY', 'icecrown') == {'7412093', '7411877'}
        assert db.get_match_ids('Pinkbunny', 'Lordaeron') == set()

    def test_limit(self, db, sample_matches):
        db.save_match_details('Pinkbunny', 'Icecrown', sample_matches)

        loaded = db.get_match_details('Pinkbunny', 'Icecrown', limit=1)
        assert [m.match_id for m in loaded] == ['7411877']

    def test_empty_character(self, db):
        assert db.get_match_details('Nobody', 'Icecrown') == []
        assert db.save_match_details('Nobody', 'Icecrown', []) == 0

    def test_usable_from_worker_threads(self, db, sample_matches):
        """Route handlers run on worker threads, not the thread that opened the db."""
        errors = []
        loaded = []

        def worker(match):
            try:
                db.save_match_details('Pinkbunny', 'Icecrown', [match])
                loaded.append(db.get_match_details('Pinkbunny', 'Icecrown'))
                db.get_match_ids('Pinkbunny', 'Icecrown')
            except Exception as e:
                errors.append(e)

        threads = [threading.Thread(target=worker, args=(m,)) for m in sample_matches * 4]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert errors == []
        assert len(loaded) == 8
        assert db.get_match_ids('Pinkbunny', 'Icecrown') == {'7412093', '7411877'}
