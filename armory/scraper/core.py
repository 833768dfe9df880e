from __future__ import annotations

import logging
from concurrent.futures import Future
from typing import List, Optional, Sequence

from armory import config
from armory.api_client import ArmoryClient, RemoteFetchError
from armory.models import CharacterDetail, MatchDetails, MatchSummary
from .history import extract_match_summaries
from .limiter import ConcurrencyLimiter
from .normalize import normalize_character_details

logger = logging.getLogger(__name__)


class ArmoryCrawler:
    """Collects a character's arena match history with per-match character stats."""

    def __init__(self, client: Optional[ArmoryClient] = None, max_concurrent: Optional[int] = None):
        self.client = client or ArmoryClient()
        self.max_concurrent = config.MAX_CONCURRENT if max_concurrent is None else max_concurrent
        if self.max_concurrent < 1:
            raise ValueError(f"max_concurrent must be at least 1, got {self.max_concurrent}")

    # --- Main entry points ---

    def get_match_summaries(self, character: str, realm: str) -> List[MatchSummary]:
        """Fetch the match-history page and parse its table rows."""
        html = self.client.fetch_match_history_html(character, realm)
        summaries = extract_match_summaries(html)
        logger.info("Found %d match summaries for %s-%s", len(summaries), character, realm)
        return summaries

    def get_match_details(
        self,
        character: str,
        realm: str,
        match_summaries: Sequence[MatchSummary],
    ) -> List[MatchDetails]:
        """
        Fetch every summary's detail payload and join it back to the summary.

        Up to max_concurrent fetches run at once, but results are normalized
        and joined one identifier at a time in input order. A failed fetch
        cancels the fetches still queued and re-raises; no partial list is
        returned.
        """
        match_ids = [summary.match_id for summary in match_summaries]
        if not match_ids:
            return []

        match_details: List[MatchDetails] = []
        with ConcurrencyLimiter(self.max_concurrent) as limiter:
            limited_fetch = limiter.wrap(self.client.fetch_match_data)
            pending: List[Future] = [limited_fetch(match_id, character, realm) for match_id in match_ids]

            for match_id, future in zip(match_ids, pending):
                try:
                    raw_details = future.result()
                except RemoteFetchError:
                    logger.error("Fetching match %s failed; aborting crawl for %s-%s", match_id, character, realm)
                    raise

                joined = self._join(match_id, raw_details, match_summaries)
                if joined is None:
                    logger.warning("No summary for match %s; dropping it", match_id)
                    continue
                match_details.append(joined)

        logger.info("Joined %d/%d matches for %s-%s", len(match_details), len(match_ids), character, realm)
        return match_details

    def fetch_all_match_details(self, character: str, realm: str) -> List[MatchDetails]:
        """Summaries plus details for every match on the character's history page."""
        match_summaries = self.get_match_summaries(character, realm)
        return self.get_match_details(character, realm, match_summaries)

    # --- Internal helpers ---

    @staticmethod
    def _find_summary(match_id: str, match_summaries: Sequence[MatchSummary]) -> Optional[MatchSummary]:
        return next((s for s in match_summaries if s.match_id == match_id), None)

    def _join(
        self,
        match_id: str,
        raw_details: Sequence[CharacterDetail],
        match_summaries: Sequence[MatchSummary],
    ) -> Optional[MatchDetails]:
        character_details = normalize_character_details(raw_details)
        summary = self._find_summary(match_id, match_summaries)
        if summary is None:
            return None
        return MatchDetails.from_summary(summary, character_details)

