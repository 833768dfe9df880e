# armory/scraper/__init__.py
"""
Arena match-history crawler.

Parses the armory history table, fetches per-match detail payloads under a
concurrency ceiling, cleans their markup and joins them to their summaries.
"""

from armory.api_client import RemoteFetchError
from .core import ArmoryCrawler
from .history import extract_match_summaries, split_team_bracket
from .limiter import ConcurrencyLimiter
from .normalize import format_change, normalize_character_detail, strip_markup

__all__ = [
    'ArmoryCrawler',
    'ConcurrencyLimiter',
    'RemoteFetchError',
    'extract_match_summaries',
    'split_team_bracket',
    'format_change',
    'normalize_character_detail',
    'strip_markup',
]
