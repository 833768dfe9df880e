# armory/scraper/normalize.py
"""
Cleanup of the markup the armory embeds in match-detail fields.

teamnamerich arrives wrapped in spans and the rating change fields look like
'1543 (<span class="green">+12</span>)'. These helpers return new records
and leave their input untouched. A pattern miss is not an error: the raw
value is kept.
"""

import logging
import re
from typing import Iterable, List, Optional

from armory.models import CharacterDetail

logger = logging.getLogger(__name__)

MARKUP_RE = re.compile(r"<[^>]+>")
# signed delta right before a closing tag
CHANGE_RE = re.compile(r"[+-]\d+(?=</)")
# resulting rating right before the '(<span' that wraps the delta
OVERALL_RE = re.compile(r"-?\d+(?=\s*\(<)")

CHANGE_FIELDS = ("matchmaking_change", "personal_change")


def strip_markup(text: Optional[str]) -> Optional[str]:
    if text is None:
        return None
    return MARKUP_RE.sub("", text)


def format_change(raw: Optional[str]) -> Optional[str]:
    """Rewrite a markup change field as '<delta> (<overall>)', e.g. '+12 (1543)'."""
    if not raw:
        return raw
    change = CHANGE_RE.search(raw)
    overall = OVERALL_RE.search(raw)
    if not change or not overall:
        logger.debug("Leaving change field unformatted: %r", raw)
        return raw
    return f"{change.group(0)} ({overall.group(0)})"


def normalize_character_detail(detail: CharacterDetail) -> CharacterDetail:
    changes = {"teamnamerich": strip_markup(detail.teamnamerich) or ""}
    for name in CHANGE_FIELDS:
        value = getattr(detail, name)
        if value:
            changes[name] = format_change(value)
    return detail.with_changes(**changes)


def normalize_character_details(details: Iterable[CharacterDetail]) -> List[CharacterDetail]:
    return [normalize_character_detail(detail) for detail in details]
