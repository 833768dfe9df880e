from __future__ import annotations

import json
import logging
from http.client import HTTPException
from typing import Any, Dict, List, Optional
from urllib.error import HTTPError, URLError
from urllib.parse import quote, urlencode
from urllib.request import Request, urlopen

from armory import config
from armory.models import CharacterDetail

logger = logging.getLogger(__name__)


class RemoteFetchError(Exception):
    """Raised when the armory cannot be reached or answers with a failure."""

    def __init__(self, message: str, url: str = "", status: Optional[int] = None):
        super().__init__(message)
        self.url = url
        self.status = status


class ArmoryClient:
    HISTORY_PATH = "/character/{character}/{realm}/match-history"
    USER_AGENT = (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
        "AppleWebKit/537.36 (KHTML, like Gecko) "
        "Chrome/103.0.5060.114 Safari/537.36"
    )
    FORM_HEADERS = {
        "Content-Type": "application/x-www-form-urlencoded; charset=UTF-8",
        "User-Agent": USER_AGENT,
    }

    def __init__(self, base_url: Optional[str] = None, timeout_seconds: Optional[float] = None):
        self.base_url = (base_url or config.BASE_URL).rstrip("/")
        self.timeout_seconds = timeout_seconds if timeout_seconds is not None else config.TIMEOUT_SECONDS

    def match_history_url(self, character: str, realm: str) -> str:
        path = self.HISTORY_PATH.format(
            character=quote(character, safe=""),
            realm=quote(realm, safe=""),
        )
        return f"{self.base_url}{path}"

    def _request(self, url: str, data: Optional[bytes] = None, headers: Optional[Dict[str, str]] = None) -> str:
        method = "POST" if data is not None else "GET"
        req = Request(url, data=data, headers=headers or {"User-Agent": self.USER_AGENT}, method=method)
        logger.debug("%s %s", method, url)
        try:
            with urlopen(req, timeout=self.timeout_seconds) as resp:
                body = resp.read()
        except HTTPError as exc:
            raise RemoteFetchError(f"{method} {url} failed with HTTP {exc.code}", url=url, status=exc.code) from exc
        except (URLError, OSError, HTTPException) as exc:
            reason = getattr(exc, "reason", exc)
            raise RemoteFetchError(f"{method} {url} failed: {reason}", url=url) from exc

        try:
            return body.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise RemoteFetchError(f"{method} {url} returned a body that is not UTF-8", url=url) from exc

    def fetch_match_history_html(self, character: str, realm: str) -> str:
        """GET the match-history page for a character."""
        return self._request(self.match_history_url(character, realm))

    def fetch_match_data(self, match_id: str, character: str, realm: str) -> List[CharacterDetail]:
        """
        POST one match identifier and return the raw per-character records.

        No normalization is applied and nothing is retried; any failure is
        raised as RemoteFetchError.
        """
        url = self.match_history_url(character, realm)
        body = urlencode({"matchinfo": match_id}).encode("utf-8")
        text = self._request(url, data=body, headers=self.FORM_HEADERS)
        return self.parse_match_data(text, url=url)

    @staticmethod
    def parse_match_data(text: str, url: str = "") -> List[CharacterDetail]:
        try:
            payload: Any = json.loads(text)
        except json.JSONDecodeError as exc:
            raise RemoteFetchError(f"Match data from {url or 'armory'} is not valid JSON", url=url) from exc

        if not isinstance(payload, list) or not all(isinstance(item, dict) for item in payload):
            raise RemoteFetchError(
                f"Match data from {url or 'armory'} is not a list of objects",
                url=url,
            )
        return [CharacterDetail.from_payload(item) for item in payload]
