from fastapi import FastAPI, HTTPException
import asyncio
import logging
import os
import sys

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from armory import config
from armory.api_client import RemoteFetchError
from armory.database import Database
from armory.scraper import ArmoryCrawler

logger = logging.getLogger(__name__)

app = FastAPI()
db = Database(config.DB_PATH)
crawler = ArmoryCrawler()


@app.get("/api/match-history/{realm}/{character}")
async def match_history(realm: str, character: str) -> dict:
    try:
        summaries = await asyncio.to_thread(crawler.get_match_summaries, character, realm)
    except RemoteFetchError as e:
        raise HTTPException(status_code=502, detail=f"Armory request failed: {str(e)}")
    return {
        "character": character,
        "realm": realm,
        "matches": [s.to_dict() for s in summaries],
        "count": len(summaries),
    }


@app.get("/api/match-details/{realm}/{character}")
async def match_details(realm: str, character: str, save: bool = False) -> dict:
    try:
        matches = await asyncio.to_thread(crawler.fetch_all_match_details, character, realm)
    except RemoteFetchError as e:
        raise HTTPException(status_code=502, detail=f"Armory request failed: {str(e)}")

    stored = 0
    if save:
        try:
            stored = db.save_match_details(character, realm, matches)
        except Exception as e:
            logger.exception("Failed to store matches for %s-%s", character, realm)
            raise HTTPException(status_code=500, detail=f"Failed to store matches: {str(e)}")

    return {
        "character": character,
        "realm": realm,
        "matches": [m.to_dict() for m in matches],
        "count": len(matches),
        "stored": stored,
    }


@app.get("/api/stored-matches/{realm}/{character}")
async def stored_matches(realm: str, character: str, limit: int = 50) -> dict:
    safe_limit = max(1, min(limit, 10000))
    try:
        matches = db.get_match_details(character, realm, limit=safe_limit)
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Failed to load stored matches: {str(e)}")
    return {
        "character": character,
        "realm": realm,
        "matches": [m.to_dict() for m in matches],
        "count": len(matches),
    }


if __name__ == "__main__":
    import uvicorn

    logging.basicConfig(level=logging.INFO)
    print("Starting armory crawler API...")
    print("Open http://localhost:5000/docs in your browser")
    uvicorn.run(app, host="127.0.0.1", port=5000)
