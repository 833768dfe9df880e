# main.py
"""
Crawl a character's arena match history from the Warmane armory.

Usage:
    python main.py --character Pinkbunny --realm Icecrown
    python main.py --character Pinkbunny --realm Icecrown --save --output matches.json
"""

import argparse
import json
import logging
from pathlib import Path

from armory import config
from armory.api_client import ArmoryClient, RemoteFetchError
from armory.database import Database
from armory.scraper import ArmoryCrawler


def _safe_print(message: str) -> None:
    """Print with ASCII fallback for restricted terminal encodings."""
    try:
        print(message)
    except UnicodeEncodeError:
        print(message.encode("ascii", "replace").decode("ascii"))


def _format_match_line(match) -> str:
    players = ", ".join(d.charname for d in match.character_details) or "-"
    return (
        f"  {match.match_id:<10} {match.bracket:<4} {match.outcome:<8} "
        f"{match.points_change:>5}  {match.arena:<22} {players}"
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Fetch arena match history with per-character stats",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python main.py --character Pinkbunny --realm Icecrown
  python main.py --character Pinkbunny --realm Icecrown --save
  python main.py --character Pinkbunny --realm Icecrown --output matches.json --verbose
        """,
    )
    parser.add_argument("--character", required=True, help="Character name")
    parser.add_argument("--realm", required=True, help="Realm name")
    parser.add_argument("--save", action="store_true", help="Store results in the SQLite database")
    parser.add_argument("--db", default=config.DB_PATH, help=f"Path to SQLite database (default: {config.DB_PATH})")
    parser.add_argument("--output", help="Write the joined matches as JSON to this file")
    parser.add_argument(
        "--max-concurrent",
        type=int,
        default=config.MAX_CONCURRENT,
        help=f"Maximum detail requests in flight (default: {config.MAX_CONCURRENT})",
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=config.TIMEOUT_SECONDS,
        help=f"Per-request timeout in seconds (default: {config.TIMEOUT_SECONDS})",
    )
    parser.add_argument("--verbose", action="store_true", help="Verbose logging")
    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    if args.max_concurrent < 1:
        _safe_print("--max-concurrent must be at least 1")
        return 2

    crawler = ArmoryCrawler(
        client=ArmoryClient(timeout_seconds=args.timeout),
        max_concurrent=args.max_concurrent,
    )
    try:
        matches = crawler.fetch_all_match_details(args.character, args.realm)
    except RemoteFetchError as exc:
        _safe_print(f"[ERROR] Crawl failed: {exc}")
        return 1

    _safe_print(f"\n{args.character}-{args.realm}: {len(matches)} matches")
    for match in matches:
        _safe_print(_format_match_line(match))

    if args.output:
        out = Path(args.output)
        out.write_text(json.dumps([m.to_dict() for m in matches], indent=2), encoding="utf-8")
        _safe_print(f"\n[OK] Saved -> {out}")

    if args.save:
        db = Database(args.db)
        try:
            written = db.save_match_details(args.character, args.realm, matches)
        finally:
            db.close()
        _safe_print(f"[OK] Stored {written} matches in {db.db_path}")

    return 0


if __name__ == "__main__":
    raise SystemExit(main())
