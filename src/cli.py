# src/cli.py
# Command line entry point.
#   scrape: run one job in the foreground, print progress, write the results JSON
#   serve:  run the HTTP API with uvicorn

import argparse
import asyncio
import sys
from pathlib import Path
from typing import List, Optional

from src.core.config import get_config, validate_config
from src.core.logging import setup_logging


def _print_banner(list_url: str, max_items: int) -> None:
    print("\n" + "=" * 60)
    print("GOOGLE MAPS LIST SCRAPER")
    print("=" * 60)
    print(f"List URL:  {list_url}")
    print(f"Max items: {max_items}")
    print("=" * 60 + "\n")


def _save_partial(channel, out_dir: Path) -> None:
    """Keep whatever was collected before the run stopped."""
    from src.scraper.file_manager import write_results

    partial = channel.last.results if channel.last and channel.last.results else []
    if partial:
        path = write_results(partial, out_dir)
        print(f"[saved] {len(partial)} partial results -> {path}")


def run_scrape(args: argparse.Namespace) -> int:
    from src.db.supabase_client import upsert_places
    from src.scraper.engine import scrape_list
    from src.scraper.file_manager import write_results
    from src.sessions.progress import ProgressChannel, console_subscriber

    config = get_config()
    if args.headed:
        config.headless = False
    max_items = args.max_items or config.default_max_items
    out_dir = Path(args.out) if args.out else config.base_out_dir

    _print_banner(args.list_url, max_items)
    channel = ProgressChannel(console_subscriber)
    try:
        results = asyncio.run(scrape_list(args.list_url, max_items, channel, config=config))
    except KeyboardInterrupt:
        print("\n[abort] KeyboardInterrupt - stopping scrape.")
        _save_partial(channel, out_dir)
        return 1
    except Exception as e:
        print(f"[fatal] scrape failed: {e}", file=sys.stderr)
        _save_partial(channel, out_dir)
        return 1

    path = write_results(results, out_dir)
    print("\n" + "=" * 60)
    print(f"Collected {len(results)} places")
    for i, place in enumerate(results, 1):
        print(f"{i:3d}. {place.name}" + (f" - {place.address}" if place.address else ""))
    print(f"[saved] {path}")
    upsert_places(results, args.list_url)
    return 0


def run_serve(args: argparse.Namespace) -> int:
    import uvicorn
    from src.api.app import create_app

    config = get_config()
    uvicorn.run(
        create_app(config),
        host=args.host or config.api_host,
        port=args.port or config.api_port,
        log_level=config.log_level.lower(),
    )
    return 0


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(description="Extract places from a Google Maps saved list.")
    ap.add_argument("--verbose", action="store_true", help="Debug logging")
    sub = ap.add_subparsers(dest="command", required=True)

    sp = sub.add_parser("scrape", help="Scrape one list in the foreground")
    sp.add_argument("list_url", help="Shared Google Maps list URL")
    sp.add_argument("max_items", nargs="?", type=int, default=None, help="Cap on entries to visit")
    sp.add_argument("--out", default=None, help="Output directory for the results JSON")
    sp.add_argument("--headed", action="store_true", help="Show the browser window")
    sp.set_defaults(func=run_scrape)

    sv = sub.add_parser("serve", help="Run the HTTP API")
    sv.add_argument("--host", default=None)
    sv.add_argument("--port", type=int, default=None)
    sv.set_defaults(func=run_serve)
    return ap


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    try:
        validate_config()
    except ValueError as e:
        print(f"[error] {e}", file=sys.stderr)
        return 2

    config = get_config()
    setup_logging(level="DEBUG" if args.verbose else config.log_level, log_dir=config.log_dir)
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
