"""
CLI for browsing the discovery feed from a terminal.

Keeps its seen-set in a local JSON state file, exactly like the mobile
client keeps it in local storage, and records swipes through the API.

Examples:
    moviedrop-discover --user-id alice
    moviedrop-discover --like 550 --dismiss 680
    moviedrop-discover --clear-seen
"""

import argparse
import logging
from pathlib import Path

from moviedrop import logging_setup
from moviedrop.api_client import MovieDropAPIClient
from moviedrop.features.signal_schema import SignalAction
from moviedrop.feed.assembler import FeedAssembler
from moviedrop.feed.dispatch import BestEffortDispatcher, InlineDispatcher
from moviedrop.feed.seen_set import JsonFileStorage, SeenSetStore
from moviedrop.feed.session import FeedSession
from moviedrop.settings import get_settings
from moviedrop.utils.reproducibility import get_random_state

logger = logging.getLogger(__name__)

PREVIOUS_FIRST_KEY = "previous_first_id"


def build_parser() -> argparse.ArgumentParser:
    cfg = get_settings()
    parser = argparse.ArgumentParser(description="Show a MovieDrop discovery feed")

    parser.add_argument("--user-id", default=None, help="Signed-in user id (omit for anonymous)")
    parser.add_argument("--base-url", default=cfg.api_base_url, help="API root, e.g. http://127.0.0.1:8000/api/v1")
    parser.add_argument(
        "--state-file",
        type=Path,
        default=cfg.client_state_dir / "state.json",
        help="Local state file holding the seen-set",
    )
    parser.add_argument("--limit", type=int, default=10, help="Cards to print (default: 10)")
    parser.add_argument("--like", type=int, action="append", default=[], help="Like a movie id (repeatable)")
    parser.add_argument("--dismiss", type=int, action="append", default=[], help="Dismiss a movie id (repeatable)")
    parser.add_argument("--watchlist", type=int, action="append", default=[], help="Watchlist a movie id (repeatable)")
    parser.add_argument("--clear-seen", action="store_true", help="Forget every seen movie before fetching")
    parser.add_argument("--sync", action="store_true", help="Send signals inline instead of in the background")
    parser.add_argument("--log-level", default="INFO", help="Logging level (DEBUG, INFO, WARNING, ERROR)")
    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    logging_setup.setup_logging(args.log_level)
    cfg = get_settings()

    storage = JsonFileStorage(args.state_file)
    seen = SeenSetStore(storage).load_on_startup()
    client = MovieDropAPIClient(base_url=args.base_url, settings=cfg)
    if args.sync:
        dispatcher = InlineDispatcher()
    else:
        dispatcher = BestEffortDispatcher(max_workers=cfg.signal_workers)

    assembler = FeedAssembler(
        personalized=client,
        popular=client,
        seen_store=seen,
        limit=cfg.feed_limit,
        region=cfg.region_default,
        rng=get_random_state(cfg.random_seed),
    )
    session = FeedSession(assembler, seen, dispatcher, signal_sink=client.send_signal, user_id=args.user_id)

    try:
        previous = storage.load(PREVIOUS_FIRST_KEY)
    except (ValueError, OSError):
        previous = None
    session.previous_first_id = previous if isinstance(previous, int) else None

    if args.clear_seen:
        session.reset()
        print("Seen movies cleared.")

    for action, ids in ((SignalAction.LIKE, args.like),
                        (SignalAction.DISMISS, args.dismiss),
                        (SignalAction.WATCHLIST, args.watchlist)):
        for movie_id in ids:
            session.record(movie_id, action)
            print(f"{action.value}: {movie_id}")

    state = session.refresh()
    dispatcher.shutdown(wait=True)
    client.close()

    if state is None:
        return 0
    if state.error:
        print(f"No movies right now ({state.error}).")
        return 1
    if not state.movies:
        print("You've seen all available movies.")
        return 0

    storage.save(PREVIOUS_FIRST_KEY, state.movies[0].id)
    print(f"Feed ({state.source}, {len(seen)} seen):")
    for movie in state.movies[:args.limit]:
        year = movie.year or "----"
        rating = f"{movie.vote_average:.1f}" if movie.vote_average is not None else " n/a"
        print(f"  {movie.id:>8}  {year}  {rating}  {movie.title}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
