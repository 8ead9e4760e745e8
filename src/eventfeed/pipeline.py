from __future__ import annotations

import argparse
import json
import logging
from datetime import date
from pathlib import Path
from typing import Dict, List, Optional, Sequence

from .candidates import build_candidates
from .config import FeedConfig, FeedPaths
from .dedup import deduplicate
from .mixer import mix_feed
from .models import EventRecord, Feed, FeedFilter, FeedItem, UserProfile
from .ranking import rank_events
from .records import events_from_frame, load_events_frame, load_profile
from .recurrence import expand_all

LOGGER = logging.getLogger(__name__)


def assemble_feed(
    events: Sequence[EventRecord],
    profile: UserProfile,
    feed_filter: Optional[FeedFilter],
    rotation_counter: int,
    today: date,
    personalized: bool = True,
    config: Optional[FeedConfig] = None,
) -> Feed:
    """
    Run every stage and return the mixed feed with its shelves and headline.

    Raises:
        ValueError: if ``profile`` is missing or ``rotation_counter`` is negative
    """
    if profile is None:
        raise ValueError("A user profile is required to assemble a feed")
    config = config or FeedConfig()

    occurrences = expand_all(events, today, config.recurrence.window_days)
    pool = deduplicate(occurrences)
    primary = rank_events(pool, profile, feed_filter, personalized, config.ranking)
    primary_ids = {occ.id for occ in primary}
    candidates = build_candidates(pool, profile, primary_ids, config.candidates)
    feed = mix_feed(primary, candidates, rotation_counter, config.mixer)

    LOGGER.info(
        "Feed for %s: %d records -> %d occurrences -> %d unique -> %d primary, %d shelves",
        profile.id,
        len(events),
        len(occurrences),
        len(pool),
        len(primary),
        len(candidates),
    )
    return feed


def build_feed(
    events: Sequence[EventRecord],
    profile: UserProfile,
    feed_filter: Optional[FeedFilter],
    rotation_counter: int,
    today: date,
    personalized: bool = True,
    config: Optional[FeedConfig] = None,
) -> List[FeedItem]:
    feed = assemble_feed(events, profile, feed_filter, rotation_counter, today, personalized, config)
    return list(feed.items)


def run_pipeline(
    paths: FeedPaths,
    feed_filter: FeedFilter,
    rotation_counter: int,
    today: date,
    config: Optional[FeedConfig] = None,
) -> Dict[str, Path]:
    output_dir = paths.output_dir
    output_dir.mkdir(parents=True, exist_ok=True)

    events = events_from_frame(load_events_frame(paths.events_path))
    profile = load_profile(paths.profile_path)
    feed = assemble_feed(events, profile, feed_filter, rotation_counter, today, config=config)

    outputs = {
        "feed": paths.feed_json(),
        "metadata": paths.metadata_json(),
    }
    outputs["feed"].write_text(
        json.dumps([item.to_dict() for item in feed.items], indent=2, ensure_ascii=False)
    )
    metadata = {
        "user_id": profile.id,
        "today": today.isoformat(),
        "filter": feed_filter.kind.value,
        "tag": feed_filter.tag,
        "rotation_counter": rotation_counter,
        "n_records": len(events),
        "n_events": len(feed.event_items),
        "n_recommendations": len(feed.recommendation_items),
        "shelves": [c.type.value for c in feed.candidates],
        "headline": feed.headline.type.value if feed.headline else None,
    }
    outputs["metadata"].write_text(json.dumps(metadata, indent=2))
    return outputs


def _parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Build a mixed event feed from an events export and a user profile."
    )
    parser.add_argument("--events", type=str, default="data/events.json", help="Events export (CSV or JSON).")
    parser.add_argument("--profile", type=str, default="", help="Optional user profile JSON.")
    parser.add_argument("--output-dir", type=str, default="output/feed", help="Where to place feed.json and metadata.json.")
    parser.add_argument("--filter", choices=["all", "near_me", "tag"], default="all", help="Primary feed filter.")
    parser.add_argument("--tag", type=str, default="", help="Tag used with --filter tag.")
    parser.add_argument("--rotation", type=int, default=0, help="Refresh counter selecting the headlined shelf.")
    parser.add_argument("--today", type=str, default="", help="Reference day (YYYY-MM-DD), defaults to the local date.")
    parser.add_argument("--window-days", type=int, default=60, help="How far ahead recurring events are expanded.")
    parser.add_argument("--near-me-km", type=float, default=50.0, help="Radius of the near-me filter.")
    parser.add_argument("--insert-interval", type=int, default=10, help="Events between two recommendation shelves.")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log pipeline details.")
    return parser.parse_args(argv)


def _filter_from_args(args: argparse.Namespace) -> FeedFilter:
    if args.filter == "near_me":
        return FeedFilter.near_me()
    if args.filter == "tag":
        return FeedFilter.for_tag(args.tag)
    return FeedFilter.all()


def main(argv: Optional[Sequence[str]] = None):
    args = _parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    paths = FeedPaths(
        events_path=Path(args.events),
        profile_path=Path(args.profile) if args.profile else None,
        output_dir=Path(args.output_dir),
    )
    config = FeedConfig()
    config.recurrence.window_days = args.window_days
    config.ranking.near_me_radius_km = args.near_me_km
    config.mixer.insert_interval = args.insert_interval
    today = date.fromisoformat(args.today) if args.today else date.today()

    run_pipeline(paths, _filter_from_args(args), args.rotation, today, config)
    print(f"[eventfeed] Feed artifacts saved to: {paths.output_dir.resolve()}")


if __name__ == "__main__":
    main()
