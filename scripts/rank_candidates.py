#!/usr/bin/env python3
"""Rank every other profile in a records file as a roommate for one subject."""

import argparse
import json
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent.parent / "src"))

from recovery_match.config import MatchingConfig, load_config
from recovery_match.data.normalize import normalize_many
from recovery_match.data.validation import filter_matchable_profiles
from recovery_match.ranking.exclusions import excluded_user_ids, sent_request_ids
from recovery_match.ranking.ranker import rank_candidates
from recovery_match.reporting.tables import format_ranking_table
from recovery_match.utils import setup_logging


def main():
    parser = argparse.ArgumentParser(description="Rank roommate candidates")
    parser.add_argument("--records", type=str, required=True, help="JSON list of raw profile records")
    parser.add_argument("--subject", type=str, required=True, help="User id to find matches for")
    parser.add_argument("--config", type=str, default=None)
    parser.add_argument("--requests", type=str, default=None, help="JSON list of match requests")
    parser.add_argument("--groups", type=str, default=None, help="JSON list of match groups")
    parser.add_argument("--min-score", type=int, default=None)
    parser.add_argument("--max-results", type=int, default=None)
    parser.add_argument("--prioritize", type=str, nargs="*", default=None)
    parser.add_argument("--workers", type=int, default=None)
    args = parser.parse_args()

    log = setup_logging()
    cfg = load_config(args.config) if args.config else MatchingConfig()

    with open(args.records) as f:
        profiles = normalize_many(json.load(f))
    by_id = {p.user_id: p for p in profiles}
    if args.subject not in by_id:
        log.error(f"Unknown subject user id: {args.subject}")
        sys.exit(1)
    subject = by_id[args.subject]

    requests, groups = [], []
    if args.requests:
        with open(args.requests) as f:
            requests = json.load(f)
    if args.groups:
        with open(args.groups) as f:
            groups = json.load(f)

    overrides = {}
    if args.min_score is not None:
        overrides["min_score"] = args.min_score
    if args.max_results is not None:
        overrides["max_results"] = args.max_results
    if args.prioritize is not None:
        overrides["prioritize_factors"] = args.prioritize
    filters = cfg.ranking.filters.model_copy(update=overrides)

    candidates = filter_matchable_profiles(
        profiles,
        require_completed=filters.require_completed,
        require_active=filters.require_active,
    )
    log.info(f"{len(candidates)}/{len(profiles)} profiles are matchable")

    matches = rank_candidates(
        subject,
        candidates,
        filters=filters,
        config=cfg,
        excluded=excluded_user_ids(subject.user_id, requests, groups),
        sent=sent_request_ids(subject.user_id, requests),
        max_workers=args.workers,
    )
    print(format_ranking_table(matches))


if __name__ == "__main__":
    main()
