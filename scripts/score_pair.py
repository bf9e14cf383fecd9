#!/usr/bin/env python3
"""Score one pair of profiles and print the breakdown, flags and summary."""

import argparse
import json
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent.parent / "src"))

from recovery_match.config import MatchingConfig, load_config
from recovery_match.data.normalize import normalize_many
from recovery_match.reporting.tables import format_breakdown_table, format_flags, format_summary
from recovery_match.scoring.engine import calculate_compatibility
from recovery_match.utils import setup_logging


def main():
    parser = argparse.ArgumentParser(description="Score a single roommate pairing")
    parser.add_argument("--records", type=str, required=True, help="JSON list of raw profile records")
    parser.add_argument("--a", type=str, required=True, help="First user id")
    parser.add_argument("--b", type=str, required=True, help="Second user id")
    parser.add_argument("--config", type=str, default=None)
    parser.add_argument("--json", action="store_true", help="Print the raw result as JSON")
    args = parser.parse_args()

    log = setup_logging()
    cfg = load_config(args.config) if args.config else MatchingConfig()

    with open(args.records) as f:
        profiles = {p.user_id: p for p in normalize_many(json.load(f))}

    missing = [uid for uid in (args.a, args.b) if uid not in profiles]
    if missing:
        log.error(f"Unknown user id(s): {', '.join(missing)}")
        sys.exit(1)

    result = calculate_compatibility(profiles[args.a], profiles[args.b], cfg)

    if args.json:
        print(json.dumps(result.to_dict(), indent=2))
        return

    print(format_breakdown_table(result, cfg))
    print("\nFlags:")
    print(format_flags(result))
    print()
    print(format_summary(result))


if __name__ == "__main__":
    main()
