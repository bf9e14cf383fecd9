#!/usr/bin/env python3
"""Generate synthetic raw roommate-profile records."""

import argparse
import json
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent.parent / "src"))

from recovery_match.data.generators import generate_raw_records
from recovery_match.utils import seed_everything, setup_logging


def main():
    parser = argparse.ArgumentParser(description="Generate synthetic profile records")
    parser.add_argument("--n", type=int, default=200)
    parser.add_argument("--seed", type=int, default=42)
    parser.add_argument("--output", type=str, default="data/profiles.json")
    args = parser.parse_args()

    log = setup_logging()
    seed_everything(args.seed)

    log.info(f"Generating {args.n} raw profile records with seed={args.seed}")
    records = generate_raw_records(args.n, seed=args.seed)

    output = Path(args.output)
    output.parent.mkdir(parents=True, exist_ok=True)
    with open(output, "w") as f:
        json.dump(records, f, indent=2)
    log.info(f"Saved {len(records)} records to {output}")


if __name__ == "__main__":
    main()
