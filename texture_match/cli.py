"""Command line entry point: match one photo against a reference index."""

import sys
import json
import logging
import argparse
from typing import List, Optional

from .engine import MatchEngine
from .errors import DecodeError, IndexFormatError
from .scoring import DEFAULT_TOP_K


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="texture-match",
        description="Match a surface texture photo against a reference index",
    )
    parser.add_argument("image", help="Path to the query photo")
    parser.add_argument("--index", required=True, help="Path to the reference index JSON")
    parser.add_argument("--top-k", type=int, default=DEFAULT_TOP_K,
                        help="Number of labels to return")
    parser.add_argument("--json", action="store_true", help="Print results as JSON")
    parser.add_argument("--log-level", default="WARNING", help="Logging verbosity")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=args.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        engine = MatchEngine(args.index)
        results = engine.match(args.image, top_k=args.top_k)
    except (DecodeError, IndexFormatError, OSError) as e:
        print(f"error: {e}", file=sys.stderr)
        return 2

    if args.json:
        print(json.dumps([r.to_dict() for r in results], indent=2))
    elif not results:
        print("No usable match. Try another photo with more visible texture.")
    else:
        for r in results:
            print(f"{r.rank}. {r.label_key}  confidence={r.confidence * 100:.0f}%  "
                  f"distance={r.distance:.4f}  source={r.source_ref}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
