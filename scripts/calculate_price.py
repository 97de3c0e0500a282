"""
scripts/calculate_price.py — Price a questionnaire from the command line.

Usage:
    python scripts/calculate_price.py responses.json --persona kavya [--client-type interiors] [--json]

responses.json holds the questionnaire answers, e.g.
    {"projectType": "Residential", "finishTier": "Premium", "areaSqft": 1000}
"""

import argparse
import json
import logging
import sys
import os

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

logging.basicConfig(
    level=logging.WARNING,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)

from botengine.pricing import personas
from botengine.pricing.engine import estimate


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Bot Engine — Price calculator")
    parser.add_argument("responses", help="Path to a JSON file with questionnaire responses")
    parser.add_argument("--persona", default="arjun", help="Persona id (kavya, arjun, priya, rohan)")
    parser.add_argument("--client-type", default=None, help="Client category (interiors, salon, tutor)")
    parser.add_argument("--json", action="store_true", help="Print the full estimate as JSON")
    args = parser.parse_args(argv)

    with open(args.responses, encoding="utf-8") as fh:
        responses = json.load(fh)

    outcome = estimate(responses, args.persona, args.client_type)
    if not outcome.success:
        print(f"❌ Pricing failed: {outcome.error}")
        print(f"   Fallback quote: {outcome.fallback_quote}")
        return 1

    result = outcome.estimate
    if args.json:
        print(json.dumps(result.to_dict(), indent=2, ensure_ascii=False))
        return 0

    breakdown = result.breakdown
    print("\n" + "=" * 55)
    print(f"  💰  Quote by {personas.display_name(args.persona)}")
    print("=" * 55)
    print(f"     Base price : {result.base_price:,}")
    print(f"     Persona    : × {breakdown.persona_factor}")
    print(f"     Materials  : × {breakdown.material_factor}")
    print(f"     Region     : × {breakdown.region_factor}")
    print(f"     Timeline   : × {breakdown.timeline_factor}")
    print(f"     Scope      : × {breakdown.scope_factor}")
    print(f"     Final      : {result.final_price:,} {result.currency}")
    print(f"     Range      : {result.price_range.display}")
    print("=" * 55 + "\n")
    return 0


if __name__ == "__main__":
    sys.exit(main())
