#!/usr/bin/env python3
"""
Cannibalization Audit Runner

Runs every detection tier over exported keyword and crawl data and
writes a JSON report.

Input file (JSON):
    {
        "domain": "acme.com",
        "locations": ["Dallas,Texas,United States"],    # optional
        "markets": {"Dallas,Texas,United States": {"items": [...]}},
        "pages": [{"url": ..., "meta": {...}}]          # optional
    }

When "locations" is missing, markets are taken from the market keys;
when there are no markets either, they are discovered from the crawled
location pages.

Usage:
    python scripts/run_cannibalization_audit.py audit_input.json

    # With options:
    python scripts/run_cannibalization_audit.py audit_input.json \
        --domain acme.com \
        --output output/acme_cannibalization.json \
        --no-content
"""

import argparse
import json
import logging
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from dotenv import load_dotenv

from siteaudit.collector import SerpDataError, parse_crawled_pages, parse_markets
from siteaudit.context import detect_city_from_content, discover_markets_from_crawl
from siteaudit.detection import CannibalizationEngine
from siteaudit.utils import get_settings

logger = logging.getLogger(__name__)


def load_input(path: Path) -> dict:
    """Read and decode the input file."""
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)
    if not isinstance(data, dict):
        raise SerpDataError("Input file must contain a JSON object", source=str(path))
    return data


def resolve_locations(data: dict, markets: dict, pages: list) -> list:
    """Tracked locations: explicit list, else market keys, else discovered from the crawl."""
    locations = data.get("locations")
    if locations:
        return list(locations)
    if markets:
        return list(markets.keys())

    discovered = [m.location for m in discover_markets_from_crawl(pages)]
    if discovered:
        logger.info(f"Discovered {len(discovered)} markets from location pages")
        return discovered

    detection = detect_city_from_content(pages)
    if detection is not None:
        logger.info(f"Detected primary market from content: {detection.location} ({detection.confidence} mentions)")
        return [detection.location]
    return []


def run_audit(input_path: Path, output_path: Path, domain: str = None, include_content: bool = True) -> dict:
    """Run the audit and write the report. Returns the report dict."""
    settings = get_settings()

    data = load_input(input_path)
    markets = parse_markets(data.get("markets"))
    pages = parse_crawled_pages(data.get("pages"))
    domain = domain or data.get("domain") or ""
    if not domain:
        logger.warning("No domain given; branded intent detection is disabled")

    locations = resolve_locations(data, markets, pages)
    logger.info(f"Auditing {domain or 'unknown domain'} [{settings.ENVIRONMENT}]: {len(locations)} tracked locations")

    engine = CannibalizationEngine(include_content_overlap=include_content)
    report = engine.analyze(markets, pages, domain, locations)
    report_dict = report.to_dict()

    output_path.parent.mkdir(parents=True, exist_ok=True)
    with open(output_path, "w", encoding="utf-8") as f:
        json.dump(report_dict, f, indent=settings.REPORT_INDENT, ensure_ascii=False)

    summary = report.summary
    print("\n" + "=" * 70)
    print("CANNIBALIZATION AUDIT COMPLETE")
    print("=" * 70)
    print(f"Domain: {report.domain or 'unknown'}")
    print(f"Markets: {len(report.markets)}")
    print(f"Total issues: {summary.total_issues}")
    print(f"Urgent: {summary.urgent_count}")
    print(f"Searches affected: {summary.searches_affected:,}/mo")
    print(f"Report: {output_path}")
    print("=" * 70 + "\n")

    return report_dict


def main():
    """Main entry point."""
    load_dotenv()
    settings = get_settings()

    logging.basicConfig(
        level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )

    parser = argparse.ArgumentParser(
        description="Detect keyword cannibalization from exported keyword and crawl data"
    )
    parser.add_argument(
        "input",
        help="JSON file with domain, markets and pages"
    )
    parser.add_argument(
        "--domain",
        default=None,
        help="Domain to audit (overrides the input file)"
    )
    parser.add_argument(
        "--output",
        default=None,
        help="Report path (default: output/<input name>_cannibalization.json)"
    )
    parser.add_argument(
        "--no-content",
        action="store_true",
        help="Skip content overlap detection (Tier 4)"
    )

    args = parser.parse_args()

    input_path = Path(args.input)
    output_path = Path(args.output) if args.output else Path("output") / f"{input_path.stem}_cannibalization.json"

    try:
        run_audit(input_path, output_path, domain=args.domain, include_content=not args.no_content)
    except FileNotFoundError:
        logger.error(f"Input file not found: {input_path}")
        sys.exit(1)
    except json.JSONDecodeError as e:
        logger.error(f"Invalid JSON in {input_path}: {e}")
        sys.exit(1)
    except SerpDataError as e:
        logger.error(f"Unusable input data: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
