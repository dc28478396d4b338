"""Seller-Analytics CLI.

Usage:
    python -m cli types
    python -m cli compute --type totalRevenue --orders orders.json --products products.json
    python -m cli compute --type monthlyRevenue --orders orders.json --products products.json \
        --start 2024-01 --end 2024-12 --seller 7
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from datetime import datetime
from decimal import Decimal
from pathlib import Path

from pydantic import ValidationError

from seller_analytics.repositories.memory import InMemoryDataSource
from seller_analytics.schemas import AnalyticsQuery
from seller_analytics.services.analytics import AnalyticsService
from seller_analytics.services.dispatch import MetricType
from seller_analytics.services.errors import AnalyticsError


class DecimalEncoder(json.JSONEncoder):
    def default(self, obj):
        if isinstance(obj, Decimal):
            return float(obj)
        if isinstance(obj, datetime):
            return obj.isoformat()
        return super().default(obj)


def main(argv=None):
    parser = argparse.ArgumentParser(
        prog="analytics-cli",
        description="Seller-Analytics CLI",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    sub = parser.add_subparsers(dest="command", help="Top-level command")

    sub.add_parser("types", help="List supported analytics types")

    compute = sub.add_parser("compute", help="Compute one metric from JSON exports")
    compute.add_argument("--type", required=True, help="Analytics type")
    compute.add_argument("--orders", required=True, help="Orders JSON file")
    compute.add_argument("--products", required=True, help="Products JSON file")
    compute.add_argument("--start", help="Start month (YYYY-MM)")
    compute.add_argument("--end", help="End month (YYYY-MM)")
    compute.add_argument("--seller", type=int, help="Restrict to one seller")

    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING)

    if not args.command:
        parser.print_help()
        return 0

    handlers = {
        "types": handle_types,
        "compute": handle_compute,
    }
    return handlers[args.command](args)


# ── Command Handlers ────────────────────────────────────

def handle_types(args):
    for metric in MetricType:
        print(metric.value)
    return 0


def _load_json(path_str: str) -> list:
    path = Path(path_str)
    if not path.exists():
        print(f"File not found: {path_str}")
        sys.exit(1)
    return json.loads(path.read_text(encoding="utf-8-sig"))


def handle_compute(args):
    orders = _load_json(args.orders)
    products = _load_json(args.products)
    source = InMemoryDataSource.from_dicts(orders, products)
    service = AnalyticsService(source)

    try:
        query = AnalyticsQuery(
            type=args.type,
            start_month_year=args.start,
            end_month_year=args.end,
            seller_id=args.seller,
        )
        result = asyncio.run(service.compute(query))
    except (AnalyticsError, ValidationError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2

    print(json.dumps(result, indent=2, ensure_ascii=False, cls=DecimalEncoder))
    return 0


if __name__ == "__main__":
    sys.exit(main())
