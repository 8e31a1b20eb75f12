#!/usr/bin/env python3
"""
Validate the elasticity policy and optionally probe the pricing service with a dataset file.
It packages a repeatable workflow so configuration mistakes surface before the dashboard is opened.
Run it directly, and expect it to print JSON and exit non-zero on failure.
"""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path

ROOT_DIR = Path(__file__).resolve().parents[1]
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))

from src.common.logging import configure_logging
from src.elasticity.elasticity_config import DEFAULT_CONFIG_PATH, load_elasticity_config
from src.elasticity.error_classifier import ElasticityQueryError
from src.elasticity.models import EntitySelection
from src.elasticity.query_client import ElasticityQueryClient
from src.elasticity.raw_dataset_cache import RawDatasetCache


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Validate elasticity policy and probe the pricing service")
    parser.add_argument("--config-path", default=DEFAULT_CONFIG_PATH)
    parser.add_argument("--probe-csv", type=Path, default=None, help="Dataset with a price column to send")
    parser.add_argument("--group-values", default="S001,P001", help="Comma-separated values for group columns")
    parser.add_argument("--month", default=None, help="Month to probe in YYYY-MM format")
    return parser.parse_args()


def main() -> None:
    args = parse_args()
    configure_logging()
    try:
        config = load_elasticity_config(config_path=args.config_path)
    except ValueError as exc:
        print(f"Invalid elasticity policy: {exc}", file=sys.stderr)
        sys.exit(1)

    report: dict[str, object] = {"config": config.to_dict()}
    if args.probe_csv is not None:
        if not args.month:
            print("--month is required with --probe-csv", file=sys.stderr)
            sys.exit(2)
        client = ElasticityQueryClient(
            config=config,
            raw_dataset=RawDatasetCache(original_text=args.probe_csv.read_text(encoding="utf-8")),
        )
        selection = EntitySelection(
            group_keys=config.group_columns,
            group_values=tuple(value.strip() for value in args.group_values.split(",")),
            month=args.month,
        )
        try:
            curve = client.query(selection, None, config.default_sweep_percent, config.default_num_points)
        except ElasticityQueryError as exc:
            print(json.dumps({**report, "probe_error": exc.user_message}, indent=2))
            sys.exit(1)
        report["probe"] = {
            "points": len(curve.points),
            "optimal_price": curve.optimal_price,
            "optimal_revenue": curve.optimal_revenue,
            "elasticity": curve.elasticity,
        }

    print(json.dumps(report, indent=2))


if __name__ == "__main__":
    main()
