#!/usr/bin/env python3
"""
Indent Planner - command line entry point.

Runs the engine on a JSON request holding already-parsed rows and
parameters, and writes the serialized results.

Request layout:
    {
      "bonding": [...], "indents": [...], "purchases": [...],
      "planning_date": "2025-11-20",
      "parameters": {"target_daily_requirement": 100000, ...}
    }
Missing parameters are taken from config.get_engine_defaults().
"""
import argparse
import json
import logging
import sys
from pathlib import Path

from config import get_engine_defaults
from indent_planner import CalculationInputs, calculate_recommended_indents, results_to_json
from indent_planner.utils.logging_config import setup_logging


def parse_args(argv=None):
    ap = argparse.ArgumentParser(description="Recommend T+3 indents per center")
    ap.add_argument("--input", type=Path, required=True, help="JSON request file")
    ap.add_argument("--output", type=Path, default=None, help="Results JSON (default: stdout)")
    ap.add_argument("--settings", type=Path, default=None, help="settings.json override")
    ap.add_argument("--log-dir", type=Path, default=None)
    ap.add_argument("--verbose", action="store_true", help="Echo info logs to the console")
    return ap.parse_args(argv)


def build_inputs(request: dict, defaults: dict) -> CalculationInputs:
    params = dict(defaults)
    params.update({k: v for k, v in (request.get("parameters") or {}).items() if k in defaults})
    return CalculationInputs(
        bonding_rows=request.get("bonding"),
        indent_rows=request.get("indents"),
        purchase_rows=request.get("purchases"),
        planning_date=request.get("planning_date"),
        **params,
    )


def main(argv=None) -> int:
    args = parse_args(argv)
    logger = setup_logging(args.log_dir, console_level=logging.INFO if args.verbose else logging.CRITICAL)

    with open(args.input, "r", encoding="utf-8") as f:
        request = json.load(f)

    try:
        inputs = build_inputs(request, get_engine_defaults(args.settings))
        results = calculate_recommended_indents(inputs)
    except ValueError as e:  # MissingInputError included
        logger.error(f"Indent calculation failed: {e}")
        print(f"Error: {e}", file=sys.stderr)
        return 1

    payload = results_to_json(results)
    if args.output is None:
        print(payload)
    else:
        args.output.parent.mkdir(parents=True, exist_ok=True)
        args.output.write_text(payload, encoding="utf-8")
        print(f"Results written to {args.output}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
