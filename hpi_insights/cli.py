# hpi_insights/cli.py
from __future__ import annotations
import argparse, json, logging, sys
from typing import List, Optional

from .config import DashboardConfig
from .data_prep import load_datasets
from .errors import LoadError
from .series import build_dashboard

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="hpi-insights",
        description="Housing price index and inflation charts for selected US states.",
    )
    p.add_argument("--data-dir", help="directory holding the three CSV files (env: HPI_INSIGHTS_DATA_DIR)")
    p.add_argument("--states", action="extend", nargs="+", metavar="STATE",
                   help="states to chart; 'all' selects every state (default: California)")
    p.add_argument("--years", nargs=2, type=int, metavar=("START", "END"),
                   help="inclusive year window")
    p.add_argument("--out-dir", default="charts", help="where chart files (PNG, HTML map) are written")
    p.add_argument("--json", action="store_true", help="print chart payloads as JSON instead of plotting")
    p.add_argument("-v", "--verbose", action="store_true")
    return p


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    overrides = {}
    if args.data_dir:
        overrides["data_dir"] = args.data_dir
    try:
        config = DashboardConfig.from_env(**overrides)
        if args.years:
            config = config.with_year_range(tuple(args.years))
    except ValueError as e:
        print(f"error: {e}", file=sys.stderr)
        return 2

    try:
        datasets = load_datasets(config.data_dir)
    except LoadError as e:
        print(f"error: {e}", file=sys.stderr)
        return 1

    if args.states:
        if [s.lower() for s in args.states] == ["all"]:
            config = config.select_all(datasets.states)
        else:
            config = config.with_states(args.states)

    dashboard = build_dashboard(datasets, config)
    if args.json:
        json.dump({k: v.to_dict() for k, v in dashboard.items()}, sys.stdout, indent=2)
        sys.stdout.write("\n")
        return 0

    from .viz import plot_dashboard

    saved = plot_dashboard(dashboard, args.out_dir)
    logger.info("Wrote %d charts to %s", len(saved), args.out_dir)
    return 0


if __name__ == "__main__":
    sys.exit(main())
