import argparse
import logging
import math
from pathlib import Path

from pydantic import ValidationError

from .engine import evaluate
from .export import annual_frame, evaluation_to_xlsx_bytes, summary_dict
from .params import DealParameters, example_parameters

logger = logging.getLogger(__name__)


def _parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Evaluate the economics of a hardware-plus-subscription deal.")
    parser.add_argument("scenario", nargs="?", type=Path,
                        help="JSON file with deal parameters. Uses the built-in example when omitted.")
    parser.add_argument("--xlsx", type=Path, default=None, help="Write the schedule workbook to this path.")
    parser.add_argument("--annual", action="store_true", help="Also print the annual P&L.")
    parser.add_argument("--log-level", default="WARNING", help="Logging level (default WARNING).")
    return parser.parse_args(argv)


def _fmt_metric(metric, val):
    if val is None or (isinstance(val, float) and math.isnan(val)):
        return "N/A"
    if isinstance(val, bool):
        return "yes" if val else "no"
    if "%" in metric or metric.startswith("IRR"):
        return f"{val*100:.2f}%"
    if metric.startswith("Payback"):
        return str(val)
    return f"{val:,.2f}"


def load_parameters(path) -> DealParameters:
    if path is None:
        return example_parameters()
    return DealParameters.model_validate_json(Path(path).read_text(encoding="utf-8"))


def main(argv=None) -> int:
    args = _parse_args(argv)
    logging.basicConfig(level=getattr(logging, str(args.log_level).upper(), logging.WARNING))

    try:
        params = load_parameters(args.scenario)
    except OSError as e:
        logger.error("Cannot read scenario %s: %s", args.scenario, e)
        return 2
    except ValidationError as e:
        logger.error("Invalid scenario %s:\n%s", args.scenario, e)
        return 2

    result = evaluate(params)
    for metric, val in summary_dict(result.summary).items():
        print(f"{metric:<24} {_fmt_metric(metric, val)}")

    if args.annual:
        print()
        print(annual_frame(result.annual).to_string(index=False))

    if args.xlsx is not None:
        try:
            args.xlsx.write_bytes(evaluation_to_xlsx_bytes(params, result))
        except OSError as e:
            logger.error("Cannot write workbook %s: %s", args.xlsx, e)
            return 1
        logger.info("Wrote %s", args.xlsx)
    return 0
