"""Command-line interface for the label calculator."""

from __future__ import annotations

import argparse
import json
import logging

from .calculator import compute
from .trace import headline, render_trace

logger = logging.getLogger(__name__)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Calculate how many labels and pallets a production batch needs."
    )
    parser.add_argument("total", type=int, help="Total pieces produced in the batch.")
    parser.add_argument("per_package", type=int, help="Pieces that fit in one package.")
    parser.add_argument(
        "--per-pallet",
        type=int,
        default=1,
        help="Packages that fit on one pallet (1 means no pallet grouping).",
    )
    parser.add_argument(
        "--detailed", action="store_true", help="Print the step-by-step calculation."
    )
    pallets = parser.add_mutually_exclusive_group()
    pallets.add_argument(
        "--show-pallets",
        dest="include_pallets",
        action="store_const",
        const=True,
        help="Always include pallet steps in the detailed calculation.",
    )
    pallets.add_argument(
        "--hide-pallets",
        dest="include_pallets",
        action="store_const",
        const=False,
        help="Never include pallet steps in the detailed calculation.",
    )
    parser.add_argument("--json", action="store_true", help="Print the result as JSON.")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging.")
    return parser


def main(argv: list[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        result = compute(args.total, args.per_package, args.per_pallet)
    except ValueError as exc:
        parser.error(str(exc))
    logger.debug("Computed %s", result.to_dict())

    if args.json:
        print(json.dumps(result.to_dict(), indent=2))
        return 0

    print(headline(result))
    print(f"Extra pieces: {result.remainder_units}")
    if result.uses_pallets:
        print(
            f"Pallets: {result.total_pallets}"
            f" ({result.full_pallets} full, {result.remainder_containers} packages on a partial pallet)"
        )
    if args.detailed:
        print()
        print(render_trace(result, args.include_pallets))
    return 0


if __name__ == "__main__":  # pragma: no cover - CLI entry point
    raise SystemExit(main())
