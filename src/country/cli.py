"""
Command line entry point: fuse the regions of an input file down to a
region count and write the sorted names of the result.
"""

import argparse
import sys
from typing import List, Optional

from .exceptions import CountryError
from .graph_loader import load_country, write_error, write_result
from .optimizer import CountryOptimizer


def _region_count(value: str) -> int:
    try:
        count = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid region count: {value!r}")
    if count < 0:
        raise argparse.ArgumentTypeError(f"region count must be non-negative, got {count}")
    return count


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="region-fusion",
        description="Fuse adjacent regions to minimize the GDP variance across regions.")
    parser.add_argument("input_file", help="region description file")
    parser.add_argument("output_file", help="file receiving the resulting region names")
    parser.add_argument("region_count", type=_region_count, help="number of regions to keep")
    parser.add_argument("--workers", type=int, default=None,
                        help="worker processes (default: number of cores, at most 48)")
    parser.add_argument("--progress", action="store_true", help="show a progress bar")
    parser.add_argument("--verbose", action="store_true", help="print search statistics")
    return parser


def run(input_file: str, output_file: str, region_count: int,
        workers: Optional[int] = None, progress: bool = False, verbose: bool = False) -> None:
    country = load_country(input_file, verbose=verbose)
    optimizer = CountryOptimizer(country, workers=workers, progress=progress, verbose=verbose)
    result = optimizer.optimize(region_count)
    if verbose:
        print(result.summary())
    write_result(output_file, result)


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    try:
        run(args.input_file, args.output_file, args.region_count,
            workers=args.workers, progress=args.progress, verbose=args.verbose)
    except (CountryError, OSError, ValueError) as error:
        print(f"Error: {error}", file=sys.stderr)
        try:
            write_error(args.output_file)
        except OSError as io_error:
            print(f"\t Could not write error to {args.output_file}: {io_error}", file=sys.stderr)
        return 1

    print("Done!")
    return 0


if __name__ == "__main__":
    sys.exit(main())
