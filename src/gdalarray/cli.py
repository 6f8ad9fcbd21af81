"""
Command line entry point: inspect what gdalarray loads from a file.
"""

import argparse
import logging
import sys
from typing import List, Optional

from ._version import __version__
from .api import list_subdatasets, load_all
from .bundle import DataBundle
from .config import LoadOptions
from .errors import GdalArrayError
from .types import AxisOrder, ComplexIntegerMode, Origin

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    """Create the argument parser with ``info`` and ``subdatasets`` commands."""
    parser = argparse.ArgumentParser(
        prog="gdalarray",
        description="Load GDAL rasters and multidimensional arrays into xarray.",
    )
    parser.add_argument(
        "--log-level", "-l",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        default="WARNING",
        help="Logging level (default: WARNING)",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"gdalarray {__version__}",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    info_parser = subparsers.add_parser("info", help="Summarize the arrays loaded from a file")
    info_parser.add_argument("path", help="File name or GDAL connection string")
    info_parser.add_argument(
        "--origin",
        choices=[origin.value for origin in Origin],
        default=Origin.LOWER.value,
        help="Vertical origin of returned rasters (default: lower)",
    )
    info_parser.add_argument(
        "--axis-order",
        choices=[order.value for order in AxisOrder],
        default=AxisOrder.GDAL.value,
        help="Axis order of returned arrays (default: gdal)",
    )
    info_parser.add_argument(
        "--complex-integers",
        choices=[mode.value for mode in ComplexIntegerMode],
        default=ComplexIntegerMode.WIDEN.value,
        help="Representation of CInt16/CInt32 data (default: widen)",
    )
    info_parser.add_argument(
        "--chunk-rows",
        type=int,
        default=None,
        help="Rows per read (default: band block height)",
    )
    info_parser.add_argument(
        "--no-subdatasets",
        action="store_true",
        help="Do not follow the SUBDATASETS metadata domain",
    )
    info_parser.add_argument(
        "--no-multidim",
        action="store_true",
        help="Do not fall back to the multidimensional API",
    )

    subdataset_parser = subparsers.add_parser("subdatasets", help="List sub-datasets of a container file")
    subdataset_parser.add_argument("path", help="File name or GDAL connection string")

    return parser


def options_from_args(args: argparse.Namespace) -> LoadOptions:
    return LoadOptions.from_kwargs(
        origin=args.origin,
        axis_order=args.axis_order,
        complex_integers=args.complex_integers,
        chunk_rows=args.chunk_rows,
        recurse_subdatasets=not args.no_subdatasets,
        multidim=not args.no_multidim,
    )


def format_bundle(bundle: DataBundle) -> List[str]:
    """One line per loaded array plus a metadata line."""
    lines: List[str] = []
    for kind, array in bundle.arrays():
        sizes = ", ".join(f"{dim}={size}" for dim, size in array.sizes.items())
        label = array.name or array.attrs.get("source", "")
        lines.append(f"{kind.value:<9} {array.dtype!s:<28} ({sizes}) {label}")
    if not lines:
        lines.append("no arrays loaded")
    lines.append(f"metadata entries: {len(bundle.chars or {})}")
    return lines


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    try:
        if args.command == "subdatasets":
            refs = list_subdatasets(args.path)
            if not refs:
                print("no sub-datasets")
            for ref in refs:
                print(f"{ref.index}: {ref.name}")
                if ref.description:
                    print(f"    {ref.description}")
        else:
            bundle = load_all(args.path, options_from_args(args))
            for line in format_bundle(bundle):
                print(line)
    except GdalArrayError as exc:
        logger.error(str(exc))
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
