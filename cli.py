#!/usr/bin/env python
"""
Command-line interface for Area Extract

Usage:
    python cli.py extract --point=-74.01,40.71 --point=-74.00,40.72 --point=-73.99,40.71 --point=-74.00,40.70 -c amenity -o ./out
    python cli.py query --point=-74.01,40.71 --point=-74.00,40.72 --point=-73.99,40.71 -c highway
    python cli.py export --input response.json -p ... -o ./out --format csv
"""

import os
import sys
import json
import argparse
from typing import List, Tuple

from loguru import logger

from areaextract.config import load_config_from_env, validate_config
from areaextract.errors import AreaExtractError
from areaextract.exporters import EXPORT_FORMATS, ExportPayload
from areaextract.pipeline import ExtractionPipeline, ExtractionResult


def setup_logging(verbose: bool = False):
    """Configure logging"""
    logger.remove()
    level = "DEBUG" if verbose else "INFO"
    logger.add(
        sys.stderr,
        format="<green>{time:HH:mm:ss}</green> | <level>{level: <8}</level> | <cyan>{message}</cyan>",
        level=level
    )


def parse_point(value: str) -> Tuple[float, float]:
    """Parse "lon,lat" into a (lon, lat) tuple"""
    try:
        lon_str, lat_str = value.split(",")
        return (float(lon_str), float(lat_str))
    except ValueError:
        raise argparse.ArgumentTypeError(f"Expected LON,LAT but got {value!r}")


def parse_formats(value: str) -> List[str]:
    if value == "all":
        return list(EXPORT_FORMATS)
    formats = [f.strip() for f in value.split(",") if f.strip()]
    unknown = [f for f in formats if f not in EXPORT_FORMATS]
    if unknown:
        raise argparse.ArgumentTypeError(f"Unknown format(s) {unknown}; choose from {list(EXPORT_FORMATS)}")
    return formats


def _build_pipeline() -> ExtractionPipeline:
    config = load_config_from_env()
    validate_config(config)
    return ExtractionPipeline(config=config)


def _save_payloads(payloads: List[ExportPayload], output_dir: str) -> None:
    """The host side of the download: write each payload to disk"""
    os.makedirs(output_dir, exist_ok=True)
    for payload in payloads:
        path = os.path.join(output_dir, payload.filename)
        with open(path, "wb") as f:
            f.write(payload.to_bytes())
        logger.info(f"✓ Saved {payload.mime_type}: {path}")


def _log_result(result: ExtractionResult, summary: bool) -> None:
    stats = result.stats
    logger.info(f"  Area: {stats.area_km2:.2f} km²")
    logger.info(f"  Features: {stats.total_features}")
    if result.loss.count:
        logger.warning(f"  Dropped elements: {result.loss.by_reason()}")
    if result.degraded:
        logger.warning("  Data source: SYNTHETIC (all Overpass endpoints failed)")

    if summary:
        print(json.dumps({
            "area_km2": round(stats.area_km2, 4),
            "total_features": stats.total_features,
            "road_count": stats.road_count,
            "building_count": stats.building_count,
            "poi_count": stats.poi_count,
            "dropped": result.loss.count,
            "degraded": result.degraded,
            "endpoint": result.endpoint,
        }, indent=2))


def cmd_extract(args):
    """Fetch, filter and export features inside the clicked polygon"""
    setup_logging(args.verbose)

    try:
        pipeline = _build_pipeline()
        result = pipeline.run(
            points=args.point,
            categories=args.category,
            point_cap=args.max_points,
            allow_synthetic=args.allow_synthetic
        )
        _save_payloads(pipeline.export_many(result, args.format), args.output)
        _log_result(result, args.summary)
        return 0
    except (AreaExtractError, ValueError) as e:
        logger.error(f"Extraction failed: {e}")
        if args.verbose:
            import traceback
            traceback.print_exc()
        return 1


def cmd_query(args):
    """Print the Overpass query for the clicked polygon"""
    setup_logging(args.verbose)

    try:
        pipeline = _build_pipeline()
        boundary = pipeline.build_boundary(args.point, args.max_points)
        print(pipeline.collector.build_query(boundary, args.category or pipeline.config.default_categories))
        return 0
    except (AreaExtractError, ValueError) as e:
        logger.error(f"Could not build query: {e}")
        return 1


def cmd_export(args):
    """Process a saved Overpass JSON response offline"""
    setup_logging(args.verbose)

    if not os.path.exists(args.input):
        logger.error(f"Input file not found: {args.input}")
        return 1

    try:
        with open(args.input, "r", encoding="utf-8") as f:
            data = json.load(f)
        pipeline = _build_pipeline()
        result = pipeline.process_response(data, args.point, args.max_points)
        _save_payloads(pipeline.export_many(result, args.format), args.output)
        _log_result(result, args.summary)
        return 0
    except json.JSONDecodeError as e:
        logger.error(f"Input is not valid JSON: {e}")
        return 1
    except (AreaExtractError, ValueError) as e:
        logger.error(f"Export failed: {e}")
        return 1


def _add_polygon_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--point", "-p", type=parse_point, action="append", required=True,
                        help="Boundary click as LON,LAT (repeat 3-10 times; write --point=LON,LAT when LON is negative)")
    parser.add_argument("--max-points", type=int, default=None,
                        help="Point cap, clamped to 5-10")


def _add_output_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--output", "-o", default="output", help="Output directory")
    parser.add_argument("--format", "-f", type=parse_formats, default=list(EXPORT_FORMATS),
                        help=f"Comma-separated formats or 'all' ({', '.join(EXPORT_FORMATS)})")
    parser.add_argument("--summary", "-s", action="store_true", help="Print summary to stdout")


def main():
    parser = argparse.ArgumentParser(
        description="Area Extract CLI",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  Extract cafes and roads inside four clicks:
    python cli.py extract --point=-74.01,40.71 --point=-74.00,40.72 --point=-73.99,40.71 --point=-74.00,40.70 -c amenity -c highway

  Show the Overpass query only:
    python cli.py query --point=-74.01,40.71 --point=-74.00,40.72 --point=-73.99,40.71 -c building

  Re-export a saved response:
    python cli.py export -i response.json -p ... -f csv,josm
        """
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Verbose output")

    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # Extract command
    extract_parser = subparsers.add_parser("extract", help="Fetch and export features inside a polygon")
    _add_polygon_args(extract_parser)
    extract_parser.add_argument("--category", "-c", action="append",
                                help="OSM tag key to extract (repeatable), e.g. amenity; "
                                     "defaults to highway, building and amenity")
    extract_parser.add_argument("--allow-synthetic", action="store_true",
                                help="Use synthetic data if every Overpass endpoint fails")
    _add_output_args(extract_parser)
    extract_parser.set_defaults(func=cmd_extract)

    # Query command
    query_parser = subparsers.add_parser("query", help="Print the Overpass query")
    _add_polygon_args(query_parser)
    query_parser.add_argument("--category", "-c", action="append",
                              help="OSM tag key (repeatable); defaults to highway, building and amenity")
    query_parser.set_defaults(func=cmd_query)

    # Export command
    export_parser = subparsers.add_parser("export", help="Process a saved Overpass JSON response")
    export_parser.add_argument("--input", "-i", required=True, help="Overpass JSON file")
    _add_polygon_args(export_parser)
    _add_output_args(export_parser)
    export_parser.set_defaults(func=cmd_export)

    args = parser.parse_args()

    if not args.command:
        parser.print_help()
        return 1

    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
