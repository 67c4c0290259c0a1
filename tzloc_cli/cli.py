"""
tzloc CLI - Main entry point.

Packs GeoJSON into the dataset format and runs one-off queries against a
packed dataset.
"""

import argparse
import json
import sys
from pathlib import Path
from typing import List, Optional

from tzloc_dataset import DatasetLoader, pack_geojson
from tzloc_locator import BoundaryMode, LocatorConfig, LocatorService, PointLocationEngine
from tzloc_locator.index import DEFAULT_NODE_CAPACITY


def build_service(args: argparse.Namespace) -> LocatorService:
    """
    Service from --config, or from --dataset with default settings.

    Raises:
        ValueError: If neither --config nor --dataset was given
    """
    if args.config:
        return LocatorService.from_config(LocatorConfig.from_yaml(Path(args.config)))
    if args.dataset:
        return LocatorService.from_config(LocatorConfig(dataset_path=Path(args.dataset)))
    raise ValueError("either --config or --dataset is required")


def run_query(args: argparse.Namespace) -> List[str]:
    service = build_service(args)
    mode = BoundaryMode.EXCLUSIVE if args.exclusive else None
    return service.query(args.lat, args.lon, mode)


def run_info(args: argparse.Namespace) -> dict:
    if args.config:
        config = LocatorConfig.from_yaml(Path(args.config))
        dataset_path, node_capacity = config.dataset_path, config.node_capacity
    elif args.dataset:
        dataset_path, node_capacity = Path(args.dataset), DEFAULT_NODE_CAPACITY
    else:
        raise ValueError("either --config or --dataset is required")

    engine = PointLocationEngine.from_store(
        DatasetLoader().from_path(dataset_path), node_capacity=node_capacity
    )
    return {
        'dataset': str(dataset_path),
        'entry_count': len(engine),
        'region_count': len(engine.region_ids()),
        'vertex_count': engine.store.vertex_count(),
        'index_height': engine.index.height,
        'bounds': engine.index.bounds,
    }


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="tzloc",
        description="tzloc CLI - offline point to timezone lookup",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Pack a timezone boundary FeatureCollection
  tzloc pack combined.json timezones.tzlc

  # Which timezone contains Berlin?
  tzloc query --dataset timezones.tzlc --lat 52.52 --lon 13.40

  # Strict interior only, settings from YAML
  tzloc query --config config/locator.yaml --lat 0 --lon 0 --exclusive

  # Dataset summary
  tzloc info --dataset timezones.tzlc
"""
    )

    subparsers = parser.add_subparsers(dest='command', help='Available commands')

    pack = subparsers.add_parser('pack', help='Pack GeoJSON into the dataset format')
    pack.add_argument('source', help='GeoJSON FeatureCollection path')
    pack.add_argument('destination', help='Output dataset path')

    for name, help_text in (('query', 'Locate one point'), ('info', 'Summarize a dataset')):
        sub = subparsers.add_parser(name, help=help_text)
        sub.add_argument('--dataset', help='Packed dataset path')
        sub.add_argument('--config', help='Locator config YAML')

    query = subparsers.choices['query']
    query.add_argument('--lat', type=float, required=True, help='Latitude (degrees)')
    query.add_argument('--lon', type=float, required=True, help='Longitude (degrees)')
    query.add_argument(
        '--exclusive',
        action='store_true',
        help='Exclude points exactly on a boundary'
    )

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    try:
        if args.command == 'pack':
            count = pack_geojson(Path(args.source), Path(args.destination))
            print(f"Packed {count} polygons to {args.destination}")

        elif args.command == 'query':
            print(json.dumps(run_query(args)))

        elif args.command == 'info':
            print(json.dumps(run_info(args), indent=2))

    except (ValueError, OSError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    return 0


if __name__ == '__main__':
    sys.exit(main())
