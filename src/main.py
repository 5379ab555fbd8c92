"""
Command-line entry point for DOCKGEOM.

Resolves marker corners from a configuration file, or reports the angular
error between two quaternions.

Usage:
    python main.py corners --config dock.json           # Plate-frame corners
    python main.py corners --config dock.json --world   # Apply the dock pose
    python main.py quat-error 0 0 0 1  0 0 0.7071 0.7071
    python main.py --verbose corners --config dock.json
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from typing import List, Optional

from attitude import angular_error_degrees
from frames import RigidTransform
from markers import (
    InvalidMarkerSpec,
    MarkerCornerResolver,
    parse_marker_table,
    transform_marker_corners,
)
from utils import get_config, setup_logging, validate_config

LOGGER = logging.getLogger(__name__)


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="DOCKGEOM - Fiducial marker corners and attitude error",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--verbose", "-V",
        action="store_true",
        help="Enable verbose/debug logging",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    corners = subparsers.add_parser("corners", help="Resolve marker corners from a config file")
    corners.add_argument("--config", "-c", required=True, help="JSON config with the marker table")
    corners.add_argument("--unit", help="Override the configured drawing unit")
    corners.add_argument(
        "--world",
        action="store_true",
        help="Transform corners with the configured dock pose",
    )
    corners.add_argument(
        "--strict",
        action="store_true",
        help="Fail on the first invalid marker",
    )

    quat = subparsers.add_parser("quat-error", help="Angular error between two quaternions (x y z w)")
    quat.add_argument("q1", nargs=4, type=float, metavar="Q1")
    quat.add_argument("q2", nargs=4, type=float, metavar="Q2")

    return parser.parse_args(argv)


def run_corners(args: argparse.Namespace) -> int:
    config = get_config(args.config)
    if not validate_config(config):
        return 1
    if args.unit:
        config["drawing_unit"] = args.unit
    if args.strict:
        config["strict"] = True

    try:
        specs = parse_marker_table(config["markers"], strict=config.get("strict", False))
        result = MarkerCornerResolver.from_dict(config).resolve(specs)
    except InvalidMarkerSpec as e:
        LOGGER.error("%s", e)
        return 1

    output = result.to_dict()
    if args.world or config.get("apply_dock_pose"):
        transform = RigidTransform.from_dict(config.get("dock_pose"))
        world = transform_marker_corners(result.corners, transform)
        output["markers"] = [corners.to_dict() for corners in world.values()]
        output["frame"] = "world"
    else:
        output["frame"] = "plate"

    print(json.dumps(output, indent=2))
    return 0


def run_quat_error(args: argparse.Namespace) -> int:
    degrees = angular_error_degrees(args.q1, args.q2)
    print(f"{degrees:.6f}")
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    args = parse_args(argv)

    log_level = logging.DEBUG if args.verbose else logging.INFO
    setup_logging(level=log_level)

    if args.command == "corners":
        return run_corners(args)
    return run_quat_error(args)


if __name__ == "__main__":
    sys.exit(main())
