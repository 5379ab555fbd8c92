"""
Dock pose sanity check.

Resolves the dock marker corners from a config file, projects them through a
synthetic camera, recovers the camera pose with solvePnP and reports the
attitude error against the true pose. Useful for checking that a marker table
and its drawing unit produce a sensible target before printing it.

Usage:
    python check_dock_pose.py --config dock_markers.json
    python check_dock_pose.py --config dock_markers.json --noise 0.5
"""

from __future__ import annotations

import argparse
import logging
import os
import sys

import cv2
import numpy as np

# Add src directory to path for imports
sys.path.append(os.path.join(os.path.dirname(__file__), "..", "src"))

from attitude import angular_error_degrees  # type: ignore
from frames import rotation_matrix_to_quaternion  # type: ignore
from markers import parse_marker_table, resolve_marker_corners  # type: ignore
from utils import get_config, setup_logging  # type: ignore

LOGGER = logging.getLogger(__name__)

CAMERA_MATRIX = np.array(
    [
        [800.0, 0.0, 320.0],
        [0.0, 800.0, 240.0],
        [0.0, 0.0, 1.0],
    ]
)

# Camera looking back along the plate normal: cam x = -plate y, cam y = plate z
CAMERA_FROM_PLATE = np.array(
    [
        [0.0, -1.0, 0.0],
        [0.0, 0.0, 1.0],
        [-1.0, 0.0, 0.0],
    ]
)


def main():
    parser = argparse.ArgumentParser(description="Check dock marker layout with a synthetic camera")
    parser.add_argument("--config", "-c", default=os.path.join(os.path.dirname(__file__), "dock_markers.json"))
    parser.add_argument("--distance", type=float, default=0.5, help="Camera distance from plate (m)")
    parser.add_argument("--noise", type=float, default=0.0, help="Pixel noise std dev")
    args = parser.parse_args()

    setup_logging()
    config = get_config(args.config)

    corners = resolve_marker_corners(parse_marker_table(config["markers"]), config["drawing_unit"])
    if not corners:
        LOGGER.error("No valid markers in %s", args.config)
        return 1

    object_points = np.vstack([c.as_array() for c in corners.values()])
    center = object_points.mean(axis=0)

    perturb, _ = cv2.Rodrigues(np.array([[0.05], [-0.08], [0.02]]))
    rotation = perturb @ CAMERA_FROM_PLATE
    tvec = np.array([0.0, 0.0, args.distance]) - rotation @ center
    rvec, _ = cv2.Rodrigues(rotation)

    image_points, _ = cv2.projectPoints(object_points, rvec, tvec, CAMERA_MATRIX, None)
    image_points = image_points.reshape(-1, 2)
    if args.noise > 0:
        image_points += np.random.normal(0.0, args.noise, image_points.shape)

    ok, rvec_est, tvec_est = cv2.solvePnP(object_points, image_points, CAMERA_MATRIX, None)
    if not ok:
        LOGGER.error("solvePnP failed")
        return 1

    rotation_est, _ = cv2.Rodrigues(rvec_est)
    error_deg = angular_error_degrees(
        rotation_matrix_to_quaternion(rotation),
        rotation_matrix_to_quaternion(rotation_est),
    )
    translation_err = np.linalg.norm(tvec_est.flatten() - tvec)

    print(f"Markers:           {len(corners)}")
    print(f"Attitude error:    {error_deg:.4f} deg")
    print(f"Translation error: {translation_err * 1000:.3f} mm")
    return 0


if __name__ == "__main__":
    sys.exit(main())
