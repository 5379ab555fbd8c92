"""
Integration tests for the DOCKGEOM pipeline.

Covers config loading through corner resolution, the optional dock pose, the
command-line entry point, and a synthetic solvePnP round trip that uses the
resolved corners as object points and the angular error metric to score it.
"""

from __future__ import annotations

import json
import logging
import os
import sys

import cv2
import numpy as np
import pytest

# Add src directory to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))

from attitude import angular_error_degrees
from frames import RigidTransform, rotation_matrix_to_quaternion
from markers import MarkerCornerResolver, parse_marker_table, transform_marker_corners
from main import main
from utils import get_config, save_config, validate_config

LOGGER = logging.getLogger(__name__)

CAMERA_MATRIX = np.array(
    [
        [800.0, 0.0, 320.0],
        [0.0, 800.0, 240.0],
        [0.0, 0.0, 1.0],
    ]
)


@pytest.fixture
def dock_config():
    return {
        "drawing_unit": "mm",
        "markers": {
            "1": {"id": 1, "position": [10.0, 10.0], "size": 40.0},
            "2": {"id": 2, "position": [60.0, 10.0], "size": 40.0},
            "3": {"id": 3, "position": [10.0, 60.0], "size": 40.0},
            "4": {"id": 4, "position": [60.0, 60.0], "size": 40.0},
        },
        "apply_dock_pose": False,
        "dock_pose": {
            "position": [0.3, -0.9, 0.5],
            "orientation": [0.0, 0.0, 0.7071068, 0.7071068],
        },
    }


@pytest.fixture
def config_file(tmp_path, dock_config):
    path = tmp_path / "dock.json"
    assert save_config(dock_config, str(path))
    return path


class TestConfiguration:
    def test_defaults(self):
        config = get_config()
        assert config["drawing_unit"] == "mm"
        assert config["markers"] == {}
        assert validate_config(config)

    def test_file_overrides_defaults(self, config_file):
        config = get_config(str(config_file))
        assert len(config["markers"]) == 4
        assert config["strict"] is False

    def test_missing_file_falls_back_to_defaults(self, tmp_path):
        config = get_config(str(tmp_path / "missing.json"))
        assert config["markers"] == {}

    def test_defaults_not_shared_between_calls(self):
        config = get_config()
        config["markers"]["1"] = {"id": 1, "position": [0, 0], "size": 1}
        assert get_config()["markers"] == {}

    def test_validate_rejects_bad_tables(self):
        assert not validate_config({"drawing_unit": "mm"})
        assert not validate_config({"drawing_unit": "mm", "markers": []})
        assert not validate_config({"drawing_unit": "mm", "markers": {}, "apply_dock_pose": True, "dock_pose": {}})


class TestPipeline:
    def test_config_to_world_corners(self, dock_config):
        specs = parse_marker_table(dock_config["markers"])
        result = MarkerCornerResolver.from_dict(dock_config).resolve(specs)
        assert result.success
        assert list(result.corners) == [1, 2, 3, 4]

        transform = RigidTransform.from_dict(dock_config["dock_pose"])
        world = transform_marker_corners(result.corners, transform)

        # Plate-frame marker 1 top-left is (0, -0.01, 0.01); a 90 deg yaw sends -y to +x
        np.testing.assert_allclose(world[1].top_left, [0.31, -0.9, 0.51], atol=1e-6)
        for corners in world.values():
            assert corners.edge_length == pytest.approx(0.04)

    def test_solve_pnp_recovers_attitude(self, dock_config):
        specs = parse_marker_table(dock_config["markers"])
        corners = MarkerCornerResolver.from_dict(dock_config).resolve(specs).corners
        object_points = np.vstack([c.as_array() for c in corners.values()])

        # Camera looking back along the plate normal
        base = np.array([[0.0, -1.0, 0.0], [0.0, 0.0, 1.0], [-1.0, 0.0, 0.0]])
        perturb, _ = cv2.Rodrigues(np.array([[0.05], [-0.08], [0.02]]))
        rotation = perturb @ base
        tvec = np.array([0.0, 0.0, 0.5]) - rotation @ object_points.mean(axis=0)
        rvec, _ = cv2.Rodrigues(rotation)

        image_points, _ = cv2.projectPoints(object_points, rvec, tvec, CAMERA_MATRIX, None)
        ok, rvec_est, tvec_est = cv2.solvePnP(object_points, image_points.reshape(-1, 2), CAMERA_MATRIX, None)
        assert ok

        rotation_est, _ = cv2.Rodrigues(rvec_est)
        error = angular_error_degrees(
            rotation_matrix_to_quaternion(rotation),
            rotation_matrix_to_quaternion(rotation_est),
        )
        assert error < 0.01
        np.testing.assert_allclose(tvec_est.flatten(), tvec, atol=1e-4)


class TestCommandLine:
    def test_corners_plate_frame(self, config_file, capsys):
        assert main(["corners", "--config", str(config_file)]) == 0
        payload = json.loads(capsys.readouterr().out)
        assert payload["frame"] == "plate"
        assert payload["unit"] == "mm"
        assert [m["id"] for m in payload["markers"]] == [1, 2, 3, 4]
        assert payload["markers"][0]["top_left"] == pytest.approx([0.0, -0.01, 0.01])

    def test_corners_world_frame(self, config_file, capsys):
        assert main(["corners", "--config", str(config_file), "--world"]) == 0
        payload = json.loads(capsys.readouterr().out)
        assert payload["frame"] == "world"
        assert payload["markers"][0]["top_left"] == pytest.approx([0.31, -0.9, 0.51], abs=1e-6)

    def test_unit_override(self, config_file, capsys):
        assert main(["corners", "--config", str(config_file), "--unit", "in"]) == 0
        payload = json.loads(capsys.readouterr().out)
        assert payload["scale_factor"] == pytest.approx(0.0254)

    def test_strict_mode_fails_on_bad_marker(self, tmp_path, dock_config):
        dock_config["markers"]["5"] = {"id": 5, "position": [0.0, 0.0], "size": -1.0}
        path = tmp_path / "bad.json"
        save_config(dock_config, str(path))
        assert main(["corners", "--config", str(path), "--strict"]) == 1

    def test_lenient_mode_skips_bad_marker(self, tmp_path, dock_config, capsys):
        dock_config["markers"]["5"] = {"id": 5, "position": [0.0, 0.0], "size": -1.0}
        path = tmp_path / "bad.json"
        save_config(dock_config, str(path))
        assert main(["corners", "--config", str(path)]) == 0
        payload = json.loads(capsys.readouterr().out)
        assert [m["id"] for m in payload["markers"]] == [1, 2, 3, 4]

    def test_quat_error(self, capsys):
        assert main(["quat-error", "0", "0", "0", "1", "0", "0", "0.70710678", "0.70710678"]) == 0
        assert float(capsys.readouterr().out) == pytest.approx(90.0, abs=1e-5)
